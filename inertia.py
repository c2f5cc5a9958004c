"""
Trebuchet Launch Simulator: System Inertia
==========================================
Combines the beam with the counterweight and projectile point masses into
whole-system quantities about the pivot.
"""

from typing import Tuple
import numpy as np

from config import (
    TrebuchetConfig, BeamMassProperties, PointMass, SystemInertia, ConfigurationError
)
from beam import beam_mass_properties


def system_inertia(beam: BeamMassProperties,
                   counterweight: PointMass,
                   projectile: PointMass) -> SystemInertia:
    """
    Total moment of inertia and net torque coefficient about the pivot.

    I = mCwt*L1^2 + mProj*L2^2 + Ib + mb*Lb^2
    m = mCwt*L1 - mProj*L2 - mb*Lb

    The projectile sits at a negative position, so its first moment
    contributes -mProj*L2.
    """
    mb = beam.mass
    Lb = beam.centroid_offset

    total = counterweight.inertia + projectile.inertia + beam.inertia_about_centroid + mb * Lb * Lb
    if not np.isfinite(total) or total <= 0:
        raise ConfigurationError(f"Total inertia must be positive, got {total!r}")

    net = counterweight.first_moment + projectile.first_moment - mb * Lb

    return SystemInertia(total_inertia=total, net_torque_coefficient=net)


def compute_system(config: TrebuchetConfig) -> Tuple[BeamMassProperties, SystemInertia]:
    """Beam properties and system inertia for a configuration."""
    beam = beam_mass_properties(config.get_geometry())
    system = system_inertia(beam, config.get_counterweight(), config.get_projectile())
    return beam, system
