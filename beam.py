"""
Trebuchet Launch Simulator: Beam Mass Properties
================================================
Decomposes the throwing arm into six planar primitives and composes their
mass, centroid and moment of inertia.

Sections along the arm, pivot at x = 0:

    x in [-L2, -b3]   short core rectangle + two short tapers
    x in [-b3, 0]     short root rectangle (full width)
    x in [0, b2]      long root rectangle (full width)
    x in [b2, L1]     long core rectangle + two long tapers

Tapers are right triangles mirrored above and below the core rectangles,
so each is counted twice.
"""

from dataclasses import dataclass
from typing import Dict, List
import numpy as np

from config import (
    BeamGeometry, BeamMassProperties, ConfigurationError,
    LONG_TAPER_FRACTION, LONG_ROOT_FRACTION, SHORT_ROOT_FRACTION, SHORT_TAPER_FRACTION,
    LONG_TAPER_HEIGHT, LONG_CORE_HEIGHT, SHORT_TAPER_HEIGHT, SHORT_CORE_HEIGHT,
)


@dataclass(frozen=True)
class BeamSection:
    """One planar primitive of the beam."""

    name: str
    mass: float            # Mass of a single instance [kg]
    centroid: float        # Signed offset of its centroid from the pivot [m]
    inertia_pivot: float   # Polar moment about the pivot [kg m^2]
    count: int = 1         # Mirrored instances

    @property
    def total_mass(self) -> float:
        return self.count * self.mass

    @property
    def first_moment(self) -> float:
        return self.count * self.mass * self.centroid

    @property
    def total_inertia(self) -> float:
        return self.count * self.inertia_pivot


def beam_dimensions(geometry: BeamGeometry) -> Dict[str, float]:
    """Breakpoints b1..b4 and section heights h1..h4."""
    L1, L2, w = geometry.L1, geometry.L2, geometry.w
    return {
        'b1': LONG_TAPER_FRACTION * L1,
        'b2': LONG_ROOT_FRACTION * L1,
        'b3': SHORT_ROOT_FRACTION * L2,
        'b4': SHORT_TAPER_FRACTION * L2,
        'h1': LONG_TAPER_HEIGHT * w,
        'h2': LONG_CORE_HEIGHT * w,
        'h3': SHORT_TAPER_HEIGHT * w,
        'h4': SHORT_CORE_HEIGHT * w,
    }


def decompose_beam(geometry: BeamGeometry) -> List[BeamSection]:
    """
    Split the beam into its six primitives.

    Each inertia is the closed-form polar moment of the primitive about the
    pivot, so the sum is the beam's pivot inertia without any parallel-axis
    shift.
    """
    d = beam_dimensions(geometry)
    b1, b2, b3, b4 = d['b1'], d['b2'], d['b3'], d['b4']
    h1, h2, h3, h4 = d['h1'], d['h2'], d['h3'], d['h4']
    w = geometry.w
    rho_t = geometry.rho_t

    # Triangles: area = height * base / 2
    M1 = rho_t * h1 * b1 / 2
    M3 = rho_t * h3 * b4 / 2
    # Rectangles: area = height * base
    M5 = rho_t * h2 * b1
    M6 = rho_t * h4 * b4
    M7 = rho_t * w * b2
    M8 = rho_t * w * b3

    return [
        BeamSection(
            'long_taper', M1, b2 + b1/3,
            (M1/6) * (h1*h1 + b1*b1 + 4*b1*b2 + 6*b2*b2 + 2*h1*h2 + 1.5*h2*h2),
            count=2),
        BeamSection(
            'short_taper', M3, -b3 - b4/3,
            (M3/6) * (h3*h3 + b4*b4 + 4*b3*b4 + 6*b3*b3 + 2*h3*h4 + 1.5*h4*h4),
            count=2),
        BeamSection(
            'long_core', M5, b2 + b1/2,
            (M5/12) * (h2*h2 + 4*b1*b1 + 12*b2*b2 + 12*b1*b2)),
        BeamSection(
            'short_core', M6, -b3 - b4/2,
            (M6/12) * (h4*h4 + 4*b4*b4 + 12*b3*b3 + 12*b3*b4)),
        BeamSection(
            'long_root', M7, b2/2,
            (M7/12) * (4*b2*b2 + w*w)),
        BeamSection(
            'short_root', M8, -b3/2,
            (M8/12) * (4*b3*b3 + w*w)),
    ]


def beam_mass_properties(geometry: BeamGeometry) -> BeamMassProperties:
    """
    Compose mass, centroid offset and centroidal inertia of the beam.

    Parameters
    ----------
    geometry : BeamGeometry
        Arm dimensions and material

    Returns
    -------
    BeamMassProperties

    Raises
    ------
    ConfigurationError
        If the composition yields a non-positive mass or negative centroidal
        inertia (degenerate geometry).
    """
    sections = decompose_beam(geometry)

    mb = sum(s.total_mass for s in sections)
    if not np.isfinite(mb) or mb <= 0:
        raise ConfigurationError(f"Beam mass must be positive, got {mb!r}")

    Lb = sum(s.first_moment for s in sections) / mb
    I_pivot = sum(s.total_inertia for s in sections)

    # Parallel-axis theorem back to the centroid
    Ib = I_pivot - mb * Lb * Lb
    if not np.isfinite(Ib) or Ib < 0:
        raise ConfigurationError(f"Beam centroidal inertia must be non-negative, got {Ib!r}")

    return BeamMassProperties(mass=mb, centroid_offset=Lb, inertia_about_centroid=Ib)


def beam_outline(geometry: BeamGeometry) -> np.ndarray:
    """
    Arm planform polygon for drawing, in the arm frame.

    Returns
    -------
    ndarray : (8, 2) vertices, counterweight tip first, pivot at origin
    """
    L1, L2, w = geometry.L1, geometry.L2, geometry.w
    return np.array([
        [L1 + 0.2*w, 0.2*w],
        [L1 + 0.2*w, -0.2*w],
        [0.2*L1, -0.5*w],
        [-0.2*L2, -0.5*w],
        [-L2 - 0.2*w, -0.1*w],
        [-L2 - 0.2*w, 0.1*w],
        [-0.2*L2, 0.5*w],
        [0.2*L1, 0.5*w],
    ])
