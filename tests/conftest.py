"""
Shared fixtures for the trebuchet test suite.

Tests compare the numerical model against closed-form results: planform
areas and moments, energy conservation of the arm and the ballistic
landing condition.
"""

import matplotlib
import pytest

from config import TrebuchetConfig, BeamGeometry

# Headless backend for the visualization tests
matplotlib.use("Agg")


# -----------------------------------------------------------------------------
# Test Configuration
# -----------------------------------------------------------------------------

REL_TOLERANCE = 1e-12   # Algebraic identities
ENERGY_TOLERANCE = 1e-3  # Relative energy drift of the integrator


# -----------------------------------------------------------------------------
# Common Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def default_config():
    """Default configuration."""
    return TrebuchetConfig()


@pytest.fixture
def heavy_counterweight_config():
    """Counterweight-dominant machine: m1=200, L1=2, m2=1, L2=6."""
    return TrebuchetConfig(L1=2.0, L2=6.0, M_cw=200.0, m_proj=1.0, h0=3.0)


@pytest.fixture
def geometry():
    """Beam geometry of the default configuration."""
    return BeamGeometry(L1=2.0, L2=6.0, w=0.3, t=0.08, rho=500.0)


# -----------------------------------------------------------------------------
# Helper Functions
# -----------------------------------------------------------------------------

def planform_area(geometry: BeamGeometry) -> float:
    """Area of the beam planform: 0.76*L1*w on one side, 0.64*L2*w on the other."""
    return (0.76 * geometry.L1 + 0.64 * geometry.L2) * geometry.w


def planform_first_moment(geometry: BeamGeometry) -> float:
    """First moment of the planform area about the pivot."""
    return (0.324 * geometry.L1**2 - 0.248 * geometry.L2**2) * geometry.w


def relative_error(computed: float, analytical: float) -> float:
    """Compute relative error, handling zero case."""
    if abs(analytical) < 1e-12:
        return abs(computed - analytical)
    return abs(computed - analytical) / abs(analytical)
