"""
Trebuchet Launch Simulator: Configuration and Data Model
=========================================================
Dataclasses for beam geometry, point masses, arm state and launch results,
physical constants, errors and optimization bounds.

Sign conventions
----------------
- Positions along the arm are signed distances from the pivot, positive
  toward the counterweight (L1) side.
- theta is the arm angle from horizontal; decreasing theta lowers the
  counterweight and raises the projectile.
"""

from dataclasses import dataclass, field, asdict
from typing import List, Tuple, Optional
import numpy as np


class TrebuchetError(Exception):
    """Base class for trebuchet simulation errors."""


class ConfigurationError(TrebuchetError, ValueError):
    """Invalid static input: geometry, masses, gravity or time step."""


class ComputationError(TrebuchetError, ArithmeticError):
    """A derived quantity cannot be computed from otherwise valid state."""


# Physical constants
GRAVITY = 9.81  # m/s^2

# Numerical parameters
DEFAULT_TIME_STEP = 0.001  # Integrator step [s]
FALLBACK_START_ANGLE = np.deg2rad(-89.0)  # Used when the base is taller than L2

# Beam planform proportions
# Breakpoints along the arm, as fractions of L1 (long side) or L2 (short side)
LONG_TAPER_FRACTION = 0.8    # b1
LONG_ROOT_FRACTION = 0.2     # b2
SHORT_ROOT_FRACTION = 0.1    # b3
SHORT_TAPER_FRACTION = 0.9   # b4

# Section heights as fractions of beam width w
LONG_TAPER_HEIGHT = 0.3      # h1
LONG_CORE_HEIGHT = 0.4       # h2
SHORT_TAPER_HEIGHT = 0.4     # h3
SHORT_CORE_HEIGHT = 0.2      # h4


def _require_positive(name: str, value: float):
    if not np.isfinite(value) or value <= 0:
        raise ConfigurationError(f"{name} must be positive and finite, got {value!r}")


@dataclass(frozen=True)
class BeamGeometry:
    """Physical description of the throwing arm."""

    L1: float    # Pivot to counterweight [m]
    L2: float    # Pivot to projectile [m]
    w: float     # Beam width [m]
    t: float     # Beam thickness [m]
    rho: float   # Material density [kg/m^3]

    def __post_init__(self):
        for name in ('L1', 'L2', 'w', 't', 'rho'):
            _require_positive(name, getattr(self, name))

    @property
    def rho_t(self) -> float:
        """Areal density of the planform [kg/m^2]."""
        return self.rho * self.t


@dataclass(frozen=True)
class PointMass:
    """Concentrated mass at a signed distance from the pivot."""

    mass: float      # [kg]
    position: float  # [m], + toward counterweight side

    def __post_init__(self):
        if not np.isfinite(self.mass) or self.mass < 0:
            raise ConfigurationError(f"mass must be non-negative, got {self.mass!r}")
        if not np.isfinite(self.position):
            raise ConfigurationError(f"position must be finite, got {self.position!r}")

    @property
    def first_moment(self) -> float:
        return self.mass * self.position

    @property
    def inertia(self) -> float:
        """Moment of inertia about the pivot."""
        return self.mass * self.position**2


@dataclass(frozen=True)
class BeamMassProperties:
    """Mass properties of the beam alone."""

    mass: float                    # mb [kg]
    centroid_offset: float         # Lb [m], signed
    inertia_about_centroid: float  # Ib [kg m^2]

    @property
    def inertia_about_pivot(self) -> float:
        """Parallel-axis theorem: Ib + mb * Lb^2."""
        return self.inertia_about_centroid + self.mass * self.centroid_offset**2


@dataclass(frozen=True)
class SystemInertia:
    """Whole-system quantities about the pivot."""

    total_inertia: float           # I [kg m^2]
    net_torque_coefficient: float  # Signed first moment [kg m]


@dataclass(frozen=True)
class ArmState:
    """Snapshot of the arm's single degree of freedom."""

    theta: float        # Arm angle from horizontal [rad]
    theta_dot: float    # Angular velocity [rad/s]
    theta0: float       # Angle at simulation start [rad]
    step_index: int = 0


@dataclass(frozen=True)
class LaunchResult:
    """Launch outcome computed from the arm state at release."""

    # Release state
    theta: float
    theta_dot: float

    # Release kinematics
    release_x: float       # Horizontal offset of projectile from pivot [m]
    release_height: float  # Height above ground (H2) [m]
    vx0: float             # [m/s]
    vy0: float             # [m/s]
    release_speed: float   # [m/s]
    launch_angle: float    # Elevation of release velocity [rad]

    # Reference heights
    H1: float              # Counterweight drop height [m]
    H2: float              # Projectile release height [m]
    H_star: float          # Highest attainable release height [m]

    # Flight
    flight_time: float     # [s]
    range_distance: float  # [m]

    # Energy
    potential_energy: float  # [J]
    kinetic_energy: float    # [J]

    # Ideal ranges
    R0_star: float
    R_star: float
    RH_star: float

    # Efficiencies
    energy_efficiency: float
    range_efficiency: float
    height_efficiency: float

    g: float = GRAVITY

    @property
    def release_velocity(self) -> np.ndarray:
        return np.array([self.vx0, self.vy0])

    @property
    def x_min(self) -> float:
        """Leftmost flight extent, measured from the release point."""
        return min(0.0, self.vx0 * self.flight_time)

    @property
    def x_max(self) -> float:
        return max(0.0, self.vx0 * self.flight_time)

    @property
    def y_min(self) -> float:
        return 0.0

    @property
    def y_max(self) -> float:
        """Apex height above ground."""
        if self.vy0 <= 0:
            return self.H2
        return self.vy0**2 / (2 * self.g) + self.H2


@dataclass
class TrebuchetConfig:
    """Configuration parameters for the trebuchet simulation."""

    # Geometry - Beam
    L1: float = 2.0           # Pivot to counterweight [m]
    L2: float = 6.0           # Pivot to projectile [m]
    w: float = 0.3            # Beam width [m]
    thickness: float = 0.08   # Beam thickness [m]
    rho: float = 500.0        # Beam density [kg/m^3] - softwood

    # Geometry - Base
    h0: float = 3.0           # Height of pivot above ground [m]

    # Masses
    M_cw: float = 200.0       # Counterweight mass [kg]
    m_proj: float = 1.0       # Projectile mass [kg]

    # Physics
    g: float = GRAVITY        # Gravitational acceleration [m/s^2]

    # Release mechanism
    # Arm angle at which the projectile leaves [degrees]; negative = past horizontal
    release_angle: float = -45.0

    # Simulation parameters
    dt: float = DEFAULT_TIME_STEP  # Integrator step [s]
    t_max: float = 5.0             # Maximum simulated time before giving up [s]
    dt_output: float = 0.01        # History sampling interval [s]

    def validate(self):
        """Raise ConfigurationError for any invalid static input."""
        for name in ('h0', 'g', 'dt', 't_max', 'dt_output'):
            _require_positive(name, getattr(self, name))
        if not np.isfinite(self.release_angle):
            raise ConfigurationError(f"release_angle must be finite, got {self.release_angle!r}")
        # Construction validates geometry and masses
        self.get_geometry()
        self.get_counterweight()
        self.get_projectile()

    def get_geometry(self) -> BeamGeometry:
        return BeamGeometry(L1=self.L1, L2=self.L2, w=self.w, t=self.thickness, rho=self.rho)

    def get_counterweight(self) -> PointMass:
        return PointMass(mass=self.M_cw, position=self.L1)

    def get_projectile(self) -> PointMass:
        return PointMass(mass=self.m_proj, position=-self.L2)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> 'TrebuchetConfig':
        names = cls.__dataclass_fields__.keys()
        return cls(**{k: v for k, v in data.items() if k in names})


@dataclass
class OptimizationBounds:
    """
    Bounds for optimization parameters.

    Constraint handled by the optimizer:
    - Counterweight must clear the ground at the bottom of its swing (L1 < h0)
    """

    # Geometry bounds [min, max]
    L1: Tuple[float, float] = (1.0, 3.0)      # Counterweight side
    L2: Tuple[float, float] = (3.0, 9.0)      # Throwing side

    # Mass bounds
    M_cw: Tuple[float, float] = (50.0, 1000.0)

    # Release angle bounds [degrees]
    release_angle: Tuple[float, float] = (-80.0, -10.0)

    def get_bounds_list(self) -> List[Tuple[float, float]]:
        """Get bounds as list for scipy optimizer."""
        return [
            self.L1,
            self.L2,
            self.M_cw,
            self.release_angle,
        ]

    def params_to_config(self, params: np.ndarray, base_config: TrebuchetConfig = None) -> TrebuchetConfig:
        """Convert optimizer parameters to TrebuchetConfig."""
        if base_config is None:
            base_config = TrebuchetConfig()

        data = base_config.to_dict()
        data.update(
            L1=float(params[0]),
            L2=float(params[1]),
            M_cw=float(params[2]),
            release_angle=float(params[3]),
        )
        return TrebuchetConfig.from_dict(data)


@dataclass
class SimulationResult:
    """Results from a trebuchet simulation."""

    # Sampled history
    time: np.ndarray = None
    theta: np.ndarray = None
    d_theta: np.ndarray = None

    # Key positions over time, world frame with ground at y = 0
    pos_cw: np.ndarray = None     # (N, 2) - counterweight position
    pos_proj: np.ndarray = None   # (N, 2) - projectile position

    # Energy tracking
    kinetic_energy: np.ndarray = None
    potential_energy: np.ndarray = None
    total_energy: np.ndarray = None

    # Release
    released: bool = False
    release_time: float = None
    release_state: ArmState = None
    launch: Optional[LaunchResult] = None

    # Phase information
    phase_transitions: List[Tuple[float, str]] = field(default_factory=list)

    @property
    def range_distance(self) -> float:
        return self.launch.range_distance if self.launch is not None else 0.0
