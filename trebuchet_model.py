"""
Trebuchet Launch Simulator: Simulation Model
============================================
Single-DoF rigid-arm trebuchet:
- Fixed-step semi-implicit Euler integration of the arm angle
- Caller-supplied release policy
- Analytic ballistics at release (see launch.py)
"""

import warnings
from typing import Callable, Dict, Optional, Tuple
import numpy as np

from config import (
    TrebuchetConfig, BeamGeometry, ArmState, SystemInertia, LaunchResult,
    SimulationResult, ConfigurationError, GRAVITY, DEFAULT_TIME_STEP,
    FALLBACK_START_ANGLE,
)
from inertia import compute_system
from launch import launch_from_state


ReleasePolicy = Callable[[ArmState], bool]


def initial_arm_angle(h0: float, L2: float) -> float:
    """
    Largest start angle at which the projectile end stays above ground.

    The projectile end touches the ground when L2*sin(theta) = h0. A base
    taller than the projectile arm never touches, and the arm starts nearly
    vertical instead.
    """
    if h0 >= L2:
        return FALLBACK_START_ANGLE
    return float(np.arcsin(h0 / L2))


def angular_acceleration(theta: float, system: SystemInertia, g: float) -> float:
    """Gravity torque over inertia; cos(theta) is the horizontal lever arm."""
    return (-system.net_torque_coefficient * g / system.total_inertia) * np.cos(theta)


def integrate_step(state: ArmState, i: int, system: SystemInertia,
                   g: float, dt: float) -> ArmState:
    """
    Semi-implicit Euler step with index i.

    Step 0 is the initial condition and leaves theta and theta_dot as they
    are. Later steps update the velocity from the current angle first, then
    the angle from the new velocity.
    """
    t = i * dt
    if t <= 0:
        return ArmState(state.theta, state.theta_dot, state.theta0, i)

    d_omega = angular_acceleration(state.theta, system, g)
    theta_dot = state.theta_dot + d_omega * dt
    theta = state.theta + theta_dot * dt
    return ArmState(theta, theta_dot, state.theta0, i)


# =============================================================================
# Release policies
# =============================================================================

def release_at_angle(angle_deg: float) -> ReleasePolicy:
    """Release once the arm has swung down to angle_deg."""
    angle = np.deg2rad(angle_deg)

    def policy(state: ArmState) -> bool:
        return state.theta <= angle

    return policy


def release_after_steps(n_steps: int) -> ReleasePolicy:
    """Release after a fixed number of integrator steps."""

    def policy(state: ArmState) -> bool:
        return state.step_index >= n_steps

    return policy


def release_before_ground_strike(h0: float, L1: float) -> ReleasePolicy:
    """Release when the counterweight reaches the ground."""

    def policy(state: ArmState) -> bool:
        return h0 + L1 * np.sin(state.theta) <= 0

    return policy


def release_when_any(*policies: ReleasePolicy) -> ReleasePolicy:
    """Release as soon as any of the given policies fires."""

    def policy(state: ArmState) -> bool:
        return any(p(state) for p in policies)

    return policy


# =============================================================================
# Simulator
# =============================================================================

class TrebuchetSimulator:
    """
    Simulation handle for one trebuchet configuration.

    Owns the arm state; step() is its only writer. Geometry and masses are
    fixed at construction, a new configuration needs a new simulator.
    """

    def __init__(self, config: TrebuchetConfig):
        """
        Initialize simulator with given configuration.

        Parameters
        ----------
        config : TrebuchetConfig
            Configuration parameters for the trebuchet

        Raises
        ------
        ConfigurationError
            For invalid geometry, masses, gravity or time step
        """
        config.validate()
        self.config = config
        self.geometry = config.get_geometry()

        # Precompute mass properties
        self.beam, self.inertia = compute_system(config)

        self.reset()

    def reset(self):
        """Return the arm to its start angle, at rest."""
        theta0 = initial_arm_angle(self.config.h0, self.config.L2)
        self._state = self._integrate(ArmState(theta0, 0.0, theta0), 0)

    def _integrate(self, state: ArmState, i: int) -> ArmState:
        return integrate_step(state, i, self.inertia, self.config.g, self.config.dt)

    @property
    def state(self) -> ArmState:
        return self._state

    @property
    def time(self) -> float:
        return self._state.step_index * self.config.dt

    def step(self) -> ArmState:
        """Advance exactly one time step."""
        self._state = self._integrate(self._state, self._state.step_index + 1)
        return self._state

    def advance(self, n_steps: int) -> ArmState:
        """Advance n_steps time steps; zero is allowed."""
        if n_steps < 0:
            raise ValueError("n_steps must be non-negative")
        for _ in range(n_steps):
            self.step()
        return self._state

    def launch(self) -> LaunchResult:
        """Launch outcome for a release at the current state."""
        return launch_from_state(self._state, self.config)

    def positions(self, state: Optional[ArmState] = None) -> Dict[str, np.ndarray]:
        """
        World positions with the ground at y = 0 and the pivot above x = 0.

        Returns
        -------
        dict : pivot, counterweight, projectile and beam centroid (x, y)
        """
        if state is None:
            state = self._state
        cfg = self.config
        direction = np.array([np.cos(state.theta), np.sin(state.theta)])
        p_pivot = np.array([0.0, cfg.h0])

        return {
            'pivot': p_pivot,
            'counterweight': p_pivot + cfg.L1 * direction,
            'projectile': p_pivot - cfg.L2 * direction,
            'beam_centroid': p_pivot + self.beam.centroid_offset * direction,
        }

    def energy(self, state: Optional[ArmState] = None) -> Tuple[float, float]:
        """
        Kinetic and potential energy consistent with the equation of motion.

        PE is measured from the pivot height: g * m * sin(theta), where m is
        the net torque coefficient.
        """
        if state is None:
            state = self._state
        ke = 0.5 * self.inertia.total_inertia * state.theta_dot**2
        pe = self.config.g * self.inertia.net_torque_coefficient * np.sin(state.theta)
        return ke, pe

    def run_until(self, release: ReleasePolicy, max_steps: Optional[int] = None) -> bool:
        """
        Step until the release policy fires.

        Returns
        -------
        bool : True if released, False if max_steps ran out first
        """
        if max_steps is None:
            max_steps = int(round(self.config.t_max / self.config.dt))

        for _ in range(max_steps):
            if release(self._state):
                return True
            self.step()
        return release(self._state)

    def simulate(self, release: Optional[ReleasePolicy] = None) -> SimulationResult:
        """
        Run from the start angle to release and analyze the launch.

        Parameters
        ----------
        release : callable, optional
            Release policy; defaults to the configured release angle

        Returns
        -------
        SimulationResult : sampled history, release state and launch outcome
        """
        cfg = self.config
        if release is None:
            release = release_at_angle(cfg.release_angle)

        self.reset()
        result = SimulationResult()
        result.phase_transitions = [(0.0, 'start')]

        max_steps = int(round(cfg.t_max / cfg.dt))
        stride = max(1, int(round(cfg.dt_output / cfg.dt)))

        samples = []
        released = release(self._state)
        while not released and self._state.step_index < max_steps:
            if self._state.step_index % stride == 0:
                samples.append(self._state)
            self.step()
            released = release(self._state)
        samples.append(self._state)

        result.time = np.array([s.step_index * cfg.dt for s in samples])
        result.theta = np.array([s.theta for s in samples])
        result.d_theta = np.array([s.theta_dot for s in samples])

        n_points = len(samples)
        result.pos_cw = np.zeros((n_points, 2))
        result.pos_proj = np.zeros((n_points, 2))
        result.kinetic_energy = np.zeros(n_points)
        result.potential_energy = np.zeros(n_points)

        for i, s in enumerate(samples):
            positions = self.positions(s)
            result.pos_cw[i] = positions['counterweight']
            result.pos_proj[i] = positions['projectile']
            result.kinetic_energy[i], result.potential_energy[i] = self.energy(s)

        result.total_energy = result.kinetic_energy + result.potential_energy

        result.release_state = self._state
        result.release_time = self.time
        result.released = released

        if released:
            result.phase_transitions.append((self.time, 'release'))
            result.launch = self.launch()
        else:
            result.phase_transitions.append((self.time, 'timeout'))
            warnings.warn(f"No release within t_max = {cfg.t_max} s")

        return result

    def compute_fitness(self, result: SimulationResult) -> float:
        """Fitness for optimization: the range, zero without a launch."""
        return result.range_distance


# =============================================================================
# Core interface
# =============================================================================

def configure(
    geometry: BeamGeometry,
    counterweight_mass: float,
    projectile_mass: float,
    gravity: float = GRAVITY,
    time_step: float = DEFAULT_TIME_STEP,
    base_height: float = 3.0,
    **kwargs,
) -> TrebuchetSimulator:
    """
    Build a simulation handle from geometry and masses.

    Extra keyword arguments are passed through to TrebuchetConfig
    (release_angle, t_max, dt_output).

    Raises
    ------
    ConfigurationError
        For any invalid static input
    """
    if not isinstance(geometry, BeamGeometry):
        raise ConfigurationError(f"Expected BeamGeometry, got {type(geometry).__name__}")

    config = TrebuchetConfig(
        L1=geometry.L1,
        L2=geometry.L2,
        w=geometry.w,
        thickness=geometry.t,
        rho=geometry.rho,
        h0=base_height,
        M_cw=counterweight_mass,
        m_proj=projectile_mass,
        g=gravity,
        dt=time_step,
        **kwargs,
    )
    return TrebuchetSimulator(config)


def step(handle: TrebuchetSimulator) -> ArmState:
    """Advance the handle by one time step."""
    return handle.step()


def compute_launch(handle: TrebuchetSimulator) -> LaunchResult:
    """Launch outcome for the handle's current state."""
    return handle.launch()


def run_demo():
    """Run the simulation with default parameters and print a summary."""
    print("=" * 60)
    print("Trebuchet Simulation")
    print("=" * 60)

    config = TrebuchetConfig()
    print(f"\nConfiguration:")
    print(f"  L1: {config.L1} m")
    print(f"  L2: {config.L2} m")
    print(f"  h0: {config.h0} m")
    print(f"  M_cw: {config.M_cw} kg")
    print(f"  m_proj: {config.m_proj} kg")
    print(f"  release_angle: {config.release_angle} deg")

    sim = TrebuchetSimulator(config)
    print(f"\nBeam:")
    print(f"  mass: {sim.beam.mass:.2f} kg")
    print(f"  centroid offset: {sim.beam.centroid_offset:.3f} m")
    print(f"  inertia about centroid: {sim.beam.inertia_about_centroid:.2f} kg m^2")
    print(f"  system inertia: {sim.inertia.total_inertia:.2f} kg m^2")

    print("\nRunning simulation...")
    result = sim.simulate()

    if result.launch is None:
        print("\nNo release.")
        return result

    launch = result.launch
    print(f"\nResults:")
    print(f"  Release time: {result.release_time:.3f} s")
    print(f"  Release speed: {launch.release_speed:.2f} m/s")
    print(f"  Launch angle: {np.rad2deg(launch.launch_angle):.1f} deg")
    print(f"  Flight time: {launch.flight_time:.2f} s")
    print(f"  Range: {launch.range_distance:.2f} m")
    print(f"  Energy efficiency: {launch.energy_efficiency:.3f}")
    print(f"  Range efficiency: {launch.range_efficiency:.3f}")
    print(f"  Height efficiency: {launch.height_efficiency:.3f}")

    return result


if __name__ == "__main__":
    result = run_demo()
