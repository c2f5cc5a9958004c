"""
Trebuchet Launch Simulator: Launch Analysis
===========================================
Closed-form release kinematics, flight time, range and efficiency ratios.
No numerical integration of the projectile phase.
"""

from typing import Tuple
import numpy as np

from config import (
    TrebuchetConfig, ArmState, LaunchResult, ComputationError, GRAVITY
)


def analyze_launch(
    theta: float,
    theta_dot: float,
    theta_start: float,
    L1: float,
    L2: float,
    h0: float,
    m1: float,
    m2: float,
    g: float = GRAVITY,
) -> LaunchResult:
    """
    Compute the launch outcome for a release at (theta, theta_dot).

    Parameters
    ----------
    theta, theta_dot : float
        Arm angle [rad] and angular velocity [rad/s] at release
    theta_start : float
        Arm angle at simulation start; the counterweight drop height is
        measured from here, not from the release angle
    L1, L2 : float
        Counterweight and projectile arm lengths [m]
    h0 : float
        Pivot height above ground [m]
    m1, m2 : float
        Counterweight and projectile masses [kg]
    g : float
        Gravitational acceleration [m/s^2]

    Returns
    -------
    LaunchResult

    Raises
    ------
    ComputationError
        If the projectile mass or gravity is not positive, the release point
        is below ground, or no net potential energy is released.
    """
    if m2 <= 0:
        raise ComputationError(f"Projectile mass must be positive, got {m2!r}")
    if g <= 0:
        raise ComputationError(f"Gravity must be positive, got {g!r}")

    # Reference heights
    H1 = L1 * (1 + np.sin(theta_start))
    H2 = h0 - L2 * np.sin(theta)
    H_star = h0 + L2
    if H2 < 0:
        raise ComputationError(f"Release point is below ground (H2 = {H2:.4g} m)")

    PE = (m1 * H1 - m2 * H2) * g
    if not PE > 0:
        raise ComputationError(f"No net potential energy released (PE = {PE:.4g} J)")

    # Tangential velocity of the projectile end
    vx0 = L2 * theta_dot * np.sin(theta)
    vy0 = -L2 * theta_dot * np.cos(theta)
    v02 = vx0 * vx0 + vy0 * vy0

    # Positive root of H2 + vy0*t - g*t^2/2 = 0
    t_max = vy0 / g + np.sqrt((vy0 * vy0) / (g * g) + 2 * H2 / g)

    KE = 0.5 * m2 * v02

    R = abs(vx0) * t_max
    R0_star = 2 * PE / (m2 * g)
    R_star = R0_star * np.sqrt(2 * H2 / R0_star + 1)
    RH_star = R0_star * np.sqrt(2 * H_star / R0_star + 1)

    return LaunchResult(
        theta=float(theta),
        theta_dot=float(theta_dot),
        release_x=float(-L2 * np.cos(theta)),
        release_height=float(H2),
        vx0=float(vx0),
        vy0=float(vy0),
        release_speed=float(np.sqrt(v02)),
        launch_angle=float(np.arctan2(vy0, vx0)),
        H1=float(H1),
        H2=float(H2),
        H_star=float(H_star),
        flight_time=float(t_max),
        range_distance=float(R),
        potential_energy=float(PE),
        kinetic_energy=float(KE),
        R0_star=float(R0_star),
        R_star=float(R_star),
        RH_star=float(RH_star),
        energy_efficiency=float(KE / PE),
        range_efficiency=float(R / R_star),
        height_efficiency=float(R / RH_star),
        g=float(g),
    )


def launch_from_state(state: ArmState, config: TrebuchetConfig) -> LaunchResult:
    """Analyze a release from the given arm state."""
    return analyze_launch(
        theta=state.theta,
        theta_dot=state.theta_dot,
        theta_start=state.theta0,
        L1=config.L1,
        L2=config.L2,
        h0=config.h0,
        m1=config.M_cw,
        m2=config.m_proj,
        g=config.g,
    )


def trajectory(result: LaunchResult, n_points: int = 101) -> Tuple[np.ndarray, np.ndarray]:
    """
    Sample the ballistic flight from release to landing.

    Returns
    -------
    t : ndarray
        (n_points,) times after release [s]
    xy : ndarray
        (n_points, 2) positions; x from the release point, y above ground
    """
    if n_points < 2:
        raise ValueError("n_points must be at least 2")

    t = np.linspace(0.0, result.flight_time, n_points)
    x = result.vx0 * t
    y = result.H2 + result.vy0 * t - 0.5 * result.g * t**2
    # Landing sample is exactly on the ground
    y[-1] = 0.0
    return t, np.column_stack([x, y])
