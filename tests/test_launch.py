"""
Tests for the closed-form launch analysis.
"""

import numpy as np
import pytest

from config import ArmState, TrebuchetConfig, ComputationError, TrebuchetError
from launch import analyze_launch, launch_from_state, trajectory
from trebuchet_model import TrebuchetSimulator


# Arm horizontal, spinning at 10 rad/s: the projectile end moves straight down
VERTICAL_RELEASE = dict(
    theta=0.0, theta_dot=10.0, theta_start=np.arcsin(1.0 / 3.0),
    L1=2.0, L2=6.0, h0=2.0, m1=200.0, m2=1.0, g=9.81,
)


@pytest.fixture
def released(default_config):
    """Launch outcome at the default release angle."""
    return TrebuchetSimulator(default_config).simulate().launch


class TestReleaseKinematics:

    def test_vertical_release(self):
        result = analyze_launch(**VERTICAL_RELEASE)

        assert result.vx0 == pytest.approx(0.0, abs=1e-12)
        assert result.vy0 == pytest.approx(-60.0)
        assert result.range_distance == pytest.approx(0.0, abs=1e-12)
        assert result.H2 == pytest.approx(2.0)

    def test_vertical_release_lands(self):
        result = analyze_launch(**VERTICAL_RELEASE)
        t = result.flight_time
        g = VERTICAL_RELEASE['g']

        assert t > 0
        assert result.H2 + result.vy0 * t - 0.5 * g * t**2 == pytest.approx(0.0, abs=1e-9)

    def test_velocity_is_tangential(self):
        theta, theta_dot, L2 = -0.6, -3.0, 6.0
        result = analyze_launch(theta, theta_dot, 0.5, 2.0, L2, 3.0, 200.0, 1.0)

        radial = np.array([-np.cos(theta), -np.sin(theta)])
        assert np.dot(result.release_velocity, radial) == pytest.approx(0.0, abs=1e-12)
        assert result.release_speed == pytest.approx(abs(L2 * theta_dot))

    def test_release_point(self):
        theta = -0.7
        result = analyze_launch(theta, -3.0, 0.5, 2.0, 6.0, 3.0, 200.0, 1.0)

        assert result.release_x == pytest.approx(-6.0 * np.cos(theta))
        assert result.release_height == pytest.approx(3.0 - 6.0 * np.sin(theta))
        assert result.H_star == pytest.approx(9.0)

    def test_counterweight_drop_uses_start_angle(self):
        """H1 depends on where the arm started, not where it released."""
        a = analyze_launch(-0.7, -3.0, 0.5, 2.0, 6.0, 3.0, 200.0, 1.0)
        b = analyze_launch(-0.7, -3.0, 0.2, 2.0, 6.0, 3.0, 200.0, 1.0)
        c = analyze_launch(-0.9, -3.0, 0.5, 2.0, 6.0, 3.0, 200.0, 1.0)

        assert a.H1 == pytest.approx(2.0 * (1 + np.sin(0.5)))
        assert b.H1 == pytest.approx(2.0 * (1 + np.sin(0.2)))
        assert a.H1 == c.H1


class TestEnergyAndRange:

    def test_energy_terms(self):
        result = analyze_launch(-0.7, -3.0, 0.5, 2.0, 6.0, 3.0, 200.0, 1.0)
        g = 9.81

        assert result.potential_energy == pytest.approx((200.0 * result.H1 - 1.0 * result.H2) * g)
        assert result.kinetic_energy == pytest.approx(0.5 * 1.0 * result.release_speed**2)
        assert result.energy_efficiency == pytest.approx(result.kinetic_energy / result.potential_energy)

    def test_ideal_ranges(self):
        result = analyze_launch(-0.7, -3.0, 0.5, 2.0, 6.0, 3.0, 200.0, 1.0)
        R0 = 2 * result.potential_energy / (1.0 * 9.81)

        assert result.R0_star == pytest.approx(R0)
        assert result.R_star == pytest.approx(R0 * np.sqrt(2 * result.H2 / R0 + 1))
        assert result.RH_star == pytest.approx(R0 * np.sqrt(2 * result.H_star / R0 + 1))
        assert result.range_distance == pytest.approx(abs(result.vx0) * result.flight_time)

    @pytest.mark.parametrize("params", [
        dict(),
        dict(M_cw=500.0),
        dict(M_cw=1000.0, L2=9.0, m_proj=10.0),
        dict(L1=1.0, L2=4.0, M_cw=800.0, h0=2.0),
        dict(release_angle=-20.0),
        dict(release_angle=-70.0),
    ])
    def test_counterweight_driven_efficiencies_in_unit_interval(self, params):
        config = TrebuchetConfig(**params)
        sim = TrebuchetSimulator(config)
        # Beam torque small next to the counterweight's
        assert abs(sim.beam.mass * sim.beam.centroid_offset) < 0.25 * config.M_cw * config.L1

        launch = sim.simulate().launch
        assert launch is not None
        for value in (launch.energy_efficiency, launch.range_efficiency,
                      launch.height_efficiency):
            assert 0 < value <= 1
        # Higher reference height means a longer ideal range
        assert launch.height_efficiency <= launch.range_efficiency

    def test_beam_driven_arm_exceeds_unit_efficiency(self):
        """
        PE counts only the point masses, while the -mb*Lb term lets a heavy
        short-side beam drive the arm. With a light counterweight the
        projectile gets more energy than PE.
        """
        config = TrebuchetConfig(L1=1.0, L2=3.0, M_cw=5.0, m_proj=1.0, h0=1.5,
                                 release_angle=-45.0, w=0.3)
        sim = TrebuchetSimulator(config)
        assert -sim.beam.mass * sim.beam.centroid_offset > config.M_cw * config.L1

        launch = sim.simulate().launch
        assert launch.energy_efficiency == pytest.approx(1.122, abs=1e-3)
        assert launch.range_efficiency == pytest.approx(1.062, abs=1e-3)
        assert launch.range_efficiency > 1
        assert launch.height_efficiency <= launch.range_efficiency

    def test_simulated_release_throws_forward(self, released):
        assert released.vx0 > 0
        assert released.vy0 > 0
        assert released.range_distance > 0
        assert 0 < released.launch_angle < np.pi / 2


class TestDegenerateLaunch:

    def test_no_potential_energy(self):
        with pytest.raises(ComputationError):
            analyze_launch(-0.7, -3.0, 0.5, 2.0, 6.0, 3.0, m1=0.0, m2=1.0)

    def test_massless_projectile(self):
        with pytest.raises(ComputationError):
            analyze_launch(-0.7, -3.0, 0.5, 2.0, 6.0, 3.0, m1=200.0, m2=0.0)

    def test_release_below_ground(self):
        # Projectile end pointing straight down from a 2 m pivot on a 6 m arm
        with pytest.raises(ComputationError):
            analyze_launch(np.pi / 2, 1.0, 0.3, 2.0, 6.0, 2.0, m1=200.0, m2=1.0)

    def test_non_positive_gravity(self):
        with pytest.raises(ComputationError):
            analyze_launch(-0.7, -3.0, 0.5, 2.0, 6.0, 3.0, 200.0, 1.0, g=0.0)

    def test_errors_share_base_class(self):
        with pytest.raises(TrebuchetError):
            analyze_launch(-0.7, -3.0, 0.5, 2.0, 6.0, 3.0, m1=0.0, m2=1.0)
        assert issubclass(ComputationError, ArithmeticError)


class TestLaunchFromState:

    def test_uses_config(self):
        config = TrebuchetConfig()
        state = ArmState(theta=-0.8, theta_dot=-3.0, theta0=0.5, step_index=900)
        result = launch_from_state(state, config)
        expected = analyze_launch(-0.8, -3.0, 0.5, config.L1, config.L2, config.h0,
                                  config.M_cw, config.m_proj, config.g)
        assert result == expected

    def test_idempotent(self):
        config = TrebuchetConfig()
        state = ArmState(theta=-0.8, theta_dot=-3.0, theta0=0.5)
        assert launch_from_state(state, config) == launch_from_state(state, config)


class TestTrajectory:

    def test_starts_at_release_and_lands(self, released):
        t, xy = trajectory(released, n_points=51)

        assert t.shape == (51,)
        assert xy.shape == (51, 2)
        assert t[0] == 0.0
        assert t[-1] == pytest.approx(released.flight_time)
        assert xy[0, 0] == 0.0
        assert xy[0, 1] == pytest.approx(released.H2)
        assert xy[-1, 1] == 0.0
        assert xy[-1, 0] == pytest.approx(released.range_distance)

    def test_stays_within_bounds(self, released):
        _, xy = trajectory(released)

        assert xy[:, 0].min() >= released.x_min - 1e-9
        assert xy[:, 0].max() <= released.x_max + 1e-9
        assert xy[:, 1].min() >= released.y_min - 1e-9
        assert xy[:, 1].max() <= released.y_max + 1e-9

    def test_apex(self, released):
        _, xy = trajectory(released, n_points=2001)
        assert xy[:, 1].max() == pytest.approx(released.y_max, rel=1e-4)

    def test_too_few_points(self, released):
        with pytest.raises(ValueError):
            trajectory(released, n_points=1)
