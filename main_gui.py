"""
Trebuchet Launch Simulator: Visualization and Animation
=======================================================
Matplotlib front end for the simulation:
- Live animation of the arm, driven frame by frame
- Energy and angle plots
- Analytic projectile trajectory after release

The visualizer only reads simulator state. It decides the cadence (steps
per frame) and when to launch, but never writes into the arm state.
"""

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.animation import FuncAnimation
from matplotlib.patches import Circle, Polygon
import matplotlib.gridspec as gridspec
from typing import Optional

from config import TrebuchetConfig, ArmState, LaunchResult, SimulationResult, TrebuchetError
from beam import beam_outline
from launch import trajectory
from trebuchet_model import TrebuchetSimulator, release_at_angle


# Colours
GROUND_COLOR = 'brown'
BASE_COLOR = '#9CA400'
ARM_COLOR = '#AFF53D'
PIVOT_COLOR = '#AAAAAA'
CW_COLOR = '#0000AA'
FLIGHT_COLOR = 'orange'


def arm_polygon(outline: np.ndarray, theta: float, pivot: np.ndarray) -> np.ndarray:
    """Rotate the arm-frame outline by theta and place it at the pivot."""
    c, s = np.cos(theta), np.sin(theta)
    rotation = np.array([[c, -s], [s, c]])
    return outline @ rotation.T + pivot


def base_polygon(h0: float) -> np.ndarray:
    """Trapezoidal support frame from slightly above the pivot to the ground."""
    top, foot = 0.075 * h0, 0.15 * h0
    return np.array([
        [top, 1.1*h0],
        [-top, 1.1*h0],
        [-foot, 0.0],
        [foot, 0.0],
    ])


def _label(ax, title: str, xlabel: str, ylabel: str, equal: bool = False):
    ax.set_title(title)
    ax.set_xlabel(xlabel)
    ax.set_ylabel(ylabel)
    if equal:
        ax.set_aspect('equal')
    ax.grid(True, alpha=0.3)


def _draw_flight(ax, result: SimulationResult, linewidth: float = 1.0, labels: bool = False):
    """Swing path of the projectile and, if launched, its ballistic arc."""
    ax.axhline(y=0, color=GROUND_COLOR, linewidth=2)

    if result.pos_proj is not None:
        ax.plot(*result.pos_proj.T, 'b-', linewidth=linewidth,
                label='Swing phase' if labels else None)

    launch = result.launch
    if launch is None:
        return
    _, xy = trajectory(launch)
    ax.plot(xy[:, 0] + launch.release_x, xy[:, 1], color=FLIGHT_COLOR,
            linewidth=linewidth, linestyle='--', label='Ballistic' if labels else None)
    if labels:
        ax.plot(launch.release_x, launch.release_height, 'go', markersize=10, label='Release')
        ax.plot(launch.release_x + xy[-1, 0], 0, 'rx', markersize=15, markeredgewidth=3,
                label=f'Landing: {launch.range_distance:.1f} m')


class TrebuchetVisualizer:
    """
    Animated view of one trebuchet configuration.

    The scene is redrawn from simulator.positions(); the simulator is
    advanced steps_per_frame at a time until the release policy fires.
    """

    def __init__(self, config: TrebuchetConfig = None, steps_per_frame: int = 20):
        self.config = config or TrebuchetConfig()
        self.steps_per_frame = steps_per_frame
        self.simulator = TrebuchetSimulator(self.config)
        self.release = release_at_angle(self.config.release_angle)

        self.result: Optional[SimulationResult] = None
        self.launch_result: Optional[LaunchResult] = None
        self.launch_error: Optional[str] = None
        self.animation = None

        self._outline = beam_outline(self.simulator.geometry)
        self._trail = []

        self.fig = None
        self.ax_scene = None
        self.ax_info = None
        self.ax_energy = None
        self.ax_angle = None
        self._artists = {}

    def run_simulation(self) -> SimulationResult:
        """Full run to release with the visualizer's release policy."""
        self.result = self.simulator.simulate(self.release)
        self.launch_result = self.result.launch
        self.launch_error = None
        return self.result

    def create_figure(self):
        """Scene and info panel on top, energy and angle history below."""
        self.fig = plt.figure(figsize=(14, 9))
        self.fig.suptitle('Trebuchet Launch', fontsize=14, fontweight='bold')
        grid = gridspec.GridSpec(2, 3, figure=self.fig, height_ratios=[2, 1],
                                 hspace=0.3, wspace=0.3)

        self.ax_scene = self.fig.add_subplot(grid[0, :2])
        _label(self.ax_scene, 'Arm', 'X [m]', 'Y [m]', equal=True)

        self.ax_info = self.fig.add_subplot(grid[0, 2])
        self.ax_info.axis('off')

        self.ax_energy = self.fig.add_subplot(grid[1, :2])
        _label(self.ax_energy, 'Energy', 'Time [s]', 'Energy [J]')

        self.ax_angle = self.fig.add_subplot(grid[1, 2])
        _label(self.ax_angle, 'Arm Angle', 'Time [s]', 'θ [deg]')

        return self.fig

    def _build_scene(self):
        """Create the patches and lines that frames update in place."""
        ax = self.ax_scene
        cfg = self.config
        pivot = np.array([0.0, cfg.h0])

        reach = 1.2 * max(cfg.L1, cfg.L2) + 0.5
        ax.set_xlim(-reach, reach)
        ax.set_ylim(-0.1 * cfg.h0, cfg.h0 + reach)

        ax.axhline(y=0, color=GROUND_COLOR, linewidth=2)
        ax.add_patch(Polygon(base_polygon(cfg.h0), closed=True, facecolor=BASE_COLOR,
                             edgecolor='black', alpha=0.6, zorder=1))

        size = max(0.5 * cfg.w, 0.05)
        artists = {
            'arm': Polygon(arm_polygon(self._outline, self.simulator.state.theta, pivot),
                           closed=True, facecolor=ARM_COLOR, edgecolor='black', zorder=3),
            'pivot': Circle(tuple(pivot), 0.05 * cfg.h0, color=PIVOT_COLOR, zorder=10),
            'cw': Circle((0, 0), 2 * size, color=CW_COLOR, zorder=5),
            'proj': Circle((0, 0), size, color=PIVOT_COLOR, zorder=5),
        }
        for patch in artists.values():
            ax.add_patch(patch)

        artists['trail'], = ax.plot([], [], color=FLIGHT_COLOR, linewidth=1, alpha=0.5)
        artists['flight'], = ax.plot([], [], color=FLIGHT_COLOR, linewidth=1,
                                     linestyle='--', alpha=0.7)
        artists['clock'] = ax.text(0.02, 0.98, '', transform=ax.transAxes,
                                   verticalalignment='top', fontsize=10)
        self._artists = artists
        self._trail = []

    def _draw_state(self, state: ArmState):
        """Move the scene to the given arm state."""
        positions = self.simulator.positions(state)

        self._artists['arm'].set_xy(arm_polygon(self._outline, state.theta, positions['pivot']))
        self._artists['cw'].center = tuple(positions['counterweight'])
        self._artists['proj'].center = tuple(positions['projectile'])

        self._trail.append(positions['projectile'])
        self._artists['trail'].set_data(*np.array(self._trail).T)
        if self.launch_error is None:
            self._artists['clock'].set_text(f't = {state.step_index * self.config.dt:.3f} s')

    def _draw_flight_path(self, launch: LaunchResult):
        _, xy = trajectory(launch)
        self._artists['flight'].set_data(xy[:, 0] + launch.release_x, xy[:, 1])

    def _write_info(self):
        cfg = self.config
        sim = self.simulator
        lines = [
            "MACHINE",
            f"L1 / L2:  {cfg.L1:.2f} / {cfg.L2:.2f} m",
            f"h0:       {cfg.h0:.2f} m",
            f"M_cw:     {cfg.M_cw:.0f} kg",
            f"m_proj:   {cfg.m_proj:.2f} kg",
            f"release:  {cfg.release_angle:.1f} deg",
            f"beam:     {sim.beam.mass:.1f} kg @ {sim.beam.centroid_offset:+.3f} m",
            f"I:        {sim.inertia.total_inertia:.1f} kg m^2",
        ]

        launch = self.launch_result
        if launch is not None:
            lines += [
                "",
                "LAUNCH",
                f"speed:    {launch.release_speed:.1f} m/s",
                f"angle:    {np.rad2deg(launch.launch_angle):.1f} deg",
                f"flight:   {launch.flight_time:.2f} s",
                f"range:    {launch.range_distance:.1f} m",
                f"KE/PE:    {launch.energy_efficiency:.3f}",
                f"R/R*:     {launch.range_efficiency:.3f}",
                f"R/RH*:    {launch.height_efficiency:.3f}",
            ]
        elif self.launch_error is not None:
            lines += ["", "LAUNCH FAILED", self.launch_error]

        self.ax_info.clear()
        self.ax_info.axis('off')
        self.ax_info.text(0.05, 0.95, '\n'.join(lines), transform=self.ax_info.transAxes,
                          verticalalignment='top', fontsize=9, family='monospace')

    def _plot_history(self):
        """Energy and angle curves of the last full run."""
        for ax in (self.ax_energy, self.ax_angle):
            ax.clear()
        _label(self.ax_energy, 'Energy', 'Time [s]', 'Energy [J]')
        _label(self.ax_angle, 'Arm Angle', 'Time [s]', 'θ [deg]')

        result = self.result
        if result is None or result.time is None:
            return

        self.ax_energy.plot(result.time, result.kinetic_energy, 'r-', label='Kinetic')
        self.ax_energy.plot(result.time, result.potential_energy, 'b-', label='Potential')
        self.ax_energy.plot(result.time, result.total_energy, 'k--', label='Total')
        self.ax_energy.legend(fontsize=8)

        self.ax_angle.plot(result.time, np.rad2deg(result.theta), 'b-')
        self.ax_angle.axhline(y=self.config.release_angle, color='k', linestyle='--', alpha=0.5)

    def frame(self, _frame_idx: int = 0):
        """
        One host frame: advance up to steps_per_frame until release, redraw.

        The launch is computed once, on the frame that reaches release.
        """
        sim = self.simulator
        pending = self.launch_result is None and self.launch_error is None
        if pending and sim.run_until(self.release, self.steps_per_frame):
            try:
                self.launch_result = sim.launch()
            except TrebuchetError as e:
                self.launch_error = str(e)
                self._artists['clock'].set_text(f'Launch failed: {e}')
                self._write_info()
            else:
                self._draw_flight_path(self.launch_result)
                self._write_info()

        self._draw_state(sim.state)
        return list(self._artists.values())

    def animate(self, interval: int = 30, n_frames: int = None, show: bool = True):
        """
        Animate from the start angle.

        Parameters
        ----------
        interval : int
            Milliseconds between frames
        n_frames : int, optional
            Defaults to enough frames to cover t_max
        show : bool
            Call plt.show()
        """
        if self.fig is None:
            self.create_figure()

        self.simulator.reset()
        self.launch_result = None
        self.launch_error = None
        self._build_scene()
        self._write_info()

        if n_frames is None:
            n_frames = int(round(self.config.t_max / self.config.dt)) // self.steps_per_frame + 1

        self.animation = FuncAnimation(
            self.fig, self.frame, frames=n_frames,
            init_func=lambda: list(self._artists.values()),
            interval=interval, blit=False, repeat=False,
        )

        if show:
            plt.show()
        return self.animation

    def plot_static(self, show: bool = True):
        """Release-state snapshot with energy and angle history."""
        self.run_simulation()
        if self.fig is None:
            self.create_figure()

        self._build_scene()
        self._draw_state(self.result.release_state)
        if self.launch_result is not None:
            self._draw_flight_path(self.launch_result)

        self._write_info()
        self._plot_history()

        if show:
            plt.tight_layout()
            plt.show()
        return self.fig

    def plot_trajectory(self, show: bool = True):
        """Swing path of the projectile followed by its ballistic flight."""
        if self.result is None:
            self.run_simulation()

        fig, ax = plt.subplots(figsize=(12, 6))
        _label(ax, 'Projectile Trajectory', 'X [m]', 'Y [m]', equal=True)
        _draw_flight(ax, self.result, linewidth=2, labels=True)
        ax.legend()

        if show:
            plt.tight_layout()
            plt.show()
        return fig


def compare_configs(show: bool = True):
    """Flight paths of a few variations on the default machine."""
    variants = [
        ("Default", TrebuchetConfig()),
        ("Heavy CW", TrebuchetConfig(M_cw=500.0)),
        ("Long arm", TrebuchetConfig(L2=8.0)),
        ("Late release", TrebuchetConfig(release_angle=-60.0)),
    ]

    fig, axes = plt.subplots(2, 2, figsize=(14, 10))
    for ax, (name, config) in zip(axes.flat, variants):
        result = TrebuchetSimulator(config).simulate()
        _label(ax, f'{name}\nRange: {result.range_distance:.1f} m', 'X [m]', 'Y [m]', equal=True)
        _draw_flight(ax, result)

    if show:
        plt.tight_layout()
        plt.show()
    return fig


def interactive_demo():
    viz = TrebuchetVisualizer()
    result = viz.run_simulation()

    print(f"Range: {result.range_distance:.1f} m")
    if result.launch is not None:
        print(f"Release speed: {result.launch.release_speed:.1f} m/s, "
              f"R/R* = {result.launch.range_efficiency:.3f}")

    viz.animate()


if __name__ == "__main__":
    import sys

    mode = sys.argv[1] if len(sys.argv) > 1 else None
    if mode == '--compare':
        compare_configs()
    elif mode == '--trajectory':
        TrebuchetVisualizer().plot_trajectory()
    elif mode == '--static':
        TrebuchetVisualizer().plot_static()
    else:
        interactive_demo()
