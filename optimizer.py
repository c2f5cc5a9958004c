"""
Trebuchet Launch Simulator: Design Optimizer
============================================
Searches arm lengths, counterweight mass and release angle with
differential evolution. Objectives:
- 'range'             distance thrown [m]
- 'range_efficiency'  range over the ideal range from the released energy

A counterweight arm longer than the pivot height hits the ground and is
penalized before any simulation is run.
"""

import json
import time
import warnings
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple
import numpy as np
from scipy.optimize import differential_evolution

from config import TrebuchetConfig, OptimizationBounds, LaunchResult, TrebuchetError
from trebuchet_model import TrebuchetSimulator


# Penalties, returned to the minimizer in place of a negative fitness
PENALTY_GROUND_STRIKE = 1000.0   # per metre of overshoot
PENALTY_FAILURE = 100000.0

# Counterweight must stay this far above the ground [m]
GROUND_CLEARANCE = 0.1

OBJECTIVES: Dict[str, Callable[[LaunchResult], float]] = {
    'range': lambda launch: launch.range_distance,
    'range_efficiency': lambda launch: launch.range_efficiency,
}


def clearance_penalty(L1: float, h0: float) -> float:
    """Penalty for a counterweight that swings into the ground; 0 if it clears."""
    overshoot = L1 - (h0 - GROUND_CLEARANCE)
    return PENALTY_GROUND_STRIKE * overshoot if overshoot > 0 else 0.0


def run_quietly(config: TrebuchetConfig) -> Optional[LaunchResult]:
    """Simulate to release with timeout warnings suppressed; None if no launch."""
    simulator = TrebuchetSimulator(config)
    with warnings.catch_warnings():
        warnings.simplefilter('ignore')
        return simulator.simulate().launch


@dataclass
class OptimizationResult:
    """Best design found by a run."""
    params: np.ndarray
    fitness: float
    config: TrebuchetConfig
    launch: Optional[LaunchResult]
    generations: int
    evaluations: int
    elapsed: float
    history: List[float] = field(default_factory=list)

    @property
    def best_range(self) -> float:
        return self.launch.range_distance if self.launch is not None else 0.0


class TrebuchetOptimizer:
    """
    Differential evolution over (L1, L2, M_cw, release_angle).

    Everything else comes from base_config.
    """

    def __init__(
        self,
        bounds: OptimizationBounds = None,
        base_config: TrebuchetConfig = None,
        objective: str = 'range',
        verbose: bool = True
    ):
        if objective not in OBJECTIVES:
            raise ValueError(f"Unknown objective {objective!r}, expected one of {sorted(OBJECTIVES)}")

        self.bounds = bounds or OptimizationBounds()
        self.base_config = base_config or TrebuchetConfig()
        self.objective = objective
        self.verbose = verbose
        self._reset_tracking()

    def _reset_tracking(self):
        self.evaluations = 0
        self.history = []
        self.best_fitness = -np.inf
        self.best_params = None

    def config_for(self, params: np.ndarray) -> TrebuchetConfig:
        return self.bounds.params_to_config(params, self.base_config)

    def evaluate(self, config: TrebuchetConfig) -> float:
        """Objective value of one design; zero if the arm never releases."""
        launch = run_quietly(config)
        if launch is None:
            return 0.0
        return OBJECTIVES[self.objective](launch)

    def cost(self, params: np.ndarray) -> float:
        """
        Value minimized by differential evolution.

        Negative objective for designs that launch, a positive penalty for
        ground strikes and failed simulations.
        """
        self.evaluations += 1

        penalty = clearance_penalty(params[0], self.base_config.h0)
        if penalty > 0:
            return penalty

        try:
            fitness = self.evaluate(self.config_for(params))
        except TrebuchetError as e:
            if self.verbose:
                warnings.warn(f"Design {np.round(params, 3)} rejected: {e}")
            return PENALTY_FAILURE

        if fitness > self.best_fitness:
            self.best_fitness = fitness
            self.best_params = np.array(params, copy=True)

        return -fitness

    def _on_generation(self, xk: np.ndarray, convergence: float = None):
        self.history.append(self.best_fitness)
        if self.verbose:
            print(f"  gen {len(self.history):3d}: best {self.objective} = "
                  f"{self.best_fitness:.4g} after {self.evaluations} evaluations")

    def optimize(
        self,
        maxiter: int = 50,
        popsize: int = 15,
        mutation: Tuple[float, float] = (0.5, 1.0),
        recombination: float = 0.7,
        seed: int = None,
        polish: bool = False
    ) -> OptimizationResult:
        """
        Run differential evolution.

        Parameters
        ----------
        maxiter : int
            Generations
        popsize : int
            Population multiplier; the population is popsize * 4
        mutation, recombination
            Passed through to scipy
        seed : int, optional
            Makes the run reproducible
        polish : bool
            Finish with a local L-BFGS-B search

        Returns
        -------
        OptimizationResult
        """
        self._reset_tracking()
        bounds = self.bounds.get_bounds_list()

        if self.verbose:
            print("=" * 60)
            print(f"Optimizing {self.objective}: {popsize * len(bounds)} designs x {maxiter} generations")
            print("=" * 60)

        started = time.time()
        de = differential_evolution(
            self.cost,
            bounds,
            maxiter=maxiter,
            popsize=popsize,
            mutation=mutation,
            recombination=recombination,
            seed=seed,
            polish=polish,
            callback=self._on_generation,
            disp=False,
            updating='immediate',
        )
        elapsed = time.time() - started

        params = self.best_params if self.best_params is not None else np.asarray(de.x)
        config = self.config_for(params)
        result = OptimizationResult(
            params=params,
            fitness=self.best_fitness,
            config=config,
            launch=run_quietly(config),
            generations=de.nit,
            evaluations=self.evaluations,
            elapsed=elapsed,
            history=list(self.history),
        )

        if self.verbose:
            print(f"\nDone in {elapsed:.1f} s, {self.evaluations} evaluations")
            print(f"  {self.objective}: {result.fitness:.4g}")
            print(f"  range: {result.best_range:.2f} m")
            print(f"  L1 = {config.L1:.3f} m, L2 = {config.L2:.3f} m, "
                  f"M_cw = {config.M_cw:.1f} kg, release = {config.release_angle:.1f} deg")

        return result


def save_result(result: OptimizationResult, path: str):
    """Write the best design and run statistics as JSON."""
    summary = {
        "range_m": result.best_range,
        "fitness": result.fitness,
        "parameters": result.config.to_dict(),
        "run": {
            "generations": result.generations,
            "evaluations": result.evaluations,
            "elapsed_s": result.elapsed,
        },
    }
    with open(path, 'w') as f:
        json.dump(summary, f, indent=2)


def load_config(path: str) -> TrebuchetConfig:
    """Configuration stored by save_result."""
    with open(path) as f:
        return TrebuchetConfig.from_dict(json.load(f)["parameters"])


def quick_test():
    print("Short optimization run (5 generations)...")
    return TrebuchetOptimizer().optimize(maxiter=5, popsize=5, seed=0)


def full_optimization(output_path: Optional[str] = None):
    result = TrebuchetOptimizer().optimize(maxiter=100, popsize=20, seed=42, polish=True)
    if output_path is not None:
        save_result(result, output_path)
        print(f"Saved to {output_path}")
    return result


def parameter_study(studies: List[Tuple[str, np.ndarray]] = None,
                    base_config: TrebuchetConfig = None):
    """
    One-at-a-time sweep of configuration fields.

    Designs that fail validation or analysis count as zero range.

    Returns
    -------
    dict : field name -> (values, ranges)
    """
    base_config = base_config or TrebuchetConfig()
    if studies is None:
        studies = [
            ('L1', np.linspace(1.0, 2.8, 10)),
            ('L2', np.linspace(3.0, 9.0, 10)),
            ('M_cw', np.linspace(50, 1000, 10)),
            ('m_proj', np.linspace(0.5, 5.0, 10)),
            ('release_angle', np.linspace(-80, -10, 10)),
        ]

    print("=" * 60)
    print("Parameter sweep")
    print("=" * 60)

    results = {}
    for name, values in studies:
        ranges = np.zeros(len(values))
        for i, value in enumerate(values):
            data = base_config.to_dict()
            data[name] = float(value)
            try:
                launch = run_quietly(TrebuchetConfig.from_dict(data))
            except TrebuchetError:
                continue
            if launch is not None:
                ranges[i] = launch.range_distance

        values = np.asarray(values)
        results[name] = (values, ranges)
        best = int(np.argmax(ranges))
        print(f"  {name:14s} best at {values[best]:8.2f} -> {ranges[best]:.2f} m")

    return results


if __name__ == "__main__":
    import sys

    mode = sys.argv[1] if len(sys.argv) > 1 else None
    if mode == '--test':
        quick_test()
    elif mode == '--study':
        parameter_study()
    else:
        full_optimization(mode)
