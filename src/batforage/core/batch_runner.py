"""
Batch runner for replicate simulations.

Runs several independent simulations in one process with parameter
variations and replicate seeds, each on its own SimulationContext.
"""

from __future__ import annotations

import itertools
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from batforage.core.simulation import Simulation
from batforage.parameters.simulation_params import SimulationParameters

logger = logging.getLogger("batforage.core.batch_runner")


@dataclass
class BatchResult:
    """Result from a single simulation run in a batch."""

    run_id: int
    parameters: Dict[str, Any]
    random_seed: int
    initial_population: int
    survivors: int
    total_deaths: int
    total_steps: int
    mean_final_calories: float
    prey_consumed: float
    execution_time_seconds: float

    survival_rate: float = field(init=False)

    def __post_init__(self):
        if self.initial_population > 0:
            self.survival_rate = self.survivors / self.initial_population
        else:
            self.survival_rate = 0.0


@dataclass
class BatchConfiguration:
    """Configuration for a batch of simulation runs."""

    # Parameters shared by all runs
    base_params: Dict[str, Any] = field(default_factory=dict)

    # Parameter variations: Dict[param_name, List[values]]
    variations: Dict[str, List[Any]] = field(default_factory=dict)

    # Replicates per parameter combination
    replicates: int = 1

    # Seeds for replicates (0..replicates-1 if None)
    seeds: Optional[List[int]] = None

    def get_all_combinations(self) -> List[Dict[str, Any]]:
        """Generate all parameter combinations."""
        if not self.variations:
            return [self.base_params.copy()]

        keys = list(self.variations.keys())
        combinations = []
        for combo in itertools.product(*self.variations.values()):
            params = self.base_params.copy()
            params.update(zip(keys, combo))
            combinations.append(params)
        return combinations

    @property
    def total_runs(self) -> int:
        return len(self.get_all_combinations()) * self.replicates


class BatchRunner:
    """
    Run multiple simulations with parameter variations.

    Example usage:
        config = BatchConfiguration(
            base_params={"n_steps": 480},
            variations={"bat_count": [20, 50], "n_patches": [5, 15]},
            replicates=3,
        )
        runner = BatchRunner(config)
        runner.run()
        df = runner.to_dataframe()
    """

    def __init__(self, config: BatchConfiguration):
        self.config = config
        self.results: List[BatchResult] = []
        if config.seeds is None:
            self.seeds = list(range(config.replicates))
        else:
            if len(config.seeds) < config.replicates:
                raise ValueError("need one seed per replicate")
            self.seeds = list(config.seeds)

    def run(self) -> List[BatchResult]:
        """Execute every combination x replicate sequentially."""
        combinations = self.config.get_all_combinations()
        logger.info(
            "Starting batch: %d combinations x %d replicates",
            len(combinations), self.config.replicates,
        )
        self.results = []
        run_id = 0
        for combo in combinations:
            for rep in range(self.config.replicates):
                self.results.append(self._run_single(run_id, combo, self.seeds[rep]))
                run_id += 1
        return self.results

    def _run_single(self, run_id: int, params: Dict[str, Any], seed: int) -> BatchResult:
        """Run a single simulation and summarise it."""
        start_time = time.time()
        sim_params = SimulationParameters.from_dict(params)
        sim = Simulation(sim_params, seed=seed, record_history=False)
        initial = sim.population_size
        sim.run(progress=False)

        living = [b.calories for b in sim.population.living()]
        return BatchResult(
            run_id=run_id,
            parameters=params,
            random_seed=seed,
            initial_population=initial,
            survivors=sim.population_size,
            total_deaths=sim.total_deaths,
            total_steps=sim.clock.step,
            mean_final_calories=float(np.mean(living)) if living else 0.0,
            prey_consumed=sim.total_prey_consumed,
            execution_time_seconds=time.time() - start_time,
        )

    def to_dataframe(self, results: Optional[List[BatchResult]] = None) -> pd.DataFrame:
        """One row per run, parameters flattened into ``param_*`` columns."""
        if results is None:
            results = self.results
        rows = []
        for r in results:
            row = {
                "run_id": r.run_id,
                "random_seed": r.random_seed,
                "initial_population": r.initial_population,
                "survivors": r.survivors,
                "survival_rate": r.survival_rate,
                "total_deaths": r.total_deaths,
                "total_steps": r.total_steps,
                "mean_final_calories": r.mean_final_calories,
                "prey_consumed": r.prey_consumed,
                "execution_time_seconds": r.execution_time_seconds,
            }
            for k, v in r.parameters.items():
                row[f"param_{k}"] = v
            rows.append(row)
        return pd.DataFrame(rows)

    def export_results(self, path: str) -> Path:
        """Write the results table to CSV."""
        if not self.results:
            raise ValueError("No results to export")
        output = Path(path)
        output.parent.mkdir(parents=True, exist_ok=True)
        self.to_dataframe().to_csv(output, index=False)
        return output
