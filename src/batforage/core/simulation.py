"""
Main simulation controller.

This module contains the Simulation class which drives the day-night
lifecycle of the bat population: it owns a SimulationContext, runs the
per-step phases and records population history.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd
from tqdm import tqdm

from batforage.core.clock import ClockState
from batforage.core.context import SimulationContext
from batforage.core.phases import StepReport, run_step
from batforage.core.snapshot import SimulationSnapshot
from batforage.movement.repulsion import MoveOutcome

logger = logging.getLogger("batforage.core.simulation")


class Simulation:
    """
    Main simulation controller.

    Orchestrates the model:
    - Clock advancement and daily patch regeneration
    - State resolution, movement and energy phases
    - History and statistics for the output surface

    Example:
        params = SimulationParameters(bat_count=100, n_steps=480)
        sim = Simulation(params, seed=1)
        sim.run()
        df = sim.get_history()
    """

    def __init__(
        self,
        params,
        seed: Optional[int] = None,
        bats=None,
        record_history: bool = True,
    ):
        """
        Initialize the simulation.

        Args:
            params: SimulationParameters configuration
            seed: Random seed, overrides ``params.random_seed``
            bats: Optional pre-built bats instead of sampled ones
            record_history: Append a statistics row after every step
        """
        self.params = params
        self.context = SimulationContext.create(params, seed=seed, bats=bats)
        self.record_history = record_history
        self._history: List[Dict[str, Any]] = []
        self._is_running = False
        self.total_deaths = 0
        self.total_prey_consumed = 0.0
        self.last_report: Optional[StepReport] = None

        logger.info(
            "Initialized simulation: %d bats, %d roosts, domain %s",
            len(self.context.population), len(self.context.roost_sites),
            params.domain_size,
        )

    # ------------------------------------------------------------------
    # Stepping
    # ------------------------------------------------------------------

    def step(self) -> ClockState:
        """Execute one simulation step."""
        report = run_step(self.context)
        self.last_report = report
        self.total_deaths += report.deaths
        self.total_prey_consumed += report.prey_consumed
        if self.record_history:
            self._record_history(report)
        return self.context.clock.state

    def run(self, progress: bool = True, n_steps: Optional[int] = None) -> None:
        """
        Run the simulation.

        Stops after ``n_steps`` (default ``params.n_steps``) steps, when
        ``stop()`` is called or when every bat is dead.

        Args:
            progress: Show progress bar
            n_steps: Number of steps to run from the current step
        """
        total = n_steps if n_steps is not None else self.params.n_steps - self.clock.step
        self._is_running = True

        iterator = range(max(0, total))
        if progress:
            iterator = tqdm(iterator, desc="Simulating", unit="steps")

        for _ in iterator:
            if not self._is_running:
                break
            self.step()
            if self.population_size == 0:
                logger.info("All bats dead at step %d", self.clock.step)
                break

        self._is_running = False
        logger.info(
            "Run complete at step %d: %d of %d bats alive",
            self.clock.step, self.population_size, len(self.population),
        )

    def stop(self) -> None:
        """Stop the simulation."""
        self._is_running = False

    @property
    def is_finished(self) -> bool:
        return self.clock.step >= self.params.n_steps or self.population_size == 0

    # ------------------------------------------------------------------
    # Output surface
    # ------------------------------------------------------------------

    def snapshot(self, include_field: bool = False) -> SimulationSnapshot:
        """Positions, alive flags, states and patch geometry of this step."""
        return SimulationSnapshot.capture(self.context, include_field=include_field)

    def _record_history(self, report: StepReport) -> None:
        calories = np.array([b.calories for b in self.population.living()], dtype=float)
        row = {
            "step": self.clock.step,
            "day": self.clock.day,
            "time_of_day": self.clock.time_of_day,
            "population": len(calories),
            "deaths": report.deaths,
            "mean_calories": float(calories.mean()) if len(calories) else 0.0,
            "prey_consumed": report.prey_consumed,
            "total_prey": self.context.patches.total_prey,
            "blocked_moves": report.moves.get(MoveOutcome.BLOCKED, 0),
        }
        for state, count in self.population.state_counts().items():
            row[state.lower()] = count
        self._history.append(row)

    @property
    def history(self) -> List[Dict[str, Any]]:
        return self._history

    def get_history(self) -> pd.DataFrame:
        """History as a DataFrame with one row per recorded step."""
        return pd.DataFrame(self._history)

    def get_statistics(self) -> Dict[str, Any]:
        """Current simulation statistics."""
        nn = self.population.nearest_neighbor_distances()
        return {
            "step": self.clock.step,
            "day": self.clock.day,
            "population": self.population_size,
            "deaths_total": self.total_deaths,
            "prey_consumed_total": self.total_prey_consumed,
            "mean_calories": float(np.mean([b.calories for b in self.population.living()]))
            if self.population_size else 0.0,
            "min_nearest_neighbor": float(nn.min()) if len(nn) else float("nan"),
            **self.population.state_counts(),
        }

    @property
    def clock(self):
        return self.context.clock

    @property
    def field(self):
        return self.context.field

    @property
    def patches(self):
        return self.context.patches

    @property
    def population(self):
        return self.context.population

    @property
    def bats(self):
        return self.context.population.bats

    @property
    def population_size(self) -> int:
        return self.context.population.population_size

    @property
    def agents_df(self) -> pd.DataFrame:
        return self.context.population.to_dataframe()
