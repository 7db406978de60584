"""
Bat population store.

Holds the fixed set of bats created at start-up together with the spatial
index of living bats used by the movement engine.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Dict, Iterator, List, Optional

import numpy as np
import pandas as pd
from scipy.spatial import cKDTree

from batforage.agents.bat import Bat, create_bat
from batforage.behavior.states import BatState
from batforage.movement.spatial_index import SpatialGrid
from batforage.parameters.simulation_params import SimulationParameters

logger = logging.getLogger("batforage.agents.population")


class BatPopulation:
    """
    Manages the bat population.

    The population is fixed: bats are created once and only leave the
    living set by starving. Iteration order is creation order, which is the
    order every per-step sweep processes bats in.
    """

    def __init__(
        self,
        params: SimulationParameters,
        rng: np.random.Generator,
        bats: Optional[List[Bat]] = None,
    ):
        """
        Create the population.

        Args:
            params: Simulation parameters
            rng: Random generator used for sampling bat attributes
            bats: Pre-built bats (skips sampling, used by tests and replays)
        """
        self.params = params
        self.roost_sites = np.array(params.roost_sites, dtype=float)
        bucket = max(params.repulsion_radius, params.tolerance)
        self.grid = SpatialGrid(bucket)

        if bats is None:
            bats = self._create_bats(params.bat_count, rng)
        self.bats: List[Bat] = list(bats)
        for bat in self.bats:
            if bat.alive:
                self.grid.insert(bat.id, bat.position)

    def _create_bats(self, count: int, rng: np.random.Generator) -> List[Bat]:
        """Create ``count`` bats, each assigned a random origin roost."""
        roost_choice = rng.integers(0, len(self.roost_sites), size=count)
        return [
            create_bat(i, self.roost_sites[roost_choice[i]], self.params, rng)
            for i in range(count)
        ]

    def __len__(self) -> int:
        return len(self.bats)

    def __iter__(self) -> Iterator[Bat]:
        return iter(self.bats)

    def living(self) -> Iterator[Bat]:
        """Living bats in processing order."""
        return (b for b in self.bats if b.alive)

    @property
    def population_size(self) -> int:
        """Current number of living bats."""
        return sum(1 for b in self.bats if b.alive)

    def kill(self, bat: Bat, step: Optional[int] = None) -> None:
        """Mark a bat dead and drop it from the spatial index."""
        bat.die(step)
        self.grid.remove(bat.id)

    def relocate(self, bat: Bat, position) -> None:
        """Teleport a living bat (roost snapping) keeping the index in sync."""
        bat.set_position(position)
        if bat.alive:
            self.grid.move(bat.id, bat.position)

    # ------------------------------------------------------------------
    # Read-only views for the output surface
    # ------------------------------------------------------------------

    def positions(self) -> np.ndarray:
        """(N, ndim) array of positions of every bat, dead ones included."""
        if not self.bats:
            return np.empty((0, self.params.ndim))
        return np.array([b.position for b in self.bats])

    def alive_flags(self) -> np.ndarray:
        return np.array([b.alive for b in self.bats], dtype=bool)

    def states(self) -> List[str]:
        return [b.state.name for b in self.bats]

    def calories(self) -> np.ndarray:
        return np.array([b.calories for b in self.bats], dtype=float)

    def state_counts(self) -> Dict[str, int]:
        """Number of bats in each state, every state listed."""
        counts = Counter(b.state for b in self.bats)
        return {s.name: counts.get(s, 0) for s in BatState}

    def nearest_neighbor_distances(self) -> np.ndarray:
        """
        Distance from each living bat to its nearest living neighbour.

        Returns an empty array when fewer than two bats are alive.
        """
        pts = np.array([b.position for b in self.living()])
        if len(pts) < 2:
            return np.empty(0)
        tree = cKDTree(pts)
        dist, _ = tree.query(pts, k=2)
        return dist[:, 1]

    def to_dataframe(self) -> pd.DataFrame:
        """One row per bat with identity, physiology and current state."""
        rows = []
        for b in self.bats:
            row = {
                "id": b.id,
                "alive": b.alive,
                "state": b.state.name,
                "sex": b.sex.value,
                "age": b.age,
                "reproductive_status": b.reproductive_status.value,
                "strategy": b.strategy.value,
                "competition_rate": b.competition_rate,
                "mass": b.physiology.mass,
                "bmr": b.physiology.bmr,
                "flight_power": b.physiology.flight_power,
                "cruising_speed": b.physiology.cruising_speed,
                "cost_of_transport": b.physiology.cost_of_transport,
                "calories": b.calories,
                "max_calories": b.max_calories,
                "total_gain": b.total_gain,
                "memory_entries": len(b.memory),
                "death_step": b.death_step,
            }
            for axis, value in zip("xyz", b.position):
                row[axis] = value
            rows.append(row)
        return pd.DataFrame(rows)
