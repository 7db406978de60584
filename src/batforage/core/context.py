"""
Simulation context.

All mutable simulation state (clock, resource field, patch registry and
bat population) travels in one explicit value that every phase function
receives, so independent simulations can share a process.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from batforage.agents.bat import Bat
from batforage.agents.population import BatPopulation
from batforage.core.clock import DayNightClock
from batforage.landscape.patches import PatchRegistry
from batforage.landscape.resource_field import ResourceField
from batforage.parameters.simulation_params import SimulationParameters


@dataclass
class SimulationContext:
    """Everything a phase function may read or write."""

    params: SimulationParameters
    rng: np.random.Generator
    clock: DayNightClock
    field: ResourceField
    population: BatPopulation

    @classmethod
    def create(
        cls,
        params: SimulationParameters,
        seed: Optional[int] = None,
        bats: Optional[List[Bat]] = None,
    ) -> SimulationContext:
        """
        Build a fresh context from parameters.

        Args:
            params: Simulation parameters
            seed: Random seed; falls back to ``params.random_seed``
            bats: Pre-built bats instead of sampling ``params.bat_count``
        """
        actual_seed = seed if seed is not None else params.random_seed
        rng = np.random.default_rng(actual_seed)
        field = ResourceField(params.domain_size, params.cell_size)
        population = BatPopulation(params, rng, bats=bats)
        return cls(
            params=params,
            rng=rng,
            clock=DayNightClock.from_params(params),
            field=field,
            population=population,
        )

    @property
    def patches(self) -> PatchRegistry:
        return self.field.patches

    @property
    def roost_sites(self) -> np.ndarray:
        return self.population.roost_sites
