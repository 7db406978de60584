"""
Per-step output surface.

A snapshot is the read-only view consumed by visualisation and export
code: bat positions, alive flags and states, patch geometry and,
optionally, the prey field.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional

import numpy as np

if TYPE_CHECKING:
    from batforage.core.context import SimulationContext


@dataclass(frozen=True)
class SimulationSnapshot:
    """State of the simulation after one step."""
    step: int
    day: int
    time_of_day: int
    positions: np.ndarray          # (N, ndim), dead bats keep their last position
    alive: np.ndarray              # (N,) bool
    states: List[str]              # BatState names
    patch_centers: np.ndarray      # (P, ndim)
    patch_radii: np.ndarray        # (P,)
    prey_field: Optional[np.ndarray] = None

    @classmethod
    def capture(cls, ctx: SimulationContext, include_field: bool = False) -> SimulationSnapshot:
        return cls(
            step=ctx.clock.step,
            day=ctx.clock.day,
            time_of_day=ctx.clock.time_of_day,
            positions=ctx.population.positions(),
            alive=ctx.population.alive_flags(),
            states=ctx.population.states(),
            patch_centers=ctx.patches.centers(),
            patch_radii=ctx.patches.radii(),
            prey_field=ctx.field.snapshot() if include_field else None,
        )

    @property
    def living_positions(self) -> np.ndarray:
        return self.positions[self.alive] if len(self.alive) else self.positions
