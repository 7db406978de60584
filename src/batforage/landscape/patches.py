"""
Foraging patch registry.

Patches are circular (spherical in 3D) foraging clusters with a finite
prey stock and an occupant capacity. The registry is rebuilt at the start
of every simulated day; patch ids run from 1 to ``n_patches`` so the same
id is reused by the patch occupying that slot on the next day.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

import numpy as np


@dataclass
class Patch:
    """A single foraging patch."""

    id: int
    center: np.ndarray
    radius: float
    capacity: int
    total_prey: float = 0.0
    initial_prey: float = 0.0
    occupancy: int = 0

    @property
    def is_eligible(self) -> bool:
        """True if the patch still has prey and a free slot."""
        return self.total_prey > 0 and self.occupancy < self.capacity

    @property
    def consumed(self) -> float:
        """Prey removed since the patch was generated."""
        return self.initial_prey - self.total_prey

    def contains(self, position: np.ndarray) -> bool:
        """Check whether a position lies inside the patch footprint."""
        return float(np.linalg.norm(np.asarray(position) - self.center)) <= self.radius


class PatchRegistry:
    """
    Container for the patches of the current day.

    Occupancy is derived state: it is zeroed by ``reset_occupancy`` once
    per step and rebuilt from the bats' reported locations.
    """

    def __init__(self, ndim: int = 2):
        self.ndim = ndim
        self._patches: Dict[int, Patch] = {}
        self.generation: int = 0

    def __len__(self) -> int:
        return len(self._patches)

    def __iter__(self) -> Iterator[Patch]:
        return iter(self._patches.values())

    def __contains__(self, patch_id: int) -> bool:
        return patch_id in self._patches

    def get(self, patch_id: int) -> Optional[Patch]:
        """Look up a patch by id, ``None`` if it does not exist."""
        return self._patches.get(patch_id)

    def clear(self) -> None:
        """Drop every patch and start a new generation."""
        self._patches = {}
        self.generation += 1

    def add(self, patch: Patch) -> None:
        self._patches[patch.id] = patch

    def reset_occupancy(self) -> None:
        """Zero the occupancy counter of every patch."""
        for patch in self._patches.values():
            patch.occupancy = 0

    def record_presence(self, patch_id: int) -> None:
        """Count one bat as resident in the given patch."""
        patch = self._patches.get(patch_id)
        if patch is not None:
            patch.occupancy += 1

    def eligible(self) -> List[Patch]:
        """Patches with remaining prey and spare capacity."""
        return [p for p in self._patches.values() if p.is_eligible]

    @property
    def total_prey(self) -> float:
        return float(sum(p.total_prey for p in self._patches.values()))

    @property
    def total_occupancy(self) -> int:
        return int(sum(p.occupancy for p in self._patches.values()))

    def centers(self) -> np.ndarray:
        """Patch centers as an (n, ndim) array, ordered by id."""
        if not self._patches:
            return np.empty((0, self.ndim))
        return np.array([self._patches[k].center for k in sorted(self._patches)])

    def radii(self) -> np.ndarray:
        """Patch radii ordered by id."""
        return np.array([self._patches[k].radius for k in sorted(self._patches)], dtype=float)
