"""
Foraging memory.

Each bat keeps a sparse record of how much it gained at each patch id.
Patch ids are slot numbers that are reused after the daily regeneration,
so a remembered score carries over to whatever patch occupies that slot
the next night.
"""

from __future__ import annotations

from typing import Dict, Iterator, Tuple

from batforage.parameters.constants import SimulationConstants


class PatchMemory:
    """
    Sparse mapping from patch id to accumulated foraging success.

    Entries are created lazily on the first successful feed and decay
    multiplicatively while the bat roosts. An absent entry reads as 0.
    """

    def __init__(self, decay: float = SimulationConstants.MEMORY_DECAY):
        self.decay = decay
        self._scores: Dict[int, float] = {}

    def __len__(self) -> int:
        return len(self._scores)

    def __contains__(self, patch_id: int) -> bool:
        return patch_id in self._scores

    def __iter__(self) -> Iterator[Tuple[int, float]]:
        return iter(self._scores.items())

    def get(self, patch_id: int) -> float:
        """Remembered score for a patch, 0.0 if never fed there."""
        return self._scores.get(patch_id, 0.0)

    def reinforce(self, patch_id: int, gain: float) -> None:
        """Add a foraging gain to the entry for a patch."""
        self._scores[patch_id] = self._scores.get(patch_id, 0.0) + gain

    def decay_all(self) -> None:
        """Apply one step of multiplicative decay to every entry."""
        for patch_id in self._scores:
            self._scores[patch_id] *= self.decay

    def as_dict(self) -> Dict[int, float]:
        return dict(self._scores)
