"""
Uniform grid bucket index for neighbour queries.

Replaces the all-pairs scan for repulsion and collision checks. Entries are
updated in place as agents move, so an agent processed later in a sweep
sees the positions already written by earlier agents in the same sweep.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Set, Tuple

import numpy as np


class SpatialGrid:
    """
    Hash grid mapping bucket coordinates to agent ids.

    Query results are exact (distance-filtered) and returned in ascending
    id order so that sums over neighbours are reproducible.
    """

    def __init__(self, bucket_size: float):
        if bucket_size <= 0:
            raise ValueError("bucket_size must be positive")
        self.bucket_size = float(bucket_size)
        self._buckets: Dict[Tuple[int, ...], Set[int]] = defaultdict(set)
        self._positions: Dict[int, np.ndarray] = {}
        self._keys: Dict[int, Tuple[int, ...]] = {}

    def __len__(self) -> int:
        return len(self._positions)

    def __contains__(self, agent_id: int) -> bool:
        return agent_id in self._positions

    def _key(self, position: np.ndarray) -> Tuple[int, ...]:
        return tuple(int(k) for k in np.floor(position / self.bucket_size))

    def insert(self, agent_id: int, position) -> None:
        """Add an agent, or move it if it is already indexed."""
        if agent_id in self._positions:
            self.move(agent_id, position)
            return
        pos = np.array(position, dtype=float)
        key = self._key(pos)
        self._positions[agent_id] = pos
        self._keys[agent_id] = key
        self._buckets[key].add(agent_id)

    def remove(self, agent_id: int) -> None:
        """Drop an agent from the index; unknown ids are ignored."""
        key = self._keys.pop(agent_id, None)
        self._positions.pop(agent_id, None)
        if key is None:
            return
        bucket = self._buckets.get(key)
        if bucket is not None:
            bucket.discard(agent_id)
            if not bucket:
                del self._buckets[key]

    def move(self, agent_id: int, position) -> None:
        """Update an indexed agent's position."""
        pos = np.array(position, dtype=float)
        new_key = self._key(pos)
        old_key = self._keys.get(agent_id)
        if old_key != new_key:
            if old_key is not None:
                bucket = self._buckets[old_key]
                bucket.discard(agent_id)
                if not bucket:
                    del self._buckets[old_key]
            self._buckets[new_key].add(agent_id)
            self._keys[agent_id] = new_key
        self._positions[agent_id] = pos

    def position_of(self, agent_id: int) -> np.ndarray:
        return self._positions[agent_id]

    def query(self, position, radius: float, exclude: int = None) -> List[int]:
        """
        Ids of agents within ``radius`` (inclusive) of a position.

        Args:
            position: Query point
            radius: Search radius
            exclude: Optional id to leave out (usually the querying agent)
        """
        pos = np.asarray(position, dtype=float)
        lo = np.floor((pos - radius) / self.bucket_size).astype(int)
        hi = np.floor((pos + radius) / self.bucket_size).astype(int)
        r2 = radius * radius

        found = []
        for key in np.ndindex(*(hi - lo + 1)):
            bucket = self._buckets.get(tuple(int(k) for k in lo + np.array(key)))
            if not bucket:
                continue
            for agent_id in bucket:
                if agent_id == exclude:
                    continue
                delta = self._positions[agent_id] - pos
                if float(delta @ delta) <= r2:
                    found.append(agent_id)
        found.sort()
        return found
