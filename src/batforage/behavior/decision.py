"""
Patch selection policy.

A bat scores every eligible patch by prey-per-distance, crowding and its
own memory of past success, then greedily picks the best one.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import numpy as np

from batforage.behavior.states import ForagingStrategy
from batforage.parameters.constants import SimulationConstants

if TYPE_CHECKING:
    from batforage.agents.bat import Bat
    from batforage.landscape.patches import Patch, PatchRegistry


def competition_term(bat: Bat, patch: Patch) -> float:
    """Crowding contribution: rewarded for group joiners, penalized for loners."""
    crowding = patch.occupancy * bat.competition_rate
    if bat.strategy is ForagingStrategy.GROUP_JOINER:
        return crowding
    return -crowding


def score_patch(bat: Bat, patch: Patch, jitter: float = 0.0) -> float:
    """
    Attractiveness of a patch to a bat.

    score = 0.5 * total_prey / distance + competition + memory + jitter
    """
    distance = float(np.linalg.norm(patch.center - bat.position))
    distance = max(distance, SimulationConstants.DISTANCE_EPSILON)
    return (
        SimulationConstants.PREY_DISTANCE_WEIGHT * patch.total_prey / distance
        + competition_term(bat, patch)
        + bat.memory.get(patch.id)
        + jitter
    )


def select_patch(
    bat: Bat,
    registry: PatchRegistry,
    rng: np.random.Generator,
) -> Optional[int]:
    """
    Choose the patch a bat should fly to.

    Only patches with prey left and occupancy below capacity qualify.
    A small random jitter, scaled to the score magnitude, breaks ties so
    bats in identical situations do not move in lockstep.

    Returns:
        Patch id of the best-scoring patch, or None if no patch qualifies
    """
    best_id: Optional[int] = None
    best_score = -np.inf
    for patch in registry.eligible():
        base = score_patch(bat, patch)
        jitter = rng.uniform(-1.0, 1.0) * SimulationConstants.JITTER_SCALE * max(abs(base), 1.0)
        score = base + jitter
        if score > best_score:
            best_score = score
            best_id = patch.id
    return best_id
