"""
Target seeking with short-range repulsion.

Each moving bat steers along the sum of a unit vector towards its target
and an inverse-square repulsion from nearby bats. A candidate position
that would land on top of another bat away from any roost is rejected
and the bat holds position for the step.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import TYPE_CHECKING, Iterable, Optional, Sequence

import numpy as np

if TYPE_CHECKING:
    from batforage.agents.bat import Bat
    from batforage.movement.spatial_index import SpatialGrid


class MoveOutcome(Enum):
    """Result of one movement attempt."""
    MOVED = auto()       # Position updated
    STALLED = auto()     # Attraction and repulsion cancelled exactly
    BLOCKED = auto()     # Candidate position collided with another bat


def desired_direction(position: np.ndarray, target: np.ndarray) -> np.ndarray:
    """Unit vector from position to target, zero if already there."""
    delta = target - position
    norm = np.linalg.norm(delta)
    if norm == 0:
        return np.zeros_like(position)
    return delta / norm


def repulsion_vector(position: np.ndarray, others: Iterable[np.ndarray]) -> np.ndarray:
    """
    Sum of (position - other) / distance^2 over the given neighbours.

    Neighbours at distance zero contribute nothing.
    """
    total = np.zeros_like(position)
    for other in others:
        delta = position - other
        d2 = float(delta @ delta)
        if d2 > 0:
            total += delta / d2
    return total


def is_near_roost(position: np.ndarray, roost_sites: np.ndarray, tolerance: float) -> bool:
    """True if the position is within tolerance of any roost site."""
    if len(roost_sites) == 0:
        return False
    distances = np.linalg.norm(roost_sites - position, axis=1)
    return bool(np.any(distances <= tolerance))


def step_position(
    bat: Bat,
    neighbors: SpatialGrid,
    step_size: float,
    repulsion_radius: float,
    tolerance: float,
    roost_sites: np.ndarray,
    bounds: Optional[Sequence[float]] = None,
) -> MoveOutcome:
    """
    Advance one bat by a single step.

    The displacement magnitude is ``step_size * flight_efficiency``, cut
    short at the target so bats do not overshoot it. When ``bounds`` is
    given the candidate is clipped into the domain. The move is rejected
    if the candidate lies away from every roost and within ``tolerance``
    of another bat's current position.

    Args:
        bat: Bat to move; its position is updated in place on success
        neighbors: Spatial index of living bats, updated on success
        step_size: Nominal step length
        repulsion_radius: Range of the repulsive field
        tolerance: Collision and roost-proximity distance
        roost_sites: (k, ndim) array of roost positions
        bounds: Optional domain extents per axis

    Returns:
        MoveOutcome describing what happened
    """
    position = bat.position
    desired = desired_direction(position, bat.target)

    nearby = neighbors.query(position, repulsion_radius, exclude=bat.id)
    repulsion = repulsion_vector(position, (neighbors.position_of(i) for i in nearby))

    combined = desired + repulsion
    norm = np.linalg.norm(combined)
    if norm == 0:
        return MoveOutcome.STALLED

    magnitude = step_size * bat.flight_efficiency
    remaining = float(np.linalg.norm(bat.target - position))
    if remaining > 0:
        magnitude = min(magnitude, remaining)
    candidate = position + combined / norm * magnitude
    if bounds is not None:
        candidate = np.clip(candidate, 0.0, np.asarray(bounds, dtype=float))

    if not is_near_roost(candidate, roost_sites, tolerance):
        if neighbors.query(candidate, tolerance, exclude=bat.id):
            return MoveOutcome.BLOCKED

    bat.set_position(candidate)
    neighbors.move(bat.id, candidate)
    return MoveOutcome.MOVED
