"""Movement engine: repulsion-steered stepping over a spatial index."""

from batforage.movement.spatial_index import SpatialGrid
from batforage.movement.repulsion import (
    MoveOutcome,
    desired_direction,
    repulsion_vector,
    is_near_roost,
    step_position,
)

__all__ = [
    "SpatialGrid",
    "MoveOutcome",
    "desired_direction",
    "repulsion_vector",
    "is_near_roost",
    "step_position",
]
