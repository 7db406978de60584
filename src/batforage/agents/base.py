"""
Base agent class for all simulation agents.

Provides position management and basic spatial operations in 2D or 3D.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np


@dataclass(eq=False)
class Agent:
    """
    Base class for all agents in the simulation.

    Positions are float vectors with one component per domain axis.
    """

    id: int
    position: np.ndarray = field(default_factory=lambda: np.zeros(2))

    def __post_init__(self):
        self.position = np.array(self.position, dtype=float)

    @property
    def ndim(self) -> int:
        return self.position.shape[0]

    def get_position(self) -> np.ndarray:
        """Get a copy of the current position."""
        return self.position.copy()

    def set_position(self, position) -> None:
        """Set position to given coordinates."""
        self.position = np.array(position, dtype=float)

    def distance_to(self, other: Agent) -> float:
        """Calculate Euclidean distance to another agent."""
        return float(np.linalg.norm(other.position - self.position))

    def distance_to_point(self, point) -> float:
        """Calculate Euclidean distance to a point."""
        return float(np.linalg.norm(np.asarray(point, dtype=float) - self.position))

    def direction_to_point(self, point) -> np.ndarray:
        """Unit vector towards a point, zero vector if already there."""
        delta = np.asarray(point, dtype=float) - self.position
        norm = np.linalg.norm(delta)
        if norm == 0:
            return np.zeros_like(delta)
        return delta / norm
