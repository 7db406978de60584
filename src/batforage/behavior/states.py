"""
Behavioral state definitions.

Nightly cycle of a bat:

    EMERGENCE -> FORAGING <-> RETURNING -> ROOSTING -> FORAGING (next night)

DEAD is reachable from every living state and is terminal.
"""

from __future__ import annotations

from enum import Enum, auto


class BatState(Enum):
    """Behavioral states for bat agents."""
    EMERGENCE = auto()    # Initial state, leaving the roost
    FORAGING = auto()     # Heading for or feeding in a patch
    RETURNING = auto()    # Flying back to the origin roost
    ROOSTING = auto()     # Daytime rest at the roost, reduced metabolism
    DEAD = auto()         # Starved, terminal

    @property
    def is_alive(self) -> bool:
        return self is not BatState.DEAD


LIVING_STATES = frozenset(s for s in BatState if s is not BatState.DEAD)


class Sex(Enum):
    MALE = "M"
    FEMALE = "F"


class ReproductiveStatus(Enum):
    """Reproductive status; males are always NOT_APPLICABLE."""
    PREGNANT = "pregnant"
    LACTATING = "lactating"
    NOT_PREGNANT = "not_pregnant"
    NOT_APPLICABLE = "N/A"


class ForagingStrategy(Enum):
    """
    Response to crowding at a patch.

    LONER bats are penalized by occupancy, GROUP_JOINER bats rewarded.
    """
    LONER = "loner"
    GROUP_JOINER = "group_joiner"
