"""Behavioral states, patch memory and the patch-selection policy."""

from batforage.behavior.states import (
    BatState,
    ForagingStrategy,
    Sex,
    ReproductiveStatus,
    LIVING_STATES,
)
from batforage.behavior.memory import PatchMemory
from batforage.behavior.decision import select_patch, score_patch

__all__ = [
    "BatState",
    "ForagingStrategy",
    "Sex",
    "ReproductiveStatus",
    "LIVING_STATES",
    "PatchMemory",
    "select_patch",
    "score_patch",
]
