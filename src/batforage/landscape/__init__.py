"""Resource landscape: prey field and foraging patches."""

from batforage.landscape.resource_field import ResourceField, UNASSIGNED
from batforage.landscape.patches import Patch, PatchRegistry

__all__ = ["ResourceField", "UNASSIGNED", "Patch", "PatchRegistry"]
