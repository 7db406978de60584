"""
batforage - agent-based simulation of foraging bats.

Bats emerge from their roosts at night, choose foraging patches from a
regenerating prey landscape, avoid crowding through short-range repulsion
and return to roost before daybreak. Survival is tied to the energy budget.
"""

__version__ = "0.1.0"

from batforage.core.simulation import Simulation
from batforage.parameters.simulation_params import SimulationParameters
from batforage.parameters.constants import SimulationConstants
from batforage.parameters.errors import ConfigurationError
from batforage.landscape.resource_field import ResourceField, UNASSIGNED
from batforage.landscape.patches import Patch, PatchRegistry

__all__ = [
    "Simulation",
    "SimulationParameters",
    "SimulationConstants",
    "ConfigurationError",
    "ResourceField",
    "UNASSIGNED",
    "Patch",
    "PatchRegistry",
]
