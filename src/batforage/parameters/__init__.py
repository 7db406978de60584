"""Parameters configuration module."""

from batforage.parameters.simulation_params import SimulationParameters
from batforage.parameters.constants import SimulationConstants
from batforage.parameters.errors import ConfigurationError

__all__ = ["SimulationParameters", "SimulationConstants", "ConfigurationError"]
