"""Agent classes and the bat population store."""

from batforage.agents.base import Agent
from batforage.agents.bat import Bat, create_bat
from batforage.agents.population import BatPopulation

__all__ = ["Agent", "Bat", "create_bat", "BatPopulation"]
