"""Core simulation engine module."""

from batforage.core.clock import DayNightClock, ClockState, DayPhase
from batforage.core.context import SimulationContext
from batforage.core.simulation import Simulation
from batforage.core.snapshot import SimulationSnapshot
from batforage.core.batch_runner import BatchRunner, BatchConfiguration, BatchResult

__all__ = [
    "DayNightClock",
    "ClockState",
    "DayPhase",
    "SimulationContext",
    "Simulation",
    "SimulationSnapshot",
    "BatchRunner",
    "BatchConfiguration",
    "BatchResult",
]
