"""
Simulation constants.

Fixed values that are not part of the run configuration.
"""

from __future__ import annotations


class SimulationConstants:
    """Fixed model constants shared by every simulation."""

    # Memory
    MEMORY_DECAY: float = 0.99           # Multiplicative decay per roosting step

    # Decision policy
    DISTANCE_EPSILON: float = 1e-6       # Floor on agent-patch distance
    PREY_DISTANCE_WEIGHT: float = 0.5    # Weight of total_prey / distance
    JITTER_SCALE: float = 1e-3           # Half-width of tie-break jitter

    # Senescence
    FLIGHT_AGE_SLOPE: float = 0.05       # Flight efficiency loss per year over 1
    FORAGING_AGE_SLOPE: float = 0.03     # Foraging efficiency loss per year over 1

    # Energetics
    ROOSTING_METABOLIC_FRACTION: float = 0.5
    BMR_COEFFICIENT: float = 0.05        # calories per step per g^0.75
    BMR_EXPONENT: float = 0.75
    FLIGHT_POWER_COEFFICIENT: float = 30.3   # W per kg^0.81
    FLIGHT_POWER_EXPONENT: float = 0.81
    SPEED_COEFFICIENT: float = 8.0       # m/s per kg^(1/6)
    SPEED_EXPONENT: float = 1.0 / 6.0
    GRAVITY: float = 9.81

    # Reproductive load (mass and flight power multipliers)
    PREGNANT_MASS_FACTOR: float = 1.2
    LACTATING_MASS_FACTOR: float = 1.1
    PREGNANT_POWER_FACTOR: float = 1.15
    LACTATING_POWER_FACTOR: float = 1.05

    MIN_MASS_G: float = 2.0
