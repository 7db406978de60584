"""
Energy budget module.

Provides the physiological quantities that are fixed at a bat's creation
and the per-step energy update that ties survival to behavior:

- Body mass from sex and reproductive status
- Basal metabolic rate (allometric, mass^0.75)
- Flight power, cruising speed and cost of transport
- Age-degraded flight and foraging efficiency (senescence)
- Metabolic loss and foraging gain each step

The flight-power and cost-of-transport formulas are simple allometric
scalars. They are reported with each bat but only BMR enters the budget.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from batforage.behavior.states import BatState, ReproductiveStatus, Sex
from batforage.landscape.resource_field import UNASSIGNED
from batforage.parameters.constants import SimulationConstants

if TYPE_CHECKING:
    from batforage.agents.bat import Bat
    from batforage.landscape.resource_field import ResourceField
    from batforage.parameters.simulation_params import SimulationParameters


@dataclass(frozen=True)
class Physiology:
    """
    Derived body parameters, immutable after creation.

    Attributes:
        mass: Body mass (g)
        bmr: Basal metabolic rate (calories per step)
        flight_power: Mechanical flight power Pf (W)
        cruising_speed: Cruising flight speed (m/s)
        cost_of_transport: Dimensionless cost of transport
        flight_efficiency: Multiplier on step size
        foraging_efficiency: Multiplier on foraging gain
    """
    mass: float
    bmr: float
    flight_power: float
    cruising_speed: float
    cost_of_transport: float
    flight_efficiency: float
    foraging_efficiency: float


@dataclass
class EnergyUpdate:
    """Result of one energy update for a single bat."""
    cost: float = 0.0
    gain: float = 0.0
    patch_id: int = UNASSIGNED


# ---------------------------------------------------------------------------
# Derived physiology
# ---------------------------------------------------------------------------

def sample_body_mass(
    sex: Sex,
    status: ReproductiveStatus,
    params: SimulationParameters,
    rng: np.random.Generator,
) -> float:
    """Draw a body mass (g), adding the load of pregnancy or lactation."""
    mean = params.mass_mean_female if sex is Sex.FEMALE else params.mass_mean_male
    mass = max(SimulationConstants.MIN_MASS_G, float(rng.normal(mean, params.mass_sd)))
    if status is ReproductiveStatus.PREGNANT:
        mass *= SimulationConstants.PREGNANT_MASS_FACTOR
    elif status is ReproductiveStatus.LACTATING:
        mass *= SimulationConstants.LACTATING_MASS_FACTOR
    return mass


def basal_metabolic_rate(mass_g: float) -> float:
    """BMR in calories per step."""
    return SimulationConstants.BMR_COEFFICIENT * mass_g ** SimulationConstants.BMR_EXPONENT


def flight_power(mass_g: float, status: ReproductiveStatus = ReproductiveStatus.NOT_APPLICABLE) -> float:
    """Flight power Pf (W) from body mass and reproductive load."""
    mass_kg = mass_g / 1000.0
    power = SimulationConstants.FLIGHT_POWER_COEFFICIENT * mass_kg ** SimulationConstants.FLIGHT_POWER_EXPONENT
    if status is ReproductiveStatus.PREGNANT:
        power *= SimulationConstants.PREGNANT_POWER_FACTOR
    elif status is ReproductiveStatus.LACTATING:
        power *= SimulationConstants.LACTATING_POWER_FACTOR
    return power


def cruising_speed(mass_g: float) -> float:
    """Cruising speed (m/s)."""
    return SimulationConstants.SPEED_COEFFICIENT * (mass_g / 1000.0) ** SimulationConstants.SPEED_EXPONENT


def cost_of_transport(power: float, mass_g: float, speed: float) -> float:
    """Dimensionless cost of transport, Pf / (m g v)."""
    return power / ((mass_g / 1000.0) * SimulationConstants.GRAVITY * speed)


def flight_efficiency(age: int, floor: float) -> float:
    """max(floor, 1 - 0.05 * (age - 1))"""
    return max(floor, 1.0 - SimulationConstants.FLIGHT_AGE_SLOPE * (age - 1))


def foraging_efficiency(age: int, floor: float) -> float:
    """max(floor, 1 - 0.03 * (age - 1))"""
    return max(floor, 1.0 - SimulationConstants.FORAGING_AGE_SLOPE * (age - 1))


def derive_physiology(
    mass_g: float,
    age: int,
    status: ReproductiveStatus,
    params: SimulationParameters,
) -> Physiology:
    """Compute every derived body parameter for a new bat."""
    power = flight_power(mass_g, status)
    speed = cruising_speed(mass_g)
    return Physiology(
        mass=mass_g,
        bmr=basal_metabolic_rate(mass_g),
        flight_power=power,
        cruising_speed=speed,
        cost_of_transport=cost_of_transport(power, mass_g, speed),
        flight_efficiency=flight_efficiency(age, params.min_flight_efficiency),
        foraging_efficiency=foraging_efficiency(age, params.min_foraging_efficiency),
    )


# ---------------------------------------------------------------------------
# Per-step budget
# ---------------------------------------------------------------------------

def metabolic_cost(bmr: float, metabolic_rate_factor: float, roosting: bool = False) -> float:
    """Calories burned in one step; roosting bats burn half the active rate."""
    cost = metabolic_rate_factor * bmr
    if roosting:
        cost *= SimulationConstants.ROOSTING_METABOLIC_FRACTION
    return cost


def apply_energy_update(
    bat: Bat,
    field: ResourceField,
    params: SimulationParameters,
    rng: np.random.Generator,
) -> EnergyUpdate:
    """
    Apply one step of metabolic loss and foraging gain to a bat.

    A bat that is not roosting and sits on a prey-bearing cell with spare
    capacity feeds: the gain is drawn from ``forage_gain_range``, scaled by
    foraging efficiency and clamped to both remaining capacity and the
    prey left in the cell. The same amount is removed from the cell and
    its patch and added to the bat's memory of that patch.

    Returns:
        EnergyUpdate describing the cost paid and the gain obtained
    """
    result = EnergyUpdate()
    if not bat.alive:
        return result

    roosting = bat.state is BatState.ROOSTING
    result.cost = metabolic_cost(bat.physiology.bmr, params.metabolic_rate_factor, roosting)
    bat.calories = max(0.0, bat.calories - result.cost)
    if roosting:
        return result

    cell = field.cell_index(bat.position)
    if cell is None or bat.calories >= bat.max_calories:
        return result
    patch_id = field.patch_at(bat.position)
    available = field.prey_at(bat.position)
    if patch_id == UNASSIGNED or available <= 0:
        return result

    room = bat.max_calories - bat.calories
    gain = float(rng.uniform(*params.forage_gain_range)) * bat.physiology.foraging_efficiency
    gain = min(gain, room, available)
    eaten = field.consume(cell, gain)
    if eaten <= 0:
        return result

    if eaten >= room:
        bat.calories = bat.max_calories
    else:
        bat.calories += eaten
    bat.memory.reinforce(patch_id, eaten)
    bat.total_gain += eaten

    result.gain = eaten
    result.patch_id = patch_id
    return result
