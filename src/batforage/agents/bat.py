"""
Bat agent implementation.

Main agent of the simulation: an individual bat with fixed physiology,
an energy reserve, a foraging strategy and a memory of patch success.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

import numpy as np

from batforage.agents.base import Agent
from batforage.behavior.memory import PatchMemory
from batforage.behavior.states import BatState, ForagingStrategy, ReproductiveStatus, Sex
from batforage.landscape.resource_field import UNASSIGNED
from batforage.physiology.energy_budget import Physiology, derive_physiology, sample_body_mass

if TYPE_CHECKING:
    from batforage.parameters.simulation_params import SimulationParameters

logger = logging.getLogger("batforage.agents.bat")


@dataclass(eq=False)
class Bat(Agent):
    """
    A single foraging bat.

    ``roost`` is the origin roost, fixed at creation. ``alive`` is False
    exactly when ``state`` is DEAD and never flips back.
    """

    # === Identity (inherited from Agent: id, position) ===
    roost: np.ndarray = field(default_factory=lambda: np.zeros(2))
    sex: Sex = Sex.MALE
    age: int = 1
    reproductive_status: ReproductiveStatus = ReproductiveStatus.NOT_APPLICABLE

    # === Physiology (fixed) ===
    physiology: Optional[Physiology] = None

    # === Energy ===
    calories: float = 0.0
    max_calories: float = 100.0
    total_gain: float = 0.0

    # === Behavior ===
    strategy: ForagingStrategy = ForagingStrategy.LONER
    competition_rate: float = 0.1
    sensory_range: float = 20.0
    state: BatState = BatState.EMERGENCE
    alive: bool = True
    target: Optional[np.ndarray] = None
    target_patch: int = UNASSIGNED
    memory: PatchMemory = field(default_factory=PatchMemory)

    # === Bookkeeping ===
    death_step: Optional[int] = None

    def __post_init__(self):
        super().__post_init__()
        self.roost = np.array(self.roost, dtype=float)
        self.roost.flags.writeable = False
        if self.target is None:
            self.target = self.position.copy()
        else:
            self.target = np.array(self.target, dtype=float)

    @property
    def orig_roost(self) -> np.ndarray:
        """Origin roost position (read-only)."""
        return self.roost

    @property
    def mass(self) -> float:
        return self.physiology.mass

    @property
    def bmr(self) -> float:
        return self.physiology.bmr

    @property
    def flight_efficiency(self) -> float:
        return self.physiology.flight_efficiency

    @property
    def foraging_efficiency(self) -> float:
        return self.physiology.foraging_efficiency

    @property
    def is_full(self) -> bool:
        return self.calories >= self.max_calories

    def set_state(self, state: BatState, target=None, patch_id: int = UNASSIGNED) -> bool:
        """
        Change behavioral state and optionally the movement target.

        Dead bats ignore every request.

        Returns:
            True if the state was applied
        """
        if not self.alive:
            return False
        if state is BatState.DEAD:
            raise ValueError("use die() to kill a bat")
        self.state = state
        if target is not None:
            self.target = np.array(target, dtype=float)
        self.target_patch = patch_id
        return True

    def head_home(self) -> bool:
        """Switch to RETURNING with the origin roost as target."""
        return self.set_state(BatState.RETURNING, target=self.roost)

    def die(self, step: Optional[int] = None) -> None:
        """Starve. Terminal: the bat never moves, feeds or changes state again."""
        if not self.alive:
            return
        self.alive = False
        self.state = BatState.DEAD
        self.death_step = step
        self.target_patch = UNASSIGNED
        logger.debug("Bat %d died at step %s with %.3f calories", self.id, step, self.calories)

    def is_at(self, point, tolerance: float) -> bool:
        """True if the bat is within ``tolerance`` of a point."""
        return self.distance_to_point(point) <= tolerance


def create_bat(
    bat_id: int,
    roost,
    params: SimulationParameters,
    rng: np.random.Generator,
) -> Bat:
    """
    Create a new bat at its roost.

    Sex, reproductive status, age, mass, strategy, competition rate and
    initial calories are sampled; physiology is derived from them once.
    """
    is_female = rng.random() < params.female_fraction
    sex = Sex.FEMALE if is_female else Sex.MALE

    if is_female:
        u = rng.random()
        if u < params.pregnant_fraction:
            status = ReproductiveStatus.PREGNANT
        elif u < params.pregnant_fraction + params.lactating_fraction:
            status = ReproductiveStatus.LACTATING
        else:
            status = ReproductiveStatus.NOT_PREGNANT
    else:
        status = ReproductiveStatus.NOT_APPLICABLE

    age = int(rng.integers(params.age_range[0], params.age_range[1] + 1))
    mass = sample_body_mass(sex, status, params, rng)

    if rng.random() < params.group_joiner_fraction:
        strategy = ForagingStrategy.GROUP_JOINER
    else:
        strategy = ForagingStrategy.LONER

    calories = float(rng.uniform(*params.initial_calorie_range)) * params.max_calories

    return Bat(
        id=bat_id,
        position=np.array(roost, dtype=float),
        roost=np.array(roost, dtype=float),
        sex=sex,
        age=age,
        reproductive_status=status,
        physiology=derive_physiology(mass, age, status, params),
        calories=calories,
        max_calories=params.max_calories,
        strategy=strategy,
        competition_rate=float(rng.uniform(*params.competition_rate_range)),
        sensory_range=params.sensory_range,
    )
