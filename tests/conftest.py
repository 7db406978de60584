"""Shared fixtures for batforage tests."""

import numpy as np
import pytest

from batforage.agents.bat import Bat
from batforage.behavior.states import ForagingStrategy, ReproductiveStatus, Sex
from batforage.parameters import SimulationParameters
from batforage.physiology.energy_budget import derive_physiology


@pytest.fixture
def params():
    """Small deterministic parameter set with a single roost far from the origin."""
    return SimulationParameters(
        random_seed=7,
        bat_count=0,
        domain_size=(100.0, 100.0),
        roost_sites=((90.0, 90.0),),
        n_patches=0,
    )


@pytest.fixture
def make_bat(params):
    """Factory building a bat with fixed physiology at a chosen position."""

    def _make(
        bat_id=0,
        position=(10.0, 10.0),
        roost=(90.0, 90.0),
        age=1,
        mass=20.0,
        calories=50.0,
        strategy=ForagingStrategy.LONER,
        competition_rate=0.1,
        target=None,
    ):
        return Bat(
            id=bat_id,
            position=np.array(position, dtype=float),
            roost=np.array(roost, dtype=float),
            sex=Sex.MALE,
            age=age,
            reproductive_status=ReproductiveStatus.NOT_APPLICABLE,
            physiology=derive_physiology(mass, age, ReproductiveStatus.NOT_APPLICABLE, params),
            calories=calories,
            max_calories=params.max_calories,
            strategy=strategy,
            competition_rate=competition_rate,
            sensory_range=params.sensory_range,
            target=target,
        )

    return _make
