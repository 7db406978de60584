"""
Tests for the Simulation controller.

Tests:
- Step-level invariants over a seeded run
- Reproducibility and independent simulations in one process
- Starvation and early termination
- Snapshot, history and statistics output
- 3D domains
"""

import itertools

import numpy as np
import pandas as pd
import pytest

from batforage import Simulation, SimulationParameters
from batforage.behavior.states import BatState
from batforage.core.clock import ClockState


def small_params(**overrides):
    values = dict(
        random_seed=11,
        n_steps=96,
        bat_count=25,
        domain_size=(60.0, 60.0),
        n_patches=8,
        roost_sites=((10.0, 10.0), (50.0, 50.0)),
        cycle_length=24,
        active_length=12,
        return_window=2,
    )
    values.update(overrides)
    return SimulationParameters(**values)


def trace(sim):
    """Positions, states and calories of every bat as comparable values."""
    return (
        sim.population.positions().round(12).tolist(),
        sim.population.states(),
        sim.population.calories().round(12).tolist(),
    )


class TestSimulationInitialization:
    """Test simulation construction."""

    def test_population_created_at_roosts(self):
        """Should create every bat at a roost."""
        sim = Simulation(small_params())
        roosts = np.array(sim.params.roost_sites)

        assert len(sim.population) == 25
        assert sim.population_size == 25
        for bat in sim.bats:
            assert bat.state is BatState.EMERGENCE
            assert any(np.array_equal(bat.position, r) for r in roosts)
            np.testing.assert_array_equal(bat.position, bat.roost)

    def test_no_patches_before_first_step(self):
        """Should not generate patches before stepping."""
        sim = Simulation(small_params())
        assert sim.clock.step == 0
        assert len(sim.patches) == 0

    def test_first_step_regenerates(self):
        """Should generate patches on the first step."""
        sim = Simulation(small_params())
        state = sim.step()

        assert isinstance(state, ClockState)
        assert state.step == 1
        assert state.new_day
        assert sim.last_report.regenerated
        assert len(sim.patches) == 8


class TestStepInvariants:
    """Test properties that hold after every step."""

    @pytest.fixture
    def sim(self):
        return Simulation(small_params(bat_count=30, n_steps=72))

    def test_invariants_hold_every_step(self, sim):
        """Should keep every step-level invariant."""
        params = sim.params
        tol = params.tolerance
        roosts = np.array(params.roost_sites)
        dead_before = set()

        for _ in range(params.n_steps):
            living_before = sim.population_size
            prey_before = {p.id: p.total_prey for p in sim.patches}

            sim.step()
            report = sim.last_report

            # alive flag and state agree, death is permanent
            for bat in sim.bats:
                assert bat.alive == (bat.state is not BatState.DEAD)
                if bat.id in dead_before:
                    assert not bat.alive
            dead_before = {b.id for b in sim.bats if not b.alive}

            # calories bounded
            for bat in sim.population.living():
                assert 0.0 <= bat.calories <= bat.max_calories

            # occupancy counted from the bats alive at the start of the step
            assert sim.patches.total_occupancy <= living_before

            # patch stock only shrinks within a day and matches its cells
            for patch in sim.patches:
                assert patch.total_prey >= 0.0
                assert patch.total_prey == pytest.approx(
                    sim.field.patch_prey_sum(patch.id), abs=1e-6
                )
                if not report.regenerated:
                    assert patch.total_prey <= prey_before[patch.id] + 1e-9
            assert np.all(sim.field.prey >= 0.0)

            # bats away from roosts keep their distance
            away = [
                b.position for b in sim.population.living()
                if np.min(np.linalg.norm(roosts - b.position, axis=1)) > tol
            ]
            for a, b in itertools.combinations(away, 2):
                assert np.linalg.norm(a - b) > tol

            # positions stay inside the domain
            for bat in sim.bats:
                assert np.all(bat.position >= 0.0)
                assert np.all(bat.position <= np.array(params.domain_size))

    def test_roost_hours_put_everyone_home(self, sim):
        """Should roost every bat that is not full."""
        # time of day 13..24 are roost hours with active_length 12
        while sim.clock.step < 12:
            sim.step()
        full = {b.id for b in sim.population.living() if b.is_full}
        sim.step()
        for bat in sim.population.living():
            if bat.id in full:
                assert bat.state is BatState.RETURNING
            else:
                assert bat.state is BatState.ROOSTING
                np.testing.assert_array_equal(bat.position, bat.roost)

    def test_return_window_sends_everyone_home(self, sim):
        """Should redirect every bat home in the return window."""
        while sim.clock.step < 11:
            sim.step()
        for bat in sim.population.living():
            assert bat.state is BatState.RETURNING
            np.testing.assert_array_equal(bat.target, bat.roost)

    def test_daily_regeneration_only_at_day_start(self, sim):
        """Should regenerate once per day."""
        regenerated_at = []
        for _ in range(72):
            sim.step()
            if sim.last_report.regenerated:
                regenerated_at.append(sim.clock.step)
        assert regenerated_at == [1, 25, 49]

    def test_totals_accumulate(self, sim):
        """Should accumulate deaths and consumption."""
        deaths = 0
        consumed = 0.0
        for _ in range(30):
            sim.step()
            deaths += sim.last_report.deaths
            consumed += sim.last_report.prey_consumed
        assert sim.total_deaths == deaths
        assert sim.total_prey_consumed == pytest.approx(consumed)
        assert sim.total_deaths == len(sim.population) - sim.population_size


class TestReproducibility:
    """Test seeding and process isolation."""

    def test_same_seed_same_trajectory(self):
        """Should reproduce a run from its seed."""
        a = Simulation(small_params(), seed=5)
        b = Simulation(small_params(), seed=5)
        for _ in range(40):
            a.step()
            b.step()
            assert trace(a) == trace(b)

    def test_seed_argument_overrides_params(self):
        """Should prefer the explicit seed."""
        a = Simulation(small_params(random_seed=1), seed=99)
        b = Simulation(small_params(random_seed=2), seed=99)
        a.run(progress=False, n_steps=20)
        b.run(progress=False, n_steps=20)
        assert trace(a) == trace(b)

    def test_different_seeds_diverge(self):
        """Should differ between seeds."""
        a = Simulation(small_params(), seed=1)
        b = Simulation(small_params(), seed=2)
        a.run(progress=False, n_steps=20)
        b.run(progress=False, n_steps=20)
        assert trace(a) != trace(b)

    def test_interleaved_simulations_are_independent(self):
        """Should not share state between simulations."""
        solo = Simulation(small_params(), seed=3)
        solo.run(progress=False, n_steps=30)

        first = Simulation(small_params(), seed=3)
        other = Simulation(small_params(bat_count=10, n_patches=3), seed=4)
        for _ in range(30):
            first.step()
            other.step()

        assert trace(first) == trace(solo)


class TestStarvation:
    """Test runs where every bat starves."""

    @pytest.fixture
    def starving(self):
        return Simulation(small_params(n_patches=0, metabolic_rate_factor=400.0, bat_count=10))

    def test_everyone_starves_and_run_stops(self, starving):
        """Should stop once every bat is dead."""
        starving.run(progress=False)

        assert starving.population_size == 0
        assert starving.total_deaths == 10
        assert starving.clock.step < starving.params.n_steps
        assert starving.is_finished
        for bat in starving.bats:
            assert bat.state is BatState.DEAD
            assert bat.death_step is not None

    def test_dead_bats_are_frozen(self, starving):
        """Should never move or feed dead bats."""
        frozen = {}
        for _ in range(10):
            starving.step()
            for bat in starving.bats:
                if not bat.alive:
                    if bat.id in frozen:
                        position, calories = frozen[bat.id]
                        np.testing.assert_array_equal(bat.position, position)
                        assert bat.calories == calories
                    else:
                        frozen[bat.id] = (bat.position.copy(), bat.calories)
        assert frozen

    def test_no_prey_means_no_gain(self, starving):
        """Should not gain without prey."""
        for _ in range(3):
            starving.step()
            assert starving.last_report.prey_consumed == 0.0
        assert all(b.total_gain == 0.0 for b in starving.bats)


class TestRunControl:
    """Test run length and stopping."""

    def test_run_default_length(self):
        """Should run n_steps by default."""
        sim = Simulation(small_params(n_steps=30))
        sim.run(progress=False)
        assert sim.clock.step == 30
        assert sim.is_finished

    def test_run_continues_from_current_step(self):
        """Should continue from the current step."""
        sim = Simulation(small_params(n_steps=30))
        sim.run(progress=False, n_steps=10)
        assert sim.clock.step == 10
        sim.run(progress=False)
        assert sim.clock.step == 30

    def test_run_with_progress_bar(self):
        """Should run with the progress bar enabled."""
        sim = Simulation(small_params(n_steps=5))
        sim.run(progress=True)
        assert sim.clock.step == 5

    def test_empty_population_runs_nothing(self):
        """Should stop immediately without bats."""
        sim = Simulation(small_params(bat_count=0))
        sim.run(progress=False)
        assert sim.clock.step <= 1


class TestOutputSurface:
    """Test snapshots, history and statistics."""

    @pytest.fixture
    def sim(self):
        sim = Simulation(small_params())
        sim.run(progress=False, n_steps=30)
        return sim

    def test_snapshot_shapes(self, sim):
        """Should size snapshot arrays by bats and patches."""
        snap = sim.snapshot()
        assert snap.step == 30
        assert snap.day == 2
        assert snap.time_of_day == 6
        assert snap.positions.shape == (25, 2)
        assert snap.alive.shape == (25,)
        assert len(snap.states) == 25
        assert snap.patch_centers.shape == (8, 2)
        assert snap.patch_radii.shape == (8,)
        assert snap.prey_field is None
        assert len(snap.living_positions) == sim.population_size

    def test_snapshot_without_patches(self):
        """Should keep the axis count on days without patches."""
        sim = Simulation(small_params(n_patches=0))
        sim.step()
        snap = sim.snapshot()
        assert snap.patch_centers.shape == (0, 2)
        assert snap.patch_radii.shape == (0,)

    def test_snapshot_field_is_copy(self, sim):
        """Should copy the prey field."""
        snap = sim.snapshot(include_field=True)
        assert snap.prey_field.shape == sim.field.shape
        snap.prey_field[:] = -1.0
        assert np.all(sim.field.prey >= 0.0)

    def test_history_dataframe(self, sim):
        """Should record one history row per step."""
        df = sim.get_history()
        assert isinstance(df, pd.DataFrame)
        assert len(df) == 30
        assert list(df["step"]) == list(range(1, 31))
        for column in ("day", "time_of_day", "population", "deaths", "mean_calories",
                       "prey_consumed", "total_prey", "blocked_moves",
                       "foraging", "returning", "roosting", "dead", "emergence"):
            assert column in df.columns
        assert (df["population"] + df["dead"] == 25).all()

    def test_history_disabled(self):
        """Should skip history when disabled."""
        sim = Simulation(small_params(), record_history=False)
        sim.run(progress=False, n_steps=5)
        assert sim.history == []
        assert sim.get_history().empty

    def test_statistics(self, sim):
        """Should summarise the current state."""
        stats = sim.get_statistics()
        assert stats["step"] == 30
        assert stats["population"] == sim.population_size
        assert stats["deaths_total"] == sim.total_deaths
        assert sum(stats[s.name] for s in BatState) == 25
        assert stats["min_nearest_neighbor"] >= 0.0

    def test_agents_dataframe(self, sim):
        """Should expose one row per bat."""
        df = sim.agents_df
        assert len(df) == 25
        assert {"id", "x", "y", "state", "calories", "mass"} <= set(df.columns)
        assert "z" not in df.columns


class TestThreeDimensions:
    """Test 3D domains end to end."""

    def test_3d_run(self):
        """Should run a 3D simulation."""
        params = small_params(
            domain_size=(40.0, 40.0, 20.0),
            roost_sites=((20.0, 20.0, 10.0),),
            n_patches=5,
            bat_count=15,
            n_steps=48,
        )
        sim = Simulation(params)
        sim.run(progress=False)

        assert sim.field.ndim == 3
        snap = sim.snapshot(include_field=True)
        assert snap.positions.shape == (15, 3)
        assert snap.patch_centers.shape == (5, 3)
        assert snap.prey_field.ndim == 3
        assert "z" in sim.agents_df.columns
        for bat in sim.population.living():
            assert 0.0 <= bat.calories <= bat.max_calories
