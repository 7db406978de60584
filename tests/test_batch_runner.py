"""Tests for replicate batch runs."""

import pandas as pd
import pytest

from batforage.core.batch_runner import BatchConfiguration, BatchResult, BatchRunner


BASE = {
    "n_steps": 30,
    "bat_count": 8,
    "domain_size": (40.0, 40.0),
    "roost_sites": ((20.0, 20.0),),
    "n_patches": 4,
    "cycle_length": 24,
    "active_length": 12,
    "return_window": 2,
}


class TestBatchConfiguration:
    """Test parameter combinations for batch runs."""

    def test_no_variations(self):
        """Should yield only the base parameters."""
        config = BatchConfiguration(base_params=BASE, replicates=3)
        assert config.get_all_combinations() == [BASE]
        assert config.total_runs == 3

    def test_combinations(self):
        """Should build the cartesian product of all variations."""
        config = BatchConfiguration(
            base_params=BASE,
            variations={"bat_count": [4, 8], "n_patches": [2, 4, 6]},
            replicates=2,
        )
        combos = config.get_all_combinations()
        assert len(combos) == 6
        assert {(c["bat_count"], c["n_patches"]) for c in combos} == {
            (b, n) for b in (4, 8) for n in (2, 4, 6)
        }
        assert all(c["n_steps"] == 30 for c in combos)
        assert config.total_runs == 12

    def test_base_params_not_mutated(self):
        """Should leave the caller's base parameters untouched."""
        base = dict(BASE)
        config = BatchConfiguration(base_params=base, variations={"bat_count": [1, 2]})
        config.get_all_combinations()
        assert base == BASE


class TestBatchResult:
    """Test per-run result summaries."""

    def test_survival_rate(self):
        """Should compute survivors over initial population."""
        result = BatchResult(
            run_id=0, parameters={}, random_seed=0, initial_population=10,
            survivors=4, total_deaths=6, total_steps=5, mean_final_calories=1.0,
            prey_consumed=0.0, execution_time_seconds=0.1,
        )
        assert result.survival_rate == pytest.approx(0.4)

    def test_survival_rate_empty_population(self):
        """Should report zero survival for an empty population."""
        result = BatchResult(
            run_id=0, parameters={}, random_seed=0, initial_population=0,
            survivors=0, total_deaths=0, total_steps=1, mean_final_calories=0.0,
            prey_consumed=0.0, execution_time_seconds=0.1,
        )
        assert result.survival_rate == 0.0


class TestBatchRunner:
    """Test running and exporting batches."""

    @pytest.fixture
    def runner(self):
        config = BatchConfiguration(
            base_params=BASE,
            variations={"metabolic_rate_factor": [1.0, 2.0]},
            replicates=2,
        )
        return BatchRunner(config)

    def test_run(self, runner):
        """Should run every combination and replicate once."""
        results = runner.run()
        assert len(results) == 4
        assert [r.run_id for r in results] == [0, 1, 2, 3]
        assert [r.random_seed for r in results] == [0, 1, 0, 1]
        for r in results:
            assert r.initial_population == 8
            assert r.survivors + r.total_deaths == 8
            assert r.total_steps <= 30
            assert r.prey_consumed >= 0.0

    def test_replicates_are_reproducible(self, runner):
        """Should give identical results for the same seeds."""
        first = runner.run()
        second = BatchRunner(runner.config).run()
        for a, b in zip(first, second):
            assert a.survivors == b.survivors
            assert a.mean_final_calories == b.mean_final_calories
            assert a.prey_consumed == b.prey_consumed

    def test_to_dataframe(self, runner):
        """Should flatten parameters into param_* columns."""
        runner.run()
        df = runner.to_dataframe()
        assert isinstance(df, pd.DataFrame)
        assert len(df) == 4
        assert "param_metabolic_rate_factor" in df.columns
        assert "survival_rate" in df.columns

    def test_export_results(self, runner, tmp_path):
        """Should write a CSV with one row per run."""
        runner.run()
        path = runner.export_results(str(tmp_path / "out" / "batch.csv"))
        assert path.exists()
        assert len(pd.read_csv(path)) == 4

    def test_export_without_results(self, runner, tmp_path):
        """Should refuse to export before running."""
        with pytest.raises(ValueError):
            runner.export_results(str(tmp_path / "batch.csv"))

    def test_explicit_seeds(self):
        """Should use the configured seeds."""
        config = BatchConfiguration(base_params=BASE, replicates=2, seeds=[42, 43])
        results = BatchRunner(config).run()
        assert [r.random_seed for r in results] == [42, 43]

    def test_too_few_seeds(self):
        """Should require one seed per replicate."""
        config = BatchConfiguration(base_params=BASE, replicates=3, seeds=[1])
        with pytest.raises(ValueError):
            BatchRunner(config)
