"""Tests for the adaptive-belief loop."""

import numpy as np
import pytest

from growth_hjb.belief import BeliefTrajectory, BeliefUpdateLoop, PeriodRecord
from growth_hjb.config import BeliefConfig, GridConfig, ModelParameters, SolverConfig
from growth_hjb.exceptions import SingularSystemError
from growth_hjb.models import RamseyDiffusionModel
from growth_hjb.solver import ValueIterationSolver


@pytest.fixture
def base_model():
    """Coarse Ramsey model holding the true volatility."""
    return RamseyDiffusionModel(ModelParameters(), GridConfig(capital_points=60))


@pytest.fixture
def solver_config():
    return SolverConfig(max_iterations=50)


def _run(base_model, solver_config, **belief_kwargs):
    belief_config = BeliefConfig(**belief_kwargs)
    return BeliefUpdateLoop(base_model, solver_config, belief_config).run()


class TestBeliefUpdateLoop:
    """Test the belief-update rule and the per-period records."""

    def test_zero_probability_keeps_belief(self, base_model, solver_config):
        """Test p = 0 never moves the belief."""
        trajectory = _run(
            base_model, solver_config, horizon=5, update_probability=0.0, seed=3
        )

        assert np.all(trajectory.beliefs() == 0.02)
        assert not any(record.updated for record in trajectory.records)
        assert len(trajectory.belief_path) == 6
        assert len(trajectory) == 5

    def test_certain_update_moves_toward_truth(self, base_model, solver_config):
        """Test p = 1 strictly shrinks the gap to the true value every period."""
        trajectory = _run(
            base_model,
            solver_config,
            horizon=6,
            update_probability=1.0,
            learning_rate=0.5,
            seed=3,
        )
        gaps = trajectory.distance_to_truth(0.5)

        assert np.all(np.diff(gaps) < 0)
        assert all(record.updated for record in trajectory.records)
        assert trajectory.belief_path[-1] == pytest.approx(0.5 - 0.48 * 0.5**6)

    def test_update_rule(self, base_model):
        """Test σ_g <- σ_g + λ(σ_true - σ_g) on a successful draw."""
        loop = BeliefUpdateLoop(
            base_model,
            belief_config=BeliefConfig(update_probability=1.0, learning_rate=0.001),
        )

        belief, updated = loop.update_belief(0.02)

        assert updated
        assert belief == pytest.approx(0.02 + 0.001 * (0.5 - 0.02))

    def test_same_seed_same_trajectory(self, base_model, solver_config):
        """Test two runs with the same seed are identical."""
        kwargs = {"horizon": 8, "update_probability": 0.45, "learning_rate": 0.2, "seed": 11}
        first = _run(base_model, solver_config, **kwargs)
        second = _run(base_model, solver_config, **kwargs)

        assert first.belief_path == second.belief_path
        for a, b in zip(first.records, second.records):
            assert a.updated == b.updated
            assert np.array_equal(a.value, b.value)
            assert np.array_equal(a.savings, b.savings)

    def test_explicit_generator(self, base_model, solver_config):
        """Test the random source can be passed in directly."""
        belief_config = BeliefConfig(horizon=6, learning_rate=0.2)
        first = BeliefUpdateLoop(
            base_model, solver_config, belief_config, np.random.default_rng(42)
        ).run()
        second = BeliefUpdateLoop(
            base_model, solver_config, belief_config, np.random.default_rng(42)
        ).run()

        assert first.belief_path == second.belief_path

    def test_grid_follows_belief(self, base_model, solver_config):
        """Test each period's grid is rebuilt around the believed steady state."""
        trajectory = _run(
            base_model,
            solver_config,
            horizon=3,
            update_probability=1.0,
            learning_rate=0.9,
            seed=1,
        )
        first, last = trajectory.records[0], trajectory.records[-1]

        assert first.belief == pytest.approx(0.02)
        assert last.belief != first.belief
        assert last.capital_bounds != first.capital_bounds
        assert first.grid.capital.max_value == pytest.approx(
            5.0 * base_model.with_diffusion(0.02).steady_state_capital()
        )

    def test_record_every(self, base_model, solver_config):
        """Test arrays are thinned while scalars are kept for every period."""
        trajectory = _run(
            base_model, solver_config, horizon=7, update_probability=0.0, record_every=3, seed=0
        )
        kept = [record.period for record in trajectory.records if record.has_arrays]

        assert kept == [1, 3, 6, 7]
        assert len(trajectory) == 7
        assert all(record.converged for record in trajectory.records)

    def test_skip_failed_period(self, base_model, solver_config, monkeypatch):
        """Test on_failure='skip' records the failure and keeps going."""
        original_solve = ValueIterationSolver.solve
        calls = {"count": 0}

        def flaky_solve(self, initial_guess=None):
            calls["count"] += 1
            if calls["count"] == 2:
                raise SingularSystemError("forced failure")
            return original_solve(self, initial_guess)

        monkeypatch.setattr(ValueIterationSolver, "solve", flaky_solve)

        trajectory = _run(
            base_model,
            solver_config,
            horizon=4,
            update_probability=1.0,
            learning_rate=0.5,
            on_failure="skip",
            seed=0,
        )

        assert trajectory.failed_periods == [2]
        assert [record.period for record in trajectory.records] == [1, 3, 4]
        assert len(trajectory.belief_path) == 5
        assert np.all(np.diff(trajectory.distance_to_truth(0.5)) < 0)

    def test_raise_on_failed_period(self, base_model, solver_config, monkeypatch):
        """Test the default policy aborts the run on a failed solve."""

        def failing_solve(self, initial_guess=None):
            raise SingularSystemError("forced failure")

        monkeypatch.setattr(ValueIterationSolver, "solve", failing_solve)

        with pytest.raises(SingularSystemError, match="forced failure"):
            _run(base_model, solver_config, horizon=3, seed=0)


class TestBeliefTrajectory:
    """Test the trajectory container."""

    def test_run_fills_given_trajectory(self, base_model, solver_config):
        """Test a caller-supplied trajectory is filled in place."""
        trajectory = BeliefTrajectory()
        loop = BeliefUpdateLoop(base_model, solver_config, BeliefConfig(horizon=2, seed=5))

        result = loop.run(trajectory)

        assert result is trajectory
        assert len(trajectory.belief_path) == 3

    def test_cannot_start_twice(self):
        """Test a trajectory only accepts one initial belief."""
        trajectory = BeliefTrajectory()
        trajectory.start(0.1)

        with pytest.raises(ValueError, match="already been started"):
            trajectory.start(0.2)

    def test_must_start_before_recording(self, base_model):
        """Test records cannot precede the initial belief."""
        record = PeriodRecord(
            period=1,
            belief=0.1,
            updated_belief=0.1,
            updated=False,
            converged=True,
            iterations=3,
            final_distance=1e-7,
            steady_state_capital=1.0,
            grid=base_model.grid,
        )

        with pytest.raises(ValueError, match="must be started"):
            BeliefTrajectory().append(record)

    def test_to_dataframe(self, base_model, solver_config):
        """Test the pandas summary has one row per solved period."""
        trajectory = _run(base_model, solver_config, horizon=3, seed=2)
        frame = trajectory.to_dataframe()

        assert list(frame["period"]) == [1, 2, 3]
        assert {"belief", "updated", "converged", "steady_state_capital"} <= set(frame.columns)
        assert np.all(frame["capital_min"] < frame["capital_max"])
