"""Adaptive-belief loop over a misspecified diffusion parameter.

Each period the agent solves the HJB problem under the diffusion parameter
it currently believes, on a grid rebuilt around the steady state that belief
implies. A Bernoulli draw then decides whether the belief moves a fixed
fraction of the way toward the true value::

    σ_g <- σ_g + λ·(σ_true - σ_g)

The loop always runs the full horizon. The random source is an explicit
``numpy.random.Generator`` handed to the loop, so a run is reproducible from
its seed, and results go into a :class:`BeliefTrajectory` that the caller may
pass in and inspect afterwards.

Example:
    >>> from growth_hjb.config import BeliefConfig, GridConfig, ModelParameters
    >>> from growth_hjb.models import RamseyDiffusionModel
    >>> model = RamseyDiffusionModel(ModelParameters(), GridConfig(capital_points=100))
    >>> loop = BeliefUpdateLoop(model, belief_config=BeliefConfig(horizon=5, seed=1))
    >>> trajectory = loop.run()
    >>> len(trajectory.belief_path)
    6
"""

from dataclasses import dataclass, field
import logging
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd

from .config.belief import BeliefConfig
from .config.solver import SolverConfig
from .exceptions import DomainError, SingularSystemError
from .grid import TensorGrid
from .models import GrowthModel
from .solver import ValueIterationSolver

logger = logging.getLogger(__name__)


@dataclass
class PeriodRecord:
    """Outcome of one period of the adaptive run.

    ``belief`` is the parameter the period was solved under and
    ``updated_belief`` the one carried into the next period. The arrays are
    None for periods thinned out by ``record_every``.
    """

    period: int
    belief: float
    updated_belief: float
    updated: bool
    converged: bool
    iterations: int
    final_distance: float
    steady_state_capital: float
    grid: TensorGrid
    value: Optional[np.ndarray] = None
    consumption: Optional[np.ndarray] = None
    savings: Optional[np.ndarray] = None

    @property
    def capital_bounds(self) -> Tuple[float, float]:
        return (self.grid.capital.min_value, self.grid.capital.max_value)

    @property
    def has_arrays(self) -> bool:
        return self.value is not None


@dataclass
class BeliefTrajectory:
    """Per-period records and the belief path of an adaptive run.

    ``belief_path`` starts with the initial belief and gains one entry per
    period, including periods whose solve failed, so after a full run it has
    ``horizon + 1`` entries. Records are only appended, never rewritten.
    """

    records: List[PeriodRecord] = field(default_factory=list)
    belief_path: List[float] = field(default_factory=list)
    failed_periods: List[int] = field(default_factory=list)

    def start(self, initial_belief: float) -> None:
        """Open the trajectory with the initial belief."""
        if self.belief_path:
            raise ValueError("Trajectory has already been started")
        self.belief_path.append(float(initial_belief))

    def append(self, record: PeriodRecord) -> None:
        """Add the record of a solved period."""
        self._check_open()
        self.records.append(record)
        self.belief_path.append(record.updated_belief)

    def record_failure(self, period: int, updated_belief: float) -> None:
        """Note a period whose solve failed and was skipped."""
        self._check_open()
        self.failed_periods.append(period)
        self.belief_path.append(float(updated_belief))

    def _check_open(self) -> None:
        if not self.belief_path:
            raise ValueError("Trajectory must be started before periods are recorded")

    def beliefs(self) -> np.ndarray:
        return np.array(self.belief_path)

    def distance_to_truth(self, true_sigma: float) -> np.ndarray:
        """Absolute gap ``|σ_true - σ_g|`` along the belief path."""
        return np.abs(true_sigma - self.beliefs())

    def to_dataframe(self) -> pd.DataFrame:
        """One row per solved period with the scalar diagnostics."""
        rows = [
            {
                "period": r.period,
                "belief": r.belief,
                "updated_belief": r.updated_belief,
                "updated": r.updated,
                "converged": r.converged,
                "iterations": r.iterations,
                "final_distance": r.final_distance,
                "steady_state_capital": r.steady_state_capital,
                "capital_min": r.capital_bounds[0],
                "capital_max": r.capital_bounds[1],
            }
            for r in self.records
        ]
        return pd.DataFrame(rows)

    def __len__(self) -> int:
        return len(self.records)


class BeliefUpdateLoop:
    """Re-solve the model each period under a slowly corrected belief.

    Args:
        base_model: Model whose structure (parameters, grid multiples) is
            reused; only its diffusion parameter is replaced each period.
        solver_config: Settings of the inner value iteration.
        belief_config: True and initial parameter, update rule and horizon.
        rng: Random generator for the Bernoulli draws; defaults to one
            seeded from ``belief_config.seed``.
    """

    def __init__(
        self,
        base_model: GrowthModel,
        solver_config: Optional[SolverConfig] = None,
        belief_config: Optional[BeliefConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.base_model = base_model
        self.solver_config = solver_config or SolverConfig()
        self.belief_config = belief_config or BeliefConfig()
        self.rng = rng if rng is not None else np.random.default_rng(self.belief_config.seed)

    def update_belief(self, belief: float) -> Tuple[float, bool]:
        """Draw once and apply the update rule.

        Returns:
            Tuple of (belief for the next period, whether the draw succeeded).
        """
        config = self.belief_config
        updated = bool(self.rng.random() < config.update_probability)
        if updated:
            belief = belief + config.learning_rate * (config.true_sigma - belief)
        return belief, updated

    def _keeps_arrays(self, period: int) -> bool:
        config = self.belief_config
        return period in (1, config.horizon) or period % config.record_every == 0

    def run(self, trajectory: Optional[BeliefTrajectory] = None) -> BeliefTrajectory:
        """Run the full horizon.

        Args:
            trajectory: Empty trajectory to fill; a new one is created if None.

        Returns:
            The filled trajectory.

        Raises:
            SingularSystemError: If a period's solve fails and
                ``on_failure`` is ``"raise"``.
            DomainError: Likewise, for consumption leaving its domain.
        """
        config = self.belief_config
        trajectory = trajectory if trajectory is not None else BeliefTrajectory()
        belief = float(config.initial_sigma)
        trajectory.start(belief)

        logger.info(
            f"Starting belief run: σ_true={config.true_sigma}, σ_0={belief}, "
            f"p={config.update_probability}, λ={config.learning_rate}, T={config.horizon}"
        )

        for period in range(1, config.horizon + 1):
            model = self.base_model.with_diffusion(belief)
            try:
                solution = ValueIterationSolver(model, self.solver_config).solve()
            except (SingularSystemError, DomainError) as exc:
                if config.on_failure == "raise":
                    raise
                logger.error(f"Period {period} failed under belief {belief:.6f}: {exc}")
                solution = None

            next_belief, updated = self.update_belief(belief)

            if solution is None:
                trajectory.record_failure(period, next_belief)
                logger.warning(f"Skipped period {period}; belief carried to {next_belief:.6f}")
            else:
                keep = self._keeps_arrays(period)
                trajectory.append(
                    PeriodRecord(
                        period=period,
                        belief=belief,
                        updated_belief=next_belief,
                        updated=updated,
                        converged=solution.converged,
                        iterations=solution.iterations,
                        final_distance=solution.final_distance,
                        steady_state_capital=solution.mean_steady_state_capital(),
                        grid=solution.grid,
                        value=solution.value if keep else None,
                        consumption=solution.consumption if keep else None,
                        savings=solution.savings if keep else None,
                    )
                )

            logger.debug(
                f"Period {period}: belief {belief:.6f} -> {next_belief:.6f} "
                f"({'updated' if updated else 'unchanged'})"
            )
            belief = next_belief

        logger.info(
            f"Belief run finished: final belief {belief:.6f}, "
            f"{len(trajectory.failed_periods)} failed periods"
        )
        return trajectory
