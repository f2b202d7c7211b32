"""Implicit value iteration for the stationary HJB equation.

Each iteration runs the upwind scheme, assembles the generator of the
resulting policy and takes one implicit step::

    Init(guess) -> {Iterate} -> Converged | Exhausted

Iteration stops as soon as the sup-norm change falls below the tolerance
(Converged) or the iteration budget runs out (Exhausted). Exhaustion is not
an error: the last iterate is returned with ``converged=False``, a warning is
logged and a :class:`~growth_hjb._warnings.NonConvergenceWarning` emitted.

Example:
    >>> from growth_hjb.config import GridConfig, ModelParameters, SolverConfig
    >>> from growth_hjb.models import RamseyDiffusionModel
    >>> model = RamseyDiffusionModel(ModelParameters(), GridConfig(capital_points=200))
    >>> solution = ValueIterationSolver(model, SolverConfig()).solve()
    >>> solution.converged
    True
"""

from dataclasses import dataclass, field
from enum import Enum
import logging
from typing import Any, Dict, List, Optional, Tuple, Union
import warnings

import numpy as np

from ._warnings import NonConvergenceWarning
from .config.solver import SolverConfig
from .generator import assemble_generator
from .grid import TensorGrid
from .implicit import implicit_step
from .models import GrowthModel
from .upwind import UpwindPolicy, compute_upwind_policy

logger = logging.getLogger(__name__)


class SolveStatus(Enum):
    """Terminal state of a value iteration."""

    CONVERGED = "converged"
    EXHAUSTED = "exhausted"


@dataclass
class HJBSolution:
    """Value function and policy returned by :class:`ValueIterationSolver`."""

    value: np.ndarray
    consumption: np.ndarray
    savings: np.ndarray
    drift_forward: np.ndarray
    drift_backward: np.ndarray
    grid: TensorGrid
    status: SolveStatus
    iterations: int
    distances: List[float] = field(default_factory=list)
    model: Optional[GrowthModel] = field(default=None, repr=False)

    @property
    def converged(self) -> bool:
        return self.status is SolveStatus.CONVERGED

    @property
    def final_distance(self) -> float:
        return self.distances[-1] if self.distances else float("nan")

    def steady_state_capital(self) -> Union[float, np.ndarray]:
        """Capital level at which savings change sign from positive to non-positive.

        The crossing is interpolated linearly between the two bracketing
        nodes. For a two-state model one level is returned per productivity
        node; rows without a crossing give NaN.
        """
        nodes = self.grid.capital.nodes
        rows = np.atleast_2d(self.savings)
        levels = np.full(rows.shape[0], np.nan)

        for j, savings in enumerate(rows):
            crossings = np.nonzero((savings[:-1] > 0) & (savings[1:] <= 0))[0]
            if crossings.size == 0:
                continue
            i = crossings[0]
            weight = savings[i] / (savings[i] - savings[i + 1])
            levels[j] = nodes[i] + weight * (nodes[i + 1] - nodes[i])

        if self.grid.ndim == 1:
            return float(levels[0])
        return levels

    def mean_steady_state_capital(self) -> float:
        """Average of the finite steady-state levels (NaN if there are none)."""
        levels = np.atleast_1d(self.steady_state_capital())
        finite = levels[np.isfinite(levels)]
        return float(np.mean(finite)) if finite.size else float("nan")

    def summary(self) -> Dict[str, Any]:
        """Scalar diagnostics of the solve."""
        return {
            "status": self.status.value,
            "converged": self.converged,
            "iterations": self.iterations,
            "final_distance": self.final_distance,
            "steady_state_capital": self.mean_steady_state_capital(),
            "capital_bounds": (self.grid.capital.min_value, self.grid.capital.max_value),
            "value_function_range": (float(np.min(self.value)), float(np.max(self.value))),
            "consumption_range": (
                float(np.min(self.consumption)),
                float(np.max(self.consumption)),
            ),
        }


class ValueIterationSolver:
    """Implicit upwind value iteration for one growth model.

    Args:
        model: Growth model under the operative parameters.
        config: Tolerance, relaxation step and iteration budget.
    """

    def __init__(self, model: GrowthModel, config: Optional[SolverConfig] = None):
        self.model = model
        self.config = config or SolverConfig()
        logger.info(
            f"Initialized value iteration for {model!r} "
            f"(tolerance={self.config.tolerance:.1e}, Δ={self.config.relaxation_step:g})"
        )

    def iterate(self, value: np.ndarray) -> Tuple[np.ndarray, UpwindPolicy]:
        """Run one upwind/assemble/implicit-step cycle.

        Returns:
            Tuple of (next value function, policy used for the step).
        """
        policy = compute_upwind_policy(value, self.model)
        generator = assemble_generator(policy, self.model)
        next_value = implicit_step(
            generator,
            policy.utility_flow,
            value,
            self.model.discount_rate,
            self.config.relaxation_step,
        )
        return next_value, policy

    def solve(self, initial_guess: Optional[np.ndarray] = None) -> HJBSolution:
        """Iterate to convergence or until the budget is exhausted.

        Args:
            initial_guess: Starting value function; defaults to the value of
                consuming output forever.

        Returns:
            HJBSolution with the last iterate and the policy it implies.

        Raises:
            ValueError: If the initial guess does not match the grid.
            DomainError: If consumption becomes undefined during iteration.
            SingularSystemError: If an implicit step cannot be solved.
        """
        if initial_guess is None:
            value = self.model.initial_guess()
        else:
            value = np.array(initial_guess, dtype=float)
            if value.shape != self.model.shape:
                raise ValueError(
                    f"Initial guess shape {value.shape} does not match grid {self.model.shape}"
                )

        distances: List[float] = []
        status = SolveStatus.EXHAUSTED
        iteration = 0

        for iteration in range(1, self.config.max_iterations + 1):
            next_value, _ = self.iterate(value)
            distance = float(np.max(np.abs(next_value - value)))
            distances.append(distance)
            value = next_value

            logger.debug(f"Iteration {iteration}: value change = {distance:.6e}")

            if distance < self.config.tolerance:
                status = SolveStatus.CONVERGED
                logger.info(f"Converged after {iteration} iterations")
                break

        if status is SolveStatus.EXHAUSTED:
            message = (
                f"Max iterations reached without convergence "
                f"({iteration} iterations, last change {distances[-1]:.3e}, "
                f"tolerance {self.config.tolerance:.1e})"
            )
            logger.warning(message)
            if self.config.warn_on_exhaustion:
                warnings.warn(message, NonConvergenceWarning, stacklevel=2)

        policy = compute_upwind_policy(value, self.model)
        return HJBSolution(
            value=value,
            consumption=policy.consumption,
            savings=policy.savings,
            drift_forward=policy.drift_forward,
            drift_backward=policy.drift_backward,
            grid=self.model.grid,
            status=status,
            iterations=iteration,
            distances=distances,
            model=self.model,
        )

    def hjb_residual(self, solution: HJBSolution) -> Dict[str, float]:
        """Residual ``|ρV - u(c) - A V|`` of the discretised HJB equation.

        Args:
            solution: Solution computed for this solver's model.

        Returns:
            Dictionary with ``max_residual`` and ``mean_residual``.
        """
        policy = compute_upwind_policy(solution.value, self.model)
        generator = assemble_generator(policy, self.model)
        value = solution.value.ravel()
        residual = np.abs(
            self.model.discount_rate * value - policy.utility_flow.ravel() - generator @ value
        )
        return {
            "max_residual": float(np.max(residual)),
            "mean_residual": float(np.mean(residual)),
        }
