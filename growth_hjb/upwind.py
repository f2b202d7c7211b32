"""Upwind selection of the capital derivative and the consumption policy.

Given a value function, the scheme forms the forward and backward one-sided
derivatives in capital, turns each into a candidate consumption through the
inverse marginal utility, and keeps the candidate whose implied drift points
in the direction its difference was taken from:

- forward where the forward drift is positive,
- backward where the backward drift is negative,
- the drift-free consumption everywhere else.

When both one-sided drifts are state-improving at the same node (the value
function is locally non-concave) the backward candidate wins, so exactly one
indicator is set at every node.

At the capital edges the missing one-sided derivative is pinned to the
marginal utility of drift-free consumption, which keeps the state on the grid.
"""

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING

import numpy as np

from .exceptions import DomainError

if TYPE_CHECKING:
    from .models import GrowthModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpwindPolicy:
    """Policy implied by one value-function iterate.

    All arrays have the value function's shape. ``drift_forward`` and
    ``drift_backward`` are masked by their indicators, so they are zero
    wherever the other candidate (or the drift-free one) was selected; the
    generator assembler reads the transition rates straight from them.
    """

    forward_derivative: np.ndarray
    backward_derivative: np.ndarray
    marginal_value: np.ndarray
    consumption: np.ndarray
    drift_forward: np.ndarray
    drift_backward: np.ndarray
    savings: np.ndarray
    forward_mask: np.ndarray
    backward_mask: np.ndarray
    steady_mask: np.ndarray
    utility_flow: np.ndarray

    def indicator_sum(self) -> np.ndarray:
        """Number of selected candidates per node (1 everywhere)."""
        return (
            self.forward_mask.astype(int)
            + self.backward_mask.astype(int)
            + self.steady_mask.astype(int)
        )


def one_sided_derivatives(value: np.ndarray, model: "GrowthModel"):
    """Forward and backward capital differences with pinned edges.

    Args:
        value: Value function on the model grid.
        model: Growth model supplying the grid step and boundary pins.

    Returns:
        Tuple ``(forward, backward)`` shaped like ``value``.
    """
    step = model.grid.capital.step
    lower_pin, upper_pin = model.boundary_marginal_values()

    differences = np.diff(value, axis=-1) / step
    forward = np.empty_like(value)
    backward = np.empty_like(value)
    forward[..., :-1] = differences
    forward[..., -1] = upper_pin
    backward[..., 1:] = differences
    backward[..., 0] = lower_pin
    return forward, backward


def compute_upwind_policy(value: np.ndarray, model: "GrowthModel") -> UpwindPolicy:
    """Select the upwind derivative and the implied consumption policy.

    Args:
        value: Current value function, shaped like ``model.shape``.
        model: Growth model providing technology, preferences and the grid.

    Returns:
        UpwindPolicy for this iterate.

    Raises:
        ValueError: If ``value`` does not match the model grid.
        DomainError: If the selected derivative is not strictly positive at
            some node, so that consumption is undefined.
    """
    value = np.asarray(value, dtype=float)
    if value.shape != model.shape:
        raise ValueError(f"Value function shape {value.shape} does not match grid {model.shape}")

    forward, backward = one_sided_derivatives(value, model)
    utility = model.utility

    consumption_forward = utility.candidate_consumption(forward)
    consumption_backward = utility.candidate_consumption(backward)
    consumption_steady = model.steady_state_consumption()

    drift_forward = model.capital_drift(consumption_forward)
    drift_backward = model.capital_drift(consumption_backward)

    backward_mask = drift_backward < 0
    forward_mask = (drift_forward > 0) & ~backward_mask
    steady_mask = ~(forward_mask | backward_mask)

    ties = int(np.sum((drift_forward > 0) & backward_mask))
    if ties:
        logger.debug(f"{ties} nodes with both one-sided drifts improving; backward selected")

    marginal_value = np.where(
        forward_mask,
        forward,
        np.where(backward_mask, backward, utility.derivative(consumption_steady)),
    )
    bad = ~(np.isfinite(marginal_value) & (marginal_value > 0))
    if np.any(bad):
        raise DomainError(
            f"Upwind derivative is non-positive at {int(np.sum(bad))} of {bad.size} nodes; "
            "the value function is not increasing in capital. "
            "Try a smaller relaxation_step or a better initial guess."
        )

    consumption = np.where(
        forward_mask,
        consumption_forward,
        np.where(backward_mask, consumption_backward, consumption_steady),
    )

    return UpwindPolicy(
        forward_derivative=forward,
        backward_derivative=backward,
        marginal_value=marginal_value,
        consumption=consumption,
        drift_forward=np.where(forward_mask, drift_forward, 0.0),
        drift_backward=np.where(backward_mask, drift_backward, 0.0),
        savings=model.capital_drift(consumption),
        forward_mask=forward_mask,
        backward_mask=backward_mask,
        steady_mask=steady_mask,
        utility_flow=utility.evaluate(consumption),
    )
