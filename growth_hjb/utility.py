"""CRRA utility functions for the consumption HJB problem.

The upwind scheme needs three maps: utility ``u(c)``, marginal utility
``u'(c)`` and its inverse ``(u')^(-1)(m)``, which turns a value-function
derivative into the consumption that equates marginal utility and marginal
value. All three are only defined for strictly positive arguments; a
non-positive argument raises :class:`~growth_hjb.exceptions.DomainError`
rather than letting NaN values into the value function.
"""

from abc import ABC, abstractmethod

import numpy as np

from .exceptions import DomainError

_GAMMA_TOLERANCE = 1e-10


def _require_positive(values: np.ndarray, what: str) -> np.ndarray:
    arr = np.asarray(values, dtype=float)
    bad = ~(np.isfinite(arr) & (arr > 0))
    if np.any(bad):
        raise DomainError(
            f"{what} must be strictly positive and finite; "
            f"{int(np.sum(bad))} of {arr.size} nodes violate this"
        )
    return arr


class UtilityFunction(ABC):
    """Abstract base class for period utility functions."""

    @abstractmethod
    def evaluate(self, consumption: np.ndarray) -> np.ndarray:
        """Evaluate utility at given consumption levels."""
        pass  # pylint: disable=unnecessary-pass

    @abstractmethod
    def derivative(self, consumption: np.ndarray) -> np.ndarray:
        """Compute marginal utility (first derivative)."""
        pass  # pylint: disable=unnecessary-pass

    @abstractmethod
    def inverse_derivative(self, marginal_value: np.ndarray) -> np.ndarray:
        """Compute consumption whose marginal utility equals ``marginal_value``."""
        pass  # pylint: disable=unnecessary-pass


class LogUtility(UtilityFunction):
    """Logarithmic utility, the γ → 1 limit of CRRA.

    U(c) = log(c)
    """

    def evaluate(self, consumption: np.ndarray) -> np.ndarray:
        """Evaluate log utility."""
        return np.array(np.log(_require_positive(consumption, "Consumption")))

    def derivative(self, consumption: np.ndarray) -> np.ndarray:
        """Compute marginal utility: U'(c) = 1/c."""
        return np.array(1.0 / _require_positive(consumption, "Consumption"))

    def inverse_derivative(self, marginal_value: np.ndarray) -> np.ndarray:
        """Compute inverse: (U')^(-1)(m) = 1/m."""
        return np.array(1.0 / _require_positive(marginal_value, "Marginal value"))


class PowerUtility(UtilityFunction):
    """Power (CRRA) utility function with risk aversion parameter.

    U(c) = c^(1-γ)/(1-γ) for γ ≠ 1
    U(c) = log(c) for γ = 1

    where γ is the coefficient of relative risk aversion.
    """

    def __init__(self, risk_aversion: float = 2.0):
        """Initialize power utility.

        Args:
            risk_aversion: Coefficient of relative risk aversion (γ), positive.
        """
        if risk_aversion <= 0:
            raise ValueError("Risk aversion must be positive")
        self.gamma = float(risk_aversion)

        # Use log utility if gamma is close to 1
        self._log_utility = LogUtility() if abs(self.gamma - 1.0) < _GAMMA_TOLERANCE else None

    def evaluate(self, consumption: np.ndarray) -> np.ndarray:
        """Evaluate power utility."""
        if self._log_utility is not None:
            return self._log_utility.evaluate(consumption)

        c = _require_positive(consumption, "Consumption")
        return np.array(np.power(c, 1 - self.gamma) / (1 - self.gamma))

    def derivative(self, consumption: np.ndarray) -> np.ndarray:
        """Compute marginal utility: U'(c) = c^(-γ)."""
        if self._log_utility is not None:
            return self._log_utility.derivative(consumption)

        c = _require_positive(consumption, "Consumption")
        return np.array(np.power(c, -self.gamma))

    def inverse_derivative(self, marginal_value: np.ndarray) -> np.ndarray:
        """Compute inverse: (U')^(-1)(m) = m^(-1/γ)."""
        if self._log_utility is not None:
            return self._log_utility.inverse_derivative(marginal_value)

        m = _require_positive(marginal_value, "Marginal value")
        return np.array(np.power(m, -1.0 / self.gamma))

    def candidate_consumption(self, marginal_value: np.ndarray) -> np.ndarray:
        """Inverse marginal utility that tolerates non-positive derivatives.

        Nodes where the one-sided derivative is not strictly positive get
        infinite consumption, which makes the implied drift ``-inf``: such a
        candidate is never selected as state-improving in the forward
        direction. If it is selected in the backward direction the upwind
        derivative itself is non-positive and the scheme raises DomainError.
        """
        m = np.asarray(marginal_value, dtype=float)
        valid = np.isfinite(m) & (m > 0)
        consumption = np.full(m.shape, np.inf)
        if self._log_utility is not None:
            consumption[valid] = 1.0 / m[valid]
        else:
            consumption[valid] = np.power(m[valid], -1.0 / self.gamma)
        return consumption

    def __repr__(self) -> str:
        return f"PowerUtility(risk_aversion={self.gamma})"
