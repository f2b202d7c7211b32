"""Drift and diffusion primitives for the growth models.

This module provides the pure functions the upwind scheme and the generator
assembler are built from: the Cobb-Douglas technology, the net capital drift
implied by a consumption choice, and the mean-reverting log process for the
exogenous productivity state together with its Itô transform to levels.

None of these functions carry hidden state. They must reproduce the drift
to the last bit because the sign of the drift selects the differencing
direction downstream.
"""

from dataclasses import dataclass
import logging
import math

import numpy as np

logger = logging.getLogger(__name__)


def cobb_douglas(capital: np.ndarray, alpha: float, productivity: np.ndarray | float = 1.0):
    """Production ``z·k^α``.

    Args:
        capital: Capital stock(s).
        alpha: Curvature of the production function, in (0, 1).
        productivity: Exogenous productivity level(s), broadcast against capital.

    Returns:
        Output at each node.
    """
    return productivity * np.power(capital, alpha)


def capital_drift(
    output: np.ndarray, capital: np.ndarray, depreciation_rate: float, consumption: np.ndarray
) -> np.ndarray:
    """Net capital drift ``f(k, z) - d·k - c``.

    ``depreciation_rate`` is the full depreciation adjustment ``d`` of the
    model (``δ`` for the RBC model, ``δ + n - σ²`` for the Ramsey model with
    capital diffusion).
    """
    return output - depreciation_rate * capital - consumption


@dataclass(frozen=True)
class LogOrnsteinUhlenbeck:
    """Mean-reverting process for log productivity.

    d ln z = -θ·ln z dt + σ dW

    with stationary distribution ``ln z ~ N(0, σ²/(2θ))``.
    """

    theta: float
    sigma_sq: float

    def __post_init__(self):
        """Validate process parameters."""
        if self.theta <= 0:
            raise ValueError("Mean-reversion speed theta must be positive")
        if self.sigma_sq < 0:
            raise ValueError("Variance sigma_sq must be non-negative")

    @classmethod
    def from_persistence(cls, correlation: float, variance: float) -> "LogOrnsteinUhlenbeck":
        """Build the process from its autocorrelation and stationary variance.

        Args:
            correlation: One-period autocorrelation of ln z, in (0, 1).
            variance: Stationary variance of ln z.

        Returns:
            Process with ``θ = -ln(corr)`` and ``σ² = 2θ·var``.
        """
        if not 0 < correlation < 1:
            raise ValueError("Correlation must lie strictly between 0 and 1")
        theta = -math.log(correlation)
        logger.debug(f"Log-OU process from corr={correlation:.3f}, var={variance:.4f}: θ={theta:.4f}")
        return cls(theta=theta, sigma_sq=2.0 * theta * variance)

    @property
    def sigma(self) -> float:
        return math.sqrt(self.sigma_sq)

    @property
    def stationary_variance(self) -> float:
        """Variance of ln z under the stationary distribution."""
        return self.sigma_sq / (2.0 * self.theta)

    @property
    def stationary_mean(self) -> float:
        """Mean level ``E[z] = exp(var/2)`` of the log-normal stationary law."""
        return math.exp(self.stationary_variance / 2.0)

    def with_sigma(self, sigma: float) -> "LogOrnsteinUhlenbeck":
        """Same mean-reversion speed, different volatility."""
        return LogOrnsteinUhlenbeck(theta=self.theta, sigma_sq=float(sigma) ** 2)

    def drift(self, z: np.ndarray) -> np.ndarray:
        """Drift of the level, from Itô's lemma: ``μ(z) = (-θ ln z + σ²/2)·z``."""
        z = np.asarray(z, dtype=float)
        return (-self.theta * np.log(z) + self.sigma_sq / 2.0) * z

    def variance(self, z: np.ndarray) -> np.ndarray:
        """Variance of the level, from Itô's lemma: ``Σ(z) = σ²·z²``."""
        z = np.asarray(z, dtype=float)
        return self.sigma_sq * z**2
