"""Stochastic growth models solved by the HJB engine.

Two variants share the :class:`GrowthModel` interface:

- :class:`RamseyDiffusionModel`: capital is the only state and carries its
  own diffusion, ``dk = (k^α - (δ + n - σ²)k - c)dt - σk dW``.
- :class:`RBCDiffusionModel`: capital crossed with a productivity level that
  follows a mean-reverting log process; output is ``z·k^α``.

A model is immutable once built. The adaptive-belief run never mutates a
model; it asks for a fresh one with :meth:`GrowthModel.with_diffusion`, which
also rebuilds the grid around the steady state implied by the new parameter.

Example:
    >>> from growth_hjb.config import GridConfig, ModelParameters
    >>> model = RamseyDiffusionModel(ModelParameters(), GridConfig(capital_points=200))
    >>> model.grid.shape
    (200,)
"""

from abc import ABC, abstractmethod
import logging
from typing import Optional, Tuple

import numpy as np
from scipy import sparse

from .config.model import ModelParameters
from .config.solver import GridConfig
from .exceptions import DomainError
from .generator import exogenous_block as build_exogenous_block
from .grid import TensorGrid, build_grid
from .processes import LogOrnsteinUhlenbeck, capital_drift, cobb_douglas
from .utility import PowerUtility

logger = logging.getLogger(__name__)


class GrowthModel(ABC):
    """Common drift/diffusion interface of the growth models.

    Args:
        parameters: Structural parameters.
        grid_config: Grid discretisation.
        capital_volatility: Operative capital diffusion volatility σ; it enters
            the effective depreciation ``δ + n - σ²`` and the capital variance
            ``σ²k²``.

    Raises:
        ValueError: If ``ρ + δ + n - σ²`` is not positive for the operative σ.
    """

    def __init__(
        self, parameters: ModelParameters, grid_config: GridConfig, capital_volatility: float
    ):
        self.parameters = parameters
        self.grid_config = grid_config
        self.capital_volatility = float(capital_volatility)

        if parameters.discount_rate + self.depreciation_rate <= 0:
            raise ValueError(
                f"No steady state for capital volatility {self.capital_volatility}: "
                f"discount_rate + effective depreciation = "
                f"{parameters.discount_rate + self.depreciation_rate:.4f} <= 0"
            )

        self.utility = PowerUtility(parameters.risk_aversion)
        self.grid: TensorGrid = self._build_grid()

        self._capital = self.grid.capital_mesh
        self._output = cobb_douglas(
            self._capital, parameters.capital_share, self.grid.exogenous_mesh
        )
        self._capital.setflags(write=False)
        self._output.setflags(write=False)

        logger.debug(
            f"Initialized {self.__class__.__name__} with diffusion parameter "
            f"{self.diffusion_parameter:.6f} on grid shape {self.grid.shape}"
        )

    @abstractmethod
    def _build_grid(self) -> TensorGrid:
        """Build the state grid around the implied steady state."""

    @abstractmethod
    def steady_state_capital(self) -> float:
        """Deterministic steady-state capital under the operative parameters."""

    @property
    @abstractmethod
    def diffusion_parameter(self) -> float:
        """The scalar the adaptive-belief run treats as uncertain."""

    @abstractmethod
    def with_diffusion(self, sigma: float) -> "GrowthModel":
        """Same model with a different diffusion parameter (and a rebuilt grid)."""

    @property
    def shape(self) -> Tuple[int, ...]:
        return self.grid.shape

    @property
    def discount_rate(self) -> float:
        return self.parameters.discount_rate

    @property
    def depreciation_rate(self) -> float:
        """Depreciation adjustment ``δ + n - σ²`` multiplying capital in the drift."""
        return self.parameters.effective_depreciation(self.capital_volatility)

    @property
    def capital(self) -> np.ndarray:
        """Capital at every node, shaped like a value function."""
        return self._capital

    def output(self) -> np.ndarray:
        """Production at every node."""
        return self._output

    def steady_state_consumption(self) -> np.ndarray:
        """Consumption that sets the capital drift to zero at every node."""
        return self._output - self.depreciation_rate * self._capital

    def capital_drift(self, consumption: np.ndarray) -> np.ndarray:
        """Net capital drift at every node for the given consumption."""
        return capital_drift(self._output, self._capital, self.depreciation_rate, consumption)

    def capital_variance(self) -> Optional[np.ndarray]:
        """Itô variance ``σ²k²`` of capital, or None without capital diffusion."""
        if self.capital_volatility == 0:
            return None
        return self.capital_volatility**2 * self._capital**2

    def exogenous_block(self) -> Optional[sparse.csr_matrix]:
        """Generator block of the exogenous state, or None for single-state models."""
        return None

    def boundary_marginal_values(self) -> Tuple[np.ndarray, np.ndarray]:
        """Marginal values pinned at the lowest and highest capital nodes.

        At both capital edges consumption equals drift-free output, so the
        state cannot leave the grid. The pinned derivative is ``u'(c0)``.

        Returns:
            Tuple ``(lower, upper)`` with one entry per exogenous node.

        Raises:
            DomainError: If drift-free consumption is not positive at an edge.
        """
        c0 = self.steady_state_consumption()
        lower, upper = c0[..., 0], c0[..., -1]
        if np.any(upper <= 0):
            raise DomainError(
                f"Drift-free consumption is non-positive at the upper capital bound "
                f"k_max={self.grid.capital.max_value:.4g}; "
                f"reduce grid.capital_upper_multiple (currently "
                f"{self.grid_config.capital_upper_multiple})"
            )
        if np.any(lower <= 0):
            raise DomainError(
                f"Drift-free consumption is non-positive at the lower capital bound "
                f"k_min={self.grid.capital.min_value:.4g}"
            )
        return self.utility.derivative(lower), self.utility.derivative(upper)

    def initial_guess(self) -> np.ndarray:
        """Value of consuming output forever: ``u(f(k, z)) / ρ``."""
        return self.utility.evaluate(self._output) / self.discount_rate

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(diffusion={self.diffusion_parameter:.6g}, "
            f"k*={self.steady_state_capital():.6g}, shape={self.shape})"
        )


class RamseyDiffusionModel(GrowthModel):
    """Single-state Ramsey model with capital diffusion.

    The diffusion parameter is the capital volatility σ. It moves the
    effective depreciation ``δ + n - σ²``, hence the steady state
    ``k* = (α / (ρ + δ + n - σ²))^(1/(1-α))`` and the grid built around it.

    Args:
        parameters: Structural parameters; ``parameters.volatility`` is the
            default diffusion parameter.
        grid_config: Grid discretisation.
        sigma: Operative volatility, overriding ``parameters.volatility``.
    """

    def __init__(
        self,
        parameters: ModelParameters,
        grid_config: Optional[GridConfig] = None,
        sigma: Optional[float] = None,
    ):
        volatility = parameters.volatility if sigma is None else sigma
        super().__init__(parameters, grid_config or GridConfig(), volatility)

    @property
    def diffusion_parameter(self) -> float:
        return self.capital_volatility

    def steady_state_capital(self) -> float:
        alpha = self.parameters.capital_share
        return float(
            (alpha / (self.discount_rate + self.depreciation_rate)) ** (1.0 / (1.0 - alpha))
        )

    def _build_grid(self) -> TensorGrid:
        k_star = self.steady_state_capital()
        capital = build_grid(
            "capital",
            self.grid_config.capital_lower_multiple * k_star,
            self.grid_config.capital_upper_multiple * k_star,
            self.grid_config.capital_points,
        )
        return TensorGrid(capital)

    def with_diffusion(self, sigma: float) -> "RamseyDiffusionModel":
        return RamseyDiffusionModel(self.parameters, self.grid_config, sigma=sigma)


class RBCDiffusionModel(GrowthModel):
    """Two-state RBC model: capital and a mean-reverting productivity level.

    The diffusion parameter is the volatility σ of log productivity. With the
    mean-reversion speed held fixed, a new σ changes the stationary variance
    ``σ²/(2θ)``, the mean productivity ``exp(var/2)`` and both grids.

    Capital carries no diffusion of its own and depreciates at ``δ`` alone;
    ``growth_rate`` and ``volatility`` in the parameters belong to the Ramsey
    model and are ignored here.

    Args:
        parameters: Structural parameters.
        grid_config: Grid discretisation.
        process: Log productivity process.
    """

    def __init__(
        self,
        parameters: ModelParameters,
        grid_config: Optional[GridConfig] = None,
        process: Optional[LogOrnsteinUhlenbeck] = None,
    ):
        self.process = process or LogOrnsteinUhlenbeck.from_persistence(0.9, 0.07)
        self._exogenous_block: Optional[sparse.csr_matrix] = None
        super().__init__(parameters, grid_config or GridConfig(), capital_volatility=0.0)

    @property
    def diffusion_parameter(self) -> float:
        return self.process.sigma

    @property
    def depreciation_rate(self) -> float:
        """Depreciation rate ``δ`` multiplying capital in the drift."""
        return self.parameters.depreciation

    @property
    def productivity(self) -> np.ndarray:
        """Productivity at every node, shaped like a value function."""
        return self.grid.exogenous_mesh

    def steady_state_capital(self) -> float:
        alpha = self.parameters.capital_share
        mean_z = self.process.stationary_mean
        return float(
            (alpha * mean_z / (self.discount_rate + self.depreciation_rate))
            ** (1.0 / (1.0 - alpha))
        )

    def _build_grid(self) -> TensorGrid:
        k_star = self.steady_state_capital()
        mean_z = self.process.stationary_mean
        capital = build_grid(
            "capital",
            self.grid_config.capital_lower_multiple * k_star,
            self.grid_config.capital_upper_multiple * k_star,
            self.grid_config.capital_points,
        )
        productivity = build_grid(
            "productivity",
            self.grid_config.exogenous_lower_multiple * mean_z,
            self.grid_config.exogenous_upper_multiple * mean_z,
            self.grid_config.exogenous_points,
        )
        return TensorGrid(capital, productivity)

    def exogenous_block(self) -> sparse.csr_matrix:
        """Productivity transition block, built once per model."""
        if self._exogenous_block is None:
            self._exogenous_block = build_exogenous_block(self.process, self.grid)
        return self._exogenous_block

    def with_diffusion(self, sigma: float) -> "RBCDiffusionModel":
        return RBCDiffusionModel(self.parameters, self.grid_config, self.process.with_sigma(sigma))
