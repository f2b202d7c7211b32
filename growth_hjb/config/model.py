"""Structural and exogenous-process parameters of the growth models.

Contains the preference/technology constants shared by both growth models
and the parameters of the mean-reverting productivity process used by the
two-state RBC model. All models are frozen: one fixed-point solve never sees
its parameters change.
"""

import math

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ModelParameters(BaseModel):
    """Structural constants of the stochastic growth problem.

    Attributes:
        risk_aversion: CRRA curvature γ of period utility.
        discount_rate: Subjective discount rate ρ.
        capital_share: Curvature α of the Cobb-Douglas technology.
        depreciation: Physical depreciation rate δ.
        growth_rate: Labor growth rate n, folded into effective depreciation.
        volatility: Capital diffusion volatility σ (zero for deterministic
            capital accumulation).

    Examples:
        Deterministic Ramsey model::

            params = ModelParameters(growth_rate=0.0, volatility=0.0)

        Ramsey model with capital diffusion::

            params = ModelParameters(growth_rate=0.51, volatility=0.5)

    Note:
        Effective depreciation is ``δ + n - σ²`` and must keep
        ``ρ + δ + n - σ² > 0`` or no interior steady state exists.
    """

    model_config = ConfigDict(frozen=True)

    risk_aversion: float = Field(default=2.0, gt=0, le=20, description="CRRA coefficient γ")
    discount_rate: float = Field(default=0.05, gt=0, le=1, description="Discount rate ρ")
    capital_share: float = Field(
        default=1.0 / 3.0, gt=0, lt=1, description="Production curvature α"
    )
    depreciation: float = Field(default=0.05, ge=0, le=1, description="Depreciation rate δ")
    growth_rate: float = Field(default=0.51, ge=-0.5, le=1, description="Labor growth rate n")
    volatility: float = Field(default=0.5, ge=0, le=2, description="Capital volatility σ")

    @model_validator(mode="after")
    def validate_steady_state_exists(self):
        """Ensure the capital steady state is well defined.

        Returns:
            ModelParameters: The validated parameters.

        Raises:
            ValueError: If ``ρ + δ + n - σ²`` is not positive.
        """
        if self.discount_rate + self.effective_depreciation(self.volatility) <= 0:
            raise ValueError(
                "discount_rate + depreciation + growth_rate - volatility**2 must be positive "
                f"(got {self.discount_rate + self.effective_depreciation(self.volatility):.4f})"
            )
        return self

    def effective_depreciation(self, volatility: float) -> float:
        """Depreciation adjustment ``δ + n - σ²`` for a given capital volatility."""
        return self.depreciation + self.growth_rate - volatility**2


class ExogenousProcessConfig(BaseModel):
    """Parameters of the log productivity process.

    For ``d ln z = -θ ln z dt + σ dW`` with ``ln z ~ N(0, var)``:
    ``θ = -ln(corr)`` and ``σ² = 2θ·var``.
    """

    model_config = ConfigDict(frozen=True)

    variance: float = Field(default=0.07, gt=0, le=1, description="Stationary variance of ln z")
    correlation: float = Field(default=0.9, gt=0, lt=1, description="Autocorrelation of ln z")

    @property
    def theta(self) -> float:
        """Mean-reversion speed θ."""
        return -math.log(self.correlation)

    @property
    def sigma_sq(self) -> float:
        """Instantaneous variance σ² of ln z."""
        return 2.0 * self.theta * self.variance

    @property
    def stationary_mean(self) -> float:
        """Mean productivity level ``exp(var/2)``."""
        return math.exp(self.variance / 2.0)
