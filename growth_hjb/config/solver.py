"""Grid and value-iteration settings.

Contains the configuration classes that control the discretisation
(grid bounds as multiples of the steady state, point counts) and the
implicit value iteration (tolerance, relaxation step, iteration budget).
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator


class GridConfig(BaseModel):
    """Discretisation of the state space.

    Capital bounds are multiples of the steady-state capital implied by the
    operative parameters, so the grid moves with the belief in the adaptive
    run. Exogenous bounds are multiples of the stationary mean productivity
    and only apply to the two-state model.

    Attributes:
        capital_points: Number of capital nodes (I, or H for the single-state model).
        capital_lower_multiple: Lowest capital node as a multiple of k*.
        capital_upper_multiple: Highest capital node as a multiple of k*.
        exogenous_points: Number of productivity nodes (J).
        exogenous_lower_multiple: Lowest productivity node as a multiple of E[z].
        exogenous_upper_multiple: Highest productivity node as a multiple of E[z].

    Examples:
        Coarse grid for quick experiments::

            grid = GridConfig(capital_points=100)
    """

    model_config = ConfigDict(frozen=True)

    capital_points: int = Field(default=1000, ge=2, description="Number of capital nodes")
    capital_lower_multiple: float = Field(default=0.1, gt=0, description="k_min / k*")
    capital_upper_multiple: float = Field(default=5.0, gt=0, description="k_max / k*")
    exogenous_points: int = Field(default=40, ge=2, description="Number of productivity nodes")
    exogenous_lower_multiple: float = Field(default=0.8, gt=0, description="z_min / E[z]")
    exogenous_upper_multiple: float = Field(default=1.2, gt=0, description="z_max / E[z]")

    @model_validator(mode="after")
    def validate_bounds_order(self):
        """Ensure each lower multiple is below its upper multiple.

        Returns:
            GridConfig: The validated config object.

        Raises:
            ValueError: If a lower multiple is not below the upper multiple.
        """
        if self.capital_lower_multiple >= self.capital_upper_multiple:
            raise ValueError("capital_lower_multiple must be less than capital_upper_multiple")
        if self.exogenous_lower_multiple >= self.exogenous_upper_multiple:
            raise ValueError("exogenous_lower_multiple must be less than exogenous_upper_multiple")
        return self


class SolverConfig(BaseModel):
    """Implicit value-iteration settings.

    Attributes:
        tolerance: Sup-norm change ε below which the iteration has converged.
        relaxation_step: Pseudo time step Δ of the implicit scheme.
        max_iterations: Iteration budget before giving up.
        warn_on_exhaustion: Emit NonConvergenceWarning when the budget runs out.
    """

    model_config = ConfigDict(frozen=True)

    tolerance: float = Field(default=1e-6, gt=0, description="Convergence tolerance ε")
    relaxation_step: float = Field(default=1000.0, gt=0, description="Relaxation step Δ")
    max_iterations: int = Field(default=30, ge=1, description="Inner iteration budget")
    warn_on_exhaustion: bool = Field(
        default=True, description="Warn when the iteration budget is exhausted"
    )
