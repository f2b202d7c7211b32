"""Tests for the growth models."""

import numpy as np
import pytest

from growth_hjb.config import GridConfig, ModelParameters
from growth_hjb.exceptions import DomainError
from growth_hjb.generator import exogenous_block
from growth_hjb.models import RamseyDiffusionModel, RBCDiffusionModel


class TestRamseyDiffusionModel:
    """Test the single-state model."""

    def test_deterministic_steady_state(self, deterministic_parameters):
        """Test k* = (α/(ρ+δ))^(1/(1-α)) without growth or diffusion."""
        model = RamseyDiffusionModel(deterministic_parameters, GridConfig(capital_points=50))

        assert model.depreciation_rate == pytest.approx(0.05)
        assert model.steady_state_capital() == pytest.approx((1 / 3 / 0.1) ** 1.5)
        assert model.capital_variance() is None
        assert model.exogenous_block() is None

    def test_grid_built_around_steady_state(self, ramsey_model):
        """Test capital bounds are multiples of k* under the operative volatility."""
        k_star = ramsey_model.steady_state_capital()

        assert ramsey_model.depreciation_rate == pytest.approx(0.05 + 0.51 - 0.25)
        assert k_star == pytest.approx((1 / 3 / 0.36) ** 1.5)
        assert ramsey_model.grid.capital.min_value == pytest.approx(0.1 * k_star)
        assert ramsey_model.grid.capital.max_value == pytest.approx(5.0 * k_star)
        assert ramsey_model.shape == (100,)

    def test_capital_variance(self, ramsey_model):
        """Test Itô variance σ²k²."""
        assert np.allclose(ramsey_model.capital_variance(), 0.25 * ramsey_model.capital**2)

    def test_with_diffusion_returns_new_model(self, ramsey_model):
        """Test a new belief gives a new model and grid, leaving the original intact."""
        believed = ramsey_model.with_diffusion(0.02)

        assert believed is not ramsey_model
        assert believed.diffusion_parameter == pytest.approx(0.02)
        assert ramsey_model.diffusion_parameter == pytest.approx(0.5)
        assert believed.grid.capital.max_value != ramsey_model.grid.capital.max_value
        assert believed.grid_config is ramsey_model.grid_config

    def test_no_steady_state(self, ramsey_model):
        """Test a volatility with ρ + δ + n - σ² <= 0 is rejected."""
        with pytest.raises(ValueError, match="No steady state"):
            ramsey_model.with_diffusion(0.8)

    def test_boundary_marginal_values(self, ramsey_model):
        """Test the pinned derivatives equal u'(drift-free consumption)."""
        lower, upper = ramsey_model.boundary_marginal_values()
        c0 = ramsey_model.steady_state_consumption()

        assert float(lower) == pytest.approx(c0[0] ** -2)
        assert float(upper) == pytest.approx(c0[-1] ** -2)
        assert np.all(c0 > 0)

    def test_upper_bound_too_far(self):
        """Test a grid reaching past zero drift-free consumption is reported."""
        model = RamseyDiffusionModel(
            ModelParameters(), GridConfig(capital_points=50, capital_upper_multiple=10.0)
        )

        with pytest.raises(DomainError, match="upper capital bound"):
            model.boundary_marginal_values()

    def test_initial_guess(self, ramsey_model):
        """Test the initial guess u(f(k))/ρ is increasing in capital."""
        guess = ramsey_model.initial_guess()

        assert guess.shape == ramsey_model.shape
        assert np.allclose(guess, -1.0 / ramsey_model.output() / 0.05)
        assert np.all(np.diff(guess) > 0)

    def test_arrays_are_read_only(self, ramsey_model):
        """Test models do not hand out writable state."""
        with pytest.raises(ValueError):
            ramsey_model.output()[0] = 0.0


class TestRBCDiffusionModel:
    """Test the two-state model."""

    def test_shape_and_meshes(self, rbc_model):
        """Test values are laid out (J, I) with productivity along rows."""
        assert rbc_model.shape == (12, 15)
        assert np.allclose(rbc_model.productivity[:, 0], rbc_model.grid.exogenous.nodes)
        assert np.allclose(
            rbc_model.output(), rbc_model.productivity * rbc_model.capital**0.3
        )

    def test_steady_state_uses_mean_productivity(self, rbc_model):
        """Test k* = (α·E[z]/(ρ+δ))^(1/(1-α))."""
        mean_z = np.exp(0.07 / 2)

        assert rbc_model.steady_state_capital() == pytest.approx(
            (0.3 * mean_z / 0.1) ** (1 / 0.7)
        )
        assert rbc_model.grid.exogenous.min_value == pytest.approx(0.8 * mean_z)
        assert rbc_model.grid.exogenous.max_value == pytest.approx(1.2 * mean_z)

    def test_exogenous_block_built_once(self, rbc_model):
        """Test the productivity block is cached on the model."""
        block = rbc_model.exogenous_block()

        assert block.shape == (180, 180)
        assert rbc_model.exogenous_block() is block

    def test_depreciation_ignores_growth_and_volatility(self, rbc_grid_config):
        """Test labor growth and capital volatility do not reach the RBC drift."""
        parameters = ModelParameters(growth_rate=0.51, volatility=0.5)
        model = RBCDiffusionModel(parameters, rbc_grid_config)
        alpha = parameters.capital_share
        mean_z = model.process.stationary_mean

        assert model.depreciation_rate == pytest.approx(0.05)
        assert model.capital_variance() is None
        assert model.steady_state_capital() == pytest.approx(
            (alpha * mean_z / 0.1) ** (1 / (1 - alpha))
        )
        assert np.allclose(
            model.capital_drift(np.zeros(model.shape)),
            model.output() - 0.05 * model.capital,
        )

    def test_exogenous_block_matches_generator(self, rbc_model):
        """Test the cached block is the generator's productivity block."""
        expected = exogenous_block(rbc_model.process, rbc_model.grid)

        assert (rbc_model.exogenous_block() != expected).nnz == 0

    def test_with_diffusion(self, rbc_model):
        """Test a new productivity volatility rebuilds both grids."""
        believed = rbc_model.with_diffusion(0.05)

        assert isinstance(believed, RBCDiffusionModel)
        assert believed.diffusion_parameter == pytest.approx(0.05)
        assert believed.process.theta == rbc_model.process.theta
        assert believed.grid.exogenous.max_value < rbc_model.grid.exogenous.max_value
        assert believed.steady_state_capital() < rbc_model.steady_state_capital()

    def test_repr(self, rbc_model):
        """Test the representation names the model and grid."""
        assert "RBCDiffusionModel" in repr(rbc_model)
        assert "(12, 15)" in repr(rbc_model)
