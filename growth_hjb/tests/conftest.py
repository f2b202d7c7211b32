"""Pytest configuration and shared fixtures."""

import pytest

from growth_hjb.config import GridConfig, ModelParameters
from growth_hjb.models import RamseyDiffusionModel, RBCDiffusionModel
from growth_hjb.processes import LogOrnsteinUhlenbeck


@pytest.fixture
def deterministic_parameters():
    """Ramsey parameters without growth or capital diffusion (closed-form steady state)."""
    return ModelParameters(
        risk_aversion=2.0,
        discount_rate=0.05,
        capital_share=1.0 / 3.0,
        depreciation=0.05,
        growth_rate=0.0,
        volatility=0.0,
    )


@pytest.fixture
def ramsey_model():
    """Ramsey model with capital diffusion on a coarse grid."""
    return RamseyDiffusionModel(ModelParameters(), GridConfig(capital_points=100))


@pytest.fixture
def rbc_parameters():
    """RBC calibration: α = 0.3, no labor growth, no capital diffusion."""
    return ModelParameters(capital_share=0.3, growth_rate=0.0, volatility=0.0)


@pytest.fixture
def rbc_grid_config():
    return GridConfig(
        capital_points=15,
        capital_lower_multiple=0.3,
        capital_upper_multiple=3.0,
        exogenous_points=12,
        exogenous_lower_multiple=0.8,
        exogenous_upper_multiple=1.2,
    )


@pytest.fixture
def rbc_model(rbc_parameters, rbc_grid_config):
    """Two-state RBC model on a 12 x 15 grid."""
    process = LogOrnsteinUhlenbeck.from_persistence(correlation=0.9, variance=0.07)
    return RBCDiffusionModel(rbc_parameters, rbc_grid_config, process)
