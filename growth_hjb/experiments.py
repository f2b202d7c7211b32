"""Assemble models and runs from a :class:`~growth_hjb.config.Config`.

Example:
    >>> from growth_hjb.config import Config
    >>> config = Config.from_preset("rbc_diffusion")
    >>> solution = solve_model(config)
    >>> solution.value.shape
    (40, 15)
"""

import logging
from typing import Optional

import numpy as np

from .belief import BeliefTrajectory, BeliefUpdateLoop
from .config.core import Config
from .models import GrowthModel, RamseyDiffusionModel, RBCDiffusionModel
from .processes import LogOrnsteinUhlenbeck
from .solver import HJBSolution, ValueIterationSolver

logger = logging.getLogger(__name__)


def build_model(config: Config, diffusion: Optional[float] = None) -> GrowthModel:
    """Build the configured growth model.

    Args:
        config: Run configuration.
        diffusion: Diffusion parameter overriding the configured one
            (capital volatility for ``ramsey``, productivity volatility for
            ``rbc``).

    Returns:
        RamseyDiffusionModel or RBCDiffusionModel.
    """
    if config.variant == "ramsey":
        return RamseyDiffusionModel(config.parameters, config.grid, sigma=diffusion)

    process = LogOrnsteinUhlenbeck(theta=config.process.theta, sigma_sq=config.process.sigma_sq)
    if diffusion is not None:
        process = process.with_sigma(diffusion)
    return RBCDiffusionModel(config.parameters, config.grid, process)


def solve_model(config: Config, initial_guess: Optional[np.ndarray] = None) -> HJBSolution:
    """Solve the configured model under its own diffusion parameter."""
    model = build_model(config)
    return ValueIterationSolver(model, config.solver).solve(initial_guess)


def run_belief_experiment(
    config: Config,
    rng: Optional[np.random.Generator] = None,
    trajectory: Optional[BeliefTrajectory] = None,
) -> BeliefTrajectory:
    """Run the adaptive-belief experiment described by ``config.belief``.

    Args:
        config: Run configuration.
        rng: Random generator; seeded from ``config.belief.seed`` if None.
        trajectory: Empty trajectory to fill.

    Returns:
        The filled BeliefTrajectory.
    """
    base_model = build_model(config, diffusion=config.belief.true_sigma)
    logger.info(f"Running {config.variant} belief experiment over {config.belief.horizon} periods")
    return BeliefUpdateLoop(base_model, config.solver, config.belief, rng).run(trajectory)
