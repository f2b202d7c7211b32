"""Finite-difference HJB solver for continuous-time stochastic growth models"""

from ._version import __version__

# Use lazy imports to avoid import issues during test discovery
# Direct imports are defined but modules are imported only when accessed

__all__ = [
    "__version__",
    "BeliefTrajectory",
    "BeliefUpdateLoop",
    "Config",
    "GrowthModel",
    "HJBSolution",
    "PowerUtility",
    "RBCDiffusionModel",
    "RamseyDiffusionModel",
    "SolveStatus",
    "ValueIterationSolver",
    "build_model",
    "run_belief_experiment",
    "solve_model",
]


def __getattr__(name):
    """Lazy import modules to avoid circular dependencies during test discovery."""
    if name == "BeliefTrajectory" or name == "BeliefUpdateLoop":
        from .belief import BeliefTrajectory, BeliefUpdateLoop

        return locals()[name]
    elif name == "Config":
        from .config import Config

        return Config
    elif name in ["GrowthModel", "RBCDiffusionModel", "RamseyDiffusionModel"]:
        from .models import GrowthModel, RamseyDiffusionModel, RBCDiffusionModel

        return locals()[name]
    elif name in ["HJBSolution", "SolveStatus", "ValueIterationSolver"]:
        from .solver import HJBSolution, SolveStatus, ValueIterationSolver

        return locals()[name]
    elif name == "PowerUtility":
        from .utility import PowerUtility

        return PowerUtility
    elif name in ["build_model", "run_belief_experiment", "solve_model"]:
        from .experiments import build_model, run_belief_experiment, solve_model

        return locals()[name]
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
