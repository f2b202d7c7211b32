"""Configuration management using Pydantic v2 models.

Sub-modules:
    belief: Adaptive-belief experiment parameters.
    core: Master Config class that composes all sub-configs.
    exceptions: ConfigurationError.
    model: Structural parameters and the exogenous productivity process.
    reporting: Logging configuration.
    solver: Grid discretisation and value-iteration settings.

Examples:
    Quick start with defaults::

        from growth_hjb.config import Config

        # Single-state Ramsey model with capital diffusion
        config = Config()

    Loading from file::

        config = Config.from_yaml(Path("my_run.yaml"))

Note:
    Rates are expressed as decimals (0.05 = 5% per unit of time).
"""

from .belief import BeliefConfig
from .core import Config
from .exceptions import ConfigurationError
from .model import ExogenousProcessConfig, ModelParameters
from .reporting import LoggingConfig
from .solver import GridConfig, SolverConfig

__all__ = [
    "BeliefConfig",
    "Config",
    "ConfigurationError",
    "ExogenousProcessConfig",
    "GridConfig",
    "LoggingConfig",
    "ModelParameters",
    "SolverConfig",
]
