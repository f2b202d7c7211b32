"""Master configuration class composing all sub-configurations.

Contains the top-level ``Config`` class that aggregates the model, grid,
solver, belief and logging sections into one validated object with YAML
loading/saving, dot-notation overrides and bundled presets.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Literal, Optional
import warnings

from pydantic import BaseModel, Field
import yaml

from .._warnings import ConfigurationWarning
from .belief import BeliefConfig
from .exceptions import ConfigurationError
from .model import ExogenousProcessConfig, ModelParameters
from .reporting import LoggingConfig
from .solver import GridConfig, SolverConfig
from .utils import deep_merge

logger = logging.getLogger(__name__)

PRESET_DIR = Path(__file__).resolve().parent.parent / "data"


class Config(BaseModel):
    """Complete configuration for a growth HJB run.

    All sub-configs have defaults, so ``Config()`` with no arguments is the
    single-state Ramsey model with capital diffusion and the adaptive-belief
    experiment with σ = 0.5 true and 0.02 initially believed.

    Examples:
        Minimal usage::

            config = Config()

        Two-state RBC model from the bundled preset::

            config = Config.from_preset("rbc_diffusion")

        Override specific parameters::

            config = config.override({"grid.capital_points": 200, "belief.horizon": 500})
    """

    variant: Literal["ramsey", "rbc"] = Field(
        default="ramsey", description="Single-state Ramsey or two-state RBC model"
    )
    parameters: ModelParameters = Field(default_factory=ModelParameters)
    process: ExogenousProcessConfig = Field(default_factory=ExogenousProcessConfig)
    grid: GridConfig = Field(default_factory=GridConfig)
    solver: SolverConfig = Field(default_factory=SolverConfig)
    belief: BeliefConfig = Field(default_factory=BeliefConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> "Config":
        """Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file.

        Returns:
            Config object with validated parameters.

        Raises:
            FileNotFoundError: If config file doesn't exist.
            ValidationError: If configuration is invalid.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        # Remove private anchors if present
        data = {k: v for k, v in data.items() if not k.startswith("_")}

        return cls(**data)

    @classmethod
    def from_preset(cls, name: str) -> "Config":
        """Load one of the bundled presets (``ramsey_diffusion``, ``rbc_diffusion``).

        Raises:
            ValueError: If no preset of that name is bundled.
        """
        path = PRESET_DIR / f"{name}.yaml"
        if not path.exists():
            available = ", ".join(sorted(p.stem for p in PRESET_DIR.glob("*.yaml")))
            raise ValueError(f"Unknown preset '{name}'. Available presets: {available}")
        return cls.from_yaml(path)

    @classmethod
    def from_dict(cls, data: dict, base_config: Optional["Config"] = None) -> "Config":
        """Create config from dictionary, optionally overriding base config.

        Args:
            data: Dictionary with configuration parameters.
            base_config: Optional base configuration to override.

        Returns:
            Config object with validated parameters.
        """
        if base_config is None:
            return cls(**data)

        config_dict = base_config.model_dump()
        merged = deep_merge(config_dict, data)
        return cls(**merged)

    def to_yaml(self, path: Path) -> None:
        """Save configuration to YAML file.

        Args:
            path: Path where to save the configuration
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(self.model_dump(), f, default_flow_style=False, sort_keys=False)

    def override(self, overrides: Dict[str, Any]) -> "Config":
        """Create a new config with overridden parameters.

        Args:
            overrides: Dictionary mapping dot-notation paths to values.
                Example: ``{"parameters.volatility": 0.3}``

        Returns:
            New Config object with overrides applied.

        Raises:
            ValueError: If a path references an unknown config section or field.
        """
        override_dict: Dict[str, Any] = {}
        for key, value in overrides.items():
            if "." in key:
                parts = key.split(".")
                self._validate_override_path(key, parts)
                current = override_dict
                for part in parts[:-1]:
                    current = current.setdefault(part, {})
                current[parts[-1]] = value
            else:
                if key not in type(self).model_fields:
                    valid = ", ".join(sorted(type(self).model_fields.keys()))
                    raise ValueError(
                        f"Invalid config path '{key}': not a valid config section. "
                        f"Valid sections: {valid}"
                    )
                override_dict[key] = value

        return Config.from_dict(override_dict, base_config=self)

    def _validate_override_path(self, key: str, parts: list) -> None:
        section_name = parts[0]
        if section_name not in type(self).model_fields:
            valid = ", ".join(sorted(type(self).model_fields.keys()))
            raise ValueError(
                f"Invalid config path '{key}': unknown section '{section_name}'. "
                f"Valid sections: {valid}"
            )
        section = getattr(self, section_name)
        if isinstance(section, BaseModel) and parts[1] not in type(section).model_fields:
            valid = ", ".join(sorted(type(section).model_fields.keys()))
            raise ValueError(
                f"Invalid config path '{key}': unknown field '{parts[1]}' "
                f"in section '{section_name}'. Valid fields: {valid}"
            )

    def validate_solvability(self) -> None:
        """Check that the configured models can actually be solved.

        Builds the true model and the initially-believed model and checks
        that drift-free consumption is positive at both capital boundaries
        (otherwise the boundary marginal values are undefined). Unusual but
        legal settings produce :class:`ConfigurationWarning`.

        Raises:
            ConfigurationError: If any critical issue is found.
        """
        from ..exceptions import DomainError, InvalidGridError
        from ..experiments import build_model

        issues = []
        for label, diffusion in (
            ("true", self.belief.true_sigma),
            ("initial belief", self.belief.initial_sigma),
        ):
            try:
                build_model(self, diffusion=diffusion).boundary_marginal_values()
            except (DomainError, InvalidGridError, ValueError) as exc:
                issues.append(f"{label} model (sigma={diffusion}): {exc}")

        if self.variant == "rbc" and (self.parameters.growth_rate or self.parameters.volatility):
            warnings.warn(
                f"growth_rate={self.parameters.growth_rate} and "
                f"volatility={self.parameters.volatility} are ignored by the rbc model",
                ConfigurationWarning,
                stacklevel=2,
            )
        if self.belief.learning_rate > 1:
            warnings.warn(
                f"learning_rate={self.belief.learning_rate} overshoots the true value on update",
                ConfigurationWarning,
                stacklevel=2,
            )
        if self.solver.relaxation_step < 1:
            warnings.warn(
                f"relaxation_step={self.solver.relaxation_step} is small; "
                "value iteration will need many more iterations",
                ConfigurationWarning,
                stacklevel=2,
            )

        if issues:
            raise ConfigurationError(issues)
        logger.debug("Configuration validated")

    def setup_logging(self) -> None:
        """Configure the ``growth_hjb`` logger based on settings."""
        if not self.logging.enabled:
            return

        import sys

        pkg_logger = logging.getLogger("growth_hjb")
        pkg_logger.setLevel(getattr(logging, self.logging.level))
        pkg_logger.handlers.clear()

        formatter = logging.Formatter(self.logging.format)

        if self.logging.console_output:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(formatter)
            pkg_logger.addHandler(console_handler)

        if self.logging.log_file:
            log_path = Path(self.logging.log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path)
            file_handler.setFormatter(formatter)
            pkg_logger.addHandler(file_handler)
