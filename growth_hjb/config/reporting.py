"""Settings for the ``growth_hjb`` logger."""

from typing import Literal, Optional

from pydantic import BaseModel, Field


class LoggingConfig(BaseModel):
    """How :meth:`Config.setup_logging` wires the ``growth_hjb`` logger.

    Solver iterations log at DEBUG, so ``INFO`` keeps a long belief run to a
    few lines per period.
    """

    enabled: bool = Field(default=True, description="Attach handlers to the growth_hjb logger")
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Level of the growth_hjb logger"
    )
    log_file: Optional[str] = Field(
        default=None, description="File receiving a copy of the run log"
    )
    console_output: bool = Field(default=True, description="Echo the run log to stdout")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Format string shared by all handlers",
    )
