"""Runtime configuration of the calculator shell."""
import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator



class CalculatorConfig(BaseModel):
    """Settings shared by the interactive, single-shot and batch modes."""

    # Make the Pydantic instance immutable (read-only) once the shell is running
    model_config = ConfigDict(frozen=True)

    prompt: str = Field(default="> ", description="Prompt shown by the interactive loop")
    quit_command: str = Field(default="quit", min_length=1, description="Sentinel that ends the interactive loop")
    lenient_underflow: Optional[bool] = Field(default=None, description="Substitute identity values for missing operands, None for the module default")
    show_postfix: bool = Field(default=False, description="Print the postfix sequence before the result")
    log_level: str = Field(default="WARNING", description="Level of the package logger")

    @field_validator("log_level")
    def log_level_must_be_known(cls, v: str) -> str:
        """Ensure the log level is a standard logging level name."""
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level
