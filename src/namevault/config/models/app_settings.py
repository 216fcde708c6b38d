"""Logging configuration model."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class LoggingSettings(BaseModel):
    """Logging configuration.

    This class manages logging behavior including level, file output,
    and console output settings.
    """

    level: str = Field(default="INFO", description="Logging level")
    file: str | None = Field(default=None, description="JSON log file path")
    console_output: bool = Field(default=True, description="Enable console logging")
    use_rich_console: bool = Field(
        default=True,
        description="Rich console output instead of JSON lines",
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        """Accept standard logging level names only."""
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            msg = f"Invalid logging level: {value}"
            raise ValueError(msg)
        return level


__all__ = ["LoggingSettings"]
