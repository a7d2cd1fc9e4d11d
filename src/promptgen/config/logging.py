"""
Logging configuration module.

Contains logging-related Pydantic config models:
- LoggingSettings: Log level and output format for CLI diagnostics
"""

from typing import Literal

from pydantic import BaseModel, Field

__all__ = ["LoggingSettings"]


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: Literal["debug", "info", "warning", "error"] = Field(
        default="warning",
        description="Log level",
    )
    format: Literal["text", "json"] = Field(
        default="text",
        description="Log format (text or json)",
    )
