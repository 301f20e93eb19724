from __future__ import annotations

from pathlib import Path

import tomllib
from pydantic import BaseModel, ConfigDict, Field

CONFIG_FILENAME = "asserttrace.toml"


class DiagnosticConfig(BaseModel):
    """Presentation settings for assertion failure messages."""

    model_config = ConfigDict(extra="forbid")

    indent: int = Field(
        default=4,
        ge=0,
        description="Spaces used to indent source snippets in messages",
    )
    empty_placeholder: str = Field(
        default="<EMPTY>",
        description="Shown in place of an argument whose source was not found",
    )
    show_assignments: bool = Field(
        default=True,
        description="Include the statements that assigned referenced variables",
    )
    show_related: bool = Field(
        default=True,
        description="Include the values of tracked related variables",
    )
    value_width: int = Field(
        default=80,
        gt=0,
        description="Maximum line width when pretty-printing values",
    )


class ConfigError(Exception):
    """Raised when config file exists but cannot be parsed."""


def load_config(root: Path) -> DiagnosticConfig:
    """Load configuration from asserttrace.toml if it exists."""
    config_path = Path(root) / CONFIG_FILENAME

    if not config_path.is_file():
        return DiagnosticConfig()

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return DiagnosticConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e
