"""
Configuration management for promptgen.

Provides YAML-based configuration with CLI overrides,
configuration hierarchy (CLI > YAML > Defaults), and validation.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from promptgen.config.logging import LoggingSettings

DEFAULT_PLACEHOLDER = "<input>"


def get_promptgen_home() -> Path:
    """Get promptgen home directory, respecting PROMPTGEN_HOME env var.

    Returns:
        Path to promptgen home (~/.promptgen by default, or PROMPTGEN_HOME if set)
    """
    promptgen_home = os.environ.get("PROMPTGEN_HOME")
    if promptgen_home:
        return Path(promptgen_home).expanduser()
    return Path.home() / ".promptgen"


def default_config_path() -> Path:
    """Location of the config file when --config is not given."""
    return get_promptgen_home() / "config.yaml"


class ClipboardSettings(BaseModel):
    """Clipboard helper configuration."""

    copy_command: list[str] | None = Field(
        default=None,
        description="Command that reads stdin into the clipboard (auto-detected if unset)",
    )
    paste_command: list[str] | None = Field(
        default=None,
        description="Command that prints the clipboard to stdout (auto-detected if unset)",
    )
    timeout: float = Field(
        default=5.0,
        description="Seconds to wait for a clipboard helper before giving up",
    )

    @field_validator("copy_command", "paste_command")
    @classmethod
    def validate_command(cls, v: list[str] | None) -> list[str] | None:
        """Validate commands are non-empty argv lists."""
        if v is not None and (not v or not v[0].strip()):
            raise ValueError("Clipboard command must be a non-empty list of arguments")
        return v

    @field_validator("timeout")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        """Validate value is positive."""
        if v <= 0:
            raise ValueError("Value must be positive")
        return v


class PromptgenConfig(BaseModel):
    """
    Main configuration for promptgen.

    Configuration is loaded with the following priority:
    1. CLI arguments (highest)
    2. YAML file (~/.promptgen/config.yaml)
    3. Defaults (lowest)
    """

    templates_dir: str | None = Field(
        default=None,
        description="Directory holding template records (default: <home>/templates)",
    )
    history_file: str | None = Field(
        default=None,
        description="Generation history log (default: <templates_dir>/history.log)",
    )
    placeholder: str = Field(
        default=DEFAULT_PLACEHOLDER,
        description="Token in template content replaced by the generation input",
    )
    editor: str | None = Field(
        default=None,
        description="Editor command for interactive input (falls back to $VISUAL, $EDITOR, vim)",
    )
    reconcile_on_load: bool = Field(
        default=True,
        description="Repair a stale latest pointer from version records when loading",
    )

    clipboard: ClipboardSettings = Field(
        default_factory=ClipboardSettings,
        description="Clipboard helper configuration",
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration",
    )

    @field_validator("placeholder")
    @classmethod
    def validate_placeholder(cls, v: str) -> str:
        """Validate placeholder is a usable token."""
        if not v or not v.strip():
            raise ValueError("Placeholder must not be empty")
        if "\n" in v or "\r" in v:
            raise ValueError("Placeholder must fit on one line")
        return v

    def get_templates_dir(self) -> Path:
        """Resolve the templates directory."""
        if self.templates_dir:
            return Path(self.templates_dir).expanduser()
        return get_promptgen_home() / "templates"

    def get_history_file(self) -> Path:
        """Resolve the history log path."""
        if self.history_file:
            return Path(self.history_file).expanduser()
        return self.get_templates_dir() / "history.log"


CONFIG_SUFFIXES = (".yaml", ".yml", ".json")


def read_config_file(config_file: str | Path) -> dict[str, Any]:
    """
    Read a config file into a dictionary.

    JSON files are parsed by the YAML loader, since JSON is valid YAML.

    Args:
        config_file: Path to a .yaml, .yml or .json file

    Returns:
        Parsed mapping; empty for a missing or empty file

    Raises:
        ValueError: If the file type is unsupported, the file cannot be
            read or parsed, or it does not contain a mapping
    """
    path = Path(config_file).expanduser()
    if path.suffix.lower() not in CONFIG_SUFFIXES:
        raise ValueError(
            f"Config file must end in {', '.join(CONFIG_SUFFIXES)}, got '{path.suffix}': {path}"
        )

    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError as e:
        raise ValueError(f"Cannot read config file {path}: {e}") from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in config file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    return data


def apply_cli_overrides(
    config_dict: dict[str, Any],
    cli_overrides: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Merge command-line values into a config dictionary in place.

    Keys may name nested settings with dots (``"logging.level"``). Values of
    None mean the option was not given and leave the dictionary untouched.

    Returns:
        The updated config_dict
    """
    for key, value in (cli_overrides or {}).items():
        if value is None:
            continue
        *parents, leaf = key.split(".")
        target = config_dict
        for part in parents:
            child = target.get(part)
            if not isinstance(child, dict):
                child = target[part] = {}
            target = child
        target[leaf] = value
    return config_dict


def write_default_config(config_file: str | Path) -> Path:
    """
    Write the default settings as YAML, replacing any existing file.

    Settings that default to None (derived paths, auto-detected helpers)
    are omitted.

    Returns:
        The path written
    """
    path = Path(config_file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)

    defaults = PromptgenConfig().model_dump(mode="json", exclude_none=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write("# promptgen configuration\n")
        yaml.safe_dump(defaults, f, default_flow_style=False, sort_keys=False)
    return path


def load_config(
    config_file: str | Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> PromptgenConfig:
    """
    Load configuration with hierarchy: CLI > config file > defaults.

    Args:
        config_file: Config file path (default: <home>/config.yaml)
        cli_overrides: Values from command-line options, see apply_cli_overrides

    Returns:
        Validated PromptgenConfig instance

    Raises:
        ValueError: If the file cannot be parsed or the settings are invalid
    """
    path = Path(config_file).expanduser() if config_file else default_config_path()
    config_dict = apply_cli_overrides(read_config_file(path), cli_overrides)

    try:
        return PromptgenConfig.model_validate(config_dict)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration in {path}: {e}") from e
