"""
Configuration package for promptgen.

Re-exports the config models and loaders so callers can use
``from promptgen.config import PromptgenConfig, load_config``.
"""

from promptgen.config.app import (
    DEFAULT_PLACEHOLDER,
    ClipboardSettings,
    PromptgenConfig,
    apply_cli_overrides,
    default_config_path,
    get_promptgen_home,
    load_config,
    read_config_file,
    write_default_config,
)
from promptgen.config.logging import LoggingSettings

__all__ = [
    "DEFAULT_PLACEHOLDER",
    "ClipboardSettings",
    "LoggingSettings",
    "PromptgenConfig",
    "apply_cli_overrides",
    "default_config_path",
    "get_promptgen_home",
    "load_config",
    "read_config_file",
    "write_default_config",
]
