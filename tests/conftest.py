"""Pytest configuration and shared fixtures for promptgen tests."""

import logging
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from promptgen.cli.utils import CLIContext
from promptgen.config.app import PromptgenConfig
from promptgen.prompts.generator import PromptGenerator
from promptgen.prompts.manager import TemplateManager
from promptgen.prompts.renderer import PromptRenderer
from promptgen.storage.history import HistoryLog
from promptgen.storage.templates import LocalTemplateStore


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point PROMPTGEN_HOME at a temp dir so tests never touch ~/.promptgen."""
    home = tmp_path / "promptgen-home"
    monkeypatch.setenv("PROMPTGEN_HOME", str(home))
    yield home


@pytest.fixture
def templates_dir(tmp_path: Path) -> Path:
    """Templates directory that does not exist yet."""
    return tmp_path / "templates"


@pytest.fixture
def store(templates_dir: Path) -> LocalTemplateStore:
    """Create a template store in a temp directory."""
    return LocalTemplateStore(templates_dir)


@pytest.fixture
def manager(store: LocalTemplateStore) -> TemplateManager:
    """Create a template manager backed by the temp store."""
    return TemplateManager(store)


@pytest.fixture
def history_log(templates_dir: Path) -> HistoryLog:
    """Create a history log next to the templates."""
    return HistoryLog(templates_dir / "history.log")


@pytest.fixture
def mock_clipboard() -> MagicMock:
    """Clipboard double; read() returns 'clipboard text' by default."""
    clipboard = MagicMock()
    clipboard.read.return_value = "clipboard text"
    return clipboard


@pytest.fixture
def mock_editor() -> MagicMock:
    """Editor double; edit() returns 'editor text' by default."""
    editor = MagicMock()
    editor.edit.return_value = "editor text"
    return editor


@pytest.fixture
def generator(
    manager: TemplateManager,
    history_log: HistoryLog,
    mock_clipboard: MagicMock,
    mock_editor: MagicMock,
) -> PromptGenerator:
    """Prompt generator wired to the temp store and mocked devices."""
    return PromptGenerator(
        manager=manager,
        renderer=PromptRenderer(),
        history=history_log,
        clipboard=mock_clipboard,
        editor=mock_editor,
    )


@pytest.fixture(autouse=True)
def reset_promptgen_logging() -> Iterator[None]:
    """Drop handlers installed by setup_logging so they never outlive a test."""
    yield
    logger = logging.getLogger("promptgen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def app_config(templates_dir: Path) -> PromptgenConfig:
    """Config pointing at the temp templates directory."""
    return PromptgenConfig(templates_dir=str(templates_dir))


@pytest.fixture
def cli_context(
    app_config: PromptgenConfig, mock_clipboard: MagicMock, mock_editor: MagicMock
) -> CLIContext:
    """CLIContext over the temp store with mocked clipboard and editor."""
    context = CLIContext(config=app_config)
    # cached_property values can be preset through the instance dict
    context.__dict__["clipboard"] = mock_clipboard
    context.__dict__["editor"] = mock_editor
    return context
