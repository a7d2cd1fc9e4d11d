"""Adapters for the system clipboard and external editor."""

from promptgen.integrations.clipboard import Clipboard
from promptgen.integrations.editor import Editor, resolve_editor

__all__ = ["Clipboard", "Editor", "resolve_editor"]
