"""Persistence for templates and generation history."""

from promptgen.storage.history import HistoryEntry, HistoryLog
from promptgen.storage.templates import DeleteResult, LocalTemplateStore

__all__ = ["DeleteResult", "HistoryEntry", "HistoryLog", "LocalTemplateStore"]
