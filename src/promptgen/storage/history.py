"""Append-only log of prompt generations.

One JSON object per line: ``{"timestamp": ..., "name": ..., "version": ...}``.
Entries are only ever appended; file order is chronological order.
"""

from __future__ import annotations

import json
import logging
from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from promptgen.errors import StorageIOError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryEntry:
    """A single generation event."""

    name: str
    version: int
    timestamp: datetime

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HistoryEntry:
        name = data["name"]
        version = data["version"]
        if not isinstance(name, str) or not isinstance(version, int):
            raise ValueError("Invalid history entry fields")
        return cls(
            name=name,
            version=version,
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "name": self.name,
            "version": self.version,
        }


class HistoryLog:
    """Read and append generation history entries."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def append(self, name: str, version: int, timestamp: datetime | None = None) -> HistoryEntry:
        """Record that version of template name was used to generate a prompt.

        Raises:
            StorageIOError: If the log cannot be written
        """
        entry = HistoryEntry(
            name=name,
            version=version,
            timestamp=timestamp or datetime.now(UTC),
        )
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry.to_dict()) + "\n")
        except OSError as e:
            raise StorageIOError(f"Cannot append to history log: {e}", self.path) from e

        logger.debug(f"Recorded generation of '{name}' v{version}")
        return entry

    def entries(self) -> Iterator[HistoryEntry]:
        """Yield entries in append order, skipping malformed lines."""
        if not self.path.exists():
            return

        try:
            with open(self.path, encoding="utf-8") as f:
                for lineno, line in enumerate(f, start=1):
                    if not line.strip():
                        continue
                    try:
                        yield HistoryEntry.from_dict(json.loads(line))
                    except (json.JSONDecodeError, KeyError, TypeError, ValueError):
                        logger.debug(f"Skipping malformed history line {lineno}: {line[:50]}")
        except OSError as e:
            raise StorageIOError(f"Cannot read history log: {e}", self.path) from e

    def read(self, limit: int | None = None, name: str | None = None) -> list[HistoryEntry]:
        """Return entries oldest first, optionally filtered to one template.

        Args:
            limit: Keep only the most recent N matching entries
            name: Only include entries for this template
        """
        matching = (e for e in self.entries() if name is None or e.name == name)
        if limit is None:
            return list(matching)
        if limit <= 0:
            return []
        return list(deque(matching, maxlen=limit))
