"""File-backed template storage.

Each template lives in the templates directory as a set of JSON records:

- ``<name>.json``: the latest pointer, a copy of the newest version
- ``<name>_v<N>.json``: one immutable record per version

The latest pointer is a cache. Version records are the source of truth and
are written with exclusive-create semantics so they are never overwritten.
There is no locking: two processes updating the same template race on the
latest pointer (last writer wins).
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from promptgen.errors import (
    PartialDeletionWarning,
    StorageIOError,
    TemplateNotFoundError,
    VersionExistsError,
)
from promptgen.prompts.models import PromptTemplate, validate_template_name

logger = logging.getLogger(__name__)

RECORD_SUFFIX = ".json"
VERSION_FILE_PATTERN = re.compile(r"^(?P<name>.+)_v(?P<version>\d+)\.json$")


@dataclass
class DeleteResult:
    """Result from removing every record of a template."""

    name: str
    removed: list[Path] = field(default_factory=list)
    failed: list[tuple[Path, str]] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        return bool(self.failed)

    @property
    def warning(self) -> PartialDeletionWarning | None:
        """Warning describing records left behind, if any."""
        if not self.failed:
            return None
        return PartialDeletionWarning(self.name, self.failed)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "removed": [str(p) for p in self.removed],
            "failed": [{"path": str(p), "error": err} for p, err in self.failed],
        }


class LocalTemplateStore:
    """Persist templates and their versions as JSON files in one directory."""

    def __init__(self, templates_dir: Path) -> None:
        self.templates_dir = Path(templates_dir)

    # -- paths -------------------------------------------------------------
    # Every name is validated before it becomes part of a path, so no
    # record can resolve outside templates_dir.

    def latest_path(self, name: str) -> Path:
        """Path of the latest pointer.

        Raises:
            InvalidTemplateNameError: If name is not a valid storage key
        """
        return self.templates_dir / f"{validate_template_name(name)}{RECORD_SUFFIX}"

    def version_path(self, name: str, version: int) -> Path:
        """Path of one version record.

        Raises:
            InvalidTemplateNameError: If name is not a valid storage key
        """
        return self.templates_dir / f"{validate_template_name(name)}_v{version}{RECORD_SUFFIX}"

    def ensure_dir(self) -> None:
        """Create the templates directory if it does not exist yet."""
        try:
            self.templates_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageIOError(f"Cannot create templates directory: {e}", self.templates_dir) from e

    # -- low-level record I/O ----------------------------------------------

    def _read_record(self, path: Path, name: str, version: int | None = None) -> PromptTemplate:
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise TemplateNotFoundError(name, version) from e
        except OSError as e:
            raise StorageIOError(f"Cannot read template record: {e}", path) from e

        try:
            template = PromptTemplate.from_dict(json.loads(raw))
        except (json.JSONDecodeError, ValueError) as e:
            raise StorageIOError(f"Malformed template record: {e}", path) from e

        if version is not None and template.version != version:
            raise StorageIOError(
                f"Version record claims version {template.version}, expected {version}", path
            )
        return template

    @staticmethod
    def _serialize(template: PromptTemplate) -> str:
        return json.dumps(template.to_dict(), indent=2, ensure_ascii=False)

    def _write_atomic(self, path: Path, data: str) -> None:
        """Write data to path via a temp file and os.replace."""
        fd, temp_path = tempfile.mkstemp(dir=str(self.templates_dir), prefix=".", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, path)
        except Exception:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise

    # -- writes ------------------------------------------------------------

    def put_latest(self, template: PromptTemplate) -> None:
        """Write or overwrite the latest pointer for template.name."""
        self.ensure_dir()
        path = self.latest_path(template.name)
        try:
            self._write_atomic(path, self._serialize(template))
        except OSError as e:
            raise StorageIOError(f"Cannot write latest pointer: {e}", path) from e
        logger.debug(f"Wrote latest pointer for '{template.name}' (v{template.version})")

    def put_version(self, template: PromptTemplate) -> bool:
        """Write the immutable record for (template.name, template.version).

        Returns:
            True if the record was written, False if an identical record
            already existed

        Raises:
            VersionExistsError: If a different record holds this version
            StorageIOError: If the file cannot be written
        """
        self.ensure_dir()
        path = self.version_path(template.name, template.version)
        data = self._serialize(template)
        try:
            with open(path, "x", encoding="utf-8") as f:
                f.write(data)
        except FileExistsError:
            existing = self._read_record(path, template.name, template.version)
            if existing == template:
                logger.debug(f"Version {template.version} of '{template.name}' already stored")
                return False
            raise VersionExistsError(template.name, template.version) from None
        except OSError as e:
            raise StorageIOError(f"Cannot write version record: {e}", path) from e

        logger.debug(f"Wrote version {template.version} of '{template.name}'")
        return True

    # -- reads -------------------------------------------------------------

    def get_latest(self, name: str) -> PromptTemplate:
        """Load the latest pointer for name.

        Raises:
            TemplateNotFoundError: If no latest pointer exists
            StorageIOError: If the record cannot be read or parsed
        """
        return self._read_record(self.latest_path(name), name)

    def get_version(self, name: str, version: int) -> PromptTemplate:
        """Load one version record.

        Raises:
            TemplateNotFoundError: If the version does not exist
            StorageIOError: If the record cannot be read or parsed
        """
        return self._read_record(self.version_path(name, version), name, version)

    def has_latest(self, name: str) -> bool:
        return self.latest_path(name).is_file()

    def exists(self, name: str) -> bool:
        """True if any record (latest pointer or version) exists for name."""
        if self.has_latest(name):
            return True
        return next(self.list_versions(name), None) is not None

    def list_latest(self) -> Iterator[PromptTemplate]:
        """Yield every latest pointer in the store.

        Records that cannot be read or parsed are skipped.
        """
        if not self.templates_dir.is_dir():
            return

        for path in sorted(self.templates_dir.glob(f"*{RECORD_SUFFIX}")):
            if VERSION_FILE_PATTERN.match(path.name):
                continue
            try:
                yield self._read_record(path, path.stem)
            except (StorageIOError, TemplateNotFoundError) as e:
                logger.warning(f"Skipping unreadable template record: {e}")

    def list_versions(self, name: str) -> Iterator[int]:
        """Yield the version numbers stored for name, ascending.

        Raises:
            InvalidTemplateNameError: If name is not a valid storage key
        """
        name = validate_template_name(name)
        if not self.templates_dir.is_dir():
            return iter(())

        pattern = re.compile(rf"^{re.escape(name)}_v(\d+){re.escape(RECORD_SUFFIX)}$")
        versions: list[int] = []
        try:
            for entry in os.scandir(self.templates_dir):
                match = pattern.match(entry.name)
                if match and entry.is_file():
                    versions.append(int(match.group(1)))
        except OSError as e:
            raise StorageIOError(f"Cannot list versions: {e}", self.templates_dir) from e

        return iter(sorted(versions))

    # -- deletes -----------------------------------------------------------

    def record_paths(self, name: str) -> list[Path]:
        """All files belonging to name: the latest pointer plus each version."""
        paths = [self.version_path(name, v) for v in self.list_versions(name)]
        if self.has_latest(name):
            paths.insert(0, self.latest_path(name))
        return paths

    def delete_all(self, name: str) -> DeleteResult:
        """Remove the latest pointer and every version record of name.

        Removal is not transactional: files that cannot be removed are
        reported in the result and the rest stay deleted.

        Raises:
            TemplateNotFoundError: If name has no records
        """
        paths = self.record_paths(name)
        if not paths:
            raise TemplateNotFoundError(name)

        result = DeleteResult(name=name)
        for path in paths:
            try:
                path.unlink()
                result.removed.append(path)
            except FileNotFoundError:
                # Already gone
                result.removed.append(path)
            except OSError as e:
                logger.warning(f"Failed to delete {path}: {e}")
                result.failed.append((path, str(e)))

        return result
