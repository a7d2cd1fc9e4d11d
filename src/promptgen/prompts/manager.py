"""Version chain management for stored templates.

TemplateManager enforces the create/update/delete contract on top of
LocalTemplateStore:

- create writes version 1, then the latest pointer
- update writes latest.version + 1, then the latest pointer
- delete removes every record of a template

Version records are written before the latest pointer. If the pointer write
fails the version record is still durable, so the failure is logged and the
operation succeeds; reconcile() (run on load by default) repairs the pointer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal

from promptgen.errors import StorageIOError, TemplateExistsError, TemplateNotFoundError
from promptgen.prompts.models import PromptTemplate, TemplateSummary, validate_template_name
from promptgen.storage.templates import DeleteResult, LocalTemplateStore

logger = logging.getLogger(__name__)

ReconcileAction = Literal["ok", "rebuilt_latest", "restored_version"]


@dataclass
class ReconcileResult:
    """Outcome of checking a latest pointer against the version records."""

    name: str
    action: ReconcileAction
    version: int
    previous_version: int | None = None

    @property
    def repaired(self) -> bool:
        return self.action != "ok"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "action": self.action,
            "repaired": self.repaired,
            "version": self.version,
            "previous_version": self.previous_version,
        }


class TemplateManager:
    """Create, update, delete and look up versioned templates."""

    def __init__(self, store: LocalTemplateStore, reconcile_on_load: bool = True) -> None:
        self.store = store
        self.reconcile_on_load = reconcile_on_load

    def _write_latest(self, template: PromptTemplate) -> bool:
        try:
            self.store.put_latest(template)
            return True
        except StorageIOError as e:
            logger.warning(
                f"Saved version {template.version} of '{template.name}' but failed to "
                f"update the latest pointer: {e}"
            )
            return False

    def create(self, name: str, content: str) -> PromptTemplate:
        """Store a new template as version 1.

        Raises:
            InvalidTemplateNameError: If name is not a valid storage key
            TemplateExistsError: If a template with this name exists
            StorageIOError: If the version record cannot be written
        """
        name = validate_template_name(name)
        if self.store.exists(name):
            raise TemplateExistsError(name)

        template = PromptTemplate(name=name, version=1, content=content)
        self.store.put_version(template)
        self._write_latest(template)
        logger.info(f"Created template '{name}'")
        return template

    def update(self, name: str, content: str) -> PromptTemplate:
        """Append a new version of an existing template.

        Raises:
            TemplateNotFoundError: If the template does not exist
            VersionExistsError: If the next version number is already taken
            StorageIOError: If the version record cannot be written
        """
        current = self.get_latest(name)
        template = current.next_version(content)
        self.store.put_version(template)
        self._write_latest(template)
        logger.info(f"Updated template '{name}' to version {template.version}")
        return template

    def delete(self, name: str) -> DeleteResult:
        """Remove every record of a template.

        Partial failures are reported through DeleteResult.warning; records
        already removed stay removed.

        Raises:
            TemplateNotFoundError: If the template has no records
        """
        result = self.store.delete_all(name)
        warning = result.warning
        if warning is not None:
            logger.warning(str(warning))
        else:
            logger.info(f"Deleted template '{name}' ({len(result.removed)} records)")
        return result

    def exists(self, name: str) -> bool:
        return self.store.exists(name)

    def get_latest(self, name: str) -> PromptTemplate:
        """Load the newest version of a template.

        With reconcile_on_load, a missing or stale latest pointer is repaired
        from the version records first.

        Raises:
            TemplateNotFoundError: If the template does not exist
        """
        name = validate_template_name(name)
        if self.reconcile_on_load:
            try:
                self.reconcile(name)
            except StorageIOError as e:
                logger.warning(f"Could not reconcile template '{name}': {e}")
        return self.store.get_latest(name)

    def get_version(self, name: str, version: int) -> PromptTemplate:
        """Load a specific version of a template.

        Raises:
            TemplateNotFoundError: If that version does not exist
        """
        return self.store.get_version(name, version)

    def list_all(self) -> list[TemplateSummary]:
        """One summary per stored template, sorted by name."""
        summaries = [
            TemplateSummary(name=t.name, version=t.version) for t in self.store.list_latest()
        ]
        return sorted(summaries, key=lambda s: s.name)

    def list_versions(self, name: str) -> list[int]:
        """Version numbers stored for name; empty if the template is unknown."""
        return list(self.store.list_versions(name))

    def reconcile(self, name: str) -> ReconcileResult:
        """Bring the latest pointer back in line with the version records.

        - pointer missing, older than, or different from the newest version
          record: rebuild the pointer from that record
        - pointer newer than every version record: restore the missing version
          record from the pointer

        An unreadable or malformed pointer is treated as missing when version
        records exist.

        Raises:
            InvalidTemplateNameError: If name is not a valid storage key
            TemplateNotFoundError: If neither a pointer nor versions exist
            StorageIOError: If records cannot be read or written
        """
        name = validate_template_name(name)
        versions = self.list_versions(name)
        try:
            latest: PromptTemplate | None = self.store.get_latest(name)
        except TemplateNotFoundError:
            latest = None
        except StorageIOError as e:
            if not versions:
                raise
            logger.warning(f"Ignoring unreadable latest pointer for '{name}': {e}")
            latest = None

        if latest is not None and latest.name != name:
            raise StorageIOError(
                f"Latest pointer names template '{latest.name}'", self.store.latest_path(name)
            )

        newest = versions[-1] if versions else None
        if latest is None and newest is None:
            raise TemplateNotFoundError(name)

        if latest is not None and (newest is None or latest.version > newest):
            self.store.put_version(latest)
            logger.warning(
                f"Restored missing version {latest.version} of '{name}' from the latest pointer"
            )
            return ReconcileResult(
                name=name,
                action="restored_version",
                version=latest.version,
                previous_version=newest,
            )

        record = self.store.get_version(name, newest)
        if latest == record:
            return ReconcileResult(name=name, action="ok", version=newest)

        self.store.put_latest(record)
        if latest is None:
            logger.warning(f"Rebuilt missing latest pointer for '{name}' from version {newest}")
        else:
            logger.warning(
                f"Rebuilt latest pointer for '{name}' from version {newest} "
                f"(pointer was at version {latest.version})"
            )
        return ReconcileResult(
            name=name,
            action="rebuilt_latest",
            version=newest,
            previous_version=latest.version if latest else None,
        )
