"""Exception types for promptgen.

Every error raised by the storage, version-chain and generation layers
derives from PromptgenError so the CLI can report them uniformly.
"""

from __future__ import annotations

from pathlib import Path


class PromptgenError(Exception):
    """Base exception for promptgen errors."""

    pass


class InvalidTemplateNameError(PromptgenError, ValueError):
    """Raised when a template name cannot be used as a storage key."""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid template name '{name}': {reason}")


class TemplateNotFoundError(PromptgenError, LookupError):
    """Raised when a template, or one version of it, does not exist."""

    def __init__(self, name: str, version: int | None = None):
        self.name = name
        self.version = version
        if version is None:
            message = f"Template not found: {name}"
        else:
            message = f"Version {version} of template '{name}' not found"
        super().__init__(message)


class TemplateExistsError(PromptgenError):
    """Raised when creating a template whose name is already taken."""

    def __init__(self, name: str, message: str | None = None):
        self.name = name
        super().__init__(
            message or f"Template '{name}' already exists. Use the update command to modify it."
        )


class VersionExistsError(TemplateExistsError):
    """Raised when a version record would overwrite a different one."""

    def __init__(self, name: str, version: int):
        self.version = version
        super().__init__(
            name, f"Version {version} of template '{name}' already exists with different content"
        )


class TemplateSyntaxError(PromptgenError):
    """Raised when template content contains syntax other than the placeholder."""

    def __init__(self, name: str | None, message: str, lineno: int | None = None):
        self.name = name
        self.lineno = lineno
        where = f"template '{name}'" if name else "template"
        if lineno is not None:
            where = f"{where}, line {lineno}"
        super().__init__(f"Syntax error in {where}: {message}")


class ClipboardUnavailableError(PromptgenError):
    """Raised when the system clipboard cannot be read or written."""

    pass


class EditorError(PromptgenError):
    """Raised when the external editor fails to run."""

    pass


class InputUnavailableError(PromptgenError):
    """Raised when every input source failed to produce text."""

    def __init__(self, failures: list[tuple[str, str]]):
        self.failures = failures
        details = "; ".join(f"{source}: {reason}" for source, reason in failures)
        super().__init__(f"No input available ({details})")


class StorageIOError(PromptgenError):
    """Raised when a template or history record cannot be read or written."""

    def __init__(self, message: str, path: Path | None = None):
        self.path = path
        if path is not None:
            message = f"{message} ({path})"
        super().__init__(message)


class PartialDeletionWarning(UserWarning):
    """Some records of a template could not be removed during delete."""

    def __init__(self, name: str, failed: list[tuple[Path, str]]):
        self.name = name
        self.failed = failed
        files = ", ".join(f"{path.name} ({reason})" for path, reason in failed)
        super().__init__(f"Template '{name}' was only partially deleted; could not remove: {files}")
