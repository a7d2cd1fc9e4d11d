"""Template data models."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from promptgen.errors import InvalidTemplateNameError

# Version records are stored as "<name>_v<N>", so a name may not end that way.
_VERSION_SUFFIX = re.compile(r"_v\d+$")


def validate_template_name(name: str) -> str:
    """Check that a name can be used as a storage key.

    Args:
        name: Proposed template name

    Returns:
        The name with surrounding whitespace removed

    Raises:
        InvalidTemplateNameError: If the name is empty or would collide with
            file layout conventions
    """
    stripped = name.strip() if name else ""
    if not stripped:
        raise InvalidTemplateNameError(name, "name cannot be empty")
    if "/" in stripped or "\\" in stripped:
        raise InvalidTemplateNameError(name, "name cannot contain path separators")
    if stripped.startswith("."):
        raise InvalidTemplateNameError(name, "name cannot start with '.'")
    if _VERSION_SUFFIX.search(stripped):
        raise InvalidTemplateNameError(name, "name cannot end with a version suffix like '_v2'")
    return stripped


@dataclass(frozen=True)
class PromptTemplate:
    """One version of a named template.

    Instances are immutable; an update produces a new PromptTemplate with
    the next version number rather than modifying the current one.
    """

    name: str
    version: int
    content: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PromptTemplate:
        """Build a template from its stored JSON form.

        Raises:
            ValueError: If required fields are missing or have the wrong type
        """
        if not isinstance(data, dict):
            raise ValueError(f"Expected an object, got {type(data).__name__}")

        name = data.get("name")
        version = data.get("version")
        content = data.get("template", "")

        if not isinstance(name, str) or not name:
            raise ValueError("Missing or invalid 'name'")
        # bool is an int subclass; reject it explicitly
        if isinstance(version, bool) or not isinstance(version, int) or version < 1:
            raise ValueError(f"Invalid 'version': {version!r}")
        if not isinstance(content, str):
            raise ValueError("Invalid 'template' content")

        return cls(name=name, version=version, content=content)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the stored JSON form."""
        return {
            "name": self.name,
            "version": self.version,
            "template": self.content,
        }

    def next_version(self, content: str) -> PromptTemplate:
        """Return the version that follows this one with new content."""
        return PromptTemplate(name=self.name, version=self.version + 1, content=content)


@dataclass(frozen=True)
class TemplateSummary:
    """Name and current version of a stored template."""

    name: str
    version: int

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "version": self.version}
