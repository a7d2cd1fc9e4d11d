"""Input resolution for prompt generation.

The text substituted into a template comes from an ordered list of input
sources. Sources are tried in order until one produces text:

1. inline text given on the command line: used verbatim, nothing else runs
2. clipboard explicitly requested: the clipboard only
3. otherwise: the editor, then the clipboard as a fallback
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Protocol

from promptgen.errors import InputUnavailableError, PromptgenError

logger = logging.getLogger(__name__)


class ClipboardReader(Protocol):
    def read(self) -> str: ...


class TextEditor(Protocol):
    def edit(self, seed_text: str = "") -> str: ...


class InputSource(ABC):
    """One way of obtaining generation input."""

    label: str = "input"

    def __init__(self, allow_blank: bool = False) -> None:
        # Whitespace-only text counts as a failure unless allow_blank is set
        self.allow_blank = allow_blank

    @abstractmethod
    def read(self) -> str:
        """Return the input text or raise PromptgenError."""


class InlineSource(InputSource):
    label = "inline"

    def __init__(self, text: str) -> None:
        super().__init__(allow_blank=True)
        self.text = text

    def read(self) -> str:
        return self.text


class ClipboardSource(InputSource):
    label = "clipboard"

    def __init__(self, clipboard: ClipboardReader, allow_blank: bool = False) -> None:
        super().__init__(allow_blank=allow_blank)
        self.clipboard = clipboard

    def read(self) -> str:
        return self.clipboard.read()


class EditorSource(InputSource):
    label = "editor"

    def __init__(self, editor: TextEditor, seed_text: str = "") -> None:
        super().__init__()
        self.editor = editor
        self.seed_text = seed_text

    def read(self) -> str:
        return self.editor.edit(self.seed_text)


@dataclass(frozen=True)
class ResolvedInput:
    """Text chosen for substitution and where it came from."""

    text: str
    source: str
    fallback: bool = False

    def describe(self) -> str:
        """Human-readable source, e.g. "clipboard as fallback"."""
        return f"{self.source} as fallback" if self.fallback else self.source


def build_sources(
    inline_text: str | None,
    from_clipboard: bool,
    clipboard: ClipboardReader,
    editor: TextEditor,
) -> list[InputSource]:
    """Select the input sources for one generate invocation.

    Inline text wins over the clipboard flag, which wins over the
    editor-then-clipboard chain.
    """
    if inline_text is not None:
        return [InlineSource(inline_text)]
    if from_clipboard:
        return [ClipboardSource(clipboard, allow_blank=True)]
    return [EditorSource(editor), ClipboardSource(clipboard)]


def resolve_input(sources: list[InputSource]) -> ResolvedInput:
    """Try each source in order and return the first usable text.

    A single source propagates its own error (e.g. ClipboardUnavailableError
    for an explicit clipboard request). With several sources, a failure or
    whitespace-only result moves on to the next one.

    Raises:
        InputUnavailableError: If every source in a chain failed
    """
    if not sources:
        raise InputUnavailableError([])

    if len(sources) == 1:
        source = sources[0]
        text = source.read()
        if not source.allow_blank and not text.strip():
            raise InputUnavailableError([(source.label, "no text provided")])
        return ResolvedInput(text=text, source=source.label)

    failures: list[tuple[str, str]] = []
    for index, source in enumerate(sources):
        try:
            text = source.read()
        except PromptgenError as e:
            logger.debug(f"Input source {source.label} failed: {e}")
            failures.append((source.label, str(e)))
            continue

        if not source.allow_blank and not text.strip():
            logger.debug(f"Input source {source.label} returned no text")
            failures.append((source.label, "no text provided"))
            continue

        return ResolvedInput(text=text, source=source.label, fallback=index > 0)

    raise InputUnavailableError(failures)
