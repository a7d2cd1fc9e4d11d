"""System clipboard access through platform helper commands.

Helpers are discovered with shutil.which in platform order and can be
overridden from config (``clipboard.copy_command`` / ``clipboard.paste_command``).
"""

from __future__ import annotations

import logging
import os
import platform
import shutil
import subprocess  # nosec B404 - subprocess needed for clipboard helpers

from promptgen.config.app import ClipboardSettings
from promptgen.errors import ClipboardUnavailableError

logger = logging.getLogger(__name__)

__all__ = ["Clipboard", "detect_copy_command", "detect_paste_command"]

# (copy argv, paste argv) candidates per platform, in preference order
_DARWIN_COMMANDS = [(["pbcopy"], ["pbpaste"])]
_WINDOWS_COMMANDS = [
    (["clip.exe"], ["powershell.exe", "-NoProfile", "-Command", "Get-Clipboard -Raw"]),
]
_WAYLAND_COMMANDS = [(["wl-copy"], ["wl-paste", "--no-newline"])]
_X11_COMMANDS = [
    (["xclip", "-selection", "clipboard"], ["xclip", "-selection", "clipboard", "-o"]),
    (["xsel", "--clipboard", "--input"], ["xsel", "--clipboard", "--output"]),
]


def _candidates() -> list[tuple[list[str], list[str]]]:
    system = platform.system()
    if system == "Darwin":
        return _DARWIN_COMMANDS
    if system == "Windows":
        return _WINDOWS_COMMANDS
    candidates: list[tuple[list[str], list[str]]] = []
    if os.environ.get("WAYLAND_DISPLAY"):
        candidates.extend(_WAYLAND_COMMANDS)
    candidates.extend(_X11_COMMANDS)
    # WSL exposes the Windows helpers on PATH
    candidates.extend(_WINDOWS_COMMANDS)
    return candidates


def detect_copy_command() -> list[str] | None:
    """Return the first available copy helper for this platform."""
    for copy_cmd, _ in _candidates():
        if shutil.which(copy_cmd[0]) is not None:
            return copy_cmd
    return None


def detect_paste_command() -> list[str] | None:
    """Return the first available paste helper for this platform."""
    for _, paste_cmd in _candidates():
        if shutil.which(paste_cmd[0]) is not None:
            return paste_cmd
    return None


class Clipboard:
    """Read and write the system clipboard.

    Both operations raise ClipboardUnavailableError when no helper is
    installed or the helper fails.
    """

    def __init__(self, settings: ClipboardSettings | None = None) -> None:
        self.settings = settings or ClipboardSettings()

    def _copy_command(self) -> list[str]:
        command = self.settings.copy_command or detect_copy_command()
        if not command:
            raise ClipboardUnavailableError(
                "No clipboard helper found (install xclip, xsel or wl-clipboard, "
                "or set clipboard.copy_command)"
            )
        return command

    def _paste_command(self) -> list[str]:
        command = self.settings.paste_command or detect_paste_command()
        if not command:
            raise ClipboardUnavailableError(
                "No clipboard helper found (install xclip, xsel or wl-clipboard, "
                "or set clipboard.paste_command)"
            )
        return command

    def _run(self, command: list[str], input_text: str | None = None) -> str:
        try:
            result = subprocess.run(  # nosec B603 - argv from config or fixed list
                command,
                input=input_text,
                capture_output=True,
                text=True,
                encoding="utf-8",
                timeout=self.settings.timeout,
                check=False,
            )
        except FileNotFoundError as e:
            raise ClipboardUnavailableError(f"Clipboard helper not found: {command[0]}") from e
        except subprocess.TimeoutExpired as e:
            raise ClipboardUnavailableError(
                f"Clipboard helper timed out after {self.settings.timeout}s: {command[0]}"
            ) from e
        except OSError as e:
            raise ClipboardUnavailableError(f"Failed to run clipboard helper: {e}") from e

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise ClipboardUnavailableError(
                f"Clipboard helper {command[0]} exited with {result.returncode}"
                + (f": {stderr}" if stderr else "")
            )
        return result.stdout or ""

    def read(self) -> str:
        """Return the clipboard contents."""
        command = self._paste_command()
        logger.debug(f"Reading clipboard with {command[0]}")
        text = self._run(command)
        # PowerShell appends a line break to Get-Clipboard output
        if command[0].lower().startswith("powershell") and text.endswith("\r\n"):
            text = text[:-2]
        return text

    def write(self, text: str) -> None:
        """Replace the clipboard contents with text."""
        command = self._copy_command()
        logger.debug(f"Writing {len(text)} chars to clipboard with {command[0]}")
        self._run(command, input_text=text)
