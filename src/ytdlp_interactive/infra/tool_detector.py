"""Locate the yt-dlp and ffmpeg binaries and suggest how to install them.

Lookup is :func:`shutil.which` only: nothing is executed, installed or
added to ``PATH`` here, and nothing is printed.
"""

from __future__ import annotations

import logging
import platform
import shutil
from dataclasses import dataclass
from pathlib import Path

from ytdlp_interactive.exceptions import PrerequisiteMissingError

logger = logging.getLogger(__name__)

YTDLP: str = "yt-dlp"
FFMPEG: str = "ffmpeg"

_INSTALL_COMMANDS: dict[tuple[str, str], tuple[str, ...]] = {
    (YTDLP, "windows"): ("winget install yt-dlp.yt-dlp", "pip install yt-dlp"),
    (YTDLP, "darwin"): ("brew install yt-dlp", "pip install yt-dlp"),
    (YTDLP, "linux"): ("pip install yt-dlp",),
    (FFMPEG, "windows"): ("winget install Gyan.FFmpeg", "choco install ffmpeg"),
    (FFMPEG, "darwin"): ("brew install ffmpeg",),
    (FFMPEG, "linux"): (
        "sudo apt install ffmpeg",
        "sudo dnf install ffmpeg",
        "sudo pacman -S ffmpeg",
    ),
}

_FALLBACK_COMMANDS: dict[str, tuple[str, ...]] = {
    YTDLP: ("pip install yt-dlp",),
    FFMPEG: ("Please install ffmpeg from https://ffmpeg.org/download.html",),
}


@dataclass(frozen=True, slots=True)
class ToolStatus:
    """Outcome of looking up one binary.

    ``install_commands`` is empty when the binary was found.
    """

    name: str
    found: bool
    path: Path | None
    install_commands: tuple[str, ...]


def platform_install_commands(name: str) -> tuple[str, ...]:
    """Suggested install commands for *name* on this operating system."""
    system = platform.system().lower()
    return _INSTALL_COMMANDS.get((name, system), _FALLBACK_COMMANDS.get(name, ()))


def detect_tool(name: str) -> ToolStatus:
    """Look *name* up on ``PATH``; a missing binary is not an error here."""
    located = shutil.which(name)
    if located is None:
        logger.debug("%s not found on PATH", name)
        return ToolStatus(name, False, None, platform_install_commands(name))

    path = Path(located).resolve()
    logger.debug("%s found at %s", name, path)
    return ToolStatus(name, True, path, ())


def require_tool(name: str) -> Path:
    """Return the resolved path of *name*.

    Raises
    ------
    PrerequisiteMissingError
        If *name* is not on ``PATH``; the hint lists install commands.
    """
    status = detect_tool(name)
    if status.found and status.path is not None:
        return status.path

    hint = None
    if status.install_commands:
        hint = "\n".join(
            [f"Install {name} using one of:", *(f"  {cmd}" for cmd in status.install_commands)]
        )
    raise PrerequisiteMissingError(f"{name} is not installed or not on PATH.", hint=hint)
