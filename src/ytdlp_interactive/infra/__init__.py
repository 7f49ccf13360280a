"""Infrastructure layer: external system integration.

This layer wraps all interaction with the filesystem, the yt-dlp and
ffmpeg binaries, and the network.  Every raw OS, subprocess, JSON or
HTTP exception is caught here and re-raised as a
:class:`~ytdlp_interactive.exceptions.YtdlpInteractiveError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
"""

from ytdlp_interactive.infra.app_paths import AppPaths
from ytdlp_interactive.infra.metadata_cache import CachedVideo, MetadataCache
from ytdlp_interactive.infra.process_runner import ProcessRunner
from ytdlp_interactive.infra.settings_store import SettingsStore, ToolInventory
from ytdlp_interactive.infra.tool_detector import ToolStatus, detect_tool, require_tool

__all__: list[str] = [
    "AppPaths",
    "CachedVideo",
    "MetadataCache",
    "ProcessRunner",
    "SettingsStore",
    "ToolInventory",
    "ToolStatus",
    "detect_tool",
    "require_tool",
]
