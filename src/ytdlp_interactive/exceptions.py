"""Custom exception hierarchy for ytdlp-interactive.

All exceptions that cross layer boundaries must inherit from
:class:`YtdlpInteractiveError`.  Raw OS, subprocess, JSON and HTTP
exceptions must NEVER propagate beyond the infrastructure layer; they
are caught there and re-raised as a typed subclass defined here.

Hierarchy
---------
YtdlpInteractiveError
├── PrerequisiteMissingError
├── ConnectivityError
├── ParseError
│   ├── SettingsParseError
│   └── MetadataCacheParseError
├── SettingsWriteError
├── ArtifactFetchError
├── ExternalToolError
├── CycleStateError
└── UserCancelledError
"""

from __future__ import annotations


class YtdlpInteractiveError(Exception):
    """Base exception for all ytdlp-interactive errors.

    Every user-visible error condition maps to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Environment -----------------------------------------------------------

class PrerequisiteMissingError(YtdlpInteractiveError):
    """Raised when yt-dlp or ffmpeg cannot be located at first run."""


class ConnectivityError(YtdlpInteractiveError):
    """Raised when the host has no network reachability."""


# --- Persisted documents ---------------------------------------------------

class ParseError(YtdlpInteractiveError):
    """Raised when a persisted JSON document is not valid JSON."""

    def __init__(self, message: str, *, path: str, hint: str | None = None) -> None:
        super().__init__(message, hint=hint)
        self.path: str = path


class SettingsParseError(ParseError):
    """Raised when ``settings.json`` cannot be parsed."""


class MetadataCacheParseError(ParseError):
    """Raised when a cached ``<video_id>.info.json`` cannot be parsed."""


class SettingsWriteError(YtdlpInteractiveError):
    """Raised when the settings document or a cache artifact cannot be written."""


class ArtifactFetchError(YtdlpInteractiveError):
    """Raised when a remote artifact (thumbnail, release page) cannot be fetched."""


# --- External tools --------------------------------------------------------

class ExternalToolError(YtdlpInteractiveError):
    """Raised when an external binary exits with a non-zero status."""

    def __init__(
        self,
        message: str,
        *,
        returncode: int | None = None,
        stderr: str = "",
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.returncode: int | None = returncode
        self.stderr: str = stderr


# --- Validation / flow -----------------------------------------------------

class CycleStateError(YtdlpInteractiveError):
    """Raised when a download-cycle transition is attempted out of order."""


class UserCancelledError(YtdlpInteractiveError):
    """Raised when the user cancels a prompt or declines to proceed."""


def append_ytdlp_upgrade_suggestion(hint: str) -> str:
    """Append yt-dlp upgrade guidance to an existing hint text.

    The suggestion is appended only once and preserves the original
    hint content verbatim.
    """
    marker = "Also try updating yt-dlp:"
    if marker in hint:
        return hint
    return "\n".join(
        (
            hint,
            marker,
            "    yt-dlp -U",
        )
    )
