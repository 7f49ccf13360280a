"""Pure grouping of cached yt-dlp formats into menu entries.

Pipeline (enforced by :func:`group_format_options`):

1. **Filter**: drop storyboard (thumbnail strip) formats.
2. **Convert**: raw format dicts → :class:`FormatOption`.
3. **Split**: audio-only vs. everything else, original order kept.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from ytdlp_interactive.core.models import AUDIO_MEDIA, VIDEO_MEDIA, FormatOption

_DESCRIPTION_FIELDS: tuple[tuple[str, str], ...] = (
    ("Language", "language"),
    ("Resolution", "resolution"),
    ("Video Ext", "video_ext"),
    ("Audio Ext", "audio_ext"),
    ("Vcodec", "vcodec"),
    ("Acodec", "acodec"),
    ("VBR", "vbr"),
    ("ABR", "abr"),
)


@dataclass(frozen=True, slots=True)
class GroupedFormats:
    all: tuple[FormatOption, ...]
    audio: tuple[FormatOption, ...]
    video: tuple[FormatOption, ...]

    def find(self, format_id: str) -> FormatOption | None:
        return next((opt for opt in self.all if opt.format_id == format_id), None)


def is_storyboard(raw: dict[str, Any]) -> bool:
    return raw.get("format_note") == "storyboard"


def is_audio_only(raw: dict[str, Any]) -> bool:
    """yt-dlp names audio streams ``"<id> - audio only (...)"``."""
    if "audio" in str(raw.get("format", "")):
        return True
    return raw.get("vcodec") == "none" and raw.get("acodec") not in (None, "none")


def describe_format(raw: dict[str, Any]) -> str:
    """One-line technical summary; missing values render as ``N/A``."""
    return " | ".join(
        f"{title} : {raw.get(key) or 'N/A'}" for title, key in _DESCRIPTION_FIELDS
    )


def format_label(raw: dict[str, Any]) -> str:
    """Short filename-safe label: ``format_note``, else resolution, else id."""
    for key in ("format_note", "resolution", "format_id"):
        value = raw.get(key)
        if value:
            return str(value).replace(" ", "_")
    return "unknown"


def to_format_option(raw: dict[str, Any]) -> FormatOption:
    format_id = str(raw.get("format_id", ""))
    return FormatOption(
        format_id=format_id,
        name=str(raw.get("format") or format_id),
        label=format_label(raw),
        description=describe_format(raw),
        media=AUDIO_MEDIA if is_audio_only(raw) else VIDEO_MEDIA,
    )


def group_format_options(formats: Sequence[dict[str, Any]]) -> GroupedFormats:
    """Run the filter → convert → split pipeline."""
    options = tuple(to_format_option(raw) for raw in formats if not is_storyboard(raw))
    return GroupedFormats(
        all=options,
        audio=tuple(opt for opt in options if opt.media == AUDIO_MEDIA),
        video=tuple(opt for opt in options if opt.media != AUDIO_MEDIA),
    )
