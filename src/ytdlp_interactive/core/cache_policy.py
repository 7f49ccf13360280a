"""Pure rules for the per-video metadata cache.

* Filename sanitisation for derived artifacts.
* Expiry extraction from a signed manifest URL.
* Freshness check.

No I/O here; :mod:`ytdlp_interactive.infra.metadata_cache` applies
these rules to files on disk.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import datetime
from typing import Any
from urllib.parse import parse_qs, urlsplit

SANITIZE_PATTERN: re.Pattern[str] = re.compile(r'[/\\?%*:|"<>]')
SANITIZED_MAX_LENGTH: int = 50

INFO_JSON_SUFFIX: str = ".info.json"
THUMBNAIL_SUFFIX: str = ".thumbnail.jpg"
DESCRIPTION_SUFFIX: str = ".description.txt"


def sanitize_filename(title: str) -> str:
    """Replace each of ``/ \\ ? % * : | " < >`` with ``_`` and cut to 50 chars."""
    return SANITIZE_PATTERN.sub("_", title)[:SANITIZED_MAX_LENGTH]


def info_json_filename(video_id: str) -> str:
    return f"{video_id}{INFO_JSON_SUFFIX}"


def thumbnail_filename(title: str) -> str:
    return f"{sanitize_filename(title)}{THUMBNAIL_SUFFIX}"


def description_filename(title: str) -> str:
    return f"{sanitize_filename(title)}{DESCRIPTION_SUFFIX}"


# ---------------------------------------------------------------------------
# Expiry
# ---------------------------------------------------------------------------

def _expire_from_url(url: str) -> int | None:
    """Read ``expire`` from a manifest URL.

    YouTube manifest URLs carry it as a path pair (``.../expire/<ts>/...``);
    plain signed URLs carry it as a query parameter.
    """
    parts = urlsplit(url)
    segments = parts.path.split("/")
    if "expire" in segments:
        index = segments.index("expire")
        if index + 1 < len(segments):
            candidate = segments[index + 1]
            if candidate.isdigit():
                return int(candidate)
    values = parse_qs(parts.query).get("expire")
    if values and values[0].isdigit():
        return int(values[0])
    return None


def extract_expire_timestamp(formats: Sequence[dict[str, Any]]) -> int | None:
    """Return the expiry of the first format exposing a ``manifest_url``.

    ``None`` when no format carries a manifest URL or it has no readable
    ``expire`` value.
    """
    for fmt in formats:
        manifest_url = fmt.get("manifest_url")
        if isinstance(manifest_url, str) and manifest_url:
            return _expire_from_url(manifest_url)
    return None


def expire_locale_string(timestamp: int | None) -> str:
    """Human-readable local time for *timestamp*, empty when unknown."""
    if timestamp is None:
        return ""
    return datetime.fromtimestamp(timestamp).strftime("%x %X")


def is_expired(expire_timestamp: object, now: datetime) -> bool:
    """Return ``True`` when a cache entry must be refetched.

    Entries without a usable expiry are treated as always stale so that a
    download never runs from signed URLs of unknown age.
    """
    try:
        expire = int(expire_timestamp)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        return True
    return now.timestamp() > expire
