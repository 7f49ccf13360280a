"""Most-recently-used history ledger and settings-document updates.

Every function here is **pure**: it returns a new tuple or a new
:class:`~ytdlp_interactive.core.models.SettingsDocument` and leaves its
inputs untouched.  The session driver decides when the result is
persisted.

Ledger invariant
----------------
After any sequence of :func:`upsert_most_recent` calls a history holds
at most one entry per key, ordered by recency of (re)insertion with the
most recent entry at index 0.  Histories are unbounded.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import replace
from typing import TypeVar

from ytdlp_interactive.core.models import (
    DownloadRecord,
    Format,
    SettingsDocument,
    UrlHistoryEntry,
)

T = TypeVar("T")


def _identity(value: T) -> object:
    return value


def upsert_most_recent(
    entries: Sequence[T],
    new_entry: T,
    key: Callable[[T], object] = _identity,
) -> tuple[T, ...]:
    """Return *entries* with *new_entry* moved (or inserted) to the front.

    Any existing element whose key equals ``key(new_entry)`` is dropped.
    """
    new_key = key(new_entry)
    remaining = tuple(entry for entry in entries if key(entry) != new_key)
    return (new_entry, *remaining)


# ---------------------------------------------------------------------------
# Document-level helpers
# ---------------------------------------------------------------------------

def record_url(doc: SettingsDocument, entry: UrlHistoryEntry) -> SettingsDocument:
    """Remember a video in ``url_history``, keyed by URL."""
    return replace(
        doc,
        url_history=upsert_most_recent(doc.url_history, entry, key=lambda e: e.url),
    )


def record_download_location(doc: SettingsDocument, location: str) -> SettingsDocument:
    """Remember a download folder in ``download_location_history``."""
    return replace(
        doc,
        download_location_history=upsert_most_recent(
            doc.download_location_history, location.strip(),
        ),
    )


def record_extra_commands(doc: SettingsDocument, extra_commands: str) -> SettingsDocument:
    """Remember an extra-flags string; blank strings are ignored."""
    stripped = extra_commands.strip()
    if not stripped:
        return doc
    return replace(
        doc,
        extra_commands_history=upsert_most_recent(doc.extra_commands_history, stripped),
    )


def record_download(doc: SettingsDocument, record: DownloadRecord) -> SettingsDocument:
    """Remember a finished download, keyed by URL and output template."""
    return replace(
        doc,
        downloads_history=upsert_most_recent(
            doc.downloads_history, record, key=lambda r: (r.url, r.output_template),
        ),
    )


def set_default_format(doc: SettingsDocument, fmt: Format) -> SettingsDocument:
    return replace(doc, default_format=fmt)


def set_default_download_location(doc: SettingsDocument, location: str) -> SettingsDocument:
    return replace(doc, default_download_location=location.strip())


def set_latest_version(
    doc: SettingsDocument, version: str, fetched_at: str,
) -> SettingsDocument:
    """Store the throttled latest-release lookup result."""
    return replace(
        doc,
        ytdlp_version_latest=version,
        last_fetched_ytdlp_version_at=fetched_at,
    )
