"""YouTube URL recognition and canonicalisation.

Supported video URL shapes:

* ``https://youtu.be/<id>``
* ``https://www.youtube.com/watch?v=<id>``
* ``https://www.youtube.com/embed/<id>`` and ``/shorts/<id>``

:func:`validate_video_url` returns a :class:`UrlValidation` result
instead of raising, so the prompt loop can re-ask.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import parse_qs, urlsplit

YOUTUBE_HOSTS: frozenset[str] = frozenset(
    {
        "www.youtube.com",
        "youtube.com",
        "m.youtube.com",
        "youtu.be",
        "www.youtu.be",
        "youtube-nocookie.com",
        "www.youtube-nocookie.com",
    }
)

_VIDEO_ID_RE = re.compile(r"^[a-zA-Z0-9_-]{11}$")
_PLAYLIST_ID_RE = re.compile(r"^[a-zA-Z0-9_-]+$")
_EMBED_LIKE_RE = re.compile(r"^/(embed|shorts)/([^/?#&]+)")
_V_IN_PATH_RE = re.compile(r"v=([^&]+)")


@dataclass(frozen=True, slots=True)
class UrlValidation:
    """Outcome of :func:`validate_video_url`."""

    url: str
    video_id: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.video_id is not None


def is_url(url: str) -> bool:
    parts = urlsplit(url.strip())
    return parts.scheme in ("http", "https") and bool(parts.netloc)


def _hostname(url: str) -> str:
    return (urlsplit(url.strip()).hostname or "").lower()


def is_youtube(url: str) -> bool:
    return _hostname(url) in YOUTUBE_HOSTS


def is_valid_video_id(video_id: str | None) -> bool:
    return bool(video_id) and bool(_VIDEO_ID_RE.match(video_id or ""))


def is_youtube_video(url: str) -> bool:
    parts = urlsplit(url.strip())
    host = (parts.hostname or "").lower()
    if host not in YOUTUBE_HOSTS:
        return False
    if host in ("youtu.be", "www.youtu.be") and len(parts.path) > 1:
        return True
    if parts.path == "/watch" and "v" in parse_qs(parts.query):
        return True
    return parts.path.startswith(("/embed/", "/shorts/"))


def get_video_id(url: str) -> str | None:
    """Extract an 11-character video id, or ``None``."""
    parts = urlsplit(url.strip())
    host = (parts.hostname or "").lower()
    query = parse_qs(parts.query)

    if host in ("youtu.be", "www.youtu.be"):
        candidate = parts.path[1:].split("/")[0]
        return candidate if is_valid_video_id(candidate) else None

    if parts.path in ("/watch", "/watch/") and "v" in query:
        candidate = query["v"][0]
        return candidate if is_valid_video_id(candidate) else None

    match = _EMBED_LIKE_RE.match(parts.path)
    if match:
        candidate = match.group(2)
        return candidate if is_valid_video_id(candidate) else None

    match = _V_IN_PATH_RE.search(parts.path)
    if match and is_valid_video_id(match.group(1)):
        return match.group(1)

    for key, values in query.items():
        if key.lower() == "v" and is_valid_video_id(values[0]):
            return values[0]
    return None


def get_playlist_id(url: str) -> str | None:
    values = parse_qs(urlsplit(url.strip()).query).get("list")
    if not values or not _PLAYLIST_ID_RE.match(values[0]):
        return None
    return values[0]


def create_video_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"


def create_playlist_url(playlist_id: str) -> str:
    return f"https://www.youtube.com/playlist?list={playlist_id}"


def validate_video_url(url: str) -> UrlValidation:
    """Check that *url* is a YouTube **video** URL with a usable id."""
    stripped = url.strip()
    if not is_url(stripped):
        return UrlValidation(stripped, error="Invalid URL.")
    if not is_youtube(stripped):
        return UrlValidation(stripped, error="Currently only youtube supported.")
    if not is_youtube_video(stripped):
        return UrlValidation(stripped, error="Enter a valid youtube VIDEO URL.")
    video_id = get_video_id(stripped)
    if video_id is None:
        return UrlValidation(stripped, error="Could not read a video id from this URL.")
    return UrlValidation(stripped, video_id=video_id)
