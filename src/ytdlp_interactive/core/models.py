"""Domain models for ytdlp-interactive.

All models are **frozen** dataclasses.  The
settings document is updated by building a new instance (see
:mod:`ytdlp_interactive.core.history`), never by mutating one in place.

``to_dict`` / ``from_dict`` pairs translate between these models and the
JSON shapes persisted on disk.  ``from_dict`` tolerates missing keys so
that older settings files stay readable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

DEFAULT_FORMAT_SPEC: str = "bv+ba"
"""Format selector used until the user pins an explicit format."""

AUDIO_MEDIA: str = "audio"
VIDEO_MEDIA: str = "video"


# ---------------------------------------------------------------------------
# Format selection (tagged variant)
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class DefaultFormat:
    """A bare yt-dlp format selector such as ``bv+ba``."""

    spec: str = DEFAULT_FORMAT_SPEC

    @property
    def label(self) -> str:
        return self.spec

    @property
    def display_name(self) -> str:
        if self.spec == DEFAULT_FORMAT_SPEC:
            return "Best Video + Best Audio"
        return self.spec


@dataclass(frozen=True, slots=True)
class ExplicitFormat:
    """A concrete stream picked from the video's format list."""

    id: str
    """yt-dlp ``format_id`` (e.g. ``137``)."""

    label: str
    """Short label used in filenames (e.g. ``720p``)."""

    media: str = VIDEO_MEDIA
    """``"audio"`` for audio-only streams, ``"video"`` otherwise."""

    @property
    def is_audio_only(self) -> bool:
        return self.media == AUDIO_MEDIA

    @property
    def display_name(self) -> str:
        return f"{self.id} ({self.label})"


Format = Union[DefaultFormat, ExplicitFormat]


def format_to_dict(fmt: Format) -> str | dict[str, str]:
    """Serialise *fmt* to its ``default_format`` JSON shape."""
    if isinstance(fmt, DefaultFormat):
        return fmt.spec
    return {"id": fmt.id, "label": fmt.label, "media": fmt.media}


def format_from_dict(raw: object) -> Format:
    """Parse a ``default_format`` value; unknown shapes yield the default."""
    if isinstance(raw, str) and raw:
        return DefaultFormat(raw)
    if isinstance(raw, dict):
        format_id = raw.get("id") or raw.get("value")
        if format_id:
            label = raw.get("label") or raw.get("info") or raw.get("name") or str(format_id)
            return ExplicitFormat(
                id=str(format_id),
                label=str(label),
                media=str(raw.get("media") or VIDEO_MEDIA),
            )
    return DefaultFormat()


# ---------------------------------------------------------------------------
# History entries
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class UrlHistoryEntry:
    """One remembered video, keyed by :attr:`url`."""

    url: str
    title: str = ""
    thumbnail: str = ""
    """Remote thumbnail URI."""

    thumbnail_local: str = ""
    """``file://`` URI of the cached thumbnail."""

    def to_dict(self) -> dict[str, str]:
        return {
            "url": self.url,
            "title": self.title,
            "thumbnail": self.thumbnail,
            "thumbnail_local": self.thumbnail_local,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> UrlHistoryEntry:
        return cls(
            url=str(raw.get("url", "")),
            title=str(raw.get("title") or ""),
            thumbnail=str(raw.get("thumbnail") or ""),
            thumbnail_local=str(raw.get("thumbnail_local") or ""),
        )


@dataclass(frozen=True, slots=True)
class DownloadRecord:
    """One completed download, keyed by ``(url, output_template)``."""

    url: str
    title: str
    format: str
    download_location: str
    output_template: str
    sections: str = ""
    downloaded_at: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "url": self.url,
            "title": self.title,
            "format": self.format,
            "download_location": self.download_location,
            "output_template": self.output_template,
            "sections": self.sections,
            "downloaded_at": self.downloaded_at,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> DownloadRecord:
        return cls(
            url=str(raw.get("url", "")),
            title=str(raw.get("title") or ""),
            format=str(raw.get("format") or ""),
            download_location=str(raw.get("download_location") or ""),
            output_template=str(raw.get("output_template") or ""),
            sections=str(raw.get("sections") or ""),
            downloaded_at=str(raw.get("downloaded_at") or ""),
        )


# ---------------------------------------------------------------------------
# Settings document
# ---------------------------------------------------------------------------

_KNOWN_KEYS: tuple[str, ...] = (
    "ytdlp_path",
    "ffmpeg_path",
    "ytdlp_version",
    "ytdlp_version_latest",
    "ffmpeg_version",
    "platform",
    "app_folder",
    "downloads_data_folder",
    "user_downloads_location",
    "default_download_location",
    "url_history",
    "download_location_history",
    "extra_commands_history",
    "downloads_history",
    "default_format",
    "last_fetched_ytdlp_version_at",
)


@dataclass(frozen=True, slots=True)
class SettingsDocument:
    """The whole persisted settings + history document."""

    ytdlp_path: str = ""
    ffmpeg_path: str = ""
    ytdlp_version: str = ""
    ytdlp_version_latest: str = ""
    ffmpeg_version: str = ""
    platform: str = ""
    app_folder: str = ""
    downloads_data_folder: str = ""
    user_downloads_location: str = ""
    default_download_location: str = ""
    url_history: tuple[UrlHistoryEntry, ...] = ()
    download_location_history: tuple[str, ...] = ()
    extra_commands_history: tuple[str, ...] = ()
    downloads_history: tuple[DownloadRecord, ...] = ()
    default_format: Format = field(default_factory=DefaultFormat)
    last_fetched_ytdlp_version_at: str = ""
    extras: dict[str, Any] = field(default_factory=dict)
    """Keys this version does not know about, preserved on rewrite."""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "ytdlp_path": self.ytdlp_path,
            "ffmpeg_path": self.ffmpeg_path,
            "ytdlp_version": self.ytdlp_version,
            "ytdlp_version_latest": self.ytdlp_version_latest,
            "ffmpeg_version": self.ffmpeg_version,
            "platform": self.platform,
            "app_folder": self.app_folder,
            "downloads_data_folder": self.downloads_data_folder,
            "user_downloads_location": self.user_downloads_location,
            "default_download_location": self.default_download_location,
            "url_history": [entry.to_dict() for entry in self.url_history],
            "download_location_history": list(self.download_location_history),
            "extra_commands_history": list(self.extra_commands_history),
            "downloads_history": [record.to_dict() for record in self.downloads_history],
            "default_format": format_to_dict(self.default_format),
            "last_fetched_ytdlp_version_at": self.last_fetched_ytdlp_version_at,
        }
        data.update(self.extras)
        return data

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> SettingsDocument:
        def text(key: str) -> str:
            value = raw.get(key)
            return "" if value is None else str(value)

        def dict_items(key: str) -> list[dict[str, Any]]:
            value = raw.get(key)
            if not isinstance(value, list):
                return []
            return [item for item in value if isinstance(item, dict)]

        def str_items(key: str) -> tuple[str, ...]:
            value = raw.get(key)
            if not isinstance(value, list):
                return ()
            return tuple(str(item) for item in value if isinstance(item, str))

        return cls(
            ytdlp_path=text("ytdlp_path"),
            ffmpeg_path=text("ffmpeg_path"),
            ytdlp_version=text("ytdlp_version"),
            ytdlp_version_latest=text("ytdlp_version_latest"),
            ffmpeg_version=text("ffmpeg_version"),
            platform=text("platform"),
            app_folder=text("app_folder"),
            downloads_data_folder=text("downloads_data_folder"),
            user_downloads_location=text("user_downloads_location"),
            default_download_location=text("default_download_location"),
            url_history=tuple(UrlHistoryEntry.from_dict(d) for d in dict_items("url_history")),
            download_location_history=str_items("download_location_history"),
            extra_commands_history=str_items("extra_commands_history"),
            downloads_history=tuple(
                DownloadRecord.from_dict(d) for d in dict_items("downloads_history")
            ),
            default_format=format_from_dict(raw.get("default_format")),
            last_fetched_ytdlp_version_at=text("last_fetched_ytdlp_version_at"),
            extras={k: v for k, v in raw.items() if k not in _KNOWN_KEYS},
        )


# ---------------------------------------------------------------------------
# Format menu entries
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class FormatOption:
    """One selectable stream as shown in the format menu."""

    format_id: str
    name: str
    """yt-dlp's ``format`` string (e.g. ``251 - audio only (medium)``)."""

    label: str
    description: str
    media: str

    def to_format(self) -> ExplicitFormat:
        return ExplicitFormat(id=self.format_id, label=self.label, media=self.media)


# ---------------------------------------------------------------------------
# Metadata cache entry
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class VideoMetadataCacheEntry:
    """Typed view over a cached ``<video_id>.info.json`` document."""

    video_id: str
    fulltitle: str
    webpage_url: str
    thumbnail: str
    description: str
    formats: tuple[dict[str, Any], ...]
    expire_timestamp: int | None
    expire_locale_string: str

    @classmethod
    def from_info(cls, info: dict[str, Any]) -> VideoMetadataCacheEntry:
        raw_formats = info.get("formats")
        formats = (
            tuple(f for f in raw_formats if isinstance(f, dict))
            if isinstance(raw_formats, list)
            else ()
        )
        raw_expire = info.get("expire_timestamp")
        try:
            expire: int | None = int(raw_expire) if raw_expire is not None else None
        except (TypeError, ValueError):
            expire = None
        return cls(
            video_id=str(info.get("id", "")),
            fulltitle=str(info.get("fulltitle") or info.get("title") or ""),
            webpage_url=str(info.get("webpage_url", "")),
            thumbnail=str(info.get("thumbnail") or ""),
            description=str(info.get("description") or ""),
            formats=formats,
            expire_timestamp=expire,
            expire_locale_string=str(info.get("expire_locale_string") or ""),
        )


# ---------------------------------------------------------------------------
# Trim range
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class TimeRange:
    """A ``--download-sections`` range; ``end=None`` means to the end."""

    start: str
    end: str | None = None

    @property
    def section_value(self) -> str:
        return f"*{self.start}-{self.end if self.end else 'inf'}"

    @property
    def display(self) -> str:
        return f"{self.start} - {self.end if self.end else 'inf'}"
