"""Per-video metadata cache backed by yt-dlp's ``--write-info-json``.

Layout under the downloads-data root::

    <video_id>/
        <video_id>.info.json          yt-dlp info + expire_timestamp / expire_locale_string
        <title>.thumbnail.jpg         sanitised title, see core.cache_policy
        <title>.description.txt

An entry is reused until the expiry embedded in its signed manifest URL
has passed.  Entries without an expiry are refetched every time.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from ytdlp_interactive.core import cache_policy
from ytdlp_interactive.core.models import UrlHistoryEntry, VideoMetadataCacheEntry
from ytdlp_interactive.core.protocols import CommandRunner, FileDownloader
from ytdlp_interactive.exceptions import (
    ArtifactFetchError,
    ExternalToolError,
    MetadataCacheParseError,
    SettingsWriteError,
    append_ytdlp_upgrade_suggestion,
)
from ytdlp_interactive.infra.json_files import read_json, write_json, write_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CachedVideo:
    """Result of :meth:`MetadataCache.ensure_fresh`."""

    entry: VideoMetadataCacheEntry
    info_json_path: Path
    refreshed: bool


class MetadataCache:
    """Fetches, stores and reuses per-video yt-dlp metadata.

    Parameters
    ----------
    downloads_data_folder:
        Root folder holding one sub-folder per video id.
    ytdlp_path:
        yt-dlp binary used for metadata-only invocations.
    runner:
        Any :class:`~ytdlp_interactive.core.protocols.CommandRunner`.
    file_downloader:
        Any :class:`~ytdlp_interactive.core.protocols.FileDownloader`.
    clock:
        Returns "now"; injectable for tests.
    """

    def __init__(
        self,
        downloads_data_folder: Path,
        ytdlp_path: str,
        runner: CommandRunner,
        file_downloader: FileDownloader,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._root = downloads_data_folder
        self._ytdlp_path = ytdlp_path
        self._runner = runner
        self._file_downloader = file_downloader
        self._clock = clock

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def video_folder(self, video_id: str) -> Path:
        return self._root / video_id

    def info_json_path(self, video_id: str) -> Path:
        return self.video_folder(video_id) / cache_policy.info_json_filename(video_id)

    def thumbnail_path(self, entry: VideoMetadataCacheEntry) -> Path:
        return self.video_folder(entry.video_id) / cache_policy.thumbnail_filename(entry.fulltitle)

    def description_path(self, entry: VideoMetadataCacheEntry) -> Path:
        return self.video_folder(entry.video_id) / cache_policy.description_filename(
            entry.fulltitle,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def load(self, video_id: str) -> dict[str, Any]:
        """Read the cached info document.

        Raises
        ------
        MetadataCacheParseError
            If the cache file is unreadable or malformed.
        """
        return read_json(self.info_json_path(video_id), MetadataCacheParseError)

    def ensure_fresh(self, video_id: str, video_url: str) -> CachedVideo:
        """Return a usable cache entry for *video_id*, fetching if needed.

        Raises
        ------
        ExternalToolError
            If yt-dlp fails to produce metadata.
        MetadataCacheParseError
            If the cached or freshly written document is malformed.
        """
        path = self.info_json_path(video_id)
        if path.is_file():
            info = self.load(video_id)
            if not cache_policy.is_expired(info.get("expire_timestamp"), self._clock()):
                logger.info("Reusing cached metadata for %s", video_id)
                return CachedVideo(
                    entry=VideoMetadataCacheEntry.from_info(info),
                    info_json_path=path,
                    refreshed=False,
                )
            logger.info("Cached metadata for %s expired; refetching", video_id)

        entry = self._fetch(video_id, video_url)
        return CachedVideo(entry=entry, info_json_path=path, refreshed=True)

    def url_history_entry(self, entry: VideoMetadataCacheEntry) -> UrlHistoryEntry:
        """Build the ``url_history`` record for a cached video."""
        return UrlHistoryEntry(
            url=entry.webpage_url,
            title=entry.fulltitle,
            thumbnail=entry.thumbnail,
            thumbnail_local=self.thumbnail_path(entry).absolute().as_uri(),
        )

    # ------------------------------------------------------------------
    # Fetch pipeline
    # ------------------------------------------------------------------

    def _fetch(self, video_id: str, video_url: str) -> VideoMetadataCacheEntry:
        folder = self.video_folder(video_id)
        try:
            folder.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise SettingsWriteError(f"Failed to create {folder}: {exc}") from exc

        args = [
            self._ytdlp_path,
            "--skip-download",
            "-o",
            str(folder / video_id),
            "--write-info-json",
            video_url,
        ]
        try:
            self._runner.run(args)
        except ExternalToolError as exc:
            raise ExternalToolError(
                f"Failed to fetch video metadata for {video_url}.",
                returncode=exc.returncode,
                stderr=exc.stderr,
                hint=append_ytdlp_upgrade_suggestion("Check the URL and your connection."),
            ) from exc

        info = self.load(video_id)
        expire = cache_policy.extract_expire_timestamp(
            [f for f in info.get("formats") or [] if isinstance(f, dict)],
        )
        if expire is None:
            logger.warning("No manifest expiry for %s; it will be refetched next time", video_id)
        info["expire_timestamp"] = expire
        info["expire_locale_string"] = cache_policy.expire_locale_string(expire)
        write_json(self.info_json_path(video_id), info)

        entry = VideoMetadataCacheEntry.from_info(info)
        self._write_thumbnail(entry)
        self._write_description(entry)
        return entry

    def _write_thumbnail(self, entry: VideoMetadataCacheEntry) -> None:
        if not entry.thumbnail:
            logger.info("No thumbnail URL for %s", entry.video_id)
            return
        try:
            self._file_downloader.download_file(entry.thumbnail, self.thumbnail_path(entry))
        except ArtifactFetchError as exc:
            logger.warning("Thumbnail for %s not saved: %s", entry.video_id, exc)

    def _write_description(self, entry: VideoMetadataCacheEntry) -> None:
        try:
            write_text(self.description_path(entry), entry.description)
        except SettingsWriteError as exc:
            logger.warning("Description for %s not saved: %s", entry.video_id, exc)
