"""Persistent store for the settings + history document.

The whole document is read, replaced in memory by the pure helpers in
:mod:`ytdlp_interactive.core.history`, and written back.  A single
interactive process is the only writer; a second concurrent instance
editing the same file is not guarded against.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path

from ytdlp_interactive.core.models import DefaultFormat, SettingsDocument
from ytdlp_interactive.exceptions import SettingsParseError, SettingsWriteError
from ytdlp_interactive.infra.app_paths import AppPaths, user_downloads_folder
from ytdlp_interactive.infra.json_files import read_json, write_json

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ToolInventory:
    """External binaries probed on first run."""

    ytdlp_path: str
    ytdlp_version: str
    ffmpeg_path: str
    ffmpeg_version: str


class SettingsStore:
    """Reads and writes ``settings.json`` under the app folder."""

    def __init__(self, paths: AppPaths) -> None:
        self._paths = paths

    @property
    def path(self) -> Path:
        return self._paths.settings_path

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> SettingsDocument:
        """Parse the settings file.

        Raises
        ------
        SettingsParseError
            If the file is unreadable or not a JSON object.
        """
        return SettingsDocument.from_dict(read_json(self.path, SettingsParseError))

    def save(self, doc: SettingsDocument) -> None:
        """Overwrite the settings file with *doc*.

        Raises
        ------
        SettingsWriteError
            If the file cannot be written.
        """
        write_json(self.path, doc.to_dict())
        logger.debug("Settings written to %s", self.path)

    def create(
        self,
        tools: ToolInventory,
        *,
        platform: str | None = None,
        downloads_location: Path | None = None,
    ) -> SettingsDocument:
        """Build the first-run document, persist it, and return it.

        Always overwrites; callers gate this on :meth:`exists`.
        """
        downloads = str(downloads_location or user_downloads_folder())
        try:
            self._paths.downloads_data_folder.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise SettingsWriteError(
                f"Failed to create {self._paths.downloads_data_folder}: {exc}",
            ) from exc
        doc = SettingsDocument(
            ytdlp_path=tools.ytdlp_path,
            ffmpeg_path=tools.ffmpeg_path,
            ytdlp_version=tools.ytdlp_version,
            ytdlp_version_latest="",
            ffmpeg_version=tools.ffmpeg_version,
            platform=platform or sys.platform,
            app_folder=str(self._paths.app_folder),
            downloads_data_folder=str(self._paths.downloads_data_folder),
            user_downloads_location=downloads,
            default_download_location=downloads,
            default_format=DefaultFormat(),
        )
        self.save(doc)
        logger.info("Settings created at %s", self.path)
        return doc
