"""Filesystem locations used by ytdlp-interactive.

The app folder defaults to ``~/.ytdlp-interactive`` and can be moved
with the ``YTDLP_INTERACTIVE_HOME`` environment variable.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

HOME_ENV_VAR: str = "YTDLP_INTERACTIVE_HOME"
DEFAULT_APP_FOLDER_NAME: str = ".ytdlp-interactive"
SETTINGS_FILENAME: str = "settings.json"
DOWNLOADS_DATA_DIRNAME: str = "downloads-data"


@dataclass(frozen=True, slots=True)
class AppPaths:
    app_folder: Path
    settings_path: Path
    downloads_data_folder: Path

    @classmethod
    def from_folder(cls, app_folder: Path) -> AppPaths:
        return cls(
            app_folder=app_folder,
            settings_path=app_folder / SETTINGS_FILENAME,
            downloads_data_folder=app_folder / DOWNLOADS_DATA_DIRNAME,
        )

    @classmethod
    def from_environment(cls) -> AppPaths:
        override = os.environ.get(HOME_ENV_VAR)
        if override:
            return cls.from_folder(Path(override).expanduser())
        return cls.from_folder(Path.home() / DEFAULT_APP_FOLDER_NAME)

    def video_folder(self, video_id: str) -> Path:
        return self.downloads_data_folder / video_id


def user_downloads_folder() -> Path:
    """The host user's downloads folder (``~/Downloads``)."""
    return Path.home() / "Downloads"
