"""Shared pytest fixtures and configuration for the ytdlp-interactive test suite.

Guidelines
----------
* No internet access in any test.
* No real processes: the runner and file downloader are faked.
* Core tests must be pure.
* Filesystem tests stay inside ``tmp_path``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from ytdlp_interactive.infra.app_paths import AppPaths

MANIFEST_URL: str = (
    "https://manifest.googlevideo.com/api/manifest/hls_variant/expire/1700000000/"
    "ei/abc/ip/1.2.3.4/file/index.m3u8"
)


@pytest.fixture
def app_paths(tmp_path: Path) -> AppPaths:
    return AppPaths.from_folder(tmp_path / "app")


def make_info(**overrides: Any) -> dict[str, Any]:
    """Minimal yt-dlp info document for video ``dQw4w9WgXcQ``."""
    info: dict[str, Any] = {
        "id": "dQw4w9WgXcQ",
        "title": "Weird/Name*Test?",
        "fulltitle": "Weird/Name*Test?",
        "webpage_url": "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        "thumbnail": "https://i.ytimg.com/vi/dQw4w9WgXcQ/maxresdefault.jpg",
        "description": "A description.",
        "formats": [
            {"format_id": "sb0", "format_note": "storyboard", "format": "sb0 - storyboard"},
            {
                "format_id": "251",
                "format": "251 - audio only (medium)",
                "format_note": "medium",
                "vcodec": "none",
                "acodec": "opus",
                "abr": 130.5,
            },
            {
                "format_id": "137",
                "format": "137 - 1920x1080 (1080p)",
                "format_note": "1080p",
                "resolution": "1920x1080",
                "vcodec": "avc1.640028",
                "acodec": "none",
            },
            {
                "format_id": "96",
                "format": "96 - 1920x1080",
                "resolution": "1920x1080",
                "manifest_url": MANIFEST_URL,
                "vcodec": "avc1.640028",
                "acodec": "mp4a.40.2",
            },
        ],
    }
    info.update(overrides)
    return info
