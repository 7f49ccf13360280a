"""Core layer: pure business logic and data transformations.

Rules
-----
* No ``print()`` calls.
* No filesystem, process or network I/O.
* No imports from ``cli`` or ``infra``.
* Functions are typed and deterministic; "now" is always passed in.
"""

from ytdlp_interactive.core.arguments import ArgumentList, build_output_template
from ytdlp_interactive.core.cycle import CycleStage, DownloadCycle
from ytdlp_interactive.core.history import upsert_most_recent
from ytdlp_interactive.core.models import (
    DefaultFormat,
    ExplicitFormat,
    Format,
    SettingsDocument,
    UrlHistoryEntry,
    VideoMetadataCacheEntry,
)

__all__: list[str] = [
    "ArgumentList",
    "CycleStage",
    "DefaultFormat",
    "DownloadCycle",
    "ExplicitFormat",
    "Format",
    "SettingsDocument",
    "UrlHistoryEntry",
    "VideoMetadataCacheEntry",
    "build_output_template",
    "upsert_most_recent",
]
