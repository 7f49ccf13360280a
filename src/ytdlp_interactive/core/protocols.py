"""Protocols (interfaces) for collaborators of the metadata cache.

Concrete adapters live in ``infra``; tests substitute simple fakes.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol


class CommandRunner(Protocol):
    """Contract for running the external downloader."""

    def run(self, args: Sequence[str]) -> str:
        """Run *args* with captured output and return stdout.

        Raises
        ------
        ExternalToolError
            When the process exits with a non-zero status.
        PrerequisiteMissingError
            When the binary itself cannot be executed.
        """
        ...  # pragma: no cover


class FileDownloader(Protocol):
    """Contract for fetching a remote file (thumbnails)."""

    def download_file(self, url: str, destination: Path) -> None:
        """Write the body of *url* to *destination*.

        Raises
        ------
        ArtifactFetchError
            When the file cannot be fetched or written.
        """
        ...  # pragma: no cover
