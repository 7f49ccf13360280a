"""External process execution for yt-dlp and ffmpeg.

This module is the **only** place that spawns processes.  ``OSError``
and non-zero exits are translated into
:class:`~ytdlp_interactive.exceptions.PrerequisiteMissingError` and
:class:`~ytdlp_interactive.exceptions.ExternalToolError`; nothing raw
escapes.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence

from ytdlp_interactive.exceptions import ExternalToolError, PrerequisiteMissingError

logger = logging.getLogger(__name__)


def _command_name(args: Sequence[str]) -> str:
    return args[0] if args else "<empty>"


class ProcessRunner:
    """Runs an argument list with ``shell=False``.

    Satisfies :class:`~ytdlp_interactive.core.protocols.CommandRunner`.
    """

    def run(self, args: Sequence[str]) -> str:
        """Run *args*, capturing stdout and stderr; return stdout.

        Raises
        ------
        PrerequisiteMissingError
            If the binary cannot be executed.
        ExternalToolError
            On a non-zero exit status; carries the captured stderr.
        """
        logger.debug("Running %s", list(args))
        try:
            completed = subprocess.run(
                list(args),
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except OSError as exc:
            raise PrerequisiteMissingError(
                f"Could not execute {_command_name(args)}: {exc}",
            ) from exc

        if completed.returncode != 0:
            raise ExternalToolError(
                f"Command failed with code {completed.returncode}",
                returncode=completed.returncode,
                stderr=completed.stderr.strip(),
            )
        return completed.stdout

    def run_attached(self, args: Sequence[str]) -> None:
        """Run *args* with stdout attached to the terminal.

        yt-dlp prints its own progress on stdout; stderr is captured so it
        can be shown again if the run fails.
        """
        logger.debug("Running attached %s", list(args))
        try:
            completed = subprocess.run(
                list(args),
                stdout=None,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except OSError as exc:
            raise PrerequisiteMissingError(
                f"Could not execute {_command_name(args)}: {exc}",
            ) from exc

        if completed.returncode != 0:
            raise ExternalToolError(
                f"Command failed with code {completed.returncode}",
                returncode=completed.returncode,
                stderr=(completed.stderr or "").strip(),
            )


def probe_ytdlp_version(runner: ProcessRunner, ytdlp_path: str) -> str:
    """Return ``yt-dlp --version`` output."""
    return runner.run([ytdlp_path, "--version"]).strip()


def probe_ffmpeg_version(runner: ProcessRunner, ffmpeg_path: str) -> str:
    """Return the first line of ``ffmpeg -version``."""
    output = runner.run([ffmpeg_path, "-version"]).strip()
    return output.splitlines()[0] if output else ""
