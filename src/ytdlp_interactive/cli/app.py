"""Command-line entry point for ytdlp-interactive.

``cli()`` is where every failure ends up.  Typed
:class:`~ytdlp_interactive.exceptions.YtdlpInteractiveError` subclasses
print their message and hint; a cancelled prompt or Ctrl+C closes the
program quietly; anything else is reported as a bug.  Nothing below this
module calls :func:`sys.exit`.
"""

from __future__ import annotations

import argparse
import logging
import sys

from ytdlp_interactive.cli import exit_codes
from ytdlp_interactive.cli.console import console
from ytdlp_interactive.exceptions import UserCancelledError, YtdlpInteractiveError
from ytdlp_interactive.version import __version__

logger = logging.getLogger(__name__)

BANNER: str = "YTDLP-Interactive"
DOCTOR_COMMAND: str = "doctor"


def _build_parser() -> argparse.ArgumentParser:
    """``ytdlp-interactive [URL | doctor]`` plus ``--version``."""
    parser = argparse.ArgumentParser(
        prog="ytdlp-interactive",
        description="Interactive YouTube downloader driving the yt-dlp binary.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "target",
        nargs="?",
        default="",
        metavar="URL|doctor",
        help="YouTube URL to pre-fill the first prompt, or 'doctor' to run diagnostics.",
    )
    return parser


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def _handle_interactive(initial_url: str) -> int:
    """Startup checks, then download cycles until the user stops."""
    from ytdlp_interactive.cli.session import (
        build_context,
        require_connectivity,
        run_session,
        show_environment,
    )
    from ytdlp_interactive.infra.app_paths import AppPaths

    console.divider(BANNER, style="bright_green")
    ctx = build_context(AppPaths.from_environment(), initial_url)
    require_connectivity()
    show_environment(ctx)
    console.divider(style="bright_green")

    run_session(ctx)
    return exit_codes.SUCCESS


def _handle_doctor() -> int:
    from ytdlp_interactive.cli.doctor import run_doctor

    return run_doctor()


def main(argv: list[str] | None = None) -> int:
    """Parse *argv* (``sys.argv[1:]`` when ``None``) and run a command.

    Returns the process exit code; errors propagate to :func:`cli`.
    """
    target: str = _build_parser().parse_args(argv).target or ""
    if target.strip().lower() == DOCTOR_COMMAND:
        return _handle_doctor()
    return _handle_interactive(target.strip())


# ---------------------------------------------------------------------------
# Error boundary
# ---------------------------------------------------------------------------

def _report(exc: YtdlpInteractiveError) -> None:
    console.print(f"[bold red]Error:[/bold red] {exc}")
    if exc.hint:
        console.print(f"[yellow]Hint:[/yellow] {exc.hint}")


def cli() -> None:
    """Console-script entry point; always leaves through :func:`sys.exit`."""
    from ytdlp_interactive.cli.logging_setup import configure_logging

    configure_logging()
    try:
        sys.exit(main())
    except (UserCancelledError, KeyboardInterrupt):
        console.print("\n[bright_green]Closed by user[/bright_green]")
        sys.exit(exit_codes.SUCCESS)
    except YtdlpInteractiveError as exc:
        logger.debug("Known error", exc_info=True)
        _report(exc)
        sys.exit(exit_codes.GENERAL_ERROR)
    except Exception as exc:  # noqa: BLE001
        logger.debug("Unexpected error", exc_info=True)
        console.print(
            f"[bold red]Unexpected error:[/bold red] {type(exc).__name__}: {exc}\n"
            "Run again with YTDLP_INTERACTIVE_LOG_LEVEL=DEBUG and report the traceback."
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
