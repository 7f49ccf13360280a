"""Logging configuration for the CLI process.

Diagnostics go through :mod:`logging`; user-facing text goes through
:data:`ytdlp_interactive.cli.console.console`.  The level comes from
``YTDLP_INTERACTIVE_LOG_LEVEL`` (default ``WARNING``).
"""

from __future__ import annotations

import logging
import os

LOG_LEVEL_ENV_VAR: str = "YTDLP_INTERACTIVE_LOG_LEVEL"
DEFAULT_LOG_LEVEL: str = "WARNING"
LOG_FORMAT: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def resolve_log_level(value: str | None) -> int:
    """Map a level name to its numeric value; unknown names give WARNING."""
    level = logging.getLevelName((value or DEFAULT_LOG_LEVEL).upper())
    return level if isinstance(level, int) else logging.WARNING


def configure_logging(level: str | None = None) -> None:
    """Install a Rich handler on stderr, or a plain one without Rich."""
    numeric = resolve_log_level(level or os.environ.get(LOG_LEVEL_ENV_VAR))
    try:
        from rich.logging import RichHandler
    except ModuleNotFoundError:
        logging.basicConfig(level=numeric, format=LOG_FORMAT, force=True)
        return

    from ytdlp_interactive.cli.console import get_rich_console

    logging.basicConfig(
        level=numeric,
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=get_rich_console(), show_path=False)],
        force=True,
    )
