"""User-facing output on stderr.

Rich is imported on first use rather than at import time, so
``--version``, ``--help`` and ``doctor`` still run without it; output
then degrades to plain ``print``.
"""

from __future__ import annotations

import sys
from typing import Any

from ytdlp_interactive.exceptions import PrerequisiteMissingError

PLAIN_RULE_WIDTH: int = 60


def get_rich_console() -> Any:
    """A fresh ``rich.console.Console`` bound to the current ``sys.stderr``.

    Raises
    ------
    PrerequisiteMissingError
        If Rich is not installed.
    """
    try:
        from rich.console import Console
    except ModuleNotFoundError as exc:
        raise PrerequisiteMissingError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Console(stderr=True)


class _ConsoleProxy:
    """``print``-like facade used by the CLI layer."""

    def print(self, *objects: object) -> None:
        try:
            rich_console = get_rich_console()
        except PrerequisiteMissingError:
            print(*objects, file=sys.stderr)
        else:
            rich_console.print(*objects)

    def divider(self, title: str = "", *, style: str = "green") -> None:
        """Full-width rule with an optional centred *title*."""
        try:
            from rich.rule import Rule

            rich_console = get_rich_console()
        except (ModuleNotFoundError, PrerequisiteMissingError):
            label = f" {title} " if title else ""
            print(f"\n{label:-^{PLAIN_RULE_WIDTH}}", file=sys.stderr)
            return
        rich_console.print()
        rich_console.print(Rule(title, style=style))


console = _ConsoleProxy()
