"""Rich spinner shown while a blocking external call runs.

Falls back to a plain stderr line when Rich is unavailable.
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from contextlib import contextmanager

from ytdlp_interactive.cli.console import get_rich_console
from ytdlp_interactive.exceptions import PrerequisiteMissingError


@contextmanager
def spinner(text: str, *, success: str | None = None) -> Iterator[None]:
    """Show *text* with a spinner for the duration of the block.

    *success* is printed after the block completes without raising.
    """
    try:
        rich_console = get_rich_console()
    except PrerequisiteMissingError:
        print(text, file=sys.stderr)
        yield
        if success:
            print(success, file=sys.stderr)
        return

    with rich_console.status(text, spinner="dots"):
        yield
    if success:
        rich_console.print(f"[green]✔[/green] {success}")
