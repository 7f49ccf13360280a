"""Format picker: a Rich table of the cached formats, then a grouped menu.

The menu lists every format, then audio-only and video formats again
under their own headings.  Grouping happens in
:mod:`ytdlp_interactive.core.format_options`; this module only renders
and maps the picked id back to an
:class:`~ytdlp_interactive.core.models.ExplicitFormat`.
"""

from __future__ import annotations

from typing import Any

from ytdlp_interactive.cli.console import console
from ytdlp_interactive.cli.prompts import MenuChoice, MenuItem, MenuSeparator, ask_select
from ytdlp_interactive.core.format_options import GroupedFormats
from ytdlp_interactive.core.models import ExplicitFormat, FormatOption, VideoMetadataCacheEntry
from ytdlp_interactive.exceptions import PrerequisiteMissingError


def _import_rich_table() -> type[Any]:
    """Import rich table lazily for format rendering."""
    try:
        from rich.table import Table
    except ModuleNotFoundError as exc:
        raise PrerequisiteMissingError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Table


# ---------------------------------------------------------------------------
# Presentation helpers
# ---------------------------------------------------------------------------

def _choice(option: FormatOption) -> MenuChoice:
    return MenuChoice(title=option.name, value=option.format_id, description=option.description)


def build_menu(grouped: GroupedFormats) -> list[MenuItem]:
    """Menu layout: every format, then audio-only, then video."""
    items: list[MenuItem] = [MenuSeparator("Formats")]
    items.extend(_choice(opt) for opt in grouped.all)
    items.append(MenuSeparator("Audio Formats"))
    items.extend(_choice(opt) for opt in grouped.audio)
    items.append(MenuSeparator("Video Formats"))
    items.extend(_choice(opt) for opt in grouped.video)
    return items


def _display_format_table(entry: VideoMetadataCacheEntry, grouped: GroupedFormats) -> None:
    """Print a Rich table summarising the available formats."""
    table_class = _import_rich_table()

    table = table_class(
        title=f"Available Formats: {entry.fulltitle}",
        show_header=True,
        header_style="bold magenta",
        border_style="dim",
    )
    table.add_column("#", justify="right", style="dim", width=4)
    table.add_column("ID", justify="left", min_width=6)
    table.add_column("Label", justify="left", min_width=8)
    table.add_column("Media", justify="left", min_width=6)
    table.add_column("Format", justify="left")

    for i, opt in enumerate(grouped.all, start=1):
        table.add_row(str(i), opt.format_id, opt.label, opt.media, opt.name)

    console.print()
    console.print(table)
    console.print()


# ---------------------------------------------------------------------------
# Public prompt function
# ---------------------------------------------------------------------------

def prompt_format_selection(
    entry: VideoMetadataCacheEntry,
    grouped: GroupedFormats,
) -> ExplicitFormat:
    """Display formats and prompt the user for an interactive selection.

    Raises
    ------
    UserCancelledError
        If the user cancels the prompt.
    """
    _display_format_table(entry, grouped)
    options = {opt.format_id: opt for opt in grouped.all}
    selected_id: str = ask_select("Select a Format:", build_menu(grouped))
    return options[selected_id].to_format()
