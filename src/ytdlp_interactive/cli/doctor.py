"""``ytdlp-interactive doctor``: report whether this machine can run downloads.

Each ``_*_check`` function returns one :class:`CheckRow`.  A ``FAIL``
row makes the command exit with
:data:`~ytdlp_interactive.cli.exit_codes.GENERAL_ERROR`; ``WARN`` rows
are informational.
"""

from __future__ import annotations

import platform
import sys
from typing import NamedTuple

from ytdlp_interactive.cli import exit_codes
from ytdlp_interactive.cli.console import console
from ytdlp_interactive.exceptions import SettingsParseError
from ytdlp_interactive.infra.app_paths import AppPaths
from ytdlp_interactive.infra.settings_store import SettingsStore
from ytdlp_interactive.infra.tool_detector import FFMPEG, YTDLP, ToolStatus, detect_tool
from ytdlp_interactive.version import __version__

OK: str = "OK"
WARN: str = "WARN"
FAIL: str = "FAIL"

_STATUS_STYLE: dict[str, str] = {OK: "green", WARN: "yellow", FAIL: "red"}
_OS_NAMES: dict[str, str] = {"Darwin": "macOS"}
MIN_PYTHON: tuple[int, int] = (3, 10)


class CheckRow(NamedTuple):
    label: str
    value: str
    status: str


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------

def _app_version_check() -> CheckRow:
    return CheckRow("ytdlp-interactive", __version__, OK)


def _python_version_check() -> CheckRow:
    supported = sys.version_info[:2] >= MIN_PYTHON
    return CheckRow("Python", platform.python_version(), OK if supported else FAIL)


def _ytdlp_package_check() -> CheckRow:
    """The pip-installed yt-dlp package; the binary is checked separately."""
    label = "yt-dlp (package)"
    try:
        from yt_dlp.version import __version__ as package_version
    except ImportError:
        return CheckRow(label, "NOT INSTALLED", WARN)
    return CheckRow(label, package_version, OK)


def _binary_check(status: ToolStatus) -> CheckRow:
    if not status.found:
        return CheckRow(status.name, "not found", FAIL)
    return CheckRow(status.name, str(status.path) if status.path else "found", OK)


def _os_check() -> CheckRow:
    system = platform.system()
    name = _OS_NAMES.get(system, system)
    return CheckRow("OS", f"{name} {platform.release()} ({platform.machine()})", OK)


def _settings_check(paths: AppPaths) -> CheckRow:
    store = SettingsStore(paths)
    if not store.exists():
        return CheckRow("settings", f"{store.path} (created on first run)", OK)
    try:
        store.load()
    except SettingsParseError:
        return CheckRow("settings", f"{store.path} (corrupt)", FAIL)
    return CheckRow("settings", str(store.path), OK)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def _render_rich(rows: list[CheckRow], table_class: type) -> None:
    table = table_class(
        title="ytdlp-interactive doctor",
        header_style="bold cyan",
        border_style="dim",
    )
    table.add_column("Component", style="bold")
    table.add_column("Value")
    table.add_column("Status", justify="center")
    for row in rows:
        style = _STATUS_STYLE[row.status]
        table.add_row(row.label, row.value, f"[{style}]{row.status}[/{style}]")
    console.print()
    console.print(table)
    console.print()


def _render_plain(rows: list[CheckRow]) -> None:
    width = max(len(row.value) for row in rows)
    print("\nytdlp-interactive doctor", file=sys.stderr)
    for row in rows:
        print(f"  {row.label:<18} {row.value:<{width}}  {row.status}", file=sys.stderr)
    print(file=sys.stderr)


def run_doctor(paths: AppPaths | None = None) -> int:
    """Run every check, print the results, and return the exit code."""
    paths = paths or AppPaths.from_environment()
    tools = [detect_tool(YTDLP), detect_tool(FFMPEG)]
    rows = [
        _app_version_check(),
        _python_version_check(),
        _ytdlp_package_check(),
        *(_binary_check(tool) for tool in tools),
        _os_check(),
        _settings_check(paths),
    ]

    try:
        from rich.table import Table
    except ModuleNotFoundError:
        _render_plain(rows)
    else:
        _render_rich(rows, Table)

    for tool in tools:
        if tool.found or not tool.install_commands:
            continue
        console.print(f"{tool.name} is not installed. Install it with one of:")
        for command in tool.install_commands:
            console.print(f"  {command}")

    if any(row.status == FAIL for row in rows):
        console.print("Some checks failed.")
        return exit_codes.GENERAL_ERROR
    console.print("All checks passed.")
    return exit_codes.SUCCESS
