"""Interactive session driver.

Owns the :class:`SessionContext` (settings handle, store, cache, process
runner) and threads it through every step of the download cycle.  Each
cycle walks the :class:`~ytdlp_interactive.core.cycle.DownloadCycle`
stages in order, one prompt or external call at a time.

Persistence: the in-memory settings document is written through
:meth:`SessionContext.commit` right after each remembered decision, so an
aborted cycle keeps everything already confirmed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from ytdlp_interactive.cli.console import console
from ytdlp_interactive.cli.format_prompt import prompt_format_selection
from ytdlp_interactive.cli.progress import spinner
from ytdlp_interactive.cli.prompts import (
    MenuChoice,
    MenuItem,
    MenuSeparator,
    ask_confirm,
    ask_select,
    ask_text,
)
from ytdlp_interactive.core import history
from ytdlp_interactive.core.arguments import (
    pair_extra_tokens,
    parse_time_range,
    split_extra_commands,
)
from ytdlp_interactive.core.cycle import DownloadCycle
from ytdlp_interactive.core.format_options import group_format_options
from ytdlp_interactive.core.models import (
    DownloadRecord,
    Format,
    SettingsDocument,
    TimeRange,
    VideoMetadataCacheEntry,
)
from ytdlp_interactive.core.version_check import is_update_available, should_refresh_latest
from ytdlp_interactive.core.youtube_urls import (
    create_playlist_url,
    create_video_url,
    get_playlist_id,
    validate_video_url,
)
from ytdlp_interactive.exceptions import ConnectivityError, ExternalToolError
from ytdlp_interactive.infra.app_paths import AppPaths
from ytdlp_interactive.infra.metadata_cache import MetadataCache
from ytdlp_interactive.infra.network import (
    HttpFileDownloader,
    fetch_latest_ytdlp_version,
    get_public_ip,
    is_online,
)
from ytdlp_interactive.infra.process_runner import (
    ProcessRunner,
    probe_ffmpeg_version,
    probe_ytdlp_version,
)
from ytdlp_interactive.infra.settings_store import SettingsStore, ToolInventory
from ytdlp_interactive.infra.tool_detector import FFMPEG, YTDLP, require_tool

logger = logging.getLogger(__name__)

MAX_DOWNLOAD_ATTEMPTS: int = 3
CHOOSE_CUSTOM_LOCATION: str = "Enter a custom location..."
NO_EXTRA_COMMANDS: str = "No extra commands"
ENTER_EXTRA_COMMANDS: str = "Enter new extra commands..."


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------

@dataclass
class SessionContext:
    """Everything one interactive process shares across cycles."""

    paths: AppPaths
    store: SettingsStore
    settings: SettingsDocument
    runner: ProcessRunner
    cache: MetadataCache
    initial_url: str = ""
    clock: Callable[[], datetime] = field(default=datetime.now)

    def commit(self, doc: SettingsDocument) -> None:
        """Adopt *doc* as the current document and persist it."""
        self.settings = doc
        self.store.save(doc)


@dataclass(frozen=True, slots=True)
class CycleResult:
    proceed: bool
    """``False`` when the user declined to start the download."""

    downloaded: bool = False


# ---------------------------------------------------------------------------
# Startup
# ---------------------------------------------------------------------------

def load_or_create_settings(store: SettingsStore, runner: ProcessRunner) -> SettingsDocument:
    """Load ``settings.json``, creating it on first run.

    Raises
    ------
    PrerequisiteMissingError
        On first run when yt-dlp or ffmpeg is missing; nothing is written.
    SettingsParseError
        When an existing settings file is corrupt.
    """
    if store.exists():
        return store.load()

    ytdlp_path = str(require_tool(YTDLP))
    console.print("[green]yt-dlp is installed.[/green]")
    ffmpeg_path = str(require_tool(FFMPEG))
    console.print("[green]ffmpeg is installed.[/green]")

    tools = ToolInventory(
        ytdlp_path=ytdlp_path,
        ytdlp_version=probe_ytdlp_version(runner, ytdlp_path),
        ffmpeg_path=ffmpeg_path,
        ffmpeg_version=probe_ffmpeg_version(runner, ffmpeg_path),
    )
    doc = store.create(tools)
    console.print(f"Settings written to {store.path}")
    return doc


def build_context(paths: AppPaths, initial_url: str = "") -> SessionContext:
    store = SettingsStore(paths)
    runner = ProcessRunner()
    settings = load_or_create_settings(store, runner)
    cache = MetadataCache(
        paths.downloads_data_folder,
        settings.ytdlp_path,
        runner,
        HttpFileDownloader(),
    )
    return SessionContext(
        paths=paths,
        store=store,
        settings=settings,
        runner=runner,
        cache=cache,
        initial_url=initial_url,
    )


def require_connectivity() -> None:
    if not is_online():
        raise ConnectivityError(
            "You are not connected to the internet.",
            hint="Check your network connection and try again.",
        )


def refresh_latest_version(ctx: SessionContext) -> str | None:
    """Return the latest yt-dlp release, refetching at most hourly."""
    now = ctx.clock()
    if not should_refresh_latest(ctx.settings.last_fetched_ytdlp_version_at, now):
        return ctx.settings.ytdlp_version_latest or None

    latest = fetch_latest_ytdlp_version()
    if latest is None:
        return None
    fetched_at = now.astimezone(timezone.utc).isoformat()
    ctx.commit(history.set_latest_version(ctx.settings, latest, fetched_at))
    return latest


def show_environment(ctx: SessionContext) -> None:
    public_ip = get_public_ip()
    console.print(f"Your Public IP: {public_ip or 'unknown'}")

    latest = refresh_latest_version(ctx)
    console.print(f"Latest yt-dlp version: {latest or 'unknown'}")
    if is_update_available(latest, ctx.settings.ytdlp_version):
        console.print("[bright_yellow]Update available.[/bright_yellow]")
        console.print(
            "[bright_yellow]Download latest version from: "
            "https://github.com/yt-dlp/yt-dlp/releases or use yt-dlp -U[/bright_yellow]"
        )
    elif latest:
        console.print("[bright_green]You are using the latest version.[/bright_green]")


# ---------------------------------------------------------------------------
# Cycle steps
# ---------------------------------------------------------------------------

def show_history_counts(settings: SettingsDocument) -> None:
    console.print()
    console.print(f"[bright_blue]URL History: {len(settings.url_history)}[/bright_blue]")
    console.print(
        f"[bright_blue]Download Location History: "
        f"{len(settings.download_location_history)}[/bright_blue]"
    )
    console.print(
        f"[bright_blue]Extra Commands History: "
        f"{len(settings.extra_commands_history)}[/bright_blue]"
    )
    console.print(
        f"[bright_blue]Downloads History: {len(settings.downloads_history)}[/bright_blue]"
    )


def prompt_video_url(default: str = "") -> tuple[str, str]:
    """Ask until a valid YouTube video URL is entered; return it with its video id."""
    while True:
        result = validate_video_url(ask_text("Enter URL:", default=default))
        if result.error is None and result.video_id is not None:
            return result.url, result.video_id
        console.print(f"[bright_red]{result.error}[/bright_red]")


def show_video_ids(url: str, video_id: str) -> str:
    """Print id / playlist / canonical URLs and return the video URL."""
    video_url = create_video_url(video_id)
    playlist_id = get_playlist_id(url)

    console.divider("Youtube", style="bright_red")
    console.print(f"Video ID: [green]{video_id}[/green]")
    console.print(f"Playlist ID: [green]{playlist_id or 'N/A'}[/green]")
    console.print(f"Video URL: [green]{video_url}[/green]")
    if playlist_id:
        console.print(f"Playlist URL: [green]{create_playlist_url(playlist_id)}[/green]")
    return video_url


def choose_format(ctx: SessionContext, entry: VideoMetadataCacheEntry) -> Format:
    fmt = ctx.settings.default_format
    console.print(f"[bright_cyan]Default format: {fmt.display_name}[/bright_cyan]")
    if ask_confirm("Use default format?"):
        return fmt

    selected = prompt_format_selection(entry, group_format_options(entry.formats))
    if ask_confirm("Set this format as default?", default=False):
        ctx.commit(history.set_default_format(ctx.settings, selected))
    return selected


def choose_download_location(ctx: SessionContext) -> str:
    location = ctx.settings.default_download_location
    console.print(f"\n[bright_cyan]Default download location: {location}[/bright_cyan]")
    if ask_confirm("Use default download location?"):
        return location

    items: list[MenuItem] = [MenuChoice(CHOOSE_CUSTOM_LOCATION, CHOOSE_CUSTOM_LOCATION)]
    if ctx.settings.download_location_history:
        items.append(MenuSeparator("Download Locations"))
        items.extend(MenuChoice(loc, loc) for loc in ctx.settings.download_location_history)
    selected: str = ask_select("Select an option:", items)
    if selected == CHOOSE_CUSTOM_LOCATION:
        selected = ask_text("Enter your custom download path:").strip()

    if ask_confirm("Set this download location as default?", default=False):
        ctx.commit(history.set_default_download_location(ctx.settings, selected))
    return selected


def ask_time_range() -> TimeRange | None:
    console.print()
    time_range = parse_time_range(ask_text("Download section of video? [start end]"))
    if time_range is None:
        console.print("[bright_green]Skipping download sections[/bright_green]")
    else:
        console.print(f"[bright_green]Start and End time : {time_range.display}[/bright_green]")
    return time_range


def ask_extra_commands(ctx: SessionContext) -> tuple[str, list[str]]:
    """Return the raw extra-flags string and its tokens."""
    console.print()
    raw = ""
    if ctx.settings.extra_commands_history:
        items: list[MenuItem] = [
            MenuChoice(NO_EXTRA_COMMANDS, NO_EXTRA_COMMANDS),
            MenuChoice(ENTER_EXTRA_COMMANDS, ENTER_EXTRA_COMMANDS),
            MenuSeparator("Extra Commands History"),
        ]
        items.extend(MenuChoice(cmd, cmd) for cmd in ctx.settings.extra_commands_history)
        picked: str = ask_select("Extra Commands:", items)
        if picked == NO_EXTRA_COMMANDS:
            raw = ""
        elif picked != ENTER_EXTRA_COMMANDS:
            raw = picked
        else:
            raw = ask_text("Enter Extra Commands:")
    else:
        raw = ask_text("Enter Extra Commands:")

    while True:
        try:
            tokens = split_extra_commands(raw)
            pair_extra_tokens(tokens)
        except ValueError as exc:
            console.print(f"[bright_red]Could not parse extra commands: {exc}[/bright_red]")
            raw = ask_text("Enter Extra Commands:", default=raw)
            continue
        break

    console.print(
        f"[bright_green]Extra Commands: {raw.strip() or NO_EXTRA_COMMANDS}[/bright_green]"
    )
    return raw.strip(), tokens


def run_download(ctx: SessionContext, command: tuple[str, ...]) -> bool:
    """Run yt-dlp, offering a retry after each failure (bounded)."""
    for attempt in range(1, MAX_DOWNLOAD_ATTEMPTS + 1):
        try:
            ctx.runner.run_attached(command)
        except ExternalToolError as exc:
            logger.warning("Download attempt %d failed: %s", attempt, exc)
            console.print(f"[bold red]Download failed:[/bold red] {exc}")
            if exc.stderr:
                console.print(f"[red]{exc.stderr}[/red]")
            if attempt == MAX_DOWNLOAD_ATTEMPTS:
                console.print("[yellow]Giving up after repeated failures.[/yellow]")
                return False
            if not ask_confirm("Retry download?", default=True):
                return False
            continue
        return True
    return False


def run_cycle(ctx: SessionContext, default_url: str = "") -> CycleResult:
    """One full pass from URL prompt to finished download."""
    show_history_counts(ctx.settings)

    cycle = DownloadCycle()
    cycle.seed(ctx.settings.ytdlp_path, ctx.settings.ffmpeg_path)

    console.print()
    url, video_id = prompt_video_url(default_url)
    video_url = show_video_ids(url, video_id)
    cycle.resolve_url(video_url)

    with spinner("Fetching video metadata...", success="Fetched video metadata."):
        cached = ctx.cache.ensure_fresh(video_id, video_url)
    ctx.commit(history.record_url(ctx.settings, ctx.cache.url_history_entry(cached.entry)))
    cycle.metadata_ready(str(cached.info_json_path))
    console.print(f"\n[bright_red]{cached.entry.fulltitle}[/bright_red]\n")

    fmt = choose_format(ctx, cached.entry)
    console.print(f"[bright_green]Selected Format: {fmt.display_name}[/bright_green]")
    cycle.choose_format(fmt)

    location = choose_download_location(ctx)
    console.print(f"[bright_green]Selected Download Location: {location}[/bright_green]")
    cycle.choose_location(location)

    cycle.apply_sections(ask_time_range())

    extra_raw, extra_tokens = ask_extra_commands(ctx)
    cycle.apply_extras(extra_tokens)

    save_in_channel = ask_confirm("Save in a channel folder?", default=False)
    save_in_title = ask_confirm("Save in a video title folder?", default=False)
    template = cycle.install_output_template(
        save_in_channel_folder=save_in_channel,
        save_in_video_title_folder=save_in_title,
    )
    if cycle.custom_output_template is not None:
        console.print("[yellow]Using the -o template from Extra Commands.[/yellow]")
    console.print(f"[dim]Output: {template}[/dim]")

    console.print()
    if not ask_confirm("Start Download?"):
        return CycleResult(proceed=False)

    doc = history.record_download_location(ctx.settings, location)
    doc = history.record_extra_commands(doc, extra_raw)
    ctx.commit(doc)

    command = cycle.ready()
    logger.info("Command: %s", list(command))
    if not run_download(ctx, command):
        return CycleResult(proceed=True, downloaded=False)

    record = DownloadRecord(
        url=video_url,
        title=cached.entry.fulltitle,
        format=fmt.label,
        download_location=location,
        output_template=template,
        sections=cycle.time_range.section_value if cycle.time_range else "",
        downloaded_at=ctx.clock().astimezone(timezone.utc).isoformat(),
    )
    ctx.commit(history.record_download(ctx.settings, record))
    console.print("\n[bold green]Download complete.[/bold green]")
    return CycleResult(proceed=True, downloaded=True)


# ---------------------------------------------------------------------------
# Loop
# ---------------------------------------------------------------------------

def run_session(ctx: SessionContext) -> None:
    """Repeat download cycles until the user declines or cancels.

    A failed metadata fetch ends only the current cycle.
    """
    default_url = ctx.initial_url
    while True:
        try:
            result = run_cycle(ctx, default_url)
        except ExternalToolError as exc:
            console.print(f"[bold red]Error:[/bold red] {exc}")
            if exc.stderr:
                console.print(f"[red]{exc.stderr}[/red]")
            if exc.hint:
                console.print(f"[yellow]Hint:[/yellow] {exc.hint}")
            result = CycleResult(proceed=True)
        if not result.proceed:
            return
        default_url = ""
