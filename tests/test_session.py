"""Tests for the interactive session driver (cli/session.py).

Prompts, network and process calls are replaced; the settings store is
real and writes into ``tmp_path``.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from conftest import make_info

from ytdlp_interactive.cli import session
from ytdlp_interactive.cli.session import CycleResult, SessionContext
from ytdlp_interactive.core.models import (
    SettingsDocument,
    UrlHistoryEntry,
    VideoMetadataCacheEntry,
)
from ytdlp_interactive.exceptions import (
    ConnectivityError,
    ExternalToolError,
    PrerequisiteMissingError,
)
from ytdlp_interactive.infra.app_paths import AppPaths
from ytdlp_interactive.infra.metadata_cache import CachedVideo, MetadataCache
from ytdlp_interactive.infra.process_runner import ProcessRunner
from ytdlp_interactive.infra.settings_store import SettingsStore

VIDEO_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
FIXED_NOW = datetime(2024, 1, 1, 10, 30)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class ScriptedPrompts:
    """Answers prompts by message text, in order, and records defaults."""

    def __init__(self, answers: dict[str, list[Any]]) -> None:
        self.answers = {message: list(values) for message, values in answers.items()}
        self.defaults: dict[str, list[Any]] = {}

    def _next(self, message: str, default: Any) -> Any:
        self.defaults.setdefault(message, []).append(default)
        queue = self.answers.get(message)
        if not queue:
            raise AssertionError(f"Unexpected prompt: {message!r}")
        return queue.pop(0)

    def text(self, message: str, default: str = "") -> str:
        return self._next(message, default)

    def confirm(self, message: str, default: bool = True) -> bool:
        return self._next(message, default)

    def select(self, message: str, items: Any) -> Any:
        return self._next(message, None)


def _install(monkeypatch: pytest.MonkeyPatch, prompts: ScriptedPrompts) -> None:
    monkeypatch.setattr(session, "ask_text", prompts.text)
    monkeypatch.setattr(session, "ask_confirm", prompts.confirm)
    monkeypatch.setattr(session, "ask_select", prompts.select)


def _context(app_paths: AppPaths, tmp_path: Path, **settings: Any) -> SessionContext:
    store = SettingsStore(app_paths)
    doc = SettingsDocument(
        ytdlp_path="yt-dlp",
        ffmpeg_path="ffmpeg",
        ytdlp_version="2024.07.01",
        default_download_location=str(tmp_path / "dl"),
        **settings,
    )
    store.save(doc)

    entry = VideoMetadataCacheEntry.from_info(make_info(expire_timestamp=1700000000))
    cache = MagicMock(spec=MetadataCache)
    cache.ensure_fresh.return_value = CachedVideo(
        entry=entry,
        info_json_path=tmp_path / "cache" / "dQw4w9WgXcQ.info.json",
        refreshed=True,
    )
    cache.url_history_entry.return_value = UrlHistoryEntry(url=VIDEO_URL, title=entry.fulltitle)

    return SessionContext(
        paths=app_paths,
        store=store,
        settings=doc,
        runner=MagicMock(spec=ProcessRunner),
        cache=cache,
        clock=lambda: FIXED_NOW,
    )


def _happy_answers(**overrides: list[Any]) -> dict[str, list[Any]]:
    answers: dict[str, list[Any]] = {
        "Enter URL:": [VIDEO_URL],
        "Use default format?": [True],
        "Use default download location?": [True],
        "Download section of video? [start end]": ["10 20"],
        "Enter Extra Commands:": ["--embed-subs"],
        "Save in a channel folder?": [False],
        "Save in a video title folder?": [False],
        "Start Download?": [True],
    }
    answers.update(overrides)
    return answers


# ---------------------------------------------------------------------------
# Cycle
# ---------------------------------------------------------------------------

class TestRunCycle:
    def test_full_cycle(
        self, app_paths: AppPaths, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        ctx = _context(app_paths, tmp_path)
        _install(monkeypatch, ScriptedPrompts(_happy_answers()))

        result = session.run_cycle(ctx)

        assert result == CycleResult(proceed=True, downloaded=True)
        (command,) = ctx.runner.run_attached.call_args.args
        assert command[:3] == ("yt-dlp", "--ffmpeg-location", "ffmpeg")
        assert command[command.index("-f") + 1] == "bv+ba"
        assert command[command.index("--download-sections") + 1] == "*10-20"
        assert "--embed-subs" in command
        assert command[-2] == "-o"
        assert command[-1].endswith("%(title)s_bv+ba [10 - 20].%(ext)s")

        saved = ctx.store.load()
        assert saved.url_history[0].url == VIDEO_URL
        assert saved.download_location_history == (str(tmp_path / "dl"),)
        assert saved.extra_commands_history == ("--embed-subs",)
        assert len(saved.downloads_history) == 1
        record = saved.downloads_history[0]
        assert record.url == VIDEO_URL
        assert record.sections == "*10-20"
        assert record.output_template == command[-1]

    def test_declined_download_keeps_url_only(
        self, app_paths: AppPaths, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        ctx = _context(app_paths, tmp_path)
        _install(monkeypatch, ScriptedPrompts(_happy_answers(**{"Start Download?": [False]})))

        result = session.run_cycle(ctx)

        assert result.proceed is False
        ctx.runner.run_attached.assert_not_called()
        saved = ctx.store.load()
        assert len(saved.url_history) == 1
        assert saved.download_location_history == ()
        assert saved.downloads_history == ()

    def test_invalid_url_reprompts(
        self, app_paths: AppPaths, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        ctx = _context(app_paths, tmp_path)
        prompts = ScriptedPrompts(_happy_answers(**{
            "Enter URL:": ["https://vimeo.com/1", VIDEO_URL],
        }))
        _install(monkeypatch, prompts)

        assert session.run_cycle(ctx, "https://vimeo.com/1").downloaded is True
        assert prompts.defaults["Enter URL:"] == ["https://vimeo.com/1", "https://vimeo.com/1"]
        ctx.cache.ensure_fresh.assert_called_once_with("dQw4w9WgXcQ", VIDEO_URL)

    def test_retry_then_success(
        self, app_paths: AppPaths, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        ctx = _context(app_paths, tmp_path)
        ctx.runner.run_attached.side_effect = [
            ExternalToolError("Command failed with code 1", returncode=1, stderr="403"),
            None,
        ]
        _install(monkeypatch, ScriptedPrompts(_happy_answers(**{"Retry download?": [True]})))

        assert session.run_cycle(ctx).downloaded is True
        assert ctx.runner.run_attached.call_count == 2

    def test_retry_declined(
        self, app_paths: AppPaths, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        ctx = _context(app_paths, tmp_path)
        ctx.runner.run_attached.side_effect = ExternalToolError("failed", returncode=1)
        _install(monkeypatch, ScriptedPrompts(_happy_answers(**{"Retry download?": [False]})))

        result = session.run_cycle(ctx)

        assert result == CycleResult(proceed=True, downloaded=False)
        assert ctx.store.load().downloads_history == ()

    def test_retries_are_bounded(
        self, app_paths: AppPaths, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        ctx = _context(app_paths, tmp_path)
        ctx.runner.run_attached.side_effect = ExternalToolError("failed", returncode=1)
        _install(monkeypatch, ScriptedPrompts(_happy_answers(**{
            "Retry download?": [True, True],
        })))

        assert session.run_cycle(ctx).downloaded is False
        assert ctx.runner.run_attached.call_count == session.MAX_DOWNLOAD_ATTEMPTS

    def test_explicit_format_set_as_default(
        self, app_paths: AppPaths, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        ctx = _context(app_paths, tmp_path)
        _install(monkeypatch, ScriptedPrompts(_happy_answers(**{
            "Use default format?": [False],
            "Set this format as default?": [True],
        })))
        monkeypatch.setattr(
            session,
            "prompt_format_selection",
            lambda entry, grouped: grouped.find("251").to_format(),
        )

        session.run_cycle(ctx)

        (command,) = ctx.runner.run_attached.call_args.args
        assert command[command.index("-f") + 1] == "251"
        assert ctx.store.load().default_format.id == "251"

    def test_location_and_extras_from_history(
        self, app_paths: AppPaths, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        ctx = _context(
            app_paths, tmp_path,
            download_location_history=("/old", "/older"),
            extra_commands_history=("--no-mtime",),
        )
        _install(monkeypatch, ScriptedPrompts(_happy_answers(**{
            "Use default download location?": [False],
            "Select an option:": ["/older"],
            "Set this download location as default?": [False],
            "Extra Commands:": ["--no-mtime"],
            "Enter Extra Commands:": [],
        })))

        session.run_cycle(ctx)

        saved = ctx.store.load()
        assert saved.download_location_history == ("/older", "/old")
        assert saved.extra_commands_history == ("--no-mtime",)
        (command,) = ctx.runner.run_attached.call_args.args
        assert command[-1].startswith("/older")

    def test_unbalanced_extra_commands_reprompt(
        self, app_paths: AppPaths, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        ctx = _context(app_paths, tmp_path)
        _install(monkeypatch, ScriptedPrompts(_happy_answers(**{
            "Enter Extra Commands:": ['--sub-langs "en', '--sub-langs "en"'],
        })))

        session.run_cycle(ctx)

        (command,) = ctx.runner.run_attached.call_args.args
        assert command[command.index("--sub-langs") + 1] == "en"

    def test_extra_format_and_output_override_choices(
        self, app_paths: AppPaths, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        ctx = _context(app_paths, tmp_path)
        _install(monkeypatch, ScriptedPrompts(_happy_answers(**{
            "Enter Extra Commands:": ["-f 22 -o /mine/%(id)s.%(ext)s"],
        })))

        session.run_cycle(ctx)

        (command,) = ctx.runner.run_attached.call_args.args
        assert command.count("-f") == 1
        assert command.count("-o") == 1
        assert command[command.index("-f") + 1] == "22"
        assert command[command.index("-o") + 1] == "/mine/%(id)s.%(ext)s"
        saved = ctx.store.load()
        assert saved.downloads_history[0].output_template == "/mine/%(id)s.%(ext)s"

    def test_managed_flag_without_value_reprompts(
        self, app_paths: AppPaths, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        ctx = _context(app_paths, tmp_path)
        _install(monkeypatch, ScriptedPrompts(_happy_answers(**{
            "Enter Extra Commands:": ["--embed-subs -o", "--embed-subs"],
        })))

        session.run_cycle(ctx)

        (command,) = ctx.runner.run_attached.call_args.args
        assert command.count("-o") == 1
        assert ctx.store.load().extra_commands_history == ("--embed-subs",)


# ---------------------------------------------------------------------------
# Session loop
# ---------------------------------------------------------------------------

class TestRunSession:
    def test_metadata_failure_ends_only_that_cycle(
        self, app_paths: AppPaths, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        ctx = _context(app_paths, tmp_path)
        ctx.initial_url = VIDEO_URL
        run_cycle = MagicMock(side_effect=[
            ExternalToolError("Failed to fetch video metadata.", hint="yt-dlp -U"),
            CycleResult(proceed=True, downloaded=True),
            CycleResult(proceed=False),
        ])
        monkeypatch.setattr(session, "run_cycle", run_cycle)

        session.run_session(ctx)

        assert run_cycle.call_count == 3
        defaults = [call.args[1] for call in run_cycle.call_args_list]
        assert defaults == [VIDEO_URL, "", ""]


# ---------------------------------------------------------------------------
# Startup
# ---------------------------------------------------------------------------

class TestStartup:
    def test_require_connectivity(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(session, "is_online", lambda: False)
        with pytest.raises(ConnectivityError):
            session.require_connectivity()

    def test_latest_version_is_throttled(
        self, app_paths: AppPaths, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        ctx = _context(app_paths, tmp_path)
        fetch = MagicMock(return_value="2024.08.06")
        monkeypatch.setattr(session, "fetch_latest_ytdlp_version", fetch)

        assert session.refresh_latest_version(ctx) == "2024.08.06"
        assert session.refresh_latest_version(ctx) == "2024.08.06"

        fetch.assert_called_once()
        saved = ctx.store.load()
        assert saved.ytdlp_version_latest == "2024.08.06"
        assert saved.last_fetched_ytdlp_version_at != ""

    def test_latest_version_failure_keeps_settings(
        self, app_paths: AppPaths, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        ctx = _context(app_paths, tmp_path)
        monkeypatch.setattr(session, "fetch_latest_ytdlp_version", lambda: None)
        assert session.refresh_latest_version(ctx) is None
        assert ctx.store.load().last_fetched_ytdlp_version_at == ""

    def test_first_run_creates_settings(
        self, app_paths: AppPaths, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr(session, "require_tool", lambda name: Path(f"/usr/bin/{name}"))
        monkeypatch.setattr(session, "probe_ytdlp_version", lambda runner, path: "2024.08.06")
        monkeypatch.setattr(session, "probe_ffmpeg_version", lambda runner, path: "ffmpeg 6")
        store = SettingsStore(app_paths)

        doc = session.load_or_create_settings(store, MagicMock(spec=ProcessRunner))

        assert store.exists()
        assert doc.ytdlp_path == "/usr/bin/yt-dlp"
        assert doc.ffmpeg_version == "ffmpeg 6"

    def test_first_run_without_ffmpeg_writes_nothing(
        self, app_paths: AppPaths, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        def require_tool(name: str) -> Path:
            if name == "ffmpeg":
                raise PrerequisiteMissingError("ffmpeg is not installed or not on PATH.")
            return Path("/usr/bin/yt-dlp")

        monkeypatch.setattr(session, "require_tool", require_tool)
        store = SettingsStore(app_paths)

        with pytest.raises(PrerequisiteMissingError):
            session.load_or_create_settings(store, MagicMock(spec=ProcessRunner))
        assert not store.exists()
