"""Tests for domain models (core/models.py).

All models are frozen dataclasses; these tests cover immutability, the
format variant and tolerant parsing of persisted JSON.
"""

from __future__ import annotations

import dataclasses

import pytest

from conftest import MANIFEST_URL, make_info

from ytdlp_interactive.core.models import (
    DefaultFormat,
    DownloadRecord,
    ExplicitFormat,
    SettingsDocument,
    TimeRange,
    UrlHistoryEntry,
    VideoMetadataCacheEntry,
    format_from_dict,
    format_to_dict,
)


# ---------------------------------------------------------------------------
# Format variant
# ---------------------------------------------------------------------------

class TestFormatVariant:
    def test_default_format_label(self) -> None:
        fmt = DefaultFormat()
        assert fmt.spec == "bv+ba"
        assert fmt.label == "bv+ba"
        assert fmt.display_name == "Best Video + Best Audio"

    def test_custom_default_display(self) -> None:
        assert DefaultFormat("bv*").display_name == "bv*"

    def test_explicit_audio_only(self) -> None:
        fmt = ExplicitFormat(id="251", label="medium", media="audio")
        assert fmt.is_audio_only is True

    def test_explicit_video(self) -> None:
        fmt = ExplicitFormat(id="137", label="1080p")
        assert fmt.is_audio_only is False
        assert fmt.display_name == "137 (1080p)"

    def test_frozen(self) -> None:
        fmt = ExplicitFormat(id="137", label="1080p")
        with pytest.raises(dataclasses.FrozenInstanceError):
            fmt.id = "22"  # type: ignore[misc]

    def test_default_to_dict_is_string(self) -> None:
        assert format_to_dict(DefaultFormat()) == "bv+ba"

    def test_explicit_to_dict(self) -> None:
        fmt = ExplicitFormat(id="137", label="1080p", media="video")
        assert format_to_dict(fmt) == {"id": "137", "label": "1080p", "media": "video"}
        assert format_from_dict(format_to_dict(fmt)) == fmt

    def test_legacy_shape(self) -> None:
        parsed = format_from_dict({"value": "22", "info": "720p"})
        assert parsed == ExplicitFormat(id="22", label="720p", media="video")

    @pytest.mark.parametrize("raw", [None, "", 42, {}, {"label": "x"}, []])
    def test_unknown_shapes_fall_back_to_default(self, raw: object) -> None:
        assert format_from_dict(raw) == DefaultFormat()


# ---------------------------------------------------------------------------
# History entries
# ---------------------------------------------------------------------------

class TestHistoryEntries:
    def test_url_entry_missing_keys(self) -> None:
        entry = UrlHistoryEntry.from_dict({"url": "https://youtu.be/x", "title": None})
        assert entry == UrlHistoryEntry(url="https://youtu.be/x")

    def test_download_record_round_trip(self) -> None:
        record = DownloadRecord(
            url="https://youtu.be/x",
            title="T",
            format="137+ba",
            download_location="/dl",
            output_template="/dl/%(title)s_1080p.%(ext)s",
            sections="*10-inf",
            downloaded_at="2024-01-01T00:00:00",
        )
        assert DownloadRecord.from_dict(record.to_dict()) == record


# ---------------------------------------------------------------------------
# Settings document
# ---------------------------------------------------------------------------

class TestSettingsDocument:
    def test_empty_dict_gives_defaults(self) -> None:
        doc = SettingsDocument.from_dict({})
        assert doc == SettingsDocument()
        assert doc.default_format == DefaultFormat()
        assert doc.url_history == ()

    def test_to_dict_uses_persisted_key_names(self) -> None:
        data = SettingsDocument().to_dict()
        for key in (
            "ytdlp_path",
            "ffmpeg_path",
            "ytdlp_version",
            "ytdlp_version_latest",
            "ffmpeg_version",
            "last_fetched_ytdlp_version_at",
            "platform",
            "app_folder",
            "downloads_data_folder",
            "user_downloads_location",
            "default_download_location",
            "url_history",
            "download_location_history",
            "extra_commands_history",
            "downloads_history",
            "default_format",
        ):
            assert key in data

    def test_round_trip(self) -> None:
        doc = SettingsDocument(
            ytdlp_path="/usr/bin/yt-dlp",
            ffmpeg_path="/usr/bin/ffmpeg",
            url_history=(UrlHistoryEntry(url="https://youtu.be/a", title="A"),),
            download_location_history=("/dl",),
            extra_commands_history=("--embed-subs",),
            default_format=ExplicitFormat(id="251", label="medium", media="audio"),
        )
        assert SettingsDocument.from_dict(doc.to_dict()) == doc

    def test_unknown_keys_preserved(self) -> None:
        doc = SettingsDocument.from_dict({"ytdlp_path": "y", "theme": "dark"})
        assert doc.extras == {"theme": "dark"}
        assert doc.to_dict()["theme"] == "dark"

    def test_malformed_lists_are_dropped(self) -> None:
        doc = SettingsDocument.from_dict({
            "url_history": "nope",
            "download_location_history": ["/a", 3, None, "/b"],
            "downloads_history": [{"url": "u"}, "junk"],
        })
        assert doc.url_history == ()
        assert doc.download_location_history == ("/a", "/b")
        assert len(doc.downloads_history) == 1

    def test_null_text_becomes_empty(self) -> None:
        assert SettingsDocument.from_dict({"ytdlp_version": None}).ytdlp_version == ""


# ---------------------------------------------------------------------------
# Metadata cache entry
# ---------------------------------------------------------------------------

class TestVideoMetadataCacheEntry:
    def test_from_info(self) -> None:
        info = make_info(expire_timestamp=1700000000, expire_locale_string="x")
        entry = VideoMetadataCacheEntry.from_info(info)
        assert entry.video_id == "dQw4w9WgXcQ"
        assert entry.fulltitle == "Weird/Name*Test?"
        assert len(entry.formats) == 4
        assert entry.formats[3]["manifest_url"] == MANIFEST_URL
        assert entry.expire_timestamp == 1700000000

    def test_missing_expire(self) -> None:
        entry = VideoMetadataCacheEntry.from_info(make_info())
        assert entry.expire_timestamp is None
        assert entry.expire_locale_string == ""

    def test_title_fallback(self) -> None:
        entry = VideoMetadataCacheEntry.from_info(make_info(fulltitle=None, title="Plain"))
        assert entry.fulltitle == "Plain"

    def test_bad_formats(self) -> None:
        entry = VideoMetadataCacheEntry.from_info(make_info(formats="nope"))
        assert entry.formats == ()


class TestTimeRange:
    def test_open_ended(self) -> None:
        assert TimeRange("10").section_value == "*10-inf"
        assert TimeRange("10").display == "10 - inf"

    def test_closed(self) -> None:
        assert TimeRange("10", "20").section_value == "*10-20"
