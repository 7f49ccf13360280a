"""Per-cycle download state machine.

One :class:`DownloadCycle` exists per interactive cycle.  It owns the
:class:`~ytdlp_interactive.core.arguments.ArgumentList` and only lets it
grow in the fixed stage order::

    RESET → SEEDED → URL_RESOLVED → METADATA_READY → FORMAT_CHOSEN
          → LOCATION_CHOSEN → SECTIONS_APPLIED → EXTRAS_APPLIED
          → OUTPUT_TEMPLATE_INSTALLED → READY_TO_RUN

Calling a transition from any other stage raises
:class:`~ytdlp_interactive.exceptions.CycleStateError`.
"""

from __future__ import annotations

import enum

from ytdlp_interactive.core.arguments import (
    FORMAT_FLAG,
    KEYFRAMES_FLAG,
    LOAD_INFO_JSON_FLAG,
    OUTPUT_FLAG,
    SECTIONS_FLAG,
    ArgumentList,
    build_output_template,
    format_selection_value,
    pair_extra_tokens,
)
from ytdlp_interactive.core.models import Format, TimeRange
from ytdlp_interactive.exceptions import CycleStateError


class CycleStage(enum.IntEnum):
    RESET = 0
    SEEDED = 1
    URL_RESOLVED = 2
    METADATA_READY = 3
    FORMAT_CHOSEN = 4
    LOCATION_CHOSEN = 5
    SECTIONS_APPLIED = 6
    EXTRAS_APPLIED = 7
    OUTPUT_TEMPLATE_INSTALLED = 8
    READY_TO_RUN = 9


class DownloadCycle:
    """Accumulates one download's choices into a yt-dlp command line."""

    def __init__(self) -> None:
        self.args: ArgumentList = ArgumentList()
        self.stage: CycleStage = CycleStage.RESET
        self.video_url: str | None = None
        self.format: Format | None = None
        self.download_location: str | None = None
        self.time_range: TimeRange | None = None
        self.extra_tokens: tuple[str, ...] = ()
        self.custom_output_template: str | None = None

    # ------------------------------------------------------------------
    # Transition guard
    # ------------------------------------------------------------------

    def _advance(self, target: CycleStage) -> None:
        expected = CycleStage(target - 1)
        if self.stage is not expected:
            raise CycleStateError(
                f"Cannot move to {target.name} from {self.stage.name}; "
                f"expected {expected.name}.",
            )
        self.stage = target

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def seed(self, downloader_path: str, muxer_path: str) -> None:
        self.args.reset(downloader_path, muxer_path)
        self._advance(CycleStage.SEEDED)

    def resolve_url(self, video_url: str) -> None:
        self._advance(CycleStage.URL_RESOLVED)
        self.video_url = video_url

    def metadata_ready(self, info_json_path: str) -> None:
        self._advance(CycleStage.METADATA_READY)
        self.args.append_pair(LOAD_INFO_JSON_FLAG, info_json_path)

    def choose_format(self, fmt: Format) -> None:
        self._advance(CycleStage.FORMAT_CHOSEN)
        self.format = fmt
        self.args.set_or_replace(FORMAT_FLAG, format_selection_value(fmt))

    def choose_location(self, download_location: str) -> None:
        self._advance(CycleStage.LOCATION_CHOSEN)
        self.download_location = download_location

    def apply_sections(self, time_range: TimeRange | None) -> None:
        self._advance(CycleStage.SECTIONS_APPLIED)
        self.time_range = time_range
        if time_range is None:
            return
        self.args.set_or_replace(SECTIONS_FLAG, time_range.section_value)
        self.args.append(KEYFRAMES_FLAG)

    def apply_extras(self, extra_tokens: list[str] | tuple[str, ...]) -> None:
        """Add user-typed flags.

        A managed flag replaces the value already in place, so ``-f 22``
        overrides the chosen format.  A user ``-o`` is kept as the output
        template.  Raises ``ValueError`` before advancing when a managed
        flag has no value.
        """
        items = pair_extra_tokens(extra_tokens)
        self._advance(CycleStage.EXTRAS_APPLIED)
        self.extra_tokens = tuple(extra_tokens)
        for flag, value in items:
            if value is None:
                self.args.append(flag)
                continue
            self.args.set_or_replace(flag, value)
            if flag == OUTPUT_FLAG:
                self.custom_output_template = value

    def install_output_template(
        self,
        *,
        save_in_channel_folder: bool = False,
        save_in_video_title_folder: bool = False,
    ) -> str:
        """Install the synthesized ``-o`` template and return the one in effect.

        When the extras already set ``-o``, that template stays and is
        returned unchanged.
        """
        self._advance(CycleStage.OUTPUT_TEMPLATE_INSTALLED)
        if self.custom_output_template is not None:
            return self.custom_output_template
        if self.format is None or self.download_location is None:
            raise CycleStateError("Format and download location must be chosen first.")
        template = build_output_template(
            self.download_location,
            self.format.label,
            self.time_range.start if self.time_range else None,
            self.time_range.end if self.time_range else None,
            save_in_channel_folder=save_in_channel_folder,
            save_in_video_title_folder=save_in_video_title_folder,
        )
        self.args.set_or_replace(OUTPUT_FLAG, template)
        return template

    def ready(self) -> tuple[str, ...]:
        """Finish the cycle and return the command line to run."""
        self._advance(CycleStage.READY_TO_RUN)
        return self.args.tokens

    @property
    def output_template(self) -> str | None:
        return self.args.value_of(OUTPUT_FLAG)
