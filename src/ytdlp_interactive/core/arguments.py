"""yt-dlp argument assembly.

:class:`ArgumentList` is the ordered token sequence handed to the
process runner.  Tokens are either standalone (``--force-keyframes-at-cuts``)
or ``flag value`` pairs.  Flags written through
:meth:`ArgumentList.set_or_replace` occur at most once; their value is
the most recently set one.

The remaining functions are pure translations from user choices to
yt-dlp syntax.
"""

from __future__ import annotations

import os
import shlex
from collections.abc import Iterable, Iterator

from ytdlp_interactive.core.models import DefaultFormat, Format, TimeRange

MUXER_LOCATION_FLAG: str = "--ffmpeg-location"
FORMAT_FLAG: str = "-f"
OUTPUT_FLAG: str = "-o"
SECTIONS_FLAG: str = "--download-sections"
KEYFRAMES_FLAG: str = "--force-keyframes-at-cuts"
LOAD_INFO_JSON_FLAG: str = "--load-info-json"

TITLE_PLACEHOLDER: str = "%(title)s"
CHANNEL_PLACEHOLDER: str = "%(channel)s"
EXT_PLACEHOLDER: str = "%(ext)s"

BEST_AUDIO_SUFFIX: str = "+ba"

# Long spellings yt-dlp accepts for the flags owned by set_or_replace.
MANAGED_FLAG_ALIASES: dict[str, str] = {
    FORMAT_FLAG: FORMAT_FLAG,
    "--format": FORMAT_FLAG,
    OUTPUT_FLAG: OUTPUT_FLAG,
    "--output": OUTPUT_FLAG,
    SECTIONS_FLAG: SECTIONS_FLAG,
}


class ArgumentList:
    """Mutable, order-preserving yt-dlp command line."""

    def __init__(self) -> None:
        self._tokens: list[str] = []

    def __iter__(self) -> Iterator[str]:
        return iter(self._tokens)

    def __len__(self) -> int:
        return len(self._tokens)

    def __repr__(self) -> str:
        return f"ArgumentList({self._tokens!r})"

    @property
    def tokens(self) -> tuple[str, ...]:
        return tuple(self._tokens)

    def reset(self, downloader_path: str, muxer_path: str) -> None:
        """Clear the sequence and seed the binary plus muxer location."""
        self._tokens = [downloader_path, MUXER_LOCATION_FLAG, muxer_path]

    def append(self, token: str) -> None:
        self._tokens.append(token)

    def append_pair(self, flag: str, value: str) -> None:
        self._tokens.extend((flag, value))

    def set_or_replace(self, flag: str, value: str) -> None:
        """Install ``flag value``, replacing the value of an existing *flag*.

        The first occurrence of *flag* keeps its position; only the token
        right after it changes.
        """
        try:
            index = self._tokens.index(flag)
        except ValueError:
            self.append_pair(flag, value)
            return
        if index + 1 < len(self._tokens):
            self._tokens[index + 1] = value
        else:
            self._tokens.append(value)

    def value_of(self, flag: str) -> str | None:
        """Return the value following the first *flag*, or ``None``."""
        try:
            index = self._tokens.index(flag)
        except ValueError:
            return None
        if index + 1 < len(self._tokens):
            return self._tokens[index + 1]
        return None

    def count(self, token: str) -> int:
        return self._tokens.count(token)


# ---------------------------------------------------------------------------
# Choice → yt-dlp syntax
# ---------------------------------------------------------------------------

def format_selection_value(fmt: Format) -> str:
    """Return the ``-f`` value for *fmt*.

    Audio-only streams are used as-is; anything else is paired with the
    best audio stream (``<id>+ba``).  A default selector that already
    combines streams (contains ``+``) is passed through unchanged.
    """
    if isinstance(fmt, DefaultFormat):
        if "+" in fmt.spec:
            return fmt.spec
        return fmt.spec + BEST_AUDIO_SUFFIX
    if fmt.is_audio_only:
        return fmt.id
    return fmt.id + BEST_AUDIO_SUFFIX


def parse_time_range(text: str) -> TimeRange | None:
    """Parse ``"start [end]"``; blank input means no trimming."""
    parts = text.split()
    if not parts:
        return None
    return TimeRange(start=parts[0], end=parts[1] if len(parts) > 1 else None)


def split_extra_commands(text: str) -> list[str]:
    """Tokenise a user-typed extra-flags string.

    Raises
    ------
    ValueError
        When quoting is unbalanced.
    """
    return shlex.split(text.strip())


def pair_extra_tokens(tokens: Iterable[str]) -> list[tuple[str, str | None]]:
    """Group extra tokens into ``(flag, value)`` items.

    Managed flags (``-f``, ``-o``, ``--download-sections`` and their long
    spellings, with or without ``=value``) come back under their canonical
    name together with their value.  Every other token is returned alone
    with ``None``.

    Raises
    ------
    ValueError
        When a managed flag is the last token and has no value.
    """
    items: list[tuple[str, str | None]] = []
    pending = iter(tokens)
    for token in pending:
        name, sep, inline = token.partition("=")
        canonical = MANAGED_FLAG_ALIASES.get(name)
        if canonical is None:
            items.append((token, None))
            continue
        if sep:
            items.append((canonical, inline))
            continue
        value = next(pending, None)
        if value is None:
            raise ValueError(f"{token} needs a value.")
        items.append((canonical, value))
    return items


def build_output_template(
    download_location: str,
    format_label: str,
    start_time: str | None = None,
    end_time: str | None = None,
    *,
    save_in_channel_folder: bool = False,
    save_in_video_title_folder: bool = False,
) -> str:
    """Compose the ``-o`` template for a download.

    Layout: ``<location>/[%(channel)s/][%(title)s/]%(title)s_<label>[ range].%(ext)s``
    where the range is ``" [<start> -]"`` or ``" [<start> - <end>]"``.
    """
    segments: list[str] = []
    if save_in_channel_folder:
        segments.append(CHANNEL_PLACEHOLDER)
    if save_in_video_title_folder:
        segments.append(TITLE_PLACEHOLDER)

    stem = f"{TITLE_PLACEHOLDER}_{format_label}"
    if start_time and not end_time:
        stem += f" [{start_time} -]"
    elif start_time and end_time:
        stem += f" [{start_time} - {end_time}]"
    segments.append(f"{stem}.{EXT_PLACEHOLDER}")

    return os.path.join(download_location, *segments)
