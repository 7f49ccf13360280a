"""ytdlp-interactive: guided YouTube downloads through the yt-dlp binary.

Remembers URLs, download locations, extra flags and defaults between
sessions and assembles the yt-dlp command line for each download.
"""

from ytdlp_interactive.version import __version__

__all__: list[str] = ["__version__"]
