"""Network helpers: reachability, public IP, release lookup, file fetch.

All ``requests`` / socket exceptions are handled here.  Lookups that
only decorate the UI (public IP, latest release) return ``None`` on
failure; thumbnail fetches raise
:class:`~ytdlp_interactive.exceptions.ArtifactFetchError`.
"""

from __future__ import annotations

import logging
import re
import socket
from pathlib import Path

import requests

from ytdlp_interactive.exceptions import ArtifactFetchError

logger = logging.getLogger(__name__)

HTTP_TIMEOUT_SECONDS: float = 15.0
CONNECTIVITY_PROBE_HOST: str = "google.com"
PUBLIC_IP_URL: str = "https://api.ipify.org?format=json"
YTDLP_RELEASES_URL: str = "https://github.com/yt-dlp/yt-dlp/releases"

_RELEASE_TAG_RE = re.compile(r'href="/yt-dlp/yt-dlp/releases/tag/([0-9][0-9.]*)"')


def is_online(host: str = CONNECTIVITY_PROBE_HOST) -> bool:
    """DNS-resolve *host*; ``False`` on any resolution failure."""
    try:
        socket.getaddrinfo(host, 443)
    except OSError as exc:
        logger.debug("DNS lookup for %s failed: %s", host, exc)
        return False
    return True


def get_public_ip(timeout: float = HTTP_TIMEOUT_SECONDS) -> str | None:
    try:
        resp = requests.get(PUBLIC_IP_URL, timeout=timeout)
        resp.raise_for_status()
        ip = resp.json().get("ip")
    except (requests.RequestException, ValueError) as exc:
        logger.warning("Failed to fetch public IP: %s", exc)
        return None
    return str(ip) if ip else None


def parse_latest_release(html: str) -> str | None:
    """Return the first release tag linked from the releases page."""
    match = _RELEASE_TAG_RE.search(html)
    return match.group(1) if match else None


def fetch_latest_ytdlp_version(timeout: float = HTTP_TIMEOUT_SECONDS) -> str | None:
    try:
        resp = requests.get(YTDLP_RELEASES_URL, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as exc:
        logger.warning("Failed to fetch latest yt-dlp version: %s", exc)
        return None
    version = parse_latest_release(resp.text)
    if version is None:
        logger.warning("No release tag found on %s", YTDLP_RELEASES_URL)
    return version


class HttpFileDownloader:
    """Satisfies :class:`~ytdlp_interactive.core.protocols.FileDownloader`."""

    def __init__(self, timeout: float = HTTP_TIMEOUT_SECONDS) -> None:
        self._timeout = timeout

    def download_file(self, url: str, destination: Path) -> None:
        try:
            resp = requests.get(url, timeout=self._timeout)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise ArtifactFetchError(f"Failed to download {url}: {exc}") from exc
        try:
            destination.write_bytes(resp.content)
        except OSError as exc:
            raise ArtifactFetchError(f"Failed to write {destination}: {exc}") from exc
