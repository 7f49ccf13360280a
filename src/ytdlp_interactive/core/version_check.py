"""Latest-release throttle and yt-dlp version comparison.

yt-dlp versions are dot-dates (``2024.08.06``, sometimes with a fourth
build component).  The latest-release lookup is cached in the settings
document and refreshed at most once per wall-clock hour.

The throttle compares **hour buckets**, not elapsed time: a lookup at
10:59 is refreshed by a check at 11:00, while one at 10:00 suppresses
refreshes until 11:00.  Buckets carry the date, so a lookup late in the
evening is refreshed after midnight.
"""

from __future__ import annotations

from datetime import date, datetime


def _local_hour_bucket(moment: datetime) -> datetime:
    if moment.tzinfo is not None:
        moment = moment.astimezone().replace(tzinfo=None)
    return moment.replace(minute=0, second=0, microsecond=0)


def should_refresh_latest(last_fetched_at: str, now: datetime) -> bool:
    """Return ``True`` when the cached latest version must be refetched."""
    if not last_fetched_at:
        return True
    try:
        last = datetime.fromisoformat(last_fetched_at.replace("Z", "+00:00"))
    except ValueError:
        return True
    return _local_hour_bucket(now) > _local_hour_bucket(last)


def parse_dot_date(version: str | None) -> date | None:
    """Parse ``YYYY.MM.DD[...]`` into a :class:`date`, ``None`` if malformed."""
    if not version:
        return None
    parts = version.strip().split(".")
    if len(parts) < 3:
        return None
    try:
        return date(int(parts[0]), int(parts[1]), int(parts[2]))
    except ValueError:
        return None


def is_update_available(latest: str | None, installed: str | None) -> bool:
    latest_date = parse_dot_date(latest)
    installed_date = parse_dot_date(installed)
    if latest_date is None or installed_date is None:
        return False
    return latest_date > installed_date
