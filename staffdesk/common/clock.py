"""Wall-clock helpers in the organisation's local timezone.

Services call these through the module (``clock.local_today()``) so tests can
patch a single place.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from staffdesk.config import settings


def local_zone() -> ZoneInfo:
    return ZoneInfo(settings.TIMEZONE)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def local_today() -> date:
    """Current date in the configured timezone."""
    return utc_now().astimezone(local_zone()).date()


def local_at(day: date, wall: time) -> datetime:
    """``day`` at wall-clock ``wall`` local time, as an aware UTC datetime."""
    return datetime.combine(day, wall, tzinfo=local_zone()).astimezone(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalise DB timestamps; naive values (SQLite) are stored as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
