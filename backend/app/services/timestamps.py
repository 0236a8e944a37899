"""Time helpers shared by models, rules and serializers."""

from __future__ import annotations

from datetime import datetime, timezone
from functools import lru_cache
from zoneinfo import ZoneInfo

from ..config import settings


OPERATION_TIME_FORMAT = "%d.%m.%Y %H:%M:%S"


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: datetime | None) -> datetime | None:
    """Treat naive values (SQLite round-trips) as UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None or dt.tzinfo.utcoffset(dt) is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


@lru_cache()
def _display_zone(name: str) -> ZoneInfo:
    return ZoneInfo(name)


def format_operation_time(dt: datetime | None, *, tz_name: str | None = None) -> str | None:
    """Render an instant as DD.MM.YYYY HH:MM:SS in the display timezone."""
    value = as_utc(dt)
    if value is None:
        return None
    zone = _display_zone(tz_name or settings.DISPLAY_TIMEZONE)
    return value.astimezone(zone).strftime(OPERATION_TIME_FORMAT)
