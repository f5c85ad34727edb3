"""
Timestamp helpers for snapshot as-of instants and reporting-zone trading days.
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any
from zoneinfo import ZoneInfo

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_timestamp(s: str) -> datetime:
    """Parse ISO timestamp string to an aware UTC datetime. Raises ValueError on failure."""
    s = s.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_timestamp_or_none(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return parse_timestamp(value)
    except ValueError:
        return None


def to_millis(dt: datetime) -> int:
    return int(round(dt.timestamp() * 1000))


def from_seconds(ts: int | float) -> datetime:
    return datetime.fromtimestamp(float(ts), tz=timezone.utc)


def trading_day(as_of: datetime | str | None, tz: str = "America/New_York") -> str:
    """
    Calendar day (YYYY-MM-DD) of an as-of instant in the reporting zone.

    Snapshots are stamped shortly after the prior session's close, so the
    reporting-zone date is the trading day being reported. Missing or
    unparseable instants fall back to the epoch.
    """
    dt = parse_timestamp_or_none(as_of) or EPOCH
    return dt.astimezone(ZoneInfo(tz)).date().isoformat()


def local_timestamp(as_of: datetime | str | None, tz: str = "America/New_York") -> str:
    """Human-readable wall-clock time in the reporting zone, or "n/a"."""
    dt = parse_timestamp_or_none(as_of)
    if dt is None:
        return "n/a"
    return dt.astimezone(ZoneInfo(tz)).strftime("%Y-%m-%d %H:%M:%S %Z")


def today_in(tz: str = "America/New_York") -> date:
    return datetime.now(ZoneInfo(tz)).date()
