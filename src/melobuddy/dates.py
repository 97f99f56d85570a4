"""Calendar-day helpers for streak logic.

All comparisons use the UTC calendar date in YYYY-MM-DD form. A practice at
23:59 followed by a check at 00:01 the next day is "yesterday", no matter how
few minutes passed.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime, timedelta, timezone

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock: current time in UTC."""
    return datetime.now(tz=timezone.utc)


def day_string(moment: datetime) -> str:
    """Return the UTC calendar day of a moment as YYYY-MM-DD.

    Naive datetimes are taken to be UTC already.
    """
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.date().isoformat()


def today_string(clock: Clock = utc_now) -> str:
    """Return today's UTC date as YYYY-MM-DD."""
    return day_string(clock())


def epoch_millis(moment: datetime) -> int:
    """Return a moment as integer epoch milliseconds (naive means UTC)."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)


def _parse_date(d: str | None) -> date | None:
    """Parse YYYY-MM-DD, returning None for empty or unparseable input."""
    if not d:
        return None
    try:
        return date.fromisoformat(d)
    except (TypeError, ValueError):
        return None


def is_today(d: str | None, today: str) -> bool:
    """True if d is the same calendar day as today."""
    parsed = _parse_date(d)
    return parsed is not None and parsed == _parse_date(today)


def is_yesterday(d: str | None, today: str) -> bool:
    """True if d is the calendar day before today."""
    parsed = _parse_date(d)
    today_date = _parse_date(today)
    if parsed is None or today_date is None:
        return False
    return parsed == today_date - timedelta(days=1)
