"""Daily practice streak tracking for melobuddy."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from melobuddy.dates import is_today, is_yesterday


class DayStatus(str, Enum):
    TODAY = "today"  # already practiced today
    YESTERDAY = "yesterday"  # last practice was yesterday, streak alive
    STALE = "stale"  # older than yesterday, or never practiced


@dataclass(frozen=True)
class StreakCheck:
    streak_broken: bool
    new_streak: int
    is_first_practice_today: bool


def classify_day(last_practice_date: str | None, today: str) -> DayStatus:
    """Classify the last practice date relative to today."""
    if is_today(last_practice_date, today):
        return DayStatus.TODAY
    if is_yesterday(last_practice_date, today):
        return DayStatus.YESTERDAY
    return DayStatus.STALE


def check_streak(last_practice_date: str | None, streak_days: int, today: str) -> StreakCheck:
    """Passive streak check, as done when the app opens.

    Rules:
    - Practiced today: nothing changes, not the first practice of the day
    - Practiced yesterday: streak kept as is until a practice completes
    - Anything older with a nonzero streak: streak broken, reset to 0
    - Never practiced: nothing to break
    """
    status = classify_day(last_practice_date, today)
    if status is DayStatus.TODAY:
        return StreakCheck(streak_broken=False, new_streak=streak_days, is_first_practice_today=False)
    if status is DayStatus.YESTERDAY:
        return StreakCheck(streak_broken=False, new_streak=streak_days, is_first_practice_today=True)
    if last_practice_date and streak_days > 0:
        return StreakCheck(streak_broken=True, new_streak=0, is_first_practice_today=True)
    return StreakCheck(streak_broken=False, new_streak=0, is_first_practice_today=True)


def next_streak_days(last_practice_date: str | None, streak_days: int, today: str) -> int:
    """Streak length after a practice completes today.

    Unchanged if already practiced today, +1 when continuing from yesterday,
    otherwise a fresh streak of 1.
    """
    status = classify_day(last_practice_date, today)
    if status is DayStatus.TODAY:
        return streak_days
    if status is DayStatus.YESTERDAY:
        return streak_days + 1
    return 1
