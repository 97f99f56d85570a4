"""XP scoring for a single practice attempt.

Pure functions that turn a caller-supplied score (0-100) into XP.
All XP values are integers (math.floor for rounding).
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum

from melobuddy.dates import is_today
from melobuddy.state import GameState
from melobuddy.streaks import next_streak_days

logger = logging.getLogger(__name__)

# Base XP: half a point per score point
BASE_XP_RATE = 0.5

# Bonuses
NEW_SONG_BONUS = 20
STREAK_BONUS_PER_DAY = 5
MAX_STREAK_BONUS = 50

THREE_STAR_SCORE = 100
MIN_SCORE = 0
MAX_SCORE = 100


class PracticeMode(str, Enum):
    LEARN = "learn"
    FOLLOW = "follow"
    ASSESS = "assess"


# Minimum score for 3, 2 and 1 stars per mode
STAR_THRESHOLDS: dict[PracticeMode, tuple[int, int, int]] = {
    PracticeMode.LEARN: (100, 80, 60),
    PracticeMode.FOLLOW: (90, 70, 50),
    PracticeMode.ASSESS: (95, 80, 60),
}


@dataclass(frozen=True)
class PracticeScore:
    """XP breakdown for one practice attempt."""

    score: float
    base_xp: int
    new_song_bonus: int
    streak_bonus: int
    xp_earned: int
    is_new_song: bool
    is_first_practice_today: bool
    new_streak_days: int
    is_three_star: bool


def clamp_score(score: float) -> float:
    """Clamp a score into [0, 100], logging when it was out of range.

    NaN counts as 0.
    """
    if math.isnan(score):
        logger.warning("Practice score is NaN, counted as %r", MIN_SCORE)
        return MIN_SCORE
    clamped = min(max(score, MIN_SCORE), MAX_SCORE)
    if clamped != score:
        logger.warning("Practice score %r out of range, clamped to %r", score, clamped)
    return clamped


def get_streak_bonus(streak_days: int) -> int:
    """Return the streak bonus: 5 XP per streak day, at most 50."""
    return min(max(streak_days, 0) * STREAK_BONUS_PER_DAY, MAX_STREAK_BONUS)


def score_practice(state: GameState, song_id: str, score: float, today: str) -> PracticeScore:
    """Calculate XP for one practice attempt.

    1. Base XP = floor(score * 0.5).
    2. +20 if the song has never been completed.
    3. On the day's first practice, the streak advances (or restarts at 1) and
       adds min(streak * 5, 50).
    4. Three stars at a perfect score.
    """
    score = clamp_score(score)
    is_first_practice_today = not is_today(state.last_practice_date, today)

    base_xp = math.floor(score * BASE_XP_RATE)

    is_new_song = song_id not in state.completed_songs
    new_song_bonus = NEW_SONG_BONUS if is_new_song else 0

    new_streak_days = state.streak_days
    streak_bonus = 0
    if is_first_practice_today:
        new_streak_days = next_streak_days(state.last_practice_date, state.streak_days, today)
        streak_bonus = get_streak_bonus(new_streak_days)

    return PracticeScore(
        score=score,
        base_xp=base_xp,
        new_song_bonus=new_song_bonus,
        streak_bonus=streak_bonus,
        xp_earned=base_xp + new_song_bonus + streak_bonus,
        is_new_song=is_new_song,
        is_first_practice_today=is_first_practice_today,
        new_streak_days=new_streak_days,
        is_three_star=score >= THREE_STAR_SCORE,
    )


def stars_for_score(score: float, mode: PracticeMode | str = PracticeMode.LEARN) -> int:
    """Return 0-3 stars for a score under the given practice mode's thresholds."""
    three, two, one = STAR_THRESHOLDS[PracticeMode(mode)]
    if score >= three:
        return 3
    if score >= two:
        return 2
    if score >= one:
        return 1
    return 0
