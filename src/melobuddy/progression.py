"""State transitions for the progression engine.

Every function here is pure: it takes the current GameState plus its input
(and the current day or time where the calendar matters) and returns the next
GameState together with the result reported to the caller. Only
ProgressionStore applies them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime

from melobuddy.dates import day_string, epoch_millis
from melobuddy.levels import level_from_xp
from melobuddy.scoring import score_practice
from melobuddy.state import GameState, PracticeRecord, push_recent_practice
from melobuddy.streaks import StreakCheck, check_streak

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class XPResult:
    leveled_up: bool
    new_level: int


@dataclass(frozen=True)
class PracticeResult:
    xp_earned: int
    leveled_up: bool
    is_new_song: bool
    streak_bonus: int
    is_three_star: bool
    new_achievements: tuple[str, ...] = ()


def add_xp(state: GameState, amount: int) -> tuple[GameState, XPResult]:
    """Add XP (negative amounts count as 0) and recompute the level."""
    amount = max(int(amount), 0)
    new_xp = state.xp + amount
    new_level = level_from_xp(new_xp)
    leveled_up = new_level > state.level
    if leveled_up:
        logger.debug("Level up: %d -> %d (%d XP)", state.level, new_level, new_xp)
    return replace(state, xp=new_xp, level=new_level), XPResult(leveled_up=leveled_up, new_level=new_level)


def complete_practice(
    state: GameState,
    song_id: str,
    score: float,
    now: datetime,
    duration_seconds: int = 0,
) -> tuple[GameState, PracticeResult]:
    """Score one practice attempt and fold it into the state.

    The first practice of a calendar day restarts today's counters and moves
    the streak; later practices the same day only add to today's totals.
    """
    today = day_string(now)
    scored = score_practice(state, song_id, score, today)

    new_xp = state.xp + scored.xp_earned
    new_level = level_from_xp(new_xp)
    leveled_up = new_level > state.level
    if leveled_up:
        logger.debug("Level up: %d -> %d (%d XP)", state.level, new_level, new_xp)

    record = PracticeRecord(
        song_id=song_id,
        timestamp=epoch_millis(now),
        score=scored.score,
        xp_earned=scored.xp_earned,
    )

    three_star_songs = state.three_star_songs
    if scored.is_three_star:
        three_star_songs = three_star_songs | {song_id}

    if scored.is_first_practice_today:
        today_practice_count = 1
        today_xp = scored.xp_earned
    else:
        today_practice_count = state.today_practice_count + 1
        today_xp = state.today_xp + scored.xp_earned

    new_state = replace(
        state,
        xp=new_xp,
        level=new_level,
        streak_days=scored.new_streak_days,
        best_streak=max(state.best_streak, scored.new_streak_days),
        last_practice_date=today,
        completed_songs=state.completed_songs | {song_id},
        three_star_songs=three_star_songs,
        today_practice_count=today_practice_count,
        today_xp=today_xp,
        recent_practice=push_recent_practice(state.recent_practice, record),
        total_practice_time=state.total_practice_time + max(int(duration_seconds), 0),
    )
    result = PracticeResult(
        xp_earned=scored.xp_earned,
        leveled_up=leveled_up,
        is_new_song=scored.is_new_song,
        streak_bonus=scored.streak_bonus,
        is_three_star=scored.is_three_star,
    )
    return new_state, result


def check_and_update_streak(state: GameState, today: str) -> tuple[GameState, StreakCheck]:
    """Passive streak check. Only a broken streak changes the state.

    last_practice_date stays as it is until a practice actually happens.
    """
    check = check_streak(state.last_practice_date, state.streak_days, today)
    if not check.streak_broken:
        return state, check
    logger.debug("Streak of %d days broken (last practice %s)", state.streak_days, state.last_practice_date)
    return replace(state, streak_days=0, today_practice_count=0), check


def reset_daily_stats(state: GameState) -> GameState:
    return replace(state, today_practice_count=0)


def set_nickname(state: GameState, name: str) -> GameState:
    return replace(state, nickname=name)


def set_avatar_emoji(state: GameState, emoji: str) -> GameState:
    return replace(state, avatar_emoji=emoji)


def reset_all_progress(state: GameState) -> GameState:
    """Clear every progression field. Nickname and avatar are kept."""
    return replace(GameState(), nickname=state.nickname, avatar_emoji=state.avatar_emoji)
