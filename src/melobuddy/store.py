"""ProgressionStore: the single owner of the game state.

Each operation applies one pure transition from melobuddy.progression, swaps
the resulting state in, then writes a snapshot through the storage port.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from melobuddy import progression
from melobuddy.achievements import check_achievements, get_newly_unlocked
from melobuddy.dates import Clock, day_string, utc_now
from melobuddy.levels import progress_percent, xp_to_next_level
from melobuddy.progression import PracticeResult, XPResult
from melobuddy.state import GameState, from_snapshot, to_snapshot
from melobuddy.storage import MemoryStorage, SnapshotStorage
from melobuddy.streaks import StreakCheck

logger = logging.getLogger(__name__)


class ProgressionStore:
    """Owns GameState for the lifetime of the process.

    storage: where snapshots are read from and written to (memory if omitted)
    clock: source of "now"; tests pass a fixed or stepping clock
    total_songs: song library size, for the whole-library achievement
    """

    def __init__(
        self,
        storage: SnapshotStorage | None = None,
        clock: Clock = utc_now,
        total_songs: int | None = None,
    ) -> None:
        self.storage: SnapshotStorage = storage if storage is not None else MemoryStorage()
        self.clock = clock
        self.total_songs = total_songs
        self._state = from_snapshot(self.storage.load())

    @property
    def state(self) -> GameState:
        return self._state

    def _commit(self, new_state: GameState) -> None:
        self.storage.save(to_snapshot(new_state))
        self._state = new_state

    def _today(self) -> str:
        return day_string(self.clock())

    def level_progress(self) -> float:
        """Percent through the current level band (0-100)."""
        return progress_percent(self._state.xp, self._state.level)

    def xp_to_next_level(self) -> int:
        return xp_to_next_level(self._state.xp, self._state.level)

    def add_xp(self, amount: int) -> XPResult:
        new_state, result = progression.add_xp(self._state, amount)
        self._commit(new_state)
        return result

    def complete_practice(self, song_id: str, score: float, duration_seconds: int = 0) -> PracticeResult:
        """Record a finished practice and return the XP breakdown.

        The result also lists the ids of achievements this practice unlocked.
        A blank song id is ignored: nothing is recorded and no XP is earned.
        """
        song_id = song_id.strip()
        if not song_id:
            logger.warning("Ignoring practice with a blank song id")
            return PracticeResult(
                xp_earned=0, leveled_up=False, is_new_song=False, streak_bonus=0, is_three_star=False
            )
        before = check_achievements(self._state, self.total_songs)
        new_state, result = progression.complete_practice(
            self._state, song_id, score, self.clock(), duration_seconds
        )
        self._commit(new_state)
        unlocked = get_newly_unlocked(before, check_achievements(new_state, self.total_songs))
        if unlocked:
            logger.info("Unlocked achievements: %s", ", ".join(a.id for a in unlocked))
            result = replace(result, new_achievements=tuple(a.id for a in unlocked))
        return result

    def check_and_update_streak(self) -> StreakCheck:
        new_state, check = progression.check_and_update_streak(self._state, self._today())
        if new_state is not self._state:
            self._commit(new_state)
        return check

    def reset_daily_stats(self) -> None:
        self._commit(progression.reset_daily_stats(self._state))

    def set_nickname(self, name: str) -> None:
        self._commit(progression.set_nickname(self._state, name))

    def set_avatar_emoji(self, emoji: str) -> None:
        self._commit(progression.set_avatar_emoji(self._state, emoji))

    def reset_all_progress(self) -> None:
        self._commit(progression.reset_all_progress(self._state))
