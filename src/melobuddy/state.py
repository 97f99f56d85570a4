"""Game state model and its persisted snapshot form.

GameState is immutable: every operation builds a new state and the store swaps
it in whole. The snapshot is a versioned envelope around an explicit
allow-list of fields; anything else is never written and is dropped on read.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from melobuddy.levels import level_from_xp

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1
RECENT_PRACTICE_LIMIT = 10

DEFAULT_NICKNAME = "Little Musician"
DEFAULT_AVATAR_EMOJI = "\U0001f63a"

# snapshot key -> GameState attribute
SNAPSHOT_FIELDS: dict[str, str] = {
    "xp": "xp",
    "level": "level",
    "streakDays": "streak_days",
    "bestStreak": "best_streak",
    "lastPracticeDate": "last_practice_date",
    "completedSongs": "completed_songs",
    "threeStarSongs": "three_star_songs",
    "todayPracticeCount": "today_practice_count",
    "todayXP": "today_xp",
    "recentPractice": "recent_practice",
    "totalPracticeTime": "total_practice_time",
    "nickname": "nickname",
    "avatarEmoji": "avatar_emoji",
}


@dataclass(frozen=True)
class PracticeRecord:
    song_id: str
    timestamp: int  # epoch ms
    score: float  # 0-100
    xp_earned: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "songId": self.song_id,
            "timestamp": self.timestamp,
            "score": self.score,
            "xpEarned": self.xp_earned,
        }

    @classmethod
    def from_dict(cls, data: Any) -> PracticeRecord | None:
        """Build a record from its snapshot form, or None if malformed."""
        if not isinstance(data, dict):
            return None
        song_id = data.get("songId")
        timestamp = data.get("timestamp")
        score = data.get("score")
        xp_earned = data.get("xpEarned")
        if not isinstance(song_id, str) or not song_id:
            return None
        if not _is_int(timestamp) or not _is_number(score) or not _is_int(xp_earned):
            return None
        return cls(
            song_id=song_id,
            timestamp=timestamp,
            score=min(max(score, 0), 100),
            xp_earned=max(xp_earned, 0),
        )


@dataclass(frozen=True)
class GameState:
    xp: int = 0
    level: int = 1
    streak_days: int = 0
    best_streak: int = 0
    last_practice_date: str | None = None  # YYYY-MM-DD (UTC)
    completed_songs: frozenset[str] = field(default_factory=frozenset)
    three_star_songs: frozenset[str] = field(default_factory=frozenset)
    today_practice_count: int = 0
    today_xp: int = 0
    recent_practice: tuple[PracticeRecord, ...] = ()
    total_practice_time: int = 0  # seconds
    nickname: str = DEFAULT_NICKNAME
    avatar_emoji: str = DEFAULT_AVATAR_EMOJI


def push_recent_practice(
    records: tuple[PracticeRecord, ...], record: PracticeRecord
) -> tuple[PracticeRecord, ...]:
    """Put record first, drop any older entry for the same song, keep the newest 10."""
    others = tuple(r for r in records if r.song_id != record.song_id)
    return ((record,) + others)[:RECENT_PRACTICE_LIMIT]


def to_snapshot(state: GameState) -> dict[str, Any]:
    """Serialize the allow-listed fields into a versioned envelope."""
    data: dict[str, Any] = {key: getattr(state, attr) for key, attr in SNAPSHOT_FIELDS.items()}
    data["completedSongs"] = sorted(state.completed_songs)
    data["threeStarSongs"] = sorted(state.three_star_songs)
    data["recentPractice"] = [r.to_dict() for r in state.recent_practice]
    return {"version": SNAPSHOT_VERSION, "state": data}


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _non_negative_int(data: dict, key: str, default: int = 0) -> int:
    value = data.get(key, default)
    if not _is_int(value):
        if key in data:
            logger.warning("Snapshot field %s has invalid value %r, using default", key, value)
        return default
    return max(value, 0)


def _string(data: dict, key: str, default: str) -> str:
    value = data.get(key)
    return value if isinstance(value, str) else default


def _date_string(data: dict, key: str) -> str | None:
    value = data.get(key)
    if not isinstance(value, str):
        return None
    try:
        date.fromisoformat(value)
    except ValueError:
        logger.warning("Snapshot field %s has invalid date %r, dropping it", key, value)
        return None
    return value


def _song_set(data: dict, key: str) -> frozenset[str]:
    value = data.get(key)
    if not isinstance(value, list):
        return frozenset()
    return frozenset(s for s in value if isinstance(s, str) and s)


def _recent_practice(data: dict) -> tuple[PracticeRecord, ...]:
    value = data.get("recentPractice")
    if not isinstance(value, list):
        return ()
    records: list[PracticeRecord] = []
    seen: set[str] = set()
    for raw in value:
        record = PracticeRecord.from_dict(raw)
        if record is None or record.song_id in seen:
            continue
        seen.add(record.song_id)
        records.append(record)
        if len(records) == RECENT_PRACTICE_LIMIT:
            break
    return tuple(records)


def from_snapshot(snapshot: Any) -> GameState:
    """Deserialize a snapshot, falling back to defaults instead of failing.

    Unknown keys are ignored, missing or invalid fields take their default,
    and the derived invariants (level from XP, best streak at least the
    current streak) are restored.
    """
    if not isinstance(snapshot, dict):
        if snapshot is not None:
            logger.warning("Snapshot is not an object, starting from defaults")
        return GameState()

    version = snapshot.get("version")
    data = snapshot.get("state")
    if version != SNAPSHOT_VERSION or not isinstance(data, dict):
        logger.warning("Unsupported snapshot (version=%r), starting from defaults", version)
        return GameState()

    xp = _non_negative_int(data, "xp")
    streak_days = _non_negative_int(data, "streakDays")
    best_streak = max(_non_negative_int(data, "bestStreak"), streak_days)

    state = GameState(
        xp=xp,
        level=level_from_xp(xp),
        streak_days=streak_days,
        best_streak=best_streak,
        last_practice_date=_date_string(data, "lastPracticeDate"),
        completed_songs=_song_set(data, "completedSongs"),
        three_star_songs=_song_set(data, "threeStarSongs"),
        today_practice_count=_non_negative_int(data, "todayPracticeCount"),
        today_xp=_non_negative_int(data, "todayXP"),
        recent_practice=_recent_practice(data),
        total_practice_time=_non_negative_int(data, "totalPracticeTime"),
        nickname=_string(data, "nickname", DEFAULT_NICKNAME),
        avatar_emoji=_string(data, "avatarEmoji", DEFAULT_AVATAR_EMOJI),
    )
    stored_level = data.get("level")
    if "level" in data and stored_level != state.level:
        logger.warning("Snapshot level %r does not match XP %d, using %d", stored_level, xp, state.level)
    return state

