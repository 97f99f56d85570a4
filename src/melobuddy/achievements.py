"""Achievement definitions and checking for melobuddy."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from melobuddy.state import GameState


class Rarity(str, Enum):
    COMMON = "common"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


@dataclass
class AchievementDef:
    id: str
    name: str
    description: str
    rarity: Rarity
    target: float
    check_field: str


@dataclass
class AchievementStatus:
    definition: AchievementDef
    progress: float  # 0.0 to 1.0
    unlocked: bool
    current: int


# Placeholder target for the whole-library achievement; replaced by the
# library size at check time.
ALL_SONGS = 0

ACHIEVEMENTS: list[AchievementDef] = [
    AchievementDef(
        id="first-song",
        name="First Performance",
        description="Complete your first song",
        rarity=Rarity.COMMON,
        target=1,
        check_field="completed_songs",
    ),
    AchievementDef(
        id="song-collector-3",
        name="Song Collector",
        description="Complete 3 songs",
        rarity=Rarity.COMMON,
        target=3,
        check_field="completed_songs",
    ),
    AchievementDef(
        id="song-master",
        name="Library Master",
        description="Complete every song in the library",
        rarity=Rarity.LEGENDARY,
        target=ALL_SONGS,
        check_field="completed_songs",
    ),
    AchievementDef(
        id="streak-3",
        name="Keeping It Up",
        description="Practice 3 days in a row",
        rarity=Rarity.COMMON,
        target=3,
        check_field="streak_days",
    ),
    AchievementDef(
        id="streak-7",
        name="Week Without a Break",
        description="Practice 7 days in a row",
        rarity=Rarity.RARE,
        target=7,
        check_field="streak_days",
    ),
    AchievementDef(
        id="streak-30",
        name="Month of Music",
        description="Practice 30 days in a row",
        rarity=Rarity.EPIC,
        target=30,
        check_field="streak_days",
    ),
    AchievementDef(
        id="level-5",
        name="Beginner",
        description="Reach level 5",
        rarity=Rarity.COMMON,
        target=5,
        check_field="level",
    ),
    AchievementDef(
        id="level-10",
        name="Rising Player",
        description="Reach level 10",
        rarity=Rarity.RARE,
        target=10,
        check_field="level",
    ),
    AchievementDef(
        id="xp-1000",
        name="Seasoned",
        description="Earn 1000 XP in total",
        rarity=Rarity.RARE,
        target=1000,
        check_field="xp",
    ),
]


def _stats_from_state(state: GameState) -> dict[str, int]:
    return {
        "completed_songs": len(state.completed_songs),
        "streak_days": state.streak_days,
        "level": state.level,
        "xp": state.xp,
    }


def check_achievements(state: GameState, total_songs: int | None = None) -> list[AchievementStatus]:
    """Check all achievements against the current game state.

    total_songs is the size of the song library. The whole-library achievement
    is left out when it is unknown (None or 0).

    Returns list of AchievementStatus with progress calculated as min(current/target, 1.0).
    """
    stats = _stats_from_state(state)
    results: list[AchievementStatus] = []
    for achievement in ACHIEVEMENTS:
        target = achievement.target
        if target == ALL_SONGS:
            if not total_songs or total_songs <= 0:
                continue
            target = total_songs
        current_value = min(stats.get(achievement.check_field, 0), int(target))
        progress = min(current_value / target, 1.0)
        results.append(
            AchievementStatus(
                definition=replace(achievement, target=target),
                progress=progress,
                unlocked=progress >= 1.0,
                current=current_value,
            )
        )
    return results


def get_newly_unlocked(
    previous: list[AchievementStatus], current: list[AchievementStatus]
) -> list[AchievementDef]:
    """Compare previous and current achievement states, return newly unlocked ones."""
    prev_unlocked = {s.definition.id for s in previous if s.unlocked}
    return [s.definition for s in current if s.unlocked and s.definition.id not in prev_unlocked]


def achievement_name(achievement_id: str) -> str:
    """Display name for an achievement id; unknown ids are returned as they are."""
    for achievement in ACHIEVEMENTS:
        if achievement.id == achievement_id:
            return achievement.name
    return achievement_id


def get_closest_achievements(statuses: list[AchievementStatus], n: int = 3) -> list[AchievementStatus]:
    """Return the N achievements closest to being unlocked (highest progress < 1.0)."""
    in_progress = [s for s in statuses if not s.unlocked]
    in_progress.sort(key=lambda s: s.progress, reverse=True)
    return in_progress[:n]
