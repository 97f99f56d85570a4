"""CLI commands for melobuddy."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from melobuddy.achievements import check_achievements, get_closest_achievements
from melobuddy.config import get_db_path, get_total_songs, set_db_path, set_total_songs
from melobuddy.db import Database
from melobuddy.display import (
    print_achievements,
    print_message,
    print_practice_result,
    print_profile,
    print_status,
    print_streak_check,
)
from melobuddy.scoring import PracticeMode, stars_for_score
from melobuddy.storage import SqliteStorage
from melobuddy.store import ProgressionStore


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    parser = argparse.ArgumentParser(
        prog="melobuddy",
        description="Track your violin practice: XP, levels and streaks",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Show debug logging")
    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("status", help="Show level, XP and streak")
    practice_p = subparsers.add_parser("practice", help="Record a finished practice")
    practice_p.add_argument("song_id", help="Song identifier")
    practice_p.add_argument("score", type=float, help="Score from 0 to 100")
    practice_p.add_argument(
        "--mode", choices=[m.value for m in PracticeMode], default=PracticeMode.LEARN.value,
        help="Practice mode (affects stars only)",
    )
    practice_p.add_argument("--duration", type=int, default=0, help="Practice time in seconds")
    subparsers.add_parser("streak", help="Check whether the streak is still alive")
    add_xp_p = subparsers.add_parser("add-xp", help="Grant XP directly")
    add_xp_p.add_argument("amount", type=int, help="XP to add")
    profile_p = subparsers.add_parser("profile", help="Show or edit the profile")
    profile_p.add_argument("--nickname", "-n", default=None, help="New nickname")
    profile_p.add_argument("--avatar", "-a", default=None, help="New avatar emoji")
    subparsers.add_parser("achievements", help="List all achievements")
    subparsers.add_parser("reset-daily", help="Reset today's practice count")
    reset_p = subparsers.add_parser("reset", help="Erase all progress (keeps the profile)")
    reset_p.add_argument("--yes", action="store_true", help="Confirm the reset")
    config_p = subparsers.add_parser("config", help="Change settings")
    config_p.add_argument("--db-path", default=None, help="Where to keep the database")
    config_p.add_argument("--total-songs", type=int, default=None, help="Size of the song library")
    return parser


def open_store(db: Database, total_songs: int | None = None) -> ProgressionStore:
    """Build the store on top of an open database."""
    return ProgressionStore(storage=SqliteStorage(db), total_songs=total_songs)


def main() -> None:
    """Entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args()
    command = args.command or "status"

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if command == "config":
        do_config(db_path=args.db_path, total_songs=args.total_songs)
        return

    db = Database(get_db_path())
    try:
        store = open_store(db, total_songs=get_total_songs())
        if command == "status":
            do_status(store)
        elif command == "practice":
            do_practice(store, args.song_id, args.score, mode=args.mode, duration=args.duration)
        elif command == "streak":
            do_streak(store)
        elif command == "add-xp":
            do_add_xp(store, args.amount)
        elif command == "profile":
            do_profile(store, nickname=args.nickname, avatar=args.avatar)
        elif command == "achievements":
            do_achievements(store)
        elif command == "reset-daily":
            do_reset_daily(store)
        elif command == "reset":
            do_reset(store, confirmed=args.yes)
    finally:
        db.close()


def build_status(store: ProgressionStore) -> dict:
    """Collect the numbers shown in the status panel."""
    state = store.state
    return {
        "nickname": state.nickname,
        "avatar_emoji": state.avatar_emoji,
        "xp": state.xp,
        "level": state.level,
        "level_progress": store.level_progress(),
        "xp_to_next_level": store.xp_to_next_level(),
        "streak_days": state.streak_days,
        "best_streak": state.best_streak,
        "today_practice_count": state.today_practice_count,
        "today_xp": state.today_xp,
        "closest_achievements": [
            {
                "name": status.definition.name,
                "progress": status.progress,
                "current": status.current,
                "target": int(status.definition.target),
            }
            for status in get_closest_achievements(check_achievements(state, store.total_songs))
        ],
    }


def do_status(store: ProgressionStore) -> dict:
    """Run the passive streak check, then show the status panel."""
    check = store.check_and_update_streak()
    if check.streak_broken:
        print_streak_check(vars(check))
    data = build_status(store)
    print_status(data)
    return data


def do_practice(
    store: ProgressionStore,
    song_id: str,
    score: float,
    mode: str = PracticeMode.LEARN.value,
    duration: int = 0,
) -> dict:
    """Record a practice and print the result."""
    song_id = song_id.strip()
    if not song_id:
        print_message("Song id must not be empty.", style="red")
        return {"error": "song_id must not be empty"}
    result = store.complete_practice(song_id, score, duration_seconds=duration)
    data = {
        "song_id": song_id,
        "xp_earned": result.xp_earned,
        "leveled_up": result.leveled_up,
        "is_new_song": result.is_new_song,
        "streak_bonus": result.streak_bonus,
        "is_three_star": result.is_three_star,
        "stars": stars_for_score(min(max(score, 0), 100), mode),
        "level": store.state.level,
        "new_achievements": list(result.new_achievements),
    }
    print_practice_result(data)
    return data


def do_streak(store: ProgressionStore) -> dict:
    check = store.check_and_update_streak()
    data = vars(check).copy()
    print_streak_check(data)
    return data


def do_add_xp(store: ProgressionStore, amount: int) -> dict:
    result = store.add_xp(amount)
    data = {"leveled_up": result.leveled_up, "new_level": result.new_level, "xp": store.state.xp}
    if result.leveled_up:
        print_message(f"[bold yellow]LEVEL UP! Now level {result.new_level}[/]", style="yellow")
    else:
        print_message(f"Added XP. Total: {store.state.xp} XP", style="green")
    return data


def build_profile(store: ProgressionStore) -> dict:
    state = store.state
    return {
        "nickname": state.nickname,
        "avatar_emoji": state.avatar_emoji,
        "level": state.level,
        "xp": state.xp,
        "streak_days": state.streak_days,
        "best_streak": state.best_streak,
        "completed_songs": len(state.completed_songs),
        "three_star_songs": len(state.three_star_songs),
        "total_practice_time": state.total_practice_time,
        "recent_practice": [r.to_dict() for r in state.recent_practice],
    }


def do_profile(store: ProgressionStore, nickname: str | None = None, avatar: str | None = None) -> dict:
    """Apply profile edits (if any) and print the profile table."""
    if nickname is not None:
        nickname = nickname.strip()
        if nickname:
            store.set_nickname(nickname)
    if avatar is not None:
        avatar = avatar.strip()
        if avatar:
            store.set_avatar_emoji(avatar)
    data = build_profile(store)
    print_profile(data)
    return data


def build_achievement_list(store: ProgressionStore) -> list[dict]:
    """Achievement statuses as plain dicts, for display and the MCP server."""
    return [
        {
            "id": status.definition.id,
            "name": status.definition.name,
            "description": status.definition.description,
            "rarity": status.definition.rarity.value,
            "progress": status.progress,
            "progress_pct": int(status.progress * 100),
            "unlocked": status.unlocked,
            "current": status.current,
            "target": int(status.definition.target),
        }
        for status in check_achievements(store.state, store.total_songs)
    ]


def do_achievements(store: ProgressionStore) -> list[dict]:
    achievements = build_achievement_list(store)
    print_achievements(achievements)
    return achievements


def do_reset_daily(store: ProgressionStore) -> None:
    store.reset_daily_stats()
    print_message("Today's practice count was reset.", style="green")


def do_reset(store: ProgressionStore, confirmed: bool = False) -> bool:
    """Erase progression. Requires confirmation; returns whether it happened."""
    if not confirmed:
        print_message("This erases all progress. Re-run with [bold]--yes[/] to confirm.", style="red")
        return False
    store.reset_all_progress()
    print_message("All progress was reset.", style="red")
    return True


def do_config(db_path: str | None = None, total_songs: int | None = None, config_path: Path | None = None) -> dict:
    """Update settings and print the ones now in effect."""
    if db_path:
        set_db_path(Path(db_path).expanduser(), config_path)
    if total_songs is not None and total_songs > 0:
        set_total_songs(total_songs, config_path)
    current = {
        "db_path": str(get_db_path(config_path) or ""),
        "total_songs": get_total_songs(config_path),
    }
    print_message(
        f"Database: {current['db_path'] or 'default'}\n  Songs in library: {current['total_songs'] or 'unknown'}",
        title="Config",
    )
    return current
