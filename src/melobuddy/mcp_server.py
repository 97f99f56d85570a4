"""MCP server for melobuddy.

Exposes the progression engine as MCP tools so an assistant can read and record
practice mid-conversation.
Run via: python3 -m melobuddy.mcp_server
"""
from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import FastMCP

mcp = FastMCP(name="melobuddy")


def _get_db():
    from melobuddy.config import get_db_path
    from melobuddy.db import Database
    return Database(get_db_path())


def _open_store(db):
    from melobuddy.cli import open_store
    from melobuddy.config import get_total_songs
    return open_store(db, total_songs=get_total_songs())


@mcp.tool()
def get_progress() -> dict[str, Any]:
    """Get current progress: level, XP, level progress, streak, today's practice."""
    db = _get_db()
    try:
        from melobuddy.cli import build_status
        store = _open_store(db)
        return build_status(store)
    finally:
        db.close()


@mcp.tool()
def complete_practice(song_id: str, score: float, duration_seconds: int = 0) -> dict[str, Any]:
    """Record a finished practice of a song with a score from 0 to 100."""
    if not song_id.strip():
        return {"error": "song_id must not be empty"}
    db = _get_db()
    try:
        store = _open_store(db)
        result = store.complete_practice(song_id.strip(), score, duration_seconds=duration_seconds)
        return {
            "xp_earned": result.xp_earned,
            "leveled_up": result.leveled_up,
            "is_new_song": result.is_new_song,
            "streak_bonus": result.streak_bonus,
            "is_three_star": result.is_three_star,
            "new_achievements": list(result.new_achievements),
            "level": store.state.level,
            "xp": store.state.xp,
        }
    finally:
        db.close()


@mcp.tool()
def check_streak() -> dict[str, Any]:
    """Check whether the daily practice streak is still alive."""
    db = _get_db()
    try:
        store = _open_store(db)
        check = store.check_and_update_streak()
        return {
            "streak_broken": check.streak_broken,
            "new_streak": check.new_streak,
            "is_first_practice_today": check.is_first_practice_today,
        }
    finally:
        db.close()


@mcp.tool()
def get_achievements() -> dict[str, Any]:
    """Get all achievements with unlock status and progress."""
    db = _get_db()
    try:
        from melobuddy.cli import build_achievement_list
        result = build_achievement_list(_open_store(db))
        return {"achievements": result, "unlocked_count": sum(1 for a in result if a["unlocked"]),
                "total_count": len(result)}
    finally:
        db.close()


@mcp.tool()
def get_recent_practice(limit: int = 10) -> dict[str, Any]:
    """Get the most recent practices, newest first (one entry per song)."""
    db = _get_db()
    try:
        store = _open_store(db)
        records = [r.to_dict() for r in store.state.recent_practice[:max(limit, 0)]]
        return {"recent_practice": records, "count": len(records)}
    finally:
        db.close()


def main() -> None:
    mcp.run()


if __name__ == "__main__":
    main()
