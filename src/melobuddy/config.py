"""Configuration file management for melobuddy.

Reads and writes ~/.melobuddy/config.json for settings that don't belong in the
game state (e.g., where the database lives, how many songs the library has).
"""
from __future__ import annotations

import json
from pathlib import Path

DEFAULT_CONFIG_PATH: Path = Path.home() / ".melobuddy" / "config.json"


def load_config(config_path: Path | None = None) -> dict:
    """Load config from JSON file. Returns {} if file missing or invalid."""
    path = config_path or DEFAULT_CONFIG_PATH
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict, config_path: Path | None = None) -> None:
    """Write config dict to JSON file. Creates parent dirs if needed."""
    path = config_path or DEFAULT_CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")


def get_db_path(config_path: Path | None = None) -> Path | None:
    """Return the configured database path, or None if not set."""
    config = load_config(config_path)
    raw = config.get("db_path")
    if raw:
        return Path(raw).expanduser()
    return None


def set_db_path(db_path: Path, config_path: Path | None = None) -> None:
    """Persist the database path to config."""
    config = load_config(config_path)
    config["db_path"] = str(db_path)
    save_config(config, config_path)


def get_total_songs(config_path: Path | None = None) -> int | None:
    """Return the configured song library size, or None if not set or invalid."""
    config = load_config(config_path)
    raw = config.get("total_songs")
    if isinstance(raw, int) and not isinstance(raw, bool) and raw > 0:
        return raw
    return None


def set_total_songs(total_songs: int, config_path: Path | None = None) -> None:
    """Persist the song library size to config."""
    config = load_config(config_path)
    config["total_songs"] = int(total_songs)
    save_config(config, config_path)
