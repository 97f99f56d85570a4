"""Storage port for game state snapshots.

The store only talks to a SnapshotStorage. Adapters decide where the snapshot
lives: the SQLite database, a JSON file, or memory (for tests).
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

from melobuddy.db import Database

logger = logging.getLogger(__name__)

STORAGE_KEY = "melobuddy-game-storage"


class SnapshotStorage(Protocol):
    def load(self) -> dict[str, Any] | None:
        """Return the stored snapshot, or None if there is none (or it is unreadable)."""
        ...

    def save(self, snapshot: dict[str, Any]) -> None:
        """Replace the stored snapshot."""
        ...


def _decode(raw: str, source: str) -> dict[str, Any] | None:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Stored snapshot in %s is not valid JSON, ignoring it", source)
        return None
    if not isinstance(data, dict):
        logger.warning("Stored snapshot in %s is not an object, ignoring it", source)
        return None
    return data


class MemoryStorage:
    """Keeps the snapshot as a JSON string in memory."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self.raw: str | None = json.dumps(initial) if initial is not None else None
        self.save_count = 0

    def load(self) -> dict[str, Any] | None:
        if self.raw is None:
            return None
        return _decode(self.raw, "memory")

    def save(self, snapshot: dict[str, Any]) -> None:
        self.raw = json.dumps(snapshot)
        self.save_count += 1


class JsonFileStorage:
    """Snapshot in a single JSON file. Creates parent dirs on write."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> dict[str, Any] | None:
        if not self.path.exists():
            return None
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not read snapshot file %s: %s", self.path, exc)
            return None
        return _decode(raw, str(self.path))

    def save(self, snapshot: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(snapshot, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


class SqliteStorage:
    """Snapshot stored under one key of the melobuddy database."""

    def __init__(self, db: Database, key: str = STORAGE_KEY) -> None:
        self.db = db
        self.key = key

    def load(self) -> dict[str, Any] | None:
        raw = self.db.get_item(self.key)
        if raw is None:
            return None
        return _decode(raw, f"{self.db.db_path}:{self.key}")

    def save(self, snapshot: dict[str, Any]) -> None:
        self.db.set_item(self.key, json.dumps(snapshot, ensure_ascii=False))
