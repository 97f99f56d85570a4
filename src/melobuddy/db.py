"""SQLite database layer for melobuddy."""

import sqlite3
from pathlib import Path


DEFAULT_DB_PATH = Path.home() / ".melobuddy" / "data.db"


class Database:
    """SQLite key-value store with WAL mode."""

    def __init__(self, db_path: Path | None = None) -> None:
        self.db_path = db_path or DEFAULT_DB_PATH
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(str(self.db_path))
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA journal_mode=WAL")
        self.init_db()

    def init_db(self) -> None:
        """Create tables if they do not exist."""
        self.conn.executescript("""
            CREATE TABLE IF NOT EXISTS storage (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT DEFAULT CURRENT_TIMESTAMP
            );
        """)
        self.conn.commit()

    def get_item(self, key: str) -> str | None:
        """Get a stored value by key."""
        row = self.conn.execute(
            "SELECT value FROM storage WHERE key = ?", (key,)
        ).fetchone()
        return row["value"] if row else None

    def set_item(self, key: str, value: str) -> None:
        """Set a stored value (upsert)."""
        self.conn.execute(
            "INSERT INTO storage (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value, "
            "updated_at = CURRENT_TIMESTAMP",
            (key, str(value)),
        )
        self.conn.commit()

    def remove_item(self, key: str) -> None:
        """Delete a stored value. Missing keys are ignored."""
        self.conn.execute("DELETE FROM storage WHERE key = ?", (key,))
        self.conn.commit()

    def keys(self) -> list[str]:
        """Return all stored keys, sorted."""
        rows = self.conn.execute("SELECT key FROM storage ORDER BY key").fetchall()
        return [row["key"] for row in rows]

    def close(self) -> None:
        """Close the database connection."""
        self.conn.close()
