"""Key/value storage backends holding JSON-serializable values under a name."""
import json
import sqlite3
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Optional, Protocol


class KeyValueStorage(Protocol):
    def get(self, name: str) -> Optional[Any]: ...

    def set(self, name: str, value: Any) -> None: ...


class InMemoryStorage:
    """Process-local storage. Values are JSON round-tripped like the SQLite backend."""

    def __init__(self):
        self._entries: dict[str, str] = {}

    def get(self, name: str) -> Optional[Any]:
        raw = self._entries.get(name)
        return json.loads(raw) if raw is not None else None

    def set(self, name: str, value: Any) -> None:
        self._entries[name] = json.dumps(value)


class SqliteStorage:
    """Single-file SQLite storage: one row per named entry, value stored as JSON text."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _init_schema(self):
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS entries (
                    name TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.commit()

    def get(self, name: str) -> Optional[Any]:
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute("SELECT value FROM entries WHERE name = ?", (name,)).fetchone()
            return json.loads(row[0]) if row else None

    def set(self, name: str, value: Any) -> None:
        now = datetime.now(UTC).isoformat()
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                "INSERT INTO entries (name, value, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT(name) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at",
                (name, json.dumps(value, ensure_ascii=False), now),
            )
            conn.commit()
