"""SQLite-backed named storage slots."""
from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from pathlib import Path

SCHEMA = """
CREATE TABLE IF NOT EXISTS storage_slots (
    name TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""


class Database:
    def __init__(self, db_path: Path):
        self.db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(str(db_path), check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA journal_mode=WAL")
        self._init_schema()

    def _init_schema(self) -> None:
        self.conn.executescript(SCHEMA)
        self.conn.commit()

    def close(self) -> None:
        self.conn.close()

    # ── Slots ─────────────────────────────────────────────────────────────

    def read_slot(self, name: str) -> str | None:
        row = self.conn.execute(
            "SELECT value FROM storage_slots WHERE name = ?", (name,)
        ).fetchone()
        return row["value"] if row else None

    def write_slot(self, name: str, value: str) -> None:
        """Replace the slot contents in a single committed transaction."""
        now = datetime.now(timezone.utc).isoformat()
        with self.conn:
            self.conn.execute(
                "INSERT OR REPLACE INTO storage_slots (name, value, updated_at) "
                "VALUES (?, ?, ?)",
                (name, value, now),
            )

    def delete_slot(self, name: str) -> bool:
        with self.conn:
            cur = self.conn.execute(
                "DELETE FROM storage_slots WHERE name = ?", (name,)
            )
        return cur.rowcount > 0

    def get_slot_updated_at(self, name: str) -> str | None:
        row = self.conn.execute(
            "SELECT updated_at FROM storage_slots WHERE name = ?", (name,)
        ).fetchone()
        return row["updated_at"] if row else None
