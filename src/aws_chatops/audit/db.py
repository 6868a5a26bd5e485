"""SQLite access layer for the command history."""

from __future__ import annotations

import sqlite3
import threading
from pathlib import Path
from typing import Mapping, Sequence

from aws_chatops.audit.models import AuditRecord

_SqlValue = str | bytes | int | float | None
_SqlParams = Sequence[_SqlValue] | Mapping[str, _SqlValue]


class SqliteStore:
    def __init__(self, path: str, wal: bool = True) -> None:
        if path != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self._closed = False
        if wal:
            self._conn.execute("PRAGMA journal_mode=WAL")
        self._init_schema()

    def _init_schema(self) -> None:
        self._conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS command_history (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                actor_id TEXT NOT NULL,
                command_text TEXT NOT NULL,
                response_text TEXT NOT NULL,
                success INTEGER NOT NULL,
                created_at TEXT NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_command_history_created_at
                ON command_history(created_at);
            """
        )
        self._conn.commit()

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._conn.close()
            self._closed = True

    def fetch_all(
        self,
        query: str,
        params: _SqlParams,
    ) -> list[sqlite3.Row]:
        with self._lock:
            cur = self._conn.execute(query, params)
            return cur.fetchall()

    def append_record(self, record: AuditRecord) -> int:
        """Insert a history row and return its id. Existing rows are never touched."""
        with self._lock:
            cursor = self._conn.execute(
                """
                INSERT INTO command_history (
                    actor_id, command_text, response_text, success, created_at
                ) VALUES (?, ?, ?, ?, ?)
                """,
                (
                    record.actor_id,
                    record.command_text,
                    record.response_text,
                    1 if record.success else 0,
                    record.timestamp,
                ),
            )
            self._conn.commit()
            return int(cursor.lastrowid)

    def recent_records(self, limit: int) -> list[AuditRecord]:
        if limit < 1:
            raise ValueError("limit must be a positive integer")
        rows = self.fetch_all(
            "SELECT * FROM command_history ORDER BY created_at DESC, id DESC LIMIT ?",
            (limit,),
        )
        return [_row_to_record(row) for row in rows]


def _row_to_record(row: sqlite3.Row) -> AuditRecord:
    return AuditRecord(
        id=row["id"],
        actor_id=row["actor_id"],
        command_text=row["command_text"],
        response_text=row["response_text"],
        success=bool(row["success"]),
        timestamp=row["created_at"],
    )
