"""SQLite storage for work-item rows and their door/window children."""

from __future__ import annotations

import json
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

OPENING_KINDS = ("doors", "windows")


def _json_default(value: object) -> object:
    if isinstance(value, (datetime,)):
        return value.isoformat()
    if isinstance(value, Path):
        return str(value)
    return value


def _dump(payload: Mapping[str, Any]) -> str:
    return json.dumps(dict(payload), ensure_ascii=False, sort_keys=True, default=_json_default)


class WorkItemStore:
    """Keep per-table work-item rows in a single SQLite file.

    Each row is stored as a JSON payload keyed by ``(table_name, c_id)`` so
    the category tables keep their own column shapes. Door and window rows
    are keyed by ``c_id`` and remember the parent column they reference.
    Every call runs in its own connection and commits on its own.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._initialized = False

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.path))
        conn.execute("PRAGMA foreign_keys = ON;")
        conn.execute("PRAGMA journal_mode = WAL;")
        return conn

    def _fetchall(self, query: str, params: Sequence[object] = ()) -> List[sqlite3.Row]:
        self._ensure_schema()
        with self._lock:
            conn = self._connect()
            conn.row_factory = sqlite3.Row
            try:
                rows = conn.execute(query, params).fetchall()
            finally:
                conn.close()
        return rows

    def _execute(self, query: str, params: Sequence[object] = ()) -> int:
        self._ensure_schema()
        with self._lock:
            conn = self._connect()
            try:
                cursor = conn.execute(query, params)
                conn.commit()
                return cursor.rowcount
            finally:
                conn.close()

    def _ensure_schema(self) -> None:
        if self._initialized:
            return
        with self._lock:
            if self._initialized:
                return
            conn = self._connect()
            try:
                conn.executescript(
                    """
                    CREATE TABLE IF NOT EXISTS work_item_rows (
                        table_name TEXT NOT NULL,
                        c_id TEXT NOT NULL,
                        room_id TEXT,
                        payload TEXT NOT NULL,
                        updated_at TEXT NOT NULL,
                        PRIMARY KEY (table_name, c_id)
                    );

                    CREATE TABLE IF NOT EXISTS opening_rows (
                        c_id TEXT PRIMARY KEY,
                        kind TEXT NOT NULL,
                        parent_table TEXT NOT NULL,
                        parent_column TEXT NOT NULL,
                        parent_c_id TEXT NOT NULL,
                        payload TEXT NOT NULL,
                        updated_at TEXT NOT NULL
                    );

                    CREATE INDEX IF NOT EXISTS idx_work_item_rows_room
                        ON work_item_rows(room_id);
                    CREATE INDEX IF NOT EXISTS idx_opening_rows_parent
                        ON opening_rows(parent_table, parent_c_id);
                    """
                )
                conn.commit()
            finally:
                conn.close()
            self._initialized = True

    def upsert_row(self, table_name: str, row: Mapping[str, Any]) -> None:
        """Insert ``row`` into ``table_name`` or replace the row with its ``c_id``."""

        c_id = row.get("c_id")
        if not c_id:
            raise ValueError(f"Row for '{table_name}' has no c_id")
        self._execute(
            """
            INSERT INTO work_item_rows (table_name, c_id, room_id, payload, updated_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(table_name, c_id) DO UPDATE SET
                room_id = excluded.room_id,
                payload = excluded.payload,
                updated_at = excluded.updated_at;
            """,
            (
                table_name,
                str(c_id),
                row.get("room_id"),
                _dump(row),
                datetime.now(timezone.utc).isoformat(),
            ),
        )

    def delete_row(self, table_name: str, c_id: str) -> bool:
        deleted = self._execute(
            "DELETE FROM work_item_rows WHERE table_name = ? AND c_id = ?",
            (table_name, c_id),
        )
        return deleted > 0

    def fetch_row(self, table_name: str, c_id: str) -> Optional[Dict[str, Any]]:
        rows = self._fetchall(
            "SELECT payload FROM work_item_rows WHERE table_name = ? AND c_id = ? LIMIT 1",
            (table_name, c_id),
        )
        return json.loads(rows[0]["payload"]) if rows else None

    def fetch_room_rows(self, room_id: str) -> List[Tuple[str, Dict[str, Any]]]:
        """Return ``(table_name, row)`` pairs of a room in insertion order."""

        rows = self._fetchall(
            "SELECT table_name, payload FROM work_item_rows WHERE room_id = ? ORDER BY rowid",
            (room_id,),
        )
        return [(row["table_name"], json.loads(row["payload"])) for row in rows]

    def upsert_opening(
        self, kind: str, parent_table: str, parent_column: str, row: Mapping[str, Any]
    ) -> None:
        if kind not in OPENING_KINDS:
            raise ValueError(f"Unknown opening kind '{kind}'")
        c_id = row.get("c_id")
        parent_c_id = row.get(parent_column)
        if not c_id or not parent_c_id:
            raise ValueError(f"{kind} row needs a c_id and a '{parent_column}' value")
        self._execute(
            """
            INSERT INTO opening_rows (
                c_id, kind, parent_table, parent_column, parent_c_id, payload, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(c_id) DO UPDATE SET
                kind = excluded.kind,
                parent_table = excluded.parent_table,
                parent_column = excluded.parent_column,
                parent_c_id = excluded.parent_c_id,
                payload = excluded.payload,
                updated_at = excluded.updated_at;
            """,
            (
                str(c_id),
                kind,
                parent_table,
                parent_column,
                str(parent_c_id),
                _dump(row),
                datetime.now(timezone.utc).isoformat(),
            ),
        )

    def delete_opening(self, kind: str, c_id: str) -> bool:
        deleted = self._execute(
            "DELETE FROM opening_rows WHERE kind = ? AND c_id = ?",
            (kind, c_id),
        )
        return deleted > 0

    def delete_openings_of(self, parent_table: str, parent_c_id: str) -> int:
        return self._execute(
            "DELETE FROM opening_rows WHERE parent_table = ? AND parent_c_id = ?",
            (parent_table, parent_c_id),
        )

    def fetch_openings(
        self, kind: str, parent_table: str, parent_c_ids: Iterable[str]
    ) -> List[Dict[str, Any]]:
        """Door or window rows owned by any of ``parent_c_ids`` in ``parent_table``."""

        ids = [str(value) for value in parent_c_ids if value]
        if not ids:
            return []
        placeholders = ", ".join("?" for _ in ids)
        rows = self._fetchall(
            f"""
            SELECT payload FROM opening_rows
            WHERE kind = ? AND parent_table = ? AND parent_c_id IN ({placeholders})
            ORDER BY rowid
            """,
            [kind, parent_table, *ids],
        )
        return [json.loads(row["payload"]) for row in rows]

    def stats(self) -> Dict[str, int]:
        rows = self._fetchall(
            """
            SELECT
                (SELECT COUNT(*) FROM work_item_rows) AS work_items,
                (SELECT COUNT(*) FROM opening_rows) AS openings
            """
        )
        if not rows:
            return {"work_items": 0, "openings": 0}
        return {"work_items": int(rows[0]["work_items"]), "openings": int(rows[0]["openings"])}


__all__ = ["OPENING_KINDS", "WorkItemStore"]
