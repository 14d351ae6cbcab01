"""SQLite-backed record storage for persisted credentials and tokens."""

from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional


class SQLiteStore:
    """Key/value records in a single table keyed by (target name, record kind).

    A fresh connection is opened per operation so the store can be shared
    between threads without extra locking.
    """

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = Path(db_path)
        if self._db_path.parent and not self._db_path.parent.exists():
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    @property
    def db_path(self) -> Path:
        return self._db_path

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS credential_records (
                    target TEXT NOT NULL,
                    kind TEXT NOT NULL,
                    data TEXT NOT NULL,
                    PRIMARY KEY (target, kind)
                )
                """
            )

    def put_item(self, item: Dict[str, Any]) -> None:
        target = item.get("target")
        kind = item.get("kind")
        if not target or not kind:
            raise ValueError("Item must include 'target' and 'kind' keys")

        data_json = json.dumps(item)
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO credential_records (target, kind, data)
                VALUES (?, ?, ?)
                ON CONFLICT(target, kind) DO UPDATE SET data = excluded.data
                """,
                (target, kind, data_json),
            )

    def get_item(self, *, target: str, kind: str) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT data FROM credential_records WHERE target = ? AND kind = ?",
                (target, kind),
            ).fetchone()
        if not row:
            return None
        return json.loads(row["data"])

    def delete_item(self, *, target: str, kind: str) -> None:
        with self._connect() as conn:
            conn.execute(
                "DELETE FROM credential_records WHERE target = ? AND kind = ?",
                (target, kind),
            )


__all__ = ["SQLiteStore"]
