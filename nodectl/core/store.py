"""SQLite-backed node registry."""

from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

from nodectl.core.errors import NodeExistsError, NodeNotFoundError, StoreError
from nodectl.core.model import HardwareRecord, Node

LOGGER = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


class NodeStore:
    """Persists nodes and their hardware records.

    A node's hardware record lives in a single JSON column, so replacing it is
    one ``UPDATE`` inside one transaction. SQLite's write lock serializes
    concurrent replaces on the same node; readers see the old record or the new
    one, never a mix.
    """

    def __init__(self, db_path: Path, *, busy_timeout_s: float = 5.0) -> None:
        self.db_path = db_path
        self.busy_timeout_s = busy_timeout_s
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreError(
                f"Could not create node database directory {self.db_path.parent}: {exc}"
            ) from exc
        self._init_db()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(self.db_path, timeout=self.busy_timeout_s)
        except sqlite3.Error as exc:
            raise StoreError(f"Could not open node database {self.db_path}: {exc}") from exc
        conn.row_factory = sqlite3.Row
        try:
            with conn:
                yield conn
        except sqlite3.IntegrityError:
            raise
        except sqlite3.Error as exc:
            raise StoreError(f"Node database error: {exc}") from exc
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS nodes (
                    name TEXT PRIMARY KEY,
                    hw_info TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )

    @staticmethod
    def _row_to_node(row: sqlite3.Row) -> Node:
        return Node(
            name=row["name"],
            hw_info=HardwareRecord(facts=json.loads(row["hw_info"])),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    @staticmethod
    def _dump(record: HardwareRecord) -> str:
        return json.dumps(record.to_dict(), sort_keys=True)

    def add_node(self, name: str, record: HardwareRecord | None = None) -> Node:
        record = record or HardwareRecord()
        now = _now()
        try:
            with self._connect() as conn:
                conn.execute(
                    "INSERT INTO nodes (name, hw_info, created_at, updated_at) VALUES (?, ?, ?, ?)",
                    (name, self._dump(record), now, now),
                )
        except sqlite3.IntegrityError as exc:
            raise NodeExistsError(f"Node '{name}' already exists") from exc
        return Node(name=name, hw_info=record, created_at=now, updated_at=now)

    def get_node(self, name: str) -> Node:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT name, hw_info, created_at, updated_at FROM nodes WHERE name = ?", (name,)
            ).fetchone()
        if row is None:
            raise NodeNotFoundError(f"Node '{name}' does not exist")
        return self._row_to_node(row)

    def list_nodes(self) -> list[Node]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT name, hw_info, created_at, updated_at FROM nodes ORDER BY name"
            ).fetchall()
        return [self._row_to_node(row) for row in rows]

    def replace_hw_info(self, name: str, record: HardwareRecord) -> Node:
        now = _now()
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE nodes SET hw_info = ?, updated_at = ? WHERE name = ?",
                (self._dump(record), now, name),
            )
            if cursor.rowcount == 0:
                raise NodeNotFoundError(f"Node '{name}' does not exist")
            row = conn.execute(
                "SELECT name, hw_info, created_at, updated_at FROM nodes WHERE name = ?", (name,)
            ).fetchone()
        return self._row_to_node(row)

    def delete_node(self, name: str) -> None:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM nodes WHERE name = ?", (name,))
            if cursor.rowcount == 0:
                raise NodeNotFoundError(f"Node '{name}' does not exist")
        LOGGER.info("Deleted node %s", name)
