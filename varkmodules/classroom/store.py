"""
SQLiteStore - Reference persistence service backed by a single SQLite file.

Stores learner records (progress, submissions, completions, badges,
notifications) as JSON documents grouped by logical table name:
- upsert: insert or replace the record identified by a conflict key
- insert: append a new record
- get / select: read records matching field values

Any sqlite3 failure is raised as PersistenceError.
"""

import json
import logging
import sqlite3
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping, Optional, Protocol, Sequence

from pydantic import BaseModel

from varkmodules.errors import PersistenceError


logger = logging.getLogger(__name__)


class PersistenceService(Protocol):
    def upsert(self, table: str, record: Mapping[str, Any], conflict_key: Sequence[str]) -> dict:
        ...

    def insert(self, table: str, record: Mapping[str, Any]) -> dict:
        ...

    def get(self, table: str, match: Mapping[str, Any]) -> Optional[dict]:
        ...

    def select(self, table: str, match: Optional[Mapping[str, Any]] = None) -> list[dict]:
        ...


def to_record(data: BaseModel | Mapping[str, Any]) -> dict:
    """JSON-safe dict for a pydantic model or plain mapping."""
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json")
    return json.loads(json.dumps(dict(data), default=str))


def _where(match: Optional[Mapping[str, Any]]) -> tuple[str, list]:
    """SQL conditions on JSON fields for an equality match on scalar values."""
    clauses, params = [], []
    for field, value in (match or {}).items():
        path = f'$."{field}"'
        if value is None:
            clauses.append("json_extract(data, ?) IS NULL")
            params.append(path)
        else:
            # JSON booleans come back from json_extract as 0/1
            clauses.append("json_extract(data, ?) = ?")
            params.extend([path, int(value) if isinstance(value, bool) else value])
    return "".join(f" AND {clause}" for clause in clauses), params


class SQLiteStore:
    """
    Document store over SQLite.

    Each method opens its own connection, so one store can be shared by
    the app and the side-effect executor.
    """

    def __init__(self, db_path: str | Path):
        """
        Initialize the store.

        Args:
            db_path: Path to the SQLite file (created if missing)
        """
        self.db_path = Path(db_path)
        self._ensure_database()

    def _ensure_database(self):
        """Create database and tables if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(str(self.db_path))
        try:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS records (
                    table_name TEXT NOT NULL,
                    record_key TEXT NOT NULL,
                    data JSON NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    PRIMARY KEY (table_name, record_key)
                );

                CREATE INDEX IF NOT EXISTS idx_records_table
                ON records(table_name);
            """)
            conn.commit()
        finally:
            conn.close()

    def _get_connection(self) -> sqlite3.Connection:
        """Get a new database connection."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        return conn

    def _write(self, table: str, record_key: str, record: dict, replace: bool) -> dict:
        now = datetime.now().isoformat()
        conflict = (
            "ON CONFLICT(table_name, record_key) DO UPDATE SET data = excluded.data, updated_at = excluded.updated_at"
            if replace else ""
        )
        try:
            conn = self._get_connection()
            try:
                conn.execute(
                    f"""INSERT INTO records (table_name, record_key, data, created_at, updated_at)
                        VALUES (?, ?, ?, ?, ?) {conflict}""",
                    (table, record_key, json.dumps(record, ensure_ascii=False), now, now)
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error(f"Error writing to {table}: {e}")
            raise PersistenceError(f"Failed to write {table} record") from e
        return record

    def _query(self, table: str, columns: str, match: Optional[Mapping[str, Any]], suffix: str = "") -> list:
        conditions, params = _where(match)
        try:
            conn = self._get_connection()
            try:
                cursor = conn.execute(
                    f"SELECT {columns} FROM records WHERE table_name = ?{conditions}{suffix}",
                    [table, *params]
                )
                return cursor.fetchall()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error(f"Error reading {table}: {e}")
            raise PersistenceError(f"Failed to read {table}") from e

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def upsert(self, table: str, record: Mapping[str, Any], conflict_key: Sequence[str]) -> dict:
        """
        Insert a record, replacing any record with the same conflict key.

        Raises:
            PersistenceError: If a conflict field is missing or the write fails
        """
        data = to_record(record)
        missing = [field for field in conflict_key if field not in data]
        if missing:
            raise PersistenceError(f"Record for {table} lacks conflict key fields: {missing}")
        record_key = json.dumps([data[field] for field in conflict_key])
        return self._write(table, record_key, data, replace=True)

    def insert(self, table: str, record: Mapping[str, Any]) -> dict:
        """Append a record under a fresh key."""
        data = to_record(record)
        data.setdefault("id", uuid.uuid4().hex)
        return self._write(table, data["id"], data, replace=False)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def select(self, table: str, match: Optional[Mapping[str, Any]] = None) -> list[dict]:
        """Records of a table matching every field in `match`, oldest first."""
        rows = self._query(table, "data", match, " ORDER BY created_at, rowid")
        return [json.loads(row["data"]) for row in rows]

    def get(self, table: str, match: Mapping[str, Any]) -> Optional[dict]:
        """First record matching `match`, or None."""
        rows = self._query(table, "data", match, " ORDER BY created_at, rowid LIMIT 1")
        return json.loads(rows[0]["data"]) if rows else None

    def count(self, table: str, match: Optional[Mapping[str, Any]] = None) -> int:
        rows = self._query(table, "COUNT(*) AS n", match)
        return rows[0]["n"]
