import datetime
import json
import os
import sqlite3
from contextlib import contextmanager
from typing import List, Mapping, Tuple

from loguru import logger

from history_service import HistoryEntry, window_start


class Database:
    """Provides SQLite connection management and schema initialization."""

    _TABLE_DEFINITIONS = {
        "history_entries": (
            """CREATE TABLE history_entries (
                    kind TEXT NOT NULL,
                    date TEXT NOT NULL,
                    record TEXT NOT NULL,
                    PRIMARY KEY (kind, date)
                );""",
            ["kind", "date", "record"],
        ),
    }

    def __init__(self, db_path: str = "wellness.db") -> None:
        self._db_path = db_path or os.environ.get("ENGINE_DB_PATH", "wellness.db")
        self._ensure_schema()

    @contextmanager
    def _connection(self):
        connection = sqlite3.connect(self._db_path)
        try:
            yield connection
            connection.commit()
        finally:
            connection.close()

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            for table, (sql, columns) in self._TABLE_DEFINITIONS.items():
                self._ensure_table(conn, table, sql, columns)

    def _ensure_table(
        self, conn: sqlite3.Connection, table: str, sql: str, columns: List[str]
    ) -> None:
        cur = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?;", (table,)
        )
        if cur.fetchone() is None:
            conn.execute(sql)
            return

        cur = conn.execute(f"PRAGMA table_info({table});")
        existing_cols = [row[1] for row in cur.fetchall()]
        if existing_cols == columns:
            return

        logger.info("migrating table {} from {} to {}", table, existing_cols, columns)
        conn.execute(f"ALTER TABLE {table} RENAME TO {table}_old;")
        conn.execute(sql)
        common = [c for c in existing_cols if c in columns]
        if common:
            cols = ", ".join(common)
            conn.execute(f"INSERT INTO {table} ({cols}) SELECT {cols} FROM {table}_old;")
        conn.execute(f"DROP TABLE {table}_old;")


class BaseRepository(Database):
    """Base repository providing helper methods."""

    def execute(self, query: str, params: Tuple = ()) -> int:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.lastrowid

    def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.fetchall()


class HistoryRepository(BaseRepository):
    """Date-keyed history of one kind; saving a date again replaces it."""

    def __init__(self, db_path: str = "wellness.db", kind: str = "fitness") -> None:
        super().__init__(db_path)
        if not kind:
            raise ValueError("kind is required")
        self.kind = kind

    def append_or_replace(self, date: str, record: Mapping) -> None:
        self.execute(
            "INSERT OR REPLACE INTO history_entries (kind, date, record) VALUES (?, ?, ?);",
            (self.kind, str(date), json.dumps(dict(record), sort_keys=True)),
        )

    def read_history(
        self, range_days: int, end_date: datetime.date
    ) -> list[HistoryEntry]:
        start = window_start(range_days, end_date).isoformat()
        rows = self.fetch_all(
            "SELECT date, record FROM history_entries WHERE kind = ? AND date >= ? AND date <= ? ORDER BY date;",
            (self.kind, start, end_date.isoformat()),
        )
        entries = []
        for date, raw in rows:
            try:
                record = json.loads(raw)
            except (TypeError, ValueError):
                logger.warning("undecodable {} history record on {}", self.kind, date)
                record = None
            entries.append(HistoryEntry(date, record))
        return entries

    def delete(self, date: str) -> None:
        rows = self.fetch_all(
            "SELECT date FROM history_entries WHERE kind = ? AND date = ?;",
            (self.kind, date),
        )
        if not rows:
            raise ValueError("entry not found")
        self.execute(
            "DELETE FROM history_entries WHERE kind = ? AND date = ?;",
            (self.kind, date),
        )

