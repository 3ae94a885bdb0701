"""
SQLite log store.

Write side: `insert_log_batch` (LogSinkPort) inserts a flushed batch in one
transaction. Read side: filtered, paginated queries and maintenance used by
the admin log viewer (LogStorePort).
"""

import asyncio
from collections.abc import Sequence
from typing import Any

from src.adapters.sqlite.repos import SQLiteRepo
from src.components.logbuffer import LogRecord

_LOG_COLUMNS = ("app", "level", "message", "service", "context", "stack", "attempts", "timestamp")
_GROUPABLE = frozenset({"level", "app", "service"})


class SQLiteLogStore(SQLiteRepo):
    # --- Write side ---

    def insert_batch(self, records: Sequence[LogRecord]) -> None:
        if not records:
            return
        placeholders = ", ".join("?" for _ in _LOG_COLUMNS)
        conn = self._get_conn()
        try:
            conn.executemany(
                f"INSERT INTO logs ({', '.join(_LOG_COLUMNS)}) VALUES ({placeholders})",
                [tuple(r.to_row()[c] for c in _LOG_COLUMNS) for r in records],
            )
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    async def insert_log_batch(self, records: Sequence[LogRecord]) -> None:
        await asyncio.to_thread(self.insert_batch, list(records))

    # --- Read side ---

    @staticmethod
    def _where(filters: dict[str, Any]) -> tuple[str, list[Any]]:
        clauses: list[str] = []
        params: list[Any] = []
        for column in ("level", "app", "service"):
            if filters.get(column):
                clauses.append(f"{column} = ?")
                params.append(filters[column])
        if filters.get("search"):
            clauses.append("message LIKE ?")
            params.append(f"%{filters['search']}%")
        if filters.get("start_date"):
            clauses.append("timestamp >= ?")
            params.append(filters["start_date"])
        if filters.get("end_date"):
            clauses.append("timestamp <= ?")
            params.append(filters["end_date"])
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        return where, params

    def query(
        self,
        filters: dict[str, Any],
        limit: int,
        offset: int,
    ) -> tuple[list[dict[str, Any]], int]:
        where, params = self._where(filters)
        conn = self._get_conn()
        try:
            total_row = conn.execute(
                f"SELECT COUNT(*) AS total FROM logs{where}", params
            ).fetchone()
            rows = conn.execute(
                f"SELECT id, {', '.join(_LOG_COLUMNS)} FROM logs{where} "
                "ORDER BY timestamp DESC, id DESC LIMIT ? OFFSET ?",
                [*params, limit, offset],
            ).fetchall()
            return rows, int(total_row["total"])
        finally:
            conn.close()

    def count(self) -> int:
        row = self._fetch_one("SELECT COUNT(*) AS total FROM logs")
        return int(row["total"]) if row else 0

    def count_by(self, column: str, limit: int | None = None) -> dict[str, int]:
        if column not in _GROUPABLE:
            raise ValueError(f"Cannot group logs by {column!r}")
        sql = (
            f"SELECT {column} AS key, COUNT(*) AS count FROM logs "
            f"WHERE {column} IS NOT NULL GROUP BY {column} ORDER BY count DESC"
        )
        params: tuple[Any, ...] = ()
        if limit is not None:
            sql += " LIMIT ?"
            params = (limit,)
        return {row["key"]: int(row["count"]) for row in self._fetch_all(sql, params)}

    def delete_ids(self, log_ids: Sequence[int]) -> int:
        if not log_ids:
            return 0
        placeholders = ", ".join("?" for _ in log_ids)
        return self._execute(f"DELETE FROM logs WHERE id IN ({placeholders})", tuple(log_ids))

    def clear(self, older_than: str | None = None) -> int:
        if older_than:
            return self._execute("DELETE FROM logs WHERE timestamp < ?", (older_than,))
        return self._execute("DELETE FROM logs")
