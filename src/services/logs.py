"""
Log viewer.

Read and housekeeping operations over the persisted log records. Each
operation runs through the SafeExecutor under a `logs-*` label; a
terminal failure raises LogQueryError carrying the user-facing message.

Access control is the caller's job (the HTTP layer only exposes these to
admins).
"""

from __future__ import annotations

import asyncio
import math
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from typing import Any, TypeVar

from pydantic import BaseModel, Field

from src.components.logbuffer import LogLevel, format_timestamp
from src.components.safe_exec import RetryPolicy, RetryPolicyRegistry, SafeExecutor
from src.core.ports.db import LogStorePort

T = TypeVar("T")

LOGS_POLICY = RetryPolicy(retries=2, delay_ms=1000)
STATS_TOP_N = 10


class LogQueryError(Exception):
    """A log viewer operation failed after its retries."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class LogsFilters(BaseModel):
    level: LogLevel | None = None
    app: str | None = None
    service: str | None = None
    search: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None

    def to_query(self) -> dict[str, Any]:
        query = self.model_dump(exclude_none=True)
        for key in ("start_date", "end_date"):
            if key in query:
                query[key] = _iso(query[key])
        return query


class LogsPagination(BaseModel):
    page: int = Field(1, ge=1)
    page_size: int = Field(50, ge=1, le=500)


class LogEntry(BaseModel):
    id: int
    app: str
    level: LogLevel
    message: str
    service: str | None = None
    context: str | None = None
    stack: str | None = None
    attempts: int | None = None
    timestamp: str


class LogsPage(BaseModel):
    logs: list[LogEntry]
    total: int
    page: int
    page_size: int
    total_pages: int


class LogStats(BaseModel):
    total: int
    by_level: dict[str, int]
    by_app: dict[str, int]
    by_service: dict[str, int]


def _iso(value: datetime) -> str:
    # Naive datetimes are taken as UTC, matching how records are stamped.
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return format_timestamp(value)


class LogViewer:
    def __init__(
        self,
        store: LogStorePort,
        executor: SafeExecutor,
        policies: RetryPolicyRegistry | None = None,
    ) -> None:
        self._store = store
        self._executor = executor
        self._policies = policies

    async def _run(self, service: str, fn: Callable[..., T], *args: Any) -> T:
        async def work() -> T:
            return await asyncio.to_thread(fn, *args)

        policy = self._policies.for_service(service) if self._policies else LOGS_POLICY
        result = await self._executor.execute(work, service, policy)
        if not result.ok:
            raise LogQueryError(result.user_message)
        return result.value

    async def get_logs(
        self,
        filters: LogsFilters | None = None,
        pagination: LogsPagination | None = None,
    ) -> LogsPage:
        filters = filters or LogsFilters()
        pagination = pagination or LogsPagination()
        offset = (pagination.page - 1) * pagination.page_size

        rows, total = await self._run(
            "logs-getAll", self._store.query, filters.to_query(), pagination.page_size, offset
        )
        return LogsPage(
            logs=[LogEntry.model_validate(row) for row in rows],
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
            total_pages=math.ceil(total / pagination.page_size),
        )

    async def get_log_stats(self) -> LogStats:
        def collect() -> LogStats:
            return LogStats(
                total=self._store.count(),
                by_level=self._store.count_by("level"),
                by_app=self._store.count_by("app", STATS_TOP_N),
                by_service=self._store.count_by("service", STATS_TOP_N),
            )

        return await self._run("logs-getStats", collect)

    async def delete_log(self, log_id: int) -> int:
        return await self._run("logs-delete", self._store.delete_ids, [log_id])

    async def delete_logs(self, log_ids: Sequence[int]) -> int:
        if not log_ids:
            return 0
        return await self._run("logs-deleteMultiple", self._store.delete_ids, list(log_ids))

    async def clear_logs(self, older_than: datetime | None = None) -> int:
        cutoff = _iso(older_than) if older_than is not None else None
        return await self._run("logs-clear", self._store.clear, cutoff)
