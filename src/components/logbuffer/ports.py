"""
Buffered logger port definitions.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from src.components.logbuffer.models import LogLevel, LogRecord, LogSource


class LogSinkPort(Protocol):
    """Persistence target for flushed batches."""

    async def insert_log_batch(self, records: Sequence[LogRecord]) -> None:
        """Insert all records as one batch. May raise; the logger absorbs it."""
        ...


class LogRecorderPort(Protocol):
    """What callers need from a logger: a non-blocking enqueue."""

    def record(self, source: LogSource, level: LogLevel = "info") -> LogRecord:
        ...
