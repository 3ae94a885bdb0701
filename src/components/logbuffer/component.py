"""
Buffered logger component.

Collects LogRecords in memory and writes them to a LogSinkPort in batches,
either every `flush_interval_ms` or as soon as `max_buffer` records are
waiting, whichever comes first.

Key behaviors:
- record() only enqueues; callers never wait on the sink
- A flush drains the whole buffer (snapshot-and-clear) before writing
- A failed write drops its batch; nothing is re-queued
- Sink failures are reported on the stdlib logging channel only
- Batches are written one at a time by a single writer task; at most
  `max_inflight_batches` may wait, extra size-triggered batches are
  dropped (drop-newest) and counted
- Outside an event loop a full batch is queued for the next flush()

Invariants:
- Records are written in enqueue order within one logger
- An enqueue that races a drain lands in exactly one batch
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections import deque
from collections.abc import Callable
from datetime import UTC, datetime

from src.components.logbuffer.models import (
    LogLevel,
    LogRecord,
    LogSource,
    build_record,
)
from src.components.logbuffer.ports import LogSinkPort

logger = logging.getLogger(__name__)

FLUSH_INTERVAL_MS = 5000
MAX_BUFFER = 50
MAX_INFLIGHT_BATCHES = 8


def _utc_now() -> datetime:
    return datetime.now(UTC)


class BufferedLogger:
    """
    Batched, non-blocking log recorder.

    Usage:
        log = BufferedLogger(sink)
        log.start()                       # inside a running event loop
        log.warn(FromMessage("slow query", application="luxe"))
        await log.aclose()                # final flush on shutdown
    """

    def __init__(
        self,
        sink: LogSinkPort,
        flush_interval_ms: int = FLUSH_INTERVAL_MS,
        max_buffer: int = MAX_BUFFER,
        max_inflight_batches: int = MAX_INFLIGHT_BATCHES,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        if flush_interval_ms <= 0:
            raise ValueError("flush_interval_ms must be positive")
        if max_buffer <= 0:
            raise ValueError("max_buffer must be positive")

        self._sink = sink
        self._flush_interval = flush_interval_ms / 1000
        self._max_buffer = max_buffer
        self._max_inflight = max_inflight_batches
        self._clock = clock

        self._buffer: list[LogRecord] = []
        self._lock = threading.Lock()
        self._batches: deque[list[LogRecord]] = deque()
        self._writer: asyncio.Task[None] | None = None
        self._periodic: asyncio.Task[None] | None = None
        self.dropped_records = 0

    # --- Enqueue ---

    def record(self, source: LogSource, level: LogLevel = "info") -> LogRecord:
        """Enqueue one record; triggers a flush when the buffer is full."""
        entry = build_record(source, level, self._clock())

        batch: list[LogRecord] = []
        with self._lock:
            self._buffer.append(entry)
            if len(self._buffer) >= self._max_buffer:
                batch = self._drain_locked()

        if batch:
            self._dispatch(batch)
        return entry

    def error(self, source: LogSource) -> LogRecord:
        return self.record(source, "error")

    def warn(self, source: LogSource) -> LogRecord:
        return self.record(source, "warn")

    def info(self, source: LogSource) -> LogRecord:
        return self.record(source, "info")

    def debug(self, source: LogSource) -> LogRecord:
        return self.record(source, "debug")

    # --- Introspection ---

    @property
    def pending(self) -> int:
        """Number of records waiting for the next flush."""
        with self._lock:
            return len(self._buffer)

    @property
    def queued_batches(self) -> int:
        """Full batches waiting for (or in the middle of) a sink write."""
        return len(self._batches)

    @property
    def is_running(self) -> bool:
        return self._periodic is not None and not self._periodic.done()

    # --- Flushing ---

    def _drain_locked(self) -> list[LogRecord]:
        batch = self._buffer
        self._buffer = []
        return batch

    def drain(self) -> list[LogRecord]:
        """Atomically take everything currently buffered."""
        with self._lock:
            return self._drain_locked()

    async def flush(self) -> None:
        """Drain the buffer and write it, after any batches already queued."""
        batch = self.drain()
        if batch:
            self._batches.append(batch)
        if self._batches:
            # Shielded so cancelling a periodic flush never interrupts a write.
            await asyncio.shield(self._start_writer(asyncio.get_running_loop()))

    def _dispatch(self, batch: list[LogRecord]) -> None:
        # The batch being written stays at the head of the queue, so the
        # queue length is the number of writes in flight.
        if len(self._batches) >= self._max_inflight:
            self.dropped_records += len(batch)
            logger.warning(
                "Log sink backlog full (%d writes in flight), dropping %d records",
                len(self._batches),
                len(batch),
            )
            return
        self._batches.append(batch)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop in this thread; the next flush() writes it.
            return
        self._start_writer(loop)

    def _start_writer(self, loop: asyncio.AbstractEventLoop) -> asyncio.Task[None]:
        if self._writer is None or self._writer.done():
            self._writer = loop.create_task(self._write_queued())
        return self._writer

    async def _write_queued(self) -> None:
        while self._batches:
            await self._write(self._batches[0])
            self._batches.popleft()

    async def _write(self, batch: list[LogRecord]) -> None:
        try:
            await self._sink.insert_log_batch(batch)
        except Exception as e:
            self.dropped_records += len(batch)
            logger.error("Logger failed (dropping %d logs): %s", len(batch), e)

    # --- Lifecycle ---

    def start(self) -> None:
        """Start the periodic flush task on the running event loop."""
        if self.is_running:
            return
        self._periodic = asyncio.get_running_loop().create_task(self._run_periodic())
        logger.info("Log flusher started (interval: %.1fs)", self._flush_interval)

    async def _run_periodic(self) -> None:
        while True:
            await asyncio.sleep(self._flush_interval)
            await self.flush()

    async def aclose(self) -> None:
        """Stop the periodic task and write everything still buffered or queued."""
        if self._periodic is not None:
            self._periodic.cancel()
            try:
                await self._periodic
            except asyncio.CancelledError:
                pass
            self._periodic = None

        await self.flush()
        logger.info("Log flusher stopped")
