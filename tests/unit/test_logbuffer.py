"""
Unit tests for the buffered logger component.

Covers record normalization, size- and time-triggered flushing, drain
atomicity, sink failure handling and in-flight backpressure.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from datetime import UTC, datetime, timedelta, timezone

import pytest

from src.components.logbuffer import (
    MAX_BUFFER,
    BufferedLogger,
    FromEntry,
    FromError,
    FromMessage,
    LogContext,
    LogEntryInput,
    LogRecord,
    build_record,
    format_timestamp,
)

NOW = datetime(2026, 3, 1, 12, 0, 0, 123456, tzinfo=UTC)


class RecordingSink:
    def __init__(self) -> None:
        self.batches: list[list[LogRecord]] = []

    async def insert_log_batch(self, records):
        self.batches.append(list(records))

    @property
    def messages(self) -> list[str]:
        return [r.message for batch in self.batches for r in batch]


class FailingSink:
    def __init__(self) -> None:
        self.calls = 0

    async def insert_log_batch(self, records):
        self.calls += 1
        raise ConnectionError("log store unreachable")


class BlockingSink(RecordingSink):
    def __init__(self) -> None:
        super().__init__()
        self.release = asyncio.Event()

    async def insert_log_batch(self, records):
        await self.release.wait()
        await super().insert_log_batch(records)


def msg(text: str) -> FromMessage:
    return FromMessage(text, application="luxe")


class TestBuildRecord:
    def test_timestamp_is_utc_millis_with_z(self):
        assert format_timestamp(NOW) == "2026-03-01T12:00:00.123Z"

    def test_timestamp_converts_offsets_to_utc(self):
        lagos = timezone(timedelta(hours=1))
        assert format_timestamp(datetime(2026, 3, 1, 13, 0, tzinfo=lagos)) == (
            "2026-03-01T12:00:00.000Z"
        )

    def test_from_message_defaults(self):
        record = build_record(FromMessage(), "info", NOW)

        assert record.message == "Unknown message"
        assert record.application == "unknown"
        assert record.context is None
        assert record.attempts is None

    def test_from_message_with_context(self):
        record = build_record(
            FromMessage("retrying", application="luxe", service="orders", ctx=LogContext(2, 3)),
            "warn",
            NOW,
        )

        assert record.context == "attempt 2/4"
        assert record.attempts == 2
        assert record.service == "orders"
        assert record.level == "warn"

    def test_context_needs_both_attempt_and_retries(self):
        assert LogContext(attempt=1).describe() is None
        assert LogContext(retries=1).describe() is None

    def test_from_error_takes_attempts_from_ctx_when_missing(self):
        record = build_record(
            FromError("boom", stack="Traceback...", ctx=LogContext(1, 2)), "error", NOW
        )

        assert record.message == "boom"
        assert record.stack == "Traceback..."
        assert record.attempts == 1
        assert record.context == "attempt 1/3"

    def test_from_error_explicit_attempts_win(self):
        record = build_record(FromError("boom", attempts=5, ctx=LogContext(1, 2)), "error", NOW)
        assert record.attempts == 5

    def test_from_error_of_exception(self):
        class Flaky(Exception):
            attempts = 3

        try:
            raise Flaky("flaky failure")
        except Flaky as e:
            source = FromError.of(e, application="luxe", service="email")

        record = build_record(source, "error", NOW)

        assert record.message == "flaky failure"
        assert record.attempts == 3
        assert record.stack is not None and "Flaky" in record.stack
        assert record.service == "email"

    def test_from_entry_passes_fields_through(self):
        entry = LogEntryInput(
            application="luxe", message="prebuilt", service="logs", context="ctx", attempts=2
        )

        record = build_record(FromEntry(entry), "debug", NOW)

        assert record.application == "luxe"
        assert record.context == "ctx"
        assert record.attempts == 2
        assert record.level == "debug"

    def test_from_entry_ctx_overrides_context(self):
        entry = LogEntryInput(application="luxe", message="prebuilt", context="ctx")
        record = build_record(FromEntry(entry, ctx=LogContext(1, 1)), "info", NOW)
        assert record.context == "attempt 1/2"

    def test_to_row_uses_app_column(self):
        record = build_record(msg("hello"), "info", NOW)
        row = record.to_row()

        assert row["app"] == "luxe"
        assert "application" not in row
        assert list(row) == [
            "app",
            "level",
            "message",
            "service",
            "context",
            "stack",
            "attempts",
            "timestamp",
        ]


class TestEnqueue:
    def test_record_buffers_until_flush(self):
        sink = RecordingSink()
        log = BufferedLogger(sink, max_buffer=10)

        log.info(msg("one"))
        log.warn(msg("two"))

        assert log.pending == 2
        assert sink.batches == []

    def test_level_helpers(self):
        log = BufferedLogger(RecordingSink())

        levels = [
            log.error(msg("e")).level,
            log.warn(msg("w")).level,
            log.info(msg("i")).level,
            log.debug(msg("d")).level,
        ]

        assert levels == ["error", "warn", "info", "debug"]

    @pytest.mark.parametrize(
        "kwargs", [{"flush_interval_ms": 0}, {"max_buffer": 0}, {"max_buffer": -1}]
    )
    def test_rejects_invalid_config(self, kwargs):
        with pytest.raises(ValueError):
            BufferedLogger(RecordingSink(), **kwargs)


class TestSizeTriggeredFlush:
    def test_full_buffer_flushes_everything_inside_loop(self):
        sink = RecordingSink()

        async def scenario():
            log = BufferedLogger(sink)
            for i in range(MAX_BUFFER):
                log.info(msg(f"m{i}"))
            assert log.pending == 0
            await asyncio.sleep(0)
            return log

        asyncio.run(scenario())

        assert len(sink.batches) == 1
        assert len(sink.batches[0]) == MAX_BUFFER
        assert sink.messages == [f"m{i}" for i in range(MAX_BUFFER)]

    def test_full_buffer_without_loop_queues_for_next_flush(self):
        sink = RecordingSink()
        log = BufferedLogger(sink, max_buffer=3)

        for i in range(7):
            log.info(msg(f"m{i}"))

        assert sink.batches == []
        assert log.queued_batches == 2
        assert log.pending == 1

        asyncio.run(log.flush())

        assert [len(b) for b in sink.batches] == [3, 3, 1]
        assert log.queued_batches == 0

    def test_record_without_loop_does_not_wait_for_sink(self):
        calls = []

        class SlowSink:
            async def insert_log_batch(self, records):
                calls.append(len(records))
                await asyncio.sleep(0.3)

        log = BufferedLogger(SlowSink(), max_buffer=1)
        started = time.perf_counter()

        log.info(msg("quick"))

        assert time.perf_counter() - started < 0.1
        assert calls == []
        assert log.queued_batches == 1

    def test_order_is_preserved_across_batches(self):
        sink = RecordingSink()
        log = BufferedLogger(sink, max_buffer=4)

        for i in range(12):
            log.info(msg(str(i)))
        asyncio.run(log.flush())

        assert sink.messages == [str(i) for i in range(12)]

    def test_slow_first_write_does_not_reorder_batches(self):
        class FirstWriteSlowSink(RecordingSink):
            async def insert_log_batch(self, records):
                if not self.batches:
                    await asyncio.sleep(0.05)
                await super().insert_log_batch(records)

        sink = FirstWriteSlowSink()

        async def scenario():
            log = BufferedLogger(sink, max_buffer=2)
            for i in range(4):
                log.info(msg(str(i)))
            await asyncio.sleep(0)
            await log.aclose()

        asyncio.run(scenario())

        assert sink.messages == ["0", "1", "2", "3"]
        assert [len(b) for b in sink.batches] == [2, 2]

    def test_flush_waits_for_queued_batches_first(self):
        sink = BlockingSink()

        async def scenario():
            log = BufferedLogger(sink, max_buffer=2)
            log.info(msg("a"))
            log.info(msg("b"))
            log.info(msg("c"))
            flushing = asyncio.ensure_future(log.flush())
            await asyncio.sleep(0)
            sink.release.set()
            await flushing

        asyncio.run(scenario())

        assert sink.messages == ["a", "b", "c"]


class TestFlush:
    def test_flush_empty_buffer_is_noop(self):
        sink = RecordingSink()
        log = BufferedLogger(sink)

        asyncio.run(log.flush())

        assert sink.batches == []

    def test_failed_write_drops_batch(self, caplog):
        sink = FailingSink()
        log = BufferedLogger(sink, max_buffer=100)
        for i in range(5):
            log.info(msg(str(i)))

        with caplog.at_level(logging.ERROR, logger="src.components.logbuffer.component"):
            asyncio.run(log.flush())

        assert sink.calls == 1
        assert log.pending == 0
        assert log.dropped_records == 5
        assert "dropping 5 logs" in caplog.text

    def test_failed_write_is_not_retried_on_next_flush(self):
        sink = FailingSink()
        log = BufferedLogger(sink)
        log.info(msg("lost"))

        asyncio.run(log.flush())
        asyncio.run(log.flush())

        assert sink.calls == 1

    def test_drain_is_atomic_under_concurrent_enqueue(self):
        log = BufferedLogger(RecordingSink(), max_buffer=1_000_000)
        per_thread = 2000
        drained: list[LogRecord] = []
        stop = threading.Event()

        def producer(tag: str) -> None:
            for i in range(per_thread):
                log.info(msg(f"{tag}-{i}"))

        def consumer() -> None:
            while not stop.is_set():
                drained.extend(log.drain())

        threads = [threading.Thread(target=producer, args=(t,)) for t in "abcd"]
        drainer = threading.Thread(target=consumer)
        drainer.start()
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        stop.set()
        drainer.join()
        drained.extend(log.drain())

        messages = [r.message for r in drained]
        assert len(messages) == 4 * per_thread
        assert len(set(messages)) == len(messages)


class TestLifecycle:
    def test_periodic_flush(self):
        sink = RecordingSink()

        async def scenario():
            log = BufferedLogger(sink, flush_interval_ms=10)
            log.start()
            assert log.is_running
            log.info(msg("tick"))
            await asyncio.sleep(0.1)
            await log.aclose()
            assert not log.is_running

        asyncio.run(scenario())

        assert sink.messages == ["tick"]

    def test_start_is_idempotent(self):
        async def scenario():
            log = BufferedLogger(RecordingSink(), flush_interval_ms=1000)
            log.start()
            first = log._periodic
            log.start()
            assert log._periodic is first
            await log.aclose()

        asyncio.run(scenario())

    def test_aclose_flushes_pending(self):
        sink = RecordingSink()

        async def scenario():
            log = BufferedLogger(sink, flush_interval_ms=60_000)
            log.start()
            log.info(msg("last words"))
            await log.aclose()

        asyncio.run(scenario())

        assert sink.messages == ["last words"]

    def test_aclose_without_start(self):
        sink = RecordingSink()
        log = BufferedLogger(sink)
        log.info(msg("x"))

        asyncio.run(log.aclose())

        assert sink.messages == ["x"]


class TestBackpressure:
    def test_drops_newest_batches_when_inflight_is_full(self, caplog):
        async def scenario():
            sink = BlockingSink()
            log = BufferedLogger(sink, max_buffer=1, max_inflight_batches=1)

            with caplog.at_level(logging.WARNING):
                log.info(msg("first"))
                log.info(msg("second"))
                log.info(msg("third"))

            assert log.dropped_records == 2
            sink.release.set()
            await log.aclose()
            return sink

        sink = asyncio.run(scenario())

        assert sink.messages == ["first"]
        assert "backlog full" in caplog.text
