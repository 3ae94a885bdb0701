"""
Buffered logger models.

A log call names its source explicitly with one of three variants
(FromMessage, FromError, FromEntry); build_record() turns any of them into
the immutable LogRecord that is buffered and later persisted.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Literal

LogLevel = Literal["error", "warn", "info", "debug"]

LOG_LEVELS: tuple[LogLevel, ...] = ("error", "warn", "info", "debug")

UNKNOWN_APP = "unknown"
UNKNOWN_MESSAGE = "Unknown message"


@dataclass(frozen=True)
class LogRecord:
    """One structured log line as stored in the `logs` table."""

    application: str
    level: LogLevel
    message: str
    timestamp: str
    service: str | None = None
    context: str | None = None
    stack: str | None = None
    attempts: int | None = None

    def to_row(self) -> dict[str, Any]:
        """Column mapping for the log store (`app` is the stored column name)."""
        return {
            "app": self.application,
            "level": self.level,
            "message": self.message,
            "service": self.service,
            "context": self.context,
            "stack": self.stack,
            "attempts": self.attempts,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class LogContext:
    """Retry position of the call that produced the record."""

    attempt: int | None = None
    retries: int | None = None

    def describe(self) -> str | None:
        if self.attempt is None or self.retries is None:
            return None
        return f"attempt {self.attempt}/{self.retries + 1}"


@dataclass(frozen=True)
class LogEntryInput:
    """Pre-built entry, minus level and timestamp."""

    application: str
    message: str
    service: str | None = None
    context: str | None = None
    stack: str | None = None
    attempts: int | None = None


# --- Source variants ---


@dataclass(frozen=True)
class FromMessage:
    message: str | None = None
    application: str | None = None
    service: str | None = None
    ctx: LogContext | None = None


@dataclass(frozen=True)
class FromError:
    message: str
    stack: str | None = None
    attempts: int | None = None
    application: str | None = None
    service: str | None = None
    ctx: LogContext | None = None

    @classmethod
    def of(
        cls,
        exc: BaseException,
        application: str | None = None,
        service: str | None = None,
        ctx: LogContext | None = None,
    ) -> FromError:
        """Build from an exception; an `attempts` attribute on it is honoured."""
        stack = "".join(traceback.format_exception(exc)) if exc.__traceback__ else None
        attempts = getattr(exc, "attempts", None)
        return cls(
            message=str(exc) or type(exc).__name__,
            stack=stack,
            attempts=attempts if isinstance(attempts, int) else None,
            application=application,
            service=service,
            ctx=ctx,
        )


@dataclass(frozen=True)
class FromEntry:
    entry: LogEntryInput
    ctx: LogContext | None = None


LogSource = FromMessage | FromError | FromEntry


def format_timestamp(now: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a trailing Z."""
    return now.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_record(source: LogSource, level: LogLevel, now: datetime) -> LogRecord:
    """Normalize a log source into a LogRecord."""
    timestamp = format_timestamp(now)

    if isinstance(source, FromEntry):
        entry = source.entry
        ctx_context = source.ctx.describe() if source.ctx else None
        return LogRecord(
            application=entry.application,
            level=level,
            message=entry.message,
            timestamp=timestamp,
            service=entry.service,
            context=ctx_context if ctx_context is not None else entry.context,
            stack=entry.stack,
            attempts=entry.attempts,
        )

    ctx = source.ctx or LogContext()

    if isinstance(source, FromError):
        return LogRecord(
            application=source.application or UNKNOWN_APP,
            level=level,
            message=source.message,
            timestamp=timestamp,
            service=source.service,
            context=ctx.describe(),
            stack=source.stack,
            attempts=source.attempts if source.attempts is not None else ctx.attempt,
        )

    return LogRecord(
        application=source.application or UNKNOWN_APP,
        level=level,
        message=source.message if source.message is not None else UNKNOWN_MESSAGE,
        timestamp=timestamp,
        service=source.service,
        context=ctx.describe(),
        attempts=ctx.attempt,
    )
