"""
Buffered logger component.

Structured, batched logging to the log store.
"""

from src.components.logbuffer.component import (
    FLUSH_INTERVAL_MS,
    MAX_BUFFER,
    MAX_INFLIGHT_BATCHES,
    BufferedLogger,
)
from src.components.logbuffer.models import (
    LOG_LEVELS,
    UNKNOWN_APP,
    UNKNOWN_MESSAGE,
    FromEntry,
    FromError,
    FromMessage,
    LogContext,
    LogEntryInput,
    LogLevel,
    LogRecord,
    LogSource,
    build_record,
    format_timestamp,
)
from src.components.logbuffer.ports import LogRecorderPort, LogSinkPort

__all__ = [
    # Component
    "BufferedLogger",
    "FLUSH_INTERVAL_MS",
    "MAX_BUFFER",
    "MAX_INFLIGHT_BATCHES",
    # Models
    "LOG_LEVELS",
    "UNKNOWN_APP",
    "UNKNOWN_MESSAGE",
    "FromEntry",
    "FromError",
    "FromMessage",
    "LogContext",
    "LogEntryInput",
    "LogLevel",
    "LogRecord",
    "LogSource",
    "build_record",
    "format_timestamp",
    # Ports
    "LogRecorderPort",
    "LogSinkPort",
]
