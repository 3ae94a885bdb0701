from datetime import UTC, datetime
from pathlib import Path
from uuid import uuid4

import pytest

from src.adapters.path_cache import RecordingPathInvalidator
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.components.logbuffer import LogLevel, LogRecord, LogSource, build_record
from src.components.safe_exec import RetryPolicyRegistry, SafeExecutor
from src.domain.entities import Profile
from src.rules.loader import load_rules

FIXED_NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=UTC)


class RecordingLog:
    """LogRecorderPort that keeps every record in memory."""

    def __init__(self) -> None:
        self.records: list[LogRecord] = []

    def record(self, source: LogSource, level: LogLevel = "info") -> LogRecord:
        entry = build_record(source, level, FIXED_NOW)
        self.records.append(entry)
        return entry

    def levels(self) -> list[str]:
        return [r.level for r in self.records]

    def at(self, level: str) -> list[LogRecord]:
        return [r for r in self.records if r.level == level]


class RecordingSleep:
    """Async sleep replacement that records requested delays (seconds)."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def db_path(tmp_path):
    """Path to a freshly migrated SQLite database."""
    path = str(tmp_path / "luxe.db")
    SQLiteMigrator(path, "migrations").run_migrations()
    return path


@pytest.fixture
def rules():
    # Assuming tests run from project root.
    rules_path = Path("rules.yaml").resolve()
    if not rules_path.exists():
        raise FileNotFoundError(f"Rules not found at {rules_path}")
    return load_rules(rules_path)


@pytest.fixture
def recording_log():
    return RecordingLog()


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def executor(recording_log, recording_sleep):
    return SafeExecutor(recording_log, application="test-app", sleep=recording_sleep)


@pytest.fixture
def policies():
    """No retries anywhere, so failures surface on the first attempt."""
    return RetryPolicyRegistry()


@pytest.fixture
def invalidator():
    return RecordingPathInvalidator()


@pytest.fixture
def admin():
    return Profile(id=uuid4(), email="admin@naomi-luxe.com", role="admin", full_name="Naomi")


@pytest.fixture
def customer():
    return Profile(id=uuid4(), email="ada@example.com", role="customer", full_name="Ada Obi")


@pytest.fixture
def other_customer():
    return Profile(id=uuid4(), email="bola@example.com", role="customer")
