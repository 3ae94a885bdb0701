"""
Safe executor models.

OperationResult is the discriminated union every executed unit of work
resolves to: Ok(value) or Failure(error, user_message, fallback). Callers
branch on `.ok` only.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Generic, Literal, TypeVar

T = TypeVar("T")

UNEXPECTED_FAILURE = "Unexpected failure"


class OperationTimeoutError(Exception):
    """An attempt did not settle within the policy's timeout."""

    def __init__(self, timeout_ms: int) -> None:
        self.timeout_ms = timeout_ms
        super().__init__(f"Timed out after {timeout_ms}ms")


@dataclass(frozen=True)
class NormalizedError:
    """
    Error observed on an attempt.

    `attempts` is the 1-based count of tries consumed when it was observed.
    `cause` keeps the original exception for in-process inspection; it is
    never shown to users.
    """

    message: str
    attempts: int
    stack: str | None = None
    error_type: str | None = None
    cause: BaseException | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T
    ok: Literal[True] = field(default=True, init=False)


@dataclass(frozen=True)
class Failure(Generic[T]):
    error: NormalizedError
    user_message: str
    fallback: T | None = None
    ok: Literal[False] = field(default=False, init=False)


OperationResult = Ok[T] | Failure[T]


@dataclass(frozen=True)
class RetryPolicy(Generic[T]):
    """
    How a unit of work is retried.

    retries: extra attempts after the first (total attempts = retries + 1)
    delay_ms: wait between attempts; 0 means no wait
    exponential_backoff: wait delay_ms * 2^(n-1) after the n-th failure
    timeout_ms: per-attempt time limit; None means unlimited
    fallback: value handed back with a Failure for the caller to use
    cancel_on_timeout: cancel the timed-out attempt instead of abandoning it
    """

    retries: int = 0
    delay_ms: int = 0
    exponential_backoff: bool = False
    timeout_ms: int | None = None
    fallback: T | None = None
    cancel_on_timeout: bool = False

    def __post_init__(self) -> None:
        if self.retries < 0:
            raise ValueError("retries must be >= 0")
        if self.delay_ms < 0:
            raise ValueError("delay_ms must be >= 0")
        if self.timeout_ms is not None and self.timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive")

    @property
    def max_attempts(self) -> int:
        return self.retries + 1

    def with_fallback(self, fallback: Any) -> RetryPolicy[Any]:
        return replace(self, fallback=fallback)
