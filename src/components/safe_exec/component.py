"""
Safe executor component.

Runs an asynchronous unit of work with optional per-attempt timeout, a
bounded number of retries and fixed or exponential backoff. The outcome
is always returned as an OperationResult; execute() does not raise for
failures of the work itself.

Logging (through the injected BufferedLogger):
- one `warn` record per failed attempt that will be retried
- one `error` record when retries are exhausted
- one `info` record when the work succeeds after at least one failure

Timeouts:
- A timed-out attempt counts as a failure and is retried like any other.
- The timed-out work is abandoned, not cancelled, unless the policy sets
  `cancel_on_timeout`. Abandoned work keeps running; it must release its
  own resources.

Cancellation of the caller (asyncio.CancelledError) is not a failure of
the work and propagates.
"""

from __future__ import annotations

import asyncio
import logging
import traceback
from collections.abc import Mapping
from typing import Any, TypeVar

from src.components.error_mapper import to_user_message
from src.components.logbuffer import FromError, FromMessage, LogContext, LogRecorderPort
from src.components.safe_exec.models import (
    UNEXPECTED_FAILURE,
    Failure,
    NormalizedError,
    Ok,
    OperationResult,
    OperationTimeoutError,
    RetryPolicy,
)
from src.components.safe_exec.ports import SleepFn, UnitOfWork

T = TypeVar("T")

logger = logging.getLogger(__name__)


def normalize_error(exc: BaseException, attempts: int) -> NormalizedError:
    """Convert any raised value into a NormalizedError stamped with `attempts`."""
    stack = "".join(traceback.format_exception(exc)) if exc.__traceback__ else None
    return NormalizedError(
        message=str(exc) or type(exc).__name__,
        attempts=attempts,
        stack=stack,
        error_type=type(exc).__name__,
        cause=exc,
    )


def backoff_delay_ms(policy: RetryPolicy[Any], attempt: int) -> int:
    """Wait before the next try, after `attempt` (1-based) has failed."""
    if policy.exponential_backoff:
        return int(policy.delay_ms * 2 ** (attempt - 1))
    return policy.delay_ms


def _consume_abandoned(task: asyncio.Task[Any]) -> None:
    # Retrieve the outcome so asyncio does not report it as never retrieved.
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("Abandoned attempt finished with %s: %s", type(exc).__name__, exc)


class SafeExecutor:
    """
    Retriable operation executor.

    Usage:
        executor = SafeExecutor(log, application="luxe")
        result = await executor.execute(fetch_orders, "orders-list", RetryPolicy(retries=2))
        if result.ok:
            use(result.value)
        else:
            show(result.user_message)
    """

    def __init__(
        self,
        log: LogRecorderPort,
        application: str,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._log = log
        self._application = application
        self._sleep = sleep

    async def execute(
        self,
        work: UnitOfWork[T],
        service: str,
        policy: RetryPolicy[T] | None = None,
    ) -> OperationResult[T]:
        policy = policy or RetryPolicy()
        attempt = 0

        while attempt <= policy.retries:
            try:
                value = await self._attempt(work, policy)
            except Exception as exc:
                attempt += 1
                error = normalize_error(exc, attempt)
                source = FromError(
                    message=error.message,
                    stack=error.stack,
                    attempts=error.attempts,
                    application=self._application,
                    service=service,
                    ctx=LogContext(attempt=attempt, retries=policy.retries),
                )

                if attempt <= policy.retries:
                    self._log.record(source, "warn")
                    delay_ms = backoff_delay_ms(policy, attempt)
                    if delay_ms > 0:
                        await self._sleep(delay_ms / 1000)
                    continue

                self._log.record(source, "error")
                return Failure(
                    error=error,
                    user_message=to_user_message(service, error.message),
                    fallback=policy.fallback,
                )

            if attempt > 0:
                self._log.record(
                    FromMessage(
                        f"Succeeded after {attempt} attempt(s)",
                        application=self._application,
                        service=service,
                    ),
                    "info",
                )
            return Ok(value)

        return Failure(
            error=NormalizedError(message=UNEXPECTED_FAILURE, attempts=attempt),
            user_message=UNEXPECTED_FAILURE,
            fallback=policy.fallback,
        )

    async def _attempt(self, work: UnitOfWork[T], policy: RetryPolicy[T]) -> T:
        if policy.timeout_ms is None:
            return await work()

        task = asyncio.ensure_future(work())
        done, _ = await asyncio.wait({task}, timeout=policy.timeout_ms / 1000)
        if task in done:
            return task.result()

        if policy.cancel_on_timeout:
            task.cancel()
        task.add_done_callback(_consume_abandoned)
        raise OperationTimeoutError(policy.timeout_ms)


class RetryPolicyRegistry:
    """
    Per-service retry defaults.

    Lookup order for a label such as "logs-getAll": exact label, then the
    prefix before the first "-" ("logs"), then the default policy.
    """

    def __init__(
        self,
        default: RetryPolicy[Any] | None = None,
        services: Mapping[str, RetryPolicy[Any]] | None = None,
    ) -> None:
        self._default = default or RetryPolicy()
        self._services = dict(services or {})

    @classmethod
    def from_rules(cls, rules: Any) -> RetryPolicyRegistry:
        """Build from `src.rules.models.RetryRules`."""

        def _policy(rule: Any) -> RetryPolicy[Any]:
            return RetryPolicy(
                retries=rule.retries,
                delay_ms=rule.delay_ms,
                exponential_backoff=rule.exponential_backoff,
                timeout_ms=rule.timeout_ms,
            )

        return cls(
            default=_policy(rules.default),
            services={name: _policy(rule) for name, rule in rules.services.items()},
        )

    def for_service(self, service: str) -> RetryPolicy[Any]:
        if service in self._services:
            return self._services[service]
        prefix = service.split("-", 1)[0]
        return self._services.get(prefix, self._default)
