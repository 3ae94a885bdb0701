"""
Safe executor component.

Retry/backoff/timeout wrapper that reports outcomes as values.
"""

from src.components.safe_exec.component import (
    RetryPolicyRegistry,
    SafeExecutor,
    backoff_delay_ms,
    normalize_error,
)
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

__all__ = [
    # Component
    "SafeExecutor",
    "RetryPolicyRegistry",
    "backoff_delay_ms",
    "normalize_error",
    # Models
    "UNEXPECTED_FAILURE",
    "Failure",
    "NormalizedError",
    "Ok",
    "OperationResult",
    "OperationTimeoutError",
    "RetryPolicy",
    # Ports
    "SleepFn",
    "UnitOfWork",
]
