# luxe: Ports (Protocol Interfaces)
# Abstract interfaces for adapters; no implementations here

from src.core.ports.cache import PathInvalidatorPort
from src.core.ports.email import (
    EmailError,
    EmailPort,
    EmailResult,
    EmailSendError,
)

__all__ = [
    # Cache
    "PathInvalidatorPort",
    # Email
    "EmailError",
    "EmailPort",
    "EmailResult",
    "EmailSendError",
]
