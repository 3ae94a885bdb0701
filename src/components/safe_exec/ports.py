"""
Safe executor port definitions.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TypeVar

T = TypeVar("T")

# Zero-argument unit of work. Must be safe to invoke more than once.
UnitOfWork = Callable[[], Awaitable[T]]

# Awaitable sleep in seconds (asyncio.sleep in production).
SleepFn = Callable[[float], Awaitable[None]]
