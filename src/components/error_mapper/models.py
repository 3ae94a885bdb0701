"""
Error-message mapper models.

A service's messages are an ordered tuple of substring rules plus the
message used when none of them match.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MessageRule:
    """Case-insensitive substring rule."""

    needle: str
    message: str

    def matches(self, normalized: str) -> bool:
        return self.needle in normalized


@dataclass(frozen=True)
class ServiceMessages:
    """Ordered rules for one service label. First match wins."""

    rules: tuple[MessageRule, ...]
    default: str
