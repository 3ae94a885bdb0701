"""
View-cache invalidation interface.

Successful writes in the action layer name the rendered paths whose cached
output is now stale.
"""

from __future__ import annotations

from typing import Protocol


class PathInvalidatorPort(Protocol):
    def revalidate(self, path: str) -> None:
        """Mark the cached rendering of `path` as stale."""
        ...
