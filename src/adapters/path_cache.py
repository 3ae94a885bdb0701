"""
Recording path invalidator.

Keeps the set of paths marked stale since the last `consume()`; a
rendering layer (or a CDN purge job) drains it.
"""

from __future__ import annotations

import logging
import threading

logger = logging.getLogger(__name__)


class RecordingPathInvalidator:
    """Implements PathInvalidatorPort."""

    def __init__(self) -> None:
        self._stale: list[str] = []
        self._lock = threading.Lock()

    def revalidate(self, path: str) -> None:
        with self._lock:
            if path not in self._stale:
                self._stale.append(path)
        logger.debug("Revalidate %s", path)

    @property
    def stale_paths(self) -> list[str]:
        with self._lock:
            return list(self._stale)

    def consume(self) -> list[str]:
        with self._lock:
            stale, self._stale = self._stale, []
        return stale
