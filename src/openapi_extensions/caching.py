"""
Concurrent Memoization

Get-or-compute cache used by transformers to memoize metadata scans.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Hashable
from typing import Generic, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

_MISSING = object()


class ConcurrentCache(Generic[K, V]):
    """
    Thread-safe memoization table.

    Reads never take the lock. A miss takes the lock and checks again before
    computing, so each key is computed at most once and the stored value never
    changes afterwards.
    """

    def __init__(self) -> None:
        self._values: dict[K, V] = {}
        self._lock = threading.RLock()

    def get_or_add(self, key: K, factory: Callable[[K], V]) -> V:
        """
        Get the value for a key, computing it on first use.

        Args:
            key: Cache key
            factory: Called with the key when no value is cached yet

        Returns:
            Cached value for the key
        """
        value = self._values.get(key, _MISSING)
        if value is not _MISSING:
            return value  # type: ignore[return-value]

        with self._lock:
            # Double-check inside lock
            value = self._values.get(key, _MISSING)
            if value is _MISSING:
                value = factory(key)
                self._values[key] = value  # type: ignore[assignment]

        return value  # type: ignore[return-value]

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)
