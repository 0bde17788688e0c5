"""
In-memory TTL cache used as the read-through layer for ranking weights.
"""
import time
from threading import Lock
from typing import Callable, Dict, Generic, Optional, Tuple, TypeVar

T = TypeVar("T")


class TTLCache(Generic[T]):
    """
    Thread-safe key/value cache whose entries expire after a fixed TTL.

    Usage:
        cache: TTLCache[RankingWeights] = TTLCache(ttl_seconds=60)
        cache.set("fyp:A", weights)
    """

    def __init__(
        self,
        ttl_seconds: float,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._timer = timer
        self._store: Dict[str, Tuple[T, float]] = {}
        self._lock = Lock()

    def get(self, key: str) -> Optional[T]:
        """Get value by key, returns None if not found or expired."""
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._timer() >= expires_at:
                del self._store[key]
                return None
            return value

    def set(self, key: str, value: T) -> None:
        with self._lock:
            self._store[key] = (value, self._timer() + self._ttl)

    def delete(self, key: str) -> bool:
        """Delete key, returns True if existed."""
        with self._lock:
            return self._store.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def size(self) -> int:
        """Return number of entries (including possibly expired)."""
        with self._lock:
            return len(self._store)
