"""Simple in-memory TTL cache plus the key normalizer used in front of it.

Note: Each uvicorn worker has its own cache instance. With --workers 2,
data may be fetched twice (once per worker). This is acceptable for this
project's scale — the cache still eliminates repeated calls within the
same worker.
"""

import threading
import time
from collections.abc import Callable, Mapping
from typing import Any

# Sentinel for "no entry", so a cached JSON null still counts as a hit
MISSING = object()


def _canonical(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def normalize_key(path: str, params: Mapping[str, Any] | None = None) -> str:
    """Build a deterministic cache key from an endpoint path and its query params.

    ``None`` values are dropped, keys are sorted, and the path always prefixes
    the key so entries for different endpoints never collide.
    """
    if not path or not path.startswith("/"):
        raise ValueError(f"Path must start with '/': {path!r}")

    pairs = sorted((k, _canonical(v)) for k, v in (params or {}).items() if v is not None)
    if not pairs:
        return path
    return path + "?" + "&".join(f"{k}={v}" for k, v in pairs)


class TTLCache:
    def __init__(self, clock: Callable[[], float] = time.time):
        self._store: dict[str, tuple[float, Any]] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def get(self, key: str, default: Any = None) -> Any:
        """Return the live value for ``key``, or ``default`` when absent or expired."""
        with self._lock:
            if key in self._store:
                expires_at, value = self._store[key]
                if self._clock() < expires_at:
                    return value
                del self._store[key]
        return default

    def put(self, key: str, value: Any, ttl_seconds: float = 60) -> None:
        # ttl <= 0 means "don't cache"
        if ttl_seconds <= 0:
            return
        with self._lock:
            self._store[key] = (self._clock() + ttl_seconds, value)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def purge_expired(self) -> int:
        """Drop every expired entry. Returns how many were removed."""
        with self._lock:
            return self._purge()

    def _purge(self) -> int:
        now = self._clock()
        expired = [k for k, (expires_at, _) in self._store.items() if expires_at <= now]
        for k in expired:
            del self._store[k]
        return len(expired)

    def __len__(self) -> int:
        """Number of live entries; expired ones are purged first."""
        with self._lock:
            self._purge()
            return len(self._store)


cache = TTLCache()
