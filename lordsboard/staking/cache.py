"""In-memory key-value cache sitting between the dashboard and its data sources."""

from __future__ import annotations

import copy
import fnmatch
import time
from threading import Lock
from typing import Any, Callable, Dict, List, Optional, Tuple

from lordsboard.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_TTL = 86400
MASTER_PREFIX = "master:"


class CacheStore:
    """Volatile TTL cache with long-lived ``master:`` snapshot keys.

    Values are deep-copied on the way in and out so callers never share
    mutable state with the cache.
    """

    def __init__(self, *, default_ttl: int = DEFAULT_TTL, clock: Callable[[], float] = time.monotonic) -> None:
        self._lock = Lock()
        self._entries: Dict[str, Tuple[Any, Optional[float]]] = {}
        self._default_ttl = default_ttl
        self._clock = clock

    # ------------------------------------------------------------------
    # Plain keys
    # ------------------------------------------------------------------
    def get(self, key: str) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at is not None and self._clock() >= expires_at:
                del self._entries[key]
                logger.debug(f"[CacheStore] Expired key {key}")
                return None
            return copy.deepcopy(value)

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """Store ``value``; ``ttl`` of 0 or less keeps the key until invalidated."""
        ttl = self._default_ttl if ttl is None else ttl
        expires_at = self._clock() + ttl if ttl > 0 else None
        with self._lock:
            self._entries[key] = (copy.deepcopy(value), expires_at)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    # ------------------------------------------------------------------
    # Master snapshots
    # ------------------------------------------------------------------
    def get_master(self, name: str) -> Any:
        return self.get(MASTER_PREFIX + name)

    def set_master(self, name: str, value: Any) -> None:
        self.set(MASTER_PREFIX + name, value, ttl=0)
        logger.info(f"[CacheStore] Master snapshot '{name}' stored")

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------
    def keys(self, pattern: str = "*") -> List[str]:
        with self._lock:
            return [key for key in self._entries if fnmatch.fnmatchcase(key, pattern)]

    def invalidate(self, pattern: str) -> int:
        """Delete every key matching the glob ``pattern``; returns the count."""
        with self._lock:
            matched = [key for key in self._entries if fnmatch.fnmatchcase(key, pattern)]
            for key in matched:
                del self._entries[key]
        if matched:
            logger.info(f"[CacheStore] Invalidated {len(matched)} keys matching pattern: {pattern}")
        return len(matched)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
