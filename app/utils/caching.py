from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional
import threading
import time


@dataclass
class CacheEntry:
    key: str
    value: Any
    expires_at: float


class TTLCache:
    """In-process key/value store with a per-entry time-to-live.

    Expiry is lazy: an entry is only dropped when a read finds it stale.
    Nothing bounds the number of keys.
    """

    def __init__(self, default_ttl: int = 3600, clock: Callable[[], float] = time.monotonic):
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            if entry.expires_at <= self._clock():
                del self._entries[key]
                self._misses += 1
                return None
            self._hits += 1
            return entry.value

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        expire = self.default_ttl if ttl is None else ttl
        with self._lock:
            self._entries[key] = CacheEntry(
                key=key, value=value, expires_at=self._clock() + expire
            )

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {"hits": self._hits, "misses": self._misses, "keys": len(self._entries)}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
