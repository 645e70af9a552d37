# repo_browser/cache.py
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

DEFAULT_TTL_SECONDS = 60 * 60

_MISSING = object()


@dataclass
class _Entry:
    value: Any
    expires_at: float


class TTLCache:
    """
    In-memory key/value store with a fixed time-to-live per entry.

    Expiry is lazy: an entry is dropped by the first lookup that finds it
    stale. Every lookup samples the clock exactly once, so `has()` and
    `get()` each give a consistent answer for the instant they ran.
    Entries expire when `now >= expires_at`.

    Not thread-safe. Under asyncio all access happens between await points,
    which is the only serialization this store relies on.
    """

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if default_ttl <= 0:
            raise ValueError("default_ttl must be positive")
        self.default_ttl = default_ttl
        self._clock = clock
        self._data: Dict[str, _Entry] = {}
        self.hits = 0
        self.misses = 0

    def _lookup(self, key: str) -> Any:
        now = self._clock()
        entry = self._data.get(key)
        if entry is None:
            return _MISSING
        if now >= entry.expires_at:
            del self._data[key]
            return _MISSING
        return entry.value

    def has(self, key: str) -> bool:
        return self._lookup(key) is not _MISSING

    def get(self, key: str, default: Any = None) -> Any:
        value = self._lookup(key)
        if value is _MISSING:
            self.misses += 1
            return default
        self.hits += 1
        return value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        ttl = self.default_ttl if ttl is None else ttl
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self._data[key] = _Entry(value=value, expires_at=self._clock() + ttl)

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def clear(self) -> None:
        self._data.clear()

    def keys(self) -> List[str]:
        now = self._clock()
        return [k for k, e in self._data.items() if now < e.expires_at]

    def __len__(self) -> int:
        return len(self.keys())

    def __contains__(self, key: str) -> bool:
        return self.has(key)

    def stats(self) -> Dict[str, int]:
        return {"hits": self.hits, "misses": self.misses, "keys": len(self)}
