# sectionlink/services/cache.py
"""
Key/value cache with compute-on-miss and an explicit commit/abort decision.

A computation handed to ``CacheStore.get_or_compute`` returns a pair
``(value, should_commit)``. The value always goes back to the caller; it is
only written to the backend when ``should_commit`` is true, so a "not found"
answer can be returned without being remembered.

Concurrent misses on the same key are serialized on a per-key lock: the first
caller computes, the others wait and then read what it committed. Backend
failures are logged and treated as misses, the cache is never a correctness
dependency.
"""
from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, Iterable, Iterator, Optional, Protocol, Tuple

from ..errors import CacheBackendError

logger = logging.getLogger(__name__)

Computation = Callable[[], Tuple[Any, bool]]


@dataclass
class CacheEntry:
    key: str
    value: Any
    tags: FrozenSet[str] = frozenset()
    expires_at: Optional[float] = None  # monotonic seconds, None = never

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class CacheBackend(Protocol):
    def get(self, key: str) -> Optional[CacheEntry]: ...

    def set(self, key: str, value: Any, ttl: Optional[float] = None, tags: Iterable[str] = ()) -> None: ...

    def delete(self, key: str) -> bool: ...

    def delete_tag(self, tag: str) -> int: ...

    def clear(self) -> None: ...

    def __len__(self) -> int: ...


class MemoryCacheBackend:
    """
    In-process backend: an ``OrderedDict`` kept in least-recently-used order.

    Args:
        max_size: evict the least recently used entry beyond this many
            entries. ``None`` means unbounded.
        clock: monotonic time source, injectable for tests.
    """

    def __init__(self, max_size: Optional[int] = None, clock: Callable[[], float] = time.monotonic):
        if max_size is not None and max_size < 1:
            raise ValueError("max_size must be positive")
        self.max_size = max_size
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.RLock()

    def get(self, key: str) -> Optional[CacheEntry]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                return None
            self._entries.move_to_end(key)
            return entry

    def set(self, key: str, value: Any, ttl: Optional[float] = None, tags: Iterable[str] = ()) -> None:
        expires_at = self._clock() + ttl if ttl is not None else None
        with self._lock:
            # last writer wins
            self._entries[key] = CacheEntry(key=key, value=value, tags=frozenset(tags), expires_at=expires_at)
            self._entries.move_to_end(key)
            while self.max_size is not None and len(self._entries) > self.max_size:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted cache entry %s", evicted)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def delete_tag(self, tag: str) -> int:
        with self._lock:
            doomed = [k for k, e in self._entries.items() if tag in e.tags]
            for k in doomed:
                del self._entries[k]
            return len(doomed)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            now = self._clock()
            return sum(1 for e in self._entries.values() if not e.is_expired(now))


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    commits: int = 0
    aborts: int = 0
    errors: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def incr(self, name: str) -> None:
        with self._lock:
            setattr(self, name, getattr(self, name) + 1)

    def as_dict(self) -> Dict[str, int]:
        with self._lock:
            return {
                "hits": self.hits,
                "misses": self.misses,
                "commits": self.commits,
                "aborts": self.aborts,
                "errors": self.errors,
            }


class CacheStore:
    """
    Compute-on-miss cache in front of a ``CacheBackend``.

    Args:
        backend: where entries live. Defaults to a fresh ``MemoryCacheBackend``.
        default_ttl: seconds an entry lives when ``get_or_compute`` is not
            given a ttl. ``None`` keeps entries until evicted.
        key_prefix: prepended to every key, for backends shared between apps.
    """

    def __init__(
        self,
        backend: Optional[CacheBackend] = None,
        default_ttl: Optional[float] = None,
        key_prefix: str = "",
    ):
        self.backend = backend if backend is not None else MemoryCacheBackend()
        self.default_ttl = default_ttl
        self.key_prefix = key_prefix
        self.stats = CacheStats()
        self._key_locks: Dict[str, Tuple[threading.Lock, int]] = {}
        self._key_locks_guard = threading.Lock()

    def get_or_compute(
        self,
        key: str,
        compute: Computation,
        ttl: Optional[float] = None,
        tags: Iterable[str] = (),
    ) -> Any:
        """
        Return the cached value for ``key``, computing it on a miss.

        ``compute`` is called with no arguments and must return
        ``(value, should_commit)``. Exceptions raised by it propagate and
        nothing is stored.
        """
        full_key = self.key_prefix + key

        entry = self._read(full_key)
        if entry is not None:
            self.stats.incr("hits")
            logger.debug("Cache hit for %s", full_key)
            return entry.value

        with self._key_lock(full_key):
            # Another thread may have committed while we waited.
            entry = self._read(full_key)
            if entry is not None:
                self.stats.incr("hits")
                logger.debug("Cache hit for %s after wait", full_key)
                return entry.value

            self.stats.incr("misses")
            value, should_commit = compute()

            if not should_commit:
                self.stats.incr("aborts")
                logger.debug("Computation for %s aborted; not cached", full_key)
                return value

            self._write(full_key, value, self.default_ttl if ttl is None else ttl, tags)
            return value

    def invalidate(self, key: str) -> bool:
        return self.backend.delete(self.key_prefix + key)

    def invalidate_tag(self, tag: str) -> int:
        """Drop every entry committed with ``tag``; returns how many went."""
        return self.backend.delete_tag(tag)

    def clear(self) -> None:
        self.backend.clear()

    def __contains__(self, key: str) -> bool:
        return self._read(self.key_prefix + key) is not None

    def __len__(self) -> int:
        return len(self.backend)

    def _read(self, full_key: str) -> Optional[CacheEntry]:
        try:
            return self.backend.get(full_key)
        except CacheBackendError:
            self.stats.incr("errors")
            logger.warning("Cache read failed for %s, recomputing", full_key, exc_info=True)
            return None

    def _write(self, full_key: str, value: Any, ttl: Optional[float], tags: Iterable[str]) -> None:
        try:
            self.backend.set(full_key, value, ttl=ttl, tags=tags)
        except CacheBackendError:
            self.stats.incr("errors")
            logger.warning("Cache write failed for %s, value not cached", full_key, exc_info=True)
            return
        self.stats.incr("commits")

    @contextmanager
    def _key_lock(self, full_key: str) -> Iterator[None]:
        with self._key_locks_guard:
            lock, holders = self._key_locks.get(full_key, (None, 0))
            if lock is None:
                lock = threading.Lock()
            self._key_locks[full_key] = (lock, holders + 1)
        try:
            with lock:
                yield
        finally:
            with self._key_locks_guard:
                lock, holders = self._key_locks[full_key]
                if holders == 1:
                    del self._key_locks[full_key]
                else:
                    self._key_locks[full_key] = (lock, holders - 1)
