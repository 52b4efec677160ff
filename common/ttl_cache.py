"""
In-memory TTL cache with lazy eviction and an optional periodic sweeper.

Entries are spread across independently locked shards so that readers and
writers working on unrelated keys never wait on each other. Expired entries
are evicted when read (lazy eviction); a PeriodicSweeper can additionally
purge entries that are never read again.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Hashable, List, Optional, TypeVar

from common.constants import CACHE_SHARD_COUNT

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    """
    Cached value with an absolute expiry instant.

    Attributes:
        value: Cached value
        stored_at: Clock reading when the value was stored
        expires_at: Clock reading at which the value stops being served
    """
    value: V
    stored_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class _Shard:
    __slots__ = ("lock", "entries")

    def __init__(self):
        self.lock = threading.Lock()
        self.entries: Dict = {}


class TTLCache(Generic[K, V]):
    """
    Thread-safe keyed cache whose entries expire after a time-to-live.

    Reading an expired entry removes it atomically, so no caller ever
    observes a stale value regardless of sweeper timing.
    """

    def __init__(
        self,
        default_ttl: float,
        shard_count: int = CACHE_SHARD_COUNT,
        clock: Callable[[], float] = time.time,
        name: str = "cache",
    ):
        """
        Initialize cache.

        Args:
            default_ttl: TTL in seconds used when set() gets no explicit ttl
            shard_count: Number of independently locked shards
            clock: Function returning the current time in seconds
            name: Label used in log messages
        """
        if default_ttl <= 0:
            raise ValueError("default_ttl must be positive")
        if shard_count < 1:
            raise ValueError("shard_count must be at least 1")

        self.default_ttl = default_ttl
        self.name = name
        self._clock = clock
        self._shards: List[_Shard] = [_Shard() for _ in range(shard_count)]

    def _shard_for(self, key: K) -> _Shard:
        return self._shards[hash(key) % len(self._shards)]

    def now(self) -> float:
        return self._clock()

    def set(self, key: K, value: V, ttl: Optional[float] = None) -> CacheEntry[V]:
        """
        Store value under key, replacing any previous entry.

        Args:
            key: Cache key
            value: Value to store
            ttl: Optional TTL in seconds (defaults to default_ttl)

        Returns:
            The stored entry
        """
        ttl = self.default_ttl if ttl is None else ttl
        if ttl <= 0:
            raise ValueError("ttl must be positive")

        now = self._clock()
        entry = CacheEntry(value=value, stored_at=now, expires_at=now + ttl)

        shard = self._shard_for(key)
        with shard.lock:
            shard.entries[key] = entry

        return entry

    def get_entry(self, key: K) -> Optional[CacheEntry[V]]:
        """
        Return the unexpired entry for key, evicting it if it has expired.
        """
        shard = self._shard_for(key)
        with shard.lock:
            entry = shard.entries.get(key)
            if entry is None:
                return None

            if entry.is_expired(self._clock()):
                del shard.entries[key]
                logger.debug(f"{self.name}: evicted expired entry on read")
                return None

            return entry

    def get(self, key: K) -> Optional[V]:
        entry = self.get_entry(key)
        return entry.value if entry is not None else None

    def delete(self, key: K) -> bool:
        """
        Remove key unconditionally.

        Returns:
            True if an entry (expired or not) existed
        """
        shard = self._shard_for(key)
        with shard.lock:
            return shard.entries.pop(key, None) is not None

    def purge_expired(self) -> int:
        """
        Remove every expired entry, one shard at a time.

        Returns:
            Number of entries removed
        """
        removed = 0
        for shard in self._shards:
            now = self._clock()
            with shard.lock:
                expired = [k for k, e in shard.entries.items() if e.is_expired(now)]
                for k in expired:
                    del shard.entries[k]
            removed += len(expired)
        return removed

    def clear(self) -> int:
        """
        Drop all entries.

        Returns:
            Number of entries dropped
        """
        dropped = 0
        for shard in self._shards:
            with shard.lock:
                dropped += len(shard.entries)
                shard.entries.clear()
        return dropped

    def __len__(self) -> int:
        total = 0
        for shard in self._shards:
            with shard.lock:
                total += len(shard.entries)
        return total

    def __contains__(self, key: K) -> bool:
        return self.get_entry(key) is not None


class PeriodicSweeper:
    """
    Daemon thread that purges expired entries from a TTLCache on an interval.
    """

    def __init__(self, cache: TTLCache, interval_seconds: float, name: str = "CacheSweeper"):
        self.cache = cache
        self.interval_seconds = interval_seconds
        self.name = name
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._start_lock = threading.Lock()

    def start(self) -> None:
        """
        Start the sweeper thread. Subsequent calls while running are no-ops.
        """
        with self._start_lock:
            if self._thread is not None and self._thread.is_alive():
                return

            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._run,
                daemon=True,
                name=self.name
            )
            self._thread.start()

            logger.info(f"{self.name} started (interval: {self.interval_seconds}s)")

    def stop(self, timeout: float = 5.0) -> None:
        self._stop_event.set()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=timeout)
            logger.info(f"{self.name} stopped")

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def sweep_once(self) -> int:
        """
        Run a single sweep, logging instead of raising on failure.

        Returns:
            Number of entries removed (0 on failure)
        """
        try:
            removed = self.cache.purge_expired()
        except Exception as e:
            logger.error(f"{self.name}: sweep failed: {e}", exc_info=True)
            return 0

        if removed:
            logger.info(f"{self.name}: removed {removed} expired {self.cache.name} entries")
        return removed

    def _run(self) -> None:
        while not self._stop_event.wait(timeout=self.interval_seconds):
            self.sweep_once()
