from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass, replace

from route_traffic.clock import Clock, SystemClock, epoch_ms
from route_traffic.models import CacheStats, TrafficSample

DEFAULT_MAX_SIZE = 100
DEFAULT_SWEEP_INTERVAL_SECONDS = 120.0

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    sample: TrafficSample
    expires_at_epoch_ms: int
    last_accessed_epoch_ms: int


class TrafficCache:
    """TTL and size bounded segment sample store.

    Expired entries are treated as absent on read and removed there; a
    background sweep started with :meth:`start` purges the rest. Inserting
    past ``max_size`` evicts the least recently accessed entries in one
    batch. All storage and counter updates happen under a single lock.
    """

    def __init__(
        self,
        max_size: int = DEFAULT_MAX_SIZE,
        eviction_batch_size: int | None = None,
        sweep_interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
        clock: Clock | None = None,
    ) -> None:
        if max_size < 1:
            raise ValueError("max_size must be >= 1")
        if sweep_interval_seconds <= 0:
            raise ValueError("sweep_interval_seconds must be > 0")
        self._max_size = max_size
        self._eviction_batch_size = max(1, eviction_batch_size or max_size // 10)
        self._sweep_interval_seconds = sweep_interval_seconds
        self._clock = clock or SystemClock()
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._sweeper: asyncio.Task[None] | None = None
        self._hit_count = 0
        self._miss_count = 0
        self._api_call_count = 0
        self._fallback_count = 0
        self._error_count = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: str) -> TrafficSample | None:
        now = epoch_ms(self._clock)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._miss_count += 1
                return None
            if now > entry.expires_at_epoch_ms:
                del self._entries[key]
                self._miss_count += 1
                return None
            self._entries[key] = replace(entry, last_accessed_epoch_ms=now)
            self._hit_count += 1
            return replace(entry.sample)

    def put(self, key: str, sample: TrafficSample, ttl_ms: int) -> None:
        if ttl_ms <= 0:
            raise ValueError("ttl_ms must be > 0")
        now = epoch_ms(self._clock)
        entry = CacheEntry(
            sample=replace(sample),
            expires_at_epoch_ms=now + ttl_ms,
            last_accessed_epoch_ms=now,
        )
        with self._lock:
            self._entries[key] = entry
            if len(self._entries) > self._max_size:
                self._evict_oldest(keep=key)

    def purge_expired(self) -> int:
        now = epoch_ms(self._clock)
        with self._lock:
            expired = [key for key, entry in self._entries.items() if now > entry.expires_at_epoch_ms]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug("cache_expired_purged", extra={"component": "cache", "purged": len(expired)})
        return len(expired)

    def clear(self) -> int:
        with self._lock:
            removed = len(self._entries)
            self._entries.clear()
            self._hit_count = 0
            self._miss_count = 0
            self._api_call_count = 0
            self._fallback_count = 0
            self._error_count = 0
        logger.info("cache_cleared", extra={"component": "cache", "removed": removed})
        return removed

    def record_api_call(self) -> None:
        with self._lock:
            self._api_call_count += 1

    def record_fallback(self) -> None:
        with self._lock:
            self._fallback_count += 1

    def record_error(self) -> None:
        with self._lock:
            self._error_count += 1

    def stats(self) -> CacheStats:
        with self._lock:
            total = self._hit_count + self._miss_count
            hit_rate = round(self._hit_count / total * 100) if total else 0
            return CacheStats(
                hit_count=self._hit_count,
                miss_count=self._miss_count,
                hit_rate=hit_rate,
                size=len(self._entries),
                max_size=self._max_size,
                api_call_count=self._api_call_count,
                fallback_count=self._fallback_count,
                error_count=self._error_count,
            )

    async def start(self) -> None:
        if self._sweeper is not None and not self._sweeper.done():
            return
        self._sweeper = asyncio.create_task(self._sweep_forever())

    async def close(self) -> None:
        sweeper, self._sweeper = self._sweeper, None
        if sweeper is None:
            return
        sweeper.cancel()
        try:
            await sweeper
        except asyncio.CancelledError:
            pass

    @property
    def sweeping(self) -> bool:
        return self._sweeper is not None and not self._sweeper.done()

    async def __aenter__(self) -> TrafficCache:
        await self.start()
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.close()

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self._sweep_interval_seconds)
            self.purge_expired()

    def _evict_oldest(self, keep: str) -> None:
        overflow = len(self._entries) - self._max_size
        candidates = sorted(
            (item for item in self._entries.items() if item[0] != keep),
            key=lambda item: item[1].last_accessed_epoch_ms,
        )
        victims = candidates[: max(overflow, self._eviction_batch_size)]
        for key, _ in victims:
            del self._entries[key]
        logger.debug(
            "cache_evicted",
            extra={"component": "cache", "evicted": len(victims), "size": len(self._entries)},
        )
