from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from route_traffic.cache import TrafficCache
from route_traffic.fingerprint import DEFAULT_PRECISION_DIGITS, segment_fingerprint
from route_traffic.models import RoutePoint, Segment, TrafficSample
from route_traffic.source import UNDISPATCHED_REASONS

DEFAULT_CACHE_TTL_MS = 60_000
DEFAULT_FALLBACK_TTL_DIVISOR = 10

logger = logging.getLogger(__name__)


class SampleSource(Protocol):
    async def fetch(
        self,
        midpoint: RoutePoint,
        segment_length_km: float,
        timeout_ms: int | None = None,
    ) -> TrafficSample: ...


@dataclass(frozen=True)
class Resolution:
    samples: list[TrafficSample]
    cache_hits: int
    lookups: int

    @property
    def hit_rate(self) -> float:
        return self.cache_hits / self.lookups if self.lookups else 0.0


class SegmentTrafficResolver:
    def __init__(
        self,
        cache: TrafficCache,
        source: SampleSource,
        cache_ttl_ms: int = DEFAULT_CACHE_TTL_MS,
        fallback_ttl_divisor: int = DEFAULT_FALLBACK_TTL_DIVISOR,
        precision: int = DEFAULT_PRECISION_DIGITS,
        directional: bool = True,
        timeout_ms: int | None = None,
    ) -> None:
        if cache_ttl_ms <= 0:
            raise ValueError("cache_ttl_ms must be > 0")
        if fallback_ttl_divisor < 1:
            raise ValueError("fallback_ttl_divisor must be >= 1")
        self._cache = cache
        self._source = source
        self._cache_ttl_ms = cache_ttl_ms
        self._fallback_ttl_ms = max(1, cache_ttl_ms // fallback_ttl_divisor)
        self._precision = precision
        self._directional = directional
        self._timeout_ms = timeout_ms

    async def resolve(self, segments: Sequence[Segment]) -> list[TrafficSample]:
        resolution = await self.resolve_detailed(segments)
        return resolution.samples

    async def resolve_detailed(self, segments: Sequence[Segment]) -> Resolution:
        keys = [segment_fingerprint(item, self._precision, self._directional) for item in segments]
        resolved: dict[str, TrafficSample] = {}
        missing: dict[str, Segment] = {}
        hits = 0
        for key, segment in zip(keys, segments):
            if key in resolved or key in missing:
                continue
            cached = self._cache.get(key)
            if cached is None:
                missing[key] = segment
            else:
                resolved[key] = cached
                hits += 1

        if missing:
            logger.info(
                "segment_fetch_started",
                extra={"component": "resolver", "segments": len(segments), "missing": len(missing)},
            )
            fetched = await asyncio.gather(*(self._fetch(key, segment) for key, segment in missing.items()))
            resolved.update(zip(missing.keys(), fetched))

        return Resolution(
            samples=[resolved[key] for key in keys],
            cache_hits=hits,
            lookups=hits + len(missing),
        )

    async def _fetch(self, key: str, segment: Segment) -> TrafficSample:
        sample = await self._source.fetch(segment.midpoint, segment.length_km, self._timeout_ms)
        dispatched = sample.fallback_reason not in UNDISPATCHED_REASONS
        if dispatched:
            self._cache.record_api_call()
        if not sample.is_fallback:
            self._cache.put(key, sample, self._cache_ttl_ms)
            return sample
        if dispatched:
            self._cache.record_error()
        self._cache.record_fallback()
        self._cache.put(key, sample, self._fallback_ttl_ms)
        return sample
