from __future__ import annotations

import asyncio
import logging
import random

from opentelemetry import trace

from route_traffic.aggregate import aggregate_route_delay
from route_traffic.cache import TrafficCache
from route_traffic.circuit_breaker import ProviderCircuitBreaker
from route_traffic.classify import DEFAULT_THRESHOLDS, ConditionThresholds, classify_delay_factor, summarize_conditions
from route_traffic.clock import Clock, SystemClock
from route_traffic.config import TrafficSettings
from route_traffic.errors import PartitionError
from route_traffic.fallback import FallbackPolicy
from route_traffic.models import CacheStats, Route, RouteTrafficResult, SegmentTraffic
from route_traffic.observability import configure_otel
from route_traffic.partition import (
    DEFAULT_MAX_SEGMENT_LENGTH_METERS,
    DEFAULT_MIN_SEGMENT_LENGTH_METERS,
    partition_route,
)
from route_traffic.resolver import SegmentTrafficResolver
from route_traffic.source import TrafficSource

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class RouteTrafficService:
    """Annotates precomputed routes with per-segment traffic conditions."""

    def __init__(
        self,
        cache: TrafficCache,
        resolver: SegmentTrafficResolver,
        max_segment_length_meters: float = DEFAULT_MAX_SEGMENT_LENGTH_METERS,
        min_segment_length_meters: float = DEFAULT_MIN_SEGMENT_LENGTH_METERS,
        thresholds: ConditionThresholds = DEFAULT_THRESHOLDS,
    ) -> None:
        self._cache = cache
        self._resolver = resolver
        self._max_segment_length_meters = max_segment_length_meters
        self._min_segment_length_meters = min_segment_length_meters
        self._thresholds = thresholds
        self._latest: asyncio.Task[RouteTrafficResult] | None = None

    @classmethod
    def from_settings(
        cls,
        settings: TrafficSettings,
        clock: Clock | None = None,
        rng: random.Random | None = None,
        source: TrafficSource | None = None,
    ) -> RouteTrafficService:
        configure_otel(settings.SERVICE_NAME)
        clock = clock or SystemClock(settings.TRAFFIC_TIMEZONE)
        cache = TrafficCache(
            max_size=settings.CACHE_MAX_SIZE,
            sweep_interval_seconds=settings.CACHE_SWEEP_INTERVAL_MS / 1000,
            clock=clock,
        )
        if source is None:
            source = TrafficSource(
                base_url=settings.TRAFFIC_PROVIDER_URL,
                api_key=settings.TRAFFIC_PROVIDER_API_KEY,
                timeout_ms=settings.FETCH_TIMEOUT_MS,
                fallback=FallbackPolicy(
                    rush_hour_windows=settings.RUSH_HOUR_WINDOWS,
                    clock=clock,
                    rng=rng,
                ),
                circuit_breaker=ProviderCircuitBreaker(
                    failure_threshold=settings.CIRCUIT_FAILURE_THRESHOLD,
                    recovery_timeout_seconds=settings.CIRCUIT_RECOVERY_SECONDS,
                ),
                clock=clock,
            )
        resolver = SegmentTrafficResolver(
            cache=cache,
            source=source,
            cache_ttl_ms=settings.CACHE_TTL_MS,
            fallback_ttl_divisor=settings.FALLBACK_TTL_DIVISOR,
            precision=settings.COORDINATE_PRECISION_DIGITS,
            directional=settings.DIRECTIONAL_FINGERPRINTS,
        )
        return cls(
            cache=cache,
            resolver=resolver,
            max_segment_length_meters=settings.MAX_SEGMENT_LENGTH_METERS,
            min_segment_length_meters=settings.MIN_SEGMENT_LENGTH_METERS,
            thresholds=settings.condition_thresholds,
        )

    async def annotate(self, route: Route) -> RouteTrafficResult:
        if len(route.points) < 2:
            raise PartitionError("route must contain at least 2 points")
        with tracer.start_as_current_span("route_traffic.annotate") as span:
            segments = partition_route(
                route.points,
                max_segment_length_meters=self._max_segment_length_meters,
                min_segment_length_meters=self._min_segment_length_meters,
            )
            resolution = await self._resolver.resolve_detailed(segments)
            delay = aggregate_route_delay(segments, resolution.samples, route.baseline_duration_seconds)
            items = tuple(
                SegmentTraffic(
                    segment=segment,
                    sample=sample,
                    condition=classify_delay_factor(sample.delay_factor, self._thresholds),
                )
                for segment, sample in zip(segments, resolution.samples)
            )
            span.set_attribute("route_traffic.segments", len(items))
            span.set_attribute("route_traffic.delay_factor", delay.aggregate_delay_factor)

        logger.info(
            "route_annotated",
            extra={
                "component": "service",
                "segments": len(items),
                "delay_factor": round(delay.aggregate_delay_factor, 3),
                "cache_hit_rate": round(resolution.hit_rate, 3),
            },
        )
        return RouteTrafficResult(
            segments=items,
            adjusted_duration_seconds=delay.adjusted_duration_seconds,
            aggregate_delay_factor=delay.aggregate_delay_factor,
            cache_hit_rate=resolution.hit_rate,
            summary=summarize_conditions(items),
        )

    async def annotate_latest(self, route: Route) -> RouteTrafficResult | None:
        """Annotate ``route`` and cancel any earlier call it supersedes.

        A superseded caller gets ``None`` back instead of a stale result.
        """
        previous = self._latest
        task = asyncio.create_task(self.annotate(route))
        self._latest = task
        if previous is not None and not previous.done():
            previous.cancel()
        try:
            return await task
        except asyncio.CancelledError:
            if task.cancelled() and self._latest is not task:
                logger.info("route_annotation_superseded", extra={"component": "service"})
                return None
            raise
        finally:
            if self._latest is task:
                self._latest = None

    def stats(self) -> CacheStats:
        return self._cache.stats()

    def clear_cache(self) -> int:
        return self._cache.clear()

    async def start(self) -> None:
        await self._cache.start()

    async def close(self) -> None:
        latest, self._latest = self._latest, None
        if latest is not None and not latest.done():
            latest.cancel()
        await self._cache.close()

    async def __aenter__(self) -> RouteTrafficService:
        await self.start()
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.close()
