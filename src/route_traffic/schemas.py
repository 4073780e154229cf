from __future__ import annotations

from pydantic import BaseModel

from route_traffic.models import CacheStats, RouteTrafficResult, SegmentTraffic


class SegmentTrafficSchema(BaseModel):
    start: tuple[float, float]
    end: tuple[float, float]
    start_index: int
    end_index: int
    length_km: float
    delay_factor: float
    current_speed: float
    free_flow_speed: float
    confidence: float
    fallback: bool
    condition: str

    @classmethod
    def from_segment_traffic(cls, item: SegmentTraffic) -> SegmentTrafficSchema:
        segment, sample = item.segment, item.sample
        return cls(
            start=(segment.start.lng, segment.start.lat),
            end=(segment.end.lng, segment.end.lat),
            start_index=segment.start_index,
            end_index=segment.end_index,
            length_km=round(segment.length_km, 3),
            delay_factor=round(sample.delay_factor, 3),
            current_speed=round(sample.current_speed, 1),
            free_flow_speed=round(sample.free_flow_speed, 1),
            confidence=sample.confidence,
            fallback=sample.is_fallback,
            condition=item.condition.value,
        )


class ConditionSummarySchema(BaseModel):
    total_segments: int
    good_segments: int
    moderate_segments: int
    bad_segments: int
    average_delay: float
    distribution: dict[str, int]


class RouteTrafficResultSchema(BaseModel):
    segments: list[SegmentTrafficSchema]
    adjusted_duration_seconds: float
    aggregate_delay_factor: float
    cache_hit_rate: float
    summary: ConditionSummarySchema

    @classmethod
    def from_result(cls, result: RouteTrafficResult) -> RouteTrafficResultSchema:
        summary = result.summary
        return cls(
            segments=[SegmentTrafficSchema.from_segment_traffic(item) for item in result.segments],
            adjusted_duration_seconds=round(result.adjusted_duration_seconds, 1),
            aggregate_delay_factor=round(result.aggregate_delay_factor, 3),
            cache_hit_rate=round(result.cache_hit_rate, 3),
            summary=ConditionSummarySchema(
                total_segments=summary.total_segments,
                good_segments=summary.good_segments,
                moderate_segments=summary.moderate_segments,
                bad_segments=summary.bad_segments,
                average_delay=round(summary.average_delay, 3),
                distribution=dict(summary.distribution),
            ),
        )


class CacheStatsSchema(BaseModel):
    hit_count: int
    miss_count: int
    hit_rate: int
    total_requests: int
    size: int
    max_size: int
    api_call_count: int
    fallback_count: int
    error_count: int

    @classmethod
    def from_stats(cls, stats: CacheStats) -> CacheStatsSchema:
        return cls(
            hit_count=stats.hit_count,
            miss_count=stats.miss_count,
            hit_rate=stats.hit_rate,
            total_requests=stats.total_requests,
            size=stats.size,
            max_size=stats.max_size,
            api_call_count=stats.api_call_count,
            fallback_count=stats.fallback_count,
            error_count=stats.error_count,
        )
