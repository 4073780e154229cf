from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from route_traffic.errors import PartitionError


@dataclass(frozen=True)
class RoutePoint:
    lng: float
    lat: float


@dataclass(frozen=True)
class Route:
    points: tuple[RoutePoint, ...]
    baseline_duration_seconds: float
    distance_meters: float


@dataclass(frozen=True)
class Segment:
    start: RoutePoint
    end: RoutePoint
    length_km: float
    start_index: int
    end_index: int

    @property
    def midpoint(self) -> RoutePoint:
        return RoutePoint(
            lng=(self.start.lng + self.end.lng) / 2,
            lat=(self.start.lat + self.end.lat) / 2,
        )


@dataclass(frozen=True)
class TrafficSample:
    current_speed: float
    free_flow_speed: float
    confidence: float
    is_fallback: bool
    fetched_at_epoch_ms: int
    source: str = "provider"
    fallback_reason: str | None = None

    @property
    def delay_factor(self) -> float:
        return self.free_flow_speed / self.current_speed


class TrafficCondition(str, Enum):
    GOOD = "good"
    MODERATE = "moderate"
    BAD = "bad"


@dataclass(frozen=True)
class SegmentTraffic:
    segment: Segment
    sample: TrafficSample
    condition: TrafficCondition


@dataclass(frozen=True)
class ConditionSummary:
    total_segments: int
    good_segments: int
    moderate_segments: int
    bad_segments: int
    average_delay: float
    distribution: dict[str, int]


@dataclass(frozen=True)
class RouteTrafficResult:
    segments: tuple[SegmentTraffic, ...]
    adjusted_duration_seconds: float
    aggregate_delay_factor: float
    cache_hit_rate: float
    summary: ConditionSummary


@dataclass(frozen=True)
class CacheStats:
    hit_count: int
    miss_count: int
    hit_rate: int
    size: int
    max_size: int
    api_call_count: int
    fallback_count: int
    error_count: int = 0

    @property
    def total_requests(self) -> int:
        return self.hit_count + self.miss_count


class RouteProvider(Protocol):
    async def fetch_route(self, start: RoutePoint, end: RoutePoint, mode: str) -> Route: ...


def route_from_payload(payload: dict[str, Any]) -> Route:
    """Build a Route from a routing service payload.

    The payload carries ``points`` as ``[lon, lat]`` pairs together with
    ``durationSeconds`` and ``distanceMeters``.
    """
    try:
        raw_points = payload["points"]
        points = tuple(RoutePoint(lng=float(lng), lat=float(lat)) for lng, lat in raw_points)
        duration = float(payload["durationSeconds"])
        distance = float(payload["distanceMeters"])
    except (KeyError, TypeError, ValueError) as exc:
        raise PartitionError(f"malformed route payload: {exc}") from exc
    if len(points) < 2:
        raise PartitionError("route must contain at least 2 points")
    return Route(points=points, baseline_duration_seconds=duration, distance_meters=distance)
