"""Traffic-aware route annotation engine."""

from route_traffic.aggregate import RouteDelay, aggregate_route_delay
from route_traffic.cache import TrafficCache
from route_traffic.classify import ConditionThresholds, classify_delay_factor, summarize_conditions
from route_traffic.config import TrafficSettings, load_settings
from route_traffic.distance import haversine_distance_meters
from route_traffic.errors import FetchError, PartitionError, TrafficEngineError
from route_traffic.fallback import FallbackPolicy
from route_traffic.fingerprint import segment_fingerprint
from route_traffic.models import (
    CacheStats,
    Route,
    RoutePoint,
    RouteTrafficResult,
    Segment,
    SegmentTraffic,
    TrafficCondition,
    TrafficSample,
    route_from_payload,
)
from route_traffic.partition import partition_route
from route_traffic.resolver import SegmentTrafficResolver
from route_traffic.service import RouteTrafficService
from route_traffic.source import TrafficSource

__all__ = [
    "CacheStats",
    "ConditionThresholds",
    "FallbackPolicy",
    "FetchError",
    "PartitionError",
    "Route",
    "RouteDelay",
    "RoutePoint",
    "RouteTrafficResult",
    "RouteTrafficService",
    "Segment",
    "SegmentTraffic",
    "SegmentTrafficResolver",
    "TrafficCache",
    "TrafficCondition",
    "TrafficEngineError",
    "TrafficSample",
    "TrafficSettings",
    "TrafficSource",
    "aggregate_route_delay",
    "classify_delay_factor",
    "haversine_distance_meters",
    "load_settings",
    "partition_route",
    "route_from_payload",
    "segment_fingerprint",
    "summarize_conditions",
]
