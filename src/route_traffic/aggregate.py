from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from route_traffic.models import Segment, TrafficSample


@dataclass(frozen=True)
class RouteDelay:
    adjusted_duration_seconds: float
    aggregate_delay_factor: float


def aggregate_route_delay(
    segments: Sequence[Segment],
    samples: Sequence[TrafficSample],
    baseline_duration_seconds: float,
) -> RouteDelay:
    if len(segments) != len(samples):
        raise ValueError("segments and samples must have the same length")
    if baseline_duration_seconds < 0:
        raise ValueError("baseline_duration_seconds must be >= 0")
    weighted = 0.0
    total_km = 0.0
    for segment, sample in zip(segments, samples):
        if segment.length_km <= 0:
            continue
        weighted += sample.delay_factor * segment.length_km
        total_km += segment.length_km
    factor = weighted / total_km if total_km > 0 else 1.0
    return RouteDelay(
        adjusted_duration_seconds=baseline_duration_seconds * factor,
        aggregate_delay_factor=factor,
    )
