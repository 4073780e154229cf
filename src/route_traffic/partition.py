from __future__ import annotations

import logging
from collections.abc import Sequence

from route_traffic.distance import haversine_distance_meters
from route_traffic.models import RoutePoint, Segment

DEFAULT_MAX_SEGMENT_LENGTH_METERS = 1000.0
DEFAULT_MIN_SEGMENT_LENGTH_METERS = 100.0
# haversine round-off on a hop of exactly the limit
LENGTH_TOLERANCE_METERS = 1e-6

logger = logging.getLogger(__name__)


def partition_route(
    points: Sequence[RoutePoint],
    max_segment_length_meters: float = DEFAULT_MAX_SEGMENT_LENGTH_METERS,
    min_segment_length_meters: float = DEFAULT_MIN_SEGMENT_LENGTH_METERS,
) -> list[Segment]:
    """Split a point sequence into segments of roughly bounded length.

    Distance is accumulated hop by hop and a segment is cut as soon as it
    reaches ``max_segment_length_meters`` or the last point is reached. The
    cutting point becomes the start of the next segment. Segments shorter than
    ``min_segment_length_meters`` are dropped and their length is not carried
    over to a neighbour.
    """
    if max_segment_length_meters <= 0:
        raise ValueError("max_segment_length_meters must be > 0")
    if min_segment_length_meters < 0:
        raise ValueError("min_segment_length_meters must be >= 0")
    if len(points) < 2:
        return []

    segments: list[Segment] = []
    dropped = 0
    accumulated = 0.0
    start_index = 0
    last_index = len(points) - 1
    for index in range(1, len(points)):
        accumulated += haversine_distance_meters(points[index - 1], points[index])
        if accumulated < max_segment_length_meters - LENGTH_TOLERANCE_METERS and index != last_index:
            continue
        if accumulated >= min_segment_length_meters - LENGTH_TOLERANCE_METERS:
            segments.append(
                Segment(
                    start=points[start_index],
                    end=points[index],
                    length_km=accumulated / 1000,
                    start_index=start_index,
                    end_index=index,
                )
            )
        else:
            dropped += 1
        start_index = index
        accumulated = 0.0

    if dropped:
        logger.debug(
            "short_segments_dropped",
            extra={"component": "partition", "dropped": dropped, "emitted": len(segments)},
        )
    return segments
