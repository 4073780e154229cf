from __future__ import annotations

from route_traffic.models import RoutePoint, Segment

DEFAULT_PRECISION_DIGITS = 6


def segment_fingerprint(
    segment: Segment,
    precision: int = DEFAULT_PRECISION_DIGITS,
    directional: bool = True,
) -> str:
    """Cache key of a segment built from its rounded endpoints.

    Keys are direction sensitive unless ``directional`` is False, in which
    case both traversal directions of the same road share one key.
    """
    if precision < 0:
        raise ValueError("precision must be >= 0")
    start = _point_token(segment.start, precision)
    end = _point_token(segment.end, precision)
    if not directional and end < start:
        start, end = end, start
    return f"{start}-{end}"


def _point_token(point: RoutePoint, precision: int) -> str:
    # -0.0 and 0.0 must share a token
    lat = round(point.lat, precision) + 0.0
    lng = round(point.lng, precision) + 0.0
    return f"{lat:.{precision}f},{lng:.{precision}f}"
