import pytest

from route_traffic.errors import PartitionError
from route_traffic.models import RoutePoint, Segment, route_from_payload


def test_route_from_payload_reads_lon_lat_pairs() -> None:
    route = route_from_payload(
        {
            "points": [[29.0320, 40.9923], [29.0158, 41.0265]],
            "durationSeconds": 540,
            "distanceMeters": 4100.5,
        }
    )

    assert route.points[0] == RoutePoint(lng=29.0320, lat=40.9923)
    assert route.baseline_duration_seconds == 540.0
    assert route.distance_meters == 4100.5


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"points": [[29.0, 41.0]], "durationSeconds": 1, "distanceMeters": 1},
        {"points": [[29.0]], "durationSeconds": 1, "distanceMeters": 1},
        {"points": [[29.0, 41.0], [29.1, 41.1]], "durationSeconds": "slow", "distanceMeters": 1},
    ],
)
def test_route_from_payload_rejects_malformed_payload(payload) -> None:
    with pytest.raises(PartitionError):
        route_from_payload(payload)


def test_segment_midpoint() -> None:
    segment = Segment(
        start=RoutePoint(lng=29.0, lat=41.0),
        end=RoutePoint(lng=29.2, lat=41.4),
        length_km=40.0,
        start_index=0,
        end_index=5,
    )
    assert segment.midpoint.lng == pytest.approx(29.1)
    assert segment.midpoint.lat == pytest.approx(41.2)
