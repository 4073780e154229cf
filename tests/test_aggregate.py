import pytest

from route_traffic.aggregate import aggregate_route_delay
from route_traffic.models import RoutePoint, Segment, TrafficSample


def make_segment(length_km: float) -> Segment:
    return Segment(
        start=RoutePoint(lng=29.0, lat=41.0),
        end=RoutePoint(lng=29.01, lat=41.0),
        length_km=length_km,
        start_index=0,
        end_index=1,
    )


def make_sample(delay_factor: float) -> TrafficSample:
    return TrafficSample(
        current_speed=50.0 / delay_factor,
        free_flow_speed=50.0,
        confidence=0.9,
        is_fallback=False,
        fetched_at_epoch_ms=0,
    )


def test_aggregate_is_identity_without_delay() -> None:
    segments = [make_segment(0.37), make_segment(1.91), make_segment(0.123)]
    samples = [make_sample(1.0) for _ in segments]

    delay = aggregate_route_delay(segments, samples, baseline_duration_seconds=1234.5)

    assert delay.aggregate_delay_factor == 1.0
    assert delay.adjusted_duration_seconds == 1234.5


def test_aggregate_weights_by_segment_length() -> None:
    segments = [make_segment(1.0), make_segment(3.0)]
    samples = [make_sample(2.0), make_sample(1.0)]

    delay = aggregate_route_delay(segments, samples, baseline_duration_seconds=600)

    assert delay.aggregate_delay_factor == pytest.approx(1.25)
    assert delay.adjusted_duration_seconds == pytest.approx(750)


def test_aggregate_skips_zero_length_segments() -> None:
    segments = [make_segment(0.0), make_segment(2.0)]
    samples = [make_sample(3.0), make_sample(1.2)]

    delay = aggregate_route_delay(segments, samples, baseline_duration_seconds=100)

    assert delay.aggregate_delay_factor == pytest.approx(1.2)


def test_aggregate_defaults_to_no_delay_for_zero_total_length() -> None:
    delay = aggregate_route_delay([make_segment(0.0)], [make_sample(2.0)], baseline_duration_seconds=300)
    assert delay.aggregate_delay_factor == 1.0
    assert delay.adjusted_duration_seconds == 300

    empty = aggregate_route_delay([], [], baseline_duration_seconds=300)
    assert empty.aggregate_delay_factor == 1.0


def test_aggregate_rejects_mismatched_inputs() -> None:
    with pytest.raises(ValueError):
        aggregate_route_delay([make_segment(1.0)], [], baseline_duration_seconds=10)
    with pytest.raises(ValueError):
        aggregate_route_delay([], [], baseline_duration_seconds=-1)
