import pytest

from route_traffic.classify import ConditionThresholds, classify_delay_factor, summarize_conditions
from route_traffic.models import RoutePoint, Segment, SegmentTraffic, TrafficCondition, TrafficSample


def test_classify_boundaries() -> None:
    assert classify_delay_factor(1.0) == TrafficCondition.GOOD
    assert classify_delay_factor(1.20) == TrafficCondition.GOOD
    assert classify_delay_factor(1.21) == TrafficCondition.MODERATE
    assert classify_delay_factor(1.50) == TrafficCondition.MODERATE
    assert classify_delay_factor(1.51) == TrafficCondition.BAD
    assert classify_delay_factor(0.0) == TrafficCondition.GOOD


def test_classify_with_custom_thresholds() -> None:
    thresholds = ConditionThresholds(good=1.1, moderate=1.3)
    assert classify_delay_factor(1.15, thresholds) == TrafficCondition.MODERATE
    assert classify_delay_factor(1.35, thresholds) == TrafficCondition.BAD


def test_classify_rejects_invalid_input() -> None:
    with pytest.raises(ValueError):
        classify_delay_factor(-0.1)
    with pytest.raises(ValueError):
        classify_delay_factor(float("nan"))
    with pytest.raises(ValueError):
        ConditionThresholds(good=1.6, moderate=1.5)


def test_summarize_conditions_counts_and_distribution() -> None:
    def item(delay_factor: float, length_km: float) -> SegmentTraffic:
        segment = Segment(
            start=RoutePoint(lng=29.0, lat=41.0),
            end=RoutePoint(lng=29.01, lat=41.0),
            length_km=length_km,
            start_index=0,
            end_index=1,
        )
        sample = TrafficSample(
            current_speed=50.0 / delay_factor,
            free_flow_speed=50.0,
            confidence=0.9,
            is_fallback=False,
            fetched_at_epoch_ms=0,
        )
        return SegmentTraffic(segment=segment, sample=sample, condition=classify_delay_factor(sample.delay_factor))

    summary = summarize_conditions([item(1.0, 1.0), item(1.3, 1.0), item(1.8, 2.0), item(1.1, 1.0)])

    assert summary.total_segments == 4
    assert summary.good_segments == 2
    assert summary.moderate_segments == 1
    assert summary.bad_segments == 1
    assert summary.distribution == {"good": 50, "moderate": 25, "bad": 25}
    assert summary.average_delay == pytest.approx((0.0 + 0.3 + 1.6 + 0.1) / 4)


def test_summarize_conditions_empty() -> None:
    summary = summarize_conditions([])
    assert summary.total_segments == 0
    assert summary.distribution == {"good": 0, "moderate": 0, "bad": 0}
