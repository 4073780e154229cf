from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from route_traffic.models import ConditionSummary, SegmentTraffic, TrafficCondition


@dataclass(frozen=True)
class ConditionThresholds:
    good: float = 1.20
    moderate: float = 1.50

    def __post_init__(self) -> None:
        if self.good > self.moderate:
            raise ValueError("good threshold must be <= moderate threshold")


DEFAULT_THRESHOLDS = ConditionThresholds()


def classify_delay_factor(
    delay_factor: float,
    thresholds: ConditionThresholds = DEFAULT_THRESHOLDS,
) -> TrafficCondition:
    if math.isnan(delay_factor) or delay_factor < 0:
        raise ValueError("delay_factor must be >= 0")
    if delay_factor <= thresholds.good:
        return TrafficCondition.GOOD
    if delay_factor <= thresholds.moderate:
        return TrafficCondition.MODERATE
    return TrafficCondition.BAD


def summarize_conditions(items: Sequence[SegmentTraffic]) -> ConditionSummary:
    """Counts per condition plus the average length weighted excess delay."""
    total = len(items)
    counts = {condition: 0 for condition in TrafficCondition}
    excess_delay = 0.0
    for item in items:
        counts[item.condition] += 1
        excess_delay += (item.sample.delay_factor - 1) * item.segment.length_km
    return ConditionSummary(
        total_segments=total,
        good_segments=counts[TrafficCondition.GOOD],
        moderate_segments=counts[TrafficCondition.MODERATE],
        bad_segments=counts[TrafficCondition.BAD],
        average_delay=excess_delay / total if total else 0.0,
        distribution={
            condition.value: round(count / total * 100) if total else 0
            for condition, count in counts.items()
        },
    )
