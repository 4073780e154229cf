from __future__ import annotations

import random
from collections.abc import Sequence
from dataclasses import dataclass

from route_traffic.clock import Clock, SystemClock, epoch_ms
from route_traffic.models import TrafficSample

DEFAULT_RUSH_HOUR_WINDOWS: tuple[tuple[int, int], ...] = ((7, 9), (17, 19))


@dataclass(frozen=True)
class FallbackConfig:
    arterial_threshold_km: float = 5.0
    arterial_delay_factor: float = 1.10
    urban_delay_factor: float = 1.25
    rush_hour_multiplier: float = 1.4
    jitter_min: float = 0.85
    jitter_max: float = 1.15
    free_flow_speed: float = 50.0
    confidence: float = 0.3


class FallbackPolicy:
    """Synthesizes low confidence samples when the provider is unavailable.

    Long segments are assumed to be arterial roads with lighter traffic,
    short ones urban streets. Rush hours scale the estimate up and a bounded
    random jitter keeps neighbouring segments from looking identical.
    """

    def __init__(
        self,
        rush_hour_windows: Sequence[tuple[int, int]] = DEFAULT_RUSH_HOUR_WINDOWS,
        clock: Clock | None = None,
        rng: random.Random | None = None,
        config: FallbackConfig | None = None,
    ) -> None:
        for start_hour, end_hour in rush_hour_windows:
            if not 0 <= start_hour <= end_hour <= 23:
                raise ValueError("rush hour windows must be ordered hours between 0 and 23")
        self._rush_hour_windows = tuple(rush_hour_windows)
        self._clock = clock or SystemClock()
        self._rng = rng or random.Random()
        self._config = config or FallbackConfig()

    def is_rush_hour(self) -> bool:
        hour = self._clock.now().hour
        return any(start <= hour <= end for start, end in self._rush_hour_windows)

    def synthesize(self, segment_length_km: float, reason: str | None = None) -> TrafficSample:
        config = self._config
        if segment_length_km > config.arterial_threshold_km:
            factor = config.arterial_delay_factor
        else:
            factor = config.urban_delay_factor
        if self.is_rush_hour():
            factor *= config.rush_hour_multiplier
        factor *= self._rng.uniform(config.jitter_min, config.jitter_max)
        return TrafficSample(
            current_speed=config.free_flow_speed / factor,
            free_flow_speed=config.free_flow_speed,
            confidence=config.confidence,
            is_fallback=True,
            fetched_at_epoch_ms=epoch_ms(self._clock),
            source="fallback",
            fallback_reason=reason,
        )
