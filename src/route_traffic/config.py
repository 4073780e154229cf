from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict

from route_traffic.classify import ConditionThresholds


class TrafficSettings(BaseSettings):
    model_config = SettingsConfigDict(extra="ignore")

    SERVICE_NAME: str = "route-traffic"
    TRAFFIC_PROVIDER_URL: str = "https://api.tomtom.com/traffic/services/4/flowSegmentData/absolute/10/json"
    TRAFFIC_PROVIDER_API_KEY: str | None = None
    TRAFFIC_TIMEZONE: str = "Europe/Istanbul"
    MAX_SEGMENT_LENGTH_METERS: float = 1000.0
    MIN_SEGMENT_LENGTH_METERS: float = 100.0
    CACHE_TTL_MS: int = 60_000
    CACHE_MAX_SIZE: int = 100
    CACHE_SWEEP_INTERVAL_MS: int = 120_000
    FALLBACK_TTL_DIVISOR: int = 10
    FETCH_TIMEOUT_MS: int = 10_000
    COORDINATE_PRECISION_DIGITS: int = 6
    DIRECTIONAL_FINGERPRINTS: bool = True
    RUSH_HOUR_WINDOWS: list[tuple[int, int]] = [(7, 9), (17, 19)]
    CONDITION_GOOD_THRESHOLD: float = 1.20
    CONDITION_MODERATE_THRESHOLD: float = 1.50
    CIRCUIT_FAILURE_THRESHOLD: int = 3
    CIRCUIT_RECOVERY_SECONDS: float = 30.0

    @property
    def condition_thresholds(self) -> ConditionThresholds:
        return ConditionThresholds(
            good=self.CONDITION_GOOD_THRESHOLD,
            moderate=self.CONDITION_MODERATE_THRESHOLD,
        )


def load_settings(**overrides: object) -> TrafficSettings:
    return TrafficSettings(**overrides)
