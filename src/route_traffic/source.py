from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

import httpx

from route_traffic.circuit_breaker import ProviderCircuitBreaker
from route_traffic.clock import Clock, SystemClock, epoch_ms
from route_traffic.errors import CircuitOpenError, FetchError, ProviderNormalizationError
from route_traffic.fallback import FallbackPolicy
from route_traffic.models import RoutePoint, TrafficSample

DEFAULT_PROVIDER_URL = "https://api.tomtom.com/traffic/services/4/flowSegmentData/absolute/10/json"
DEFAULT_TIMEOUT_MS = 10_000
# fallback reasons for which no provider request went out
UNDISPATCHED_REASONS = frozenset({"circuit_open", "missing_api_key"})

logger = logging.getLogger(__name__)


class TrafficSource:
    """Fetches one traffic sample per point from the flow provider.

    ``fetch`` never raises for provider problems: every failure is logged
    and answered with a sample from the fallback policy. Task cancellation is
    left to propagate.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_PROVIDER_URL,
        api_key: str | None = None,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        fallback: FallbackPolicy | None = None,
        circuit_breaker: ProviderCircuitBreaker | None = None,
        clock: Clock | None = None,
        client_factory: Callable[[float], httpx.AsyncClient] | None = None,
    ) -> None:
        if timeout_ms <= 0:
            raise ValueError("timeout_ms must be > 0")
        self._base_url = base_url
        self._api_key = api_key
        self._timeout_ms = timeout_ms
        self._clock = clock or SystemClock()
        self._fallback = fallback or FallbackPolicy(clock=self._clock)
        self._circuit_breaker = circuit_breaker
        self._client_factory = client_factory

    async def fetch(
        self,
        midpoint: RoutePoint,
        segment_length_km: float,
        timeout_ms: int | None = None,
    ) -> TrafficSample:
        timeout_seconds = (timeout_ms or self._timeout_ms) / 1000
        try:
            return await self._guarded_request(midpoint, timeout_seconds)
        except FetchError as exc:
            logger.warning(
                "traffic_fetch_failed",
                extra={
                    "component": "traffic_source",
                    "reason": exc.reason,
                    "detail": str(exc),
                    "lat": midpoint.lat,
                    "lng": midpoint.lng,
                },
            )
            reason = exc.reason
        except Exception:
            logger.exception(
                "traffic_fetch_unexpected_error",
                extra={"component": "traffic_source", "lat": midpoint.lat, "lng": midpoint.lng},
            )
            reason = "unexpected_error"
        return self._fallback.synthesize(segment_length_km, reason=reason)

    async def _guarded_request(self, midpoint: RoutePoint, timeout_seconds: float) -> TrafficSample:
        if not self._api_key:
            raise FetchError("missing_api_key", "traffic provider api key is not configured")
        breaker = self._circuit_breaker
        if breaker is None:
            return await self._request(midpoint, timeout_seconds)
        if not breaker.allow_request(self._clock.now().timestamp()):
            raise CircuitOpenError()
        try:
            sample = await self._request(midpoint, timeout_seconds)
        except Exception:
            breaker.record_failure(self._clock.now().timestamp())
            raise
        breaker.record_success()
        return sample

    async def _request(self, midpoint: RoutePoint, timeout_seconds: float) -> TrafficSample:
        params = {"key": self._api_key, "point": f"{midpoint.lat},{midpoint.lng}"}
        try:
            response = await asyncio.wait_for(self._get(params, timeout_seconds), timeout=timeout_seconds)
        except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
            raise FetchError("timeout", "traffic provider timeout") from exc
        except httpx.HTTPStatusError as exc:
            raise FetchError(_status_reason(exc.response.status_code), str(exc)) from exc
        except httpx.HTTPError as exc:
            raise FetchError("transport_error", str(exc)) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderNormalizationError("response body is not json") from exc
        return self._normalize(payload)

    async def _get(self, params: dict[str, str], timeout_seconds: float) -> httpx.Response:
        factory = self._client_factory or (lambda timeout: httpx.AsyncClient(timeout=timeout))
        async with factory(timeout_seconds) as client:
            response = await client.get(self._base_url, params=params)
            response.raise_for_status()
        return response

    def _normalize(self, payload: Any) -> TrafficSample:
        if not isinstance(payload, dict) or not isinstance(payload.get("flowSegmentData"), dict):
            raise ProviderNormalizationError("flowSegmentData is missing")
        data = payload["flowSegmentData"]
        try:
            current_speed = float(data["currentSpeed"])
            free_flow_speed = float(data["freeFlowSpeed"])
            confidence = float(data.get("confidence", 0.7))
        except (KeyError, TypeError, ValueError) as exc:
            raise ProviderNormalizationError(f"invalid flow fields: {exc}") from exc
        if not (current_speed > 0 and free_flow_speed > 0):
            raise ProviderNormalizationError("speeds must be > 0")
        return TrafficSample(
            current_speed=current_speed,
            free_flow_speed=free_flow_speed,
            confidence=min(1.0, max(0.0, confidence)),
            is_fallback=False,
            fetched_at_epoch_ms=epoch_ms(self._clock),
        )


def _status_reason(status_code: int) -> str:
    if status_code in (401, 403):
        return "auth_rejected"
    if status_code == 429:
        return "rate_limited"
    return "http_status"
