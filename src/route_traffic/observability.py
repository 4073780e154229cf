from __future__ import annotations

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from prometheus_client import CollectorRegistry, Gauge, generate_latest

from route_traffic.models import CacheStats

_configured = False


def configure_otel(service_name: str) -> None:
    global _configured
    if _configured:
        return
    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    trace.set_tracer_provider(provider)
    _configured = True


class TrafficCachePrometheusExporter:
    def __init__(self) -> None:
        self._registry = CollectorRegistry()
        self._requests = Gauge(
            "traffic_cache_requests_total",
            "Segment cache lookups grouped by result",
            labelnames=("result",),
            registry=self._registry,
        )
        self._hit_rate = Gauge(
            "traffic_cache_hit_rate_percent",
            "Segment cache hit rate in percent",
            registry=self._registry,
        )
        self._size = Gauge(
            "traffic_cache_size",
            "Segment cache entry count",
            registry=self._registry,
        )
        self._max_size = Gauge(
            "traffic_cache_max_size",
            "Segment cache capacity",
            registry=self._registry,
        )
        self._api_calls = Gauge(
            "traffic_provider_calls_total",
            "Traffic provider requests dispatched for cache misses",
            registry=self._registry,
        )
        self._fallbacks = Gauge(
            "traffic_fallback_samples_total",
            "Synthesized fallback samples",
            registry=self._registry,
        )
        self._errors = Gauge(
            "traffic_provider_errors_total",
            "Dispatched provider requests that failed",
            registry=self._registry,
        )

    def render(self, stats: CacheStats) -> str:
        self._requests.labels(result="hit").set(stats.hit_count)
        self._requests.labels(result="miss").set(stats.miss_count)
        self._hit_rate.set(stats.hit_rate)
        self._size.set(stats.size)
        self._max_size.set(stats.max_size)
        self._api_calls.set(stats.api_call_count)
        self._fallbacks.set(stats.fallback_count)
        self._errors.set(stats.error_count)
        return generate_latest(self._registry).decode("utf-8")
