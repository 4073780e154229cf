from opentelemetry import trace

from route_traffic.models import CacheStats
from route_traffic.observability import TrafficCachePrometheusExporter, configure_otel


def test_cache_prometheus_exporter_renders_metrics() -> None:
    stats = CacheStats(
        hit_count=8,
        miss_count=2,
        hit_rate=80,
        size=5,
        max_size=100,
        api_call_count=2,
        fallback_count=1,
        error_count=1,
    )

    output = TrafficCachePrometheusExporter().render(stats)

    assert 'traffic_cache_requests_total{result="hit"} 8.0' in output
    assert 'traffic_cache_requests_total{result="miss"} 2.0' in output
    assert "traffic_cache_hit_rate_percent 80.0" in output
    assert "traffic_cache_size 5.0" in output
    assert "traffic_provider_calls_total 2.0" in output
    assert "traffic_fallback_samples_total 1.0" in output
    assert "traffic_provider_errors_total 1.0" in output


def test_configure_otel_is_idempotent() -> None:
    configure_otel("route-traffic-test")
    provider = trace.get_tracer_provider()
    configure_otel("route-traffic-test")

    assert trace.get_tracer_provider() is provider
