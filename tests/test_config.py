from route_traffic.config import load_settings


def test_load_settings_defaults() -> None:
    settings = load_settings()

    assert settings.CACHE_TTL_MS == 60_000
    assert settings.CACHE_MAX_SIZE == 100
    assert settings.COORDINATE_PRECISION_DIGITS == 6
    assert settings.RUSH_HOUR_WINDOWS == [(7, 9), (17, 19)]
    assert settings.condition_thresholds.good == 1.20
    assert settings.condition_thresholds.moderate == 1.50


def test_load_settings_reads_env(monkeypatch) -> None:
    monkeypatch.setenv("TRAFFIC_PROVIDER_API_KEY", "secret")
    monkeypatch.setenv("MAX_SEGMENT_LENGTH_METERS", "1500")
    monkeypatch.setenv("RUSH_HOUR_WINDOWS", "[[6, 8], [16, 18]]")
    monkeypatch.setenv("DIRECTIONAL_FINGERPRINTS", "false")

    settings = load_settings()

    assert settings.TRAFFIC_PROVIDER_API_KEY == "secret"
    assert settings.MAX_SEGMENT_LENGTH_METERS == 1500
    assert settings.RUSH_HOUR_WINDOWS == [(6, 8), (16, 18)]
    assert settings.DIRECTIONAL_FINGERPRINTS is False
