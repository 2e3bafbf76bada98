"""
Test cases for configuration loading
"""
import pytest
from pydantic import ValidationError

from envmonitor.models import ConfigurationError, ConnectionConfig, MetricType, ServiceConfig


def test_connection_from_env_reads_all_four_values(influx_env):
    connection = ConnectionConfig.from_env()

    assert connection.url == "http://influx.local:8086"
    assert connection.org == "home"
    assert connection.bucket == "sensors"
    assert connection.token == "secret-token"
    assert connection.missing() == []
    assert connection.require_complete() is connection


def test_connection_from_env_defaults_to_empty_strings():
    connection = ConnectionConfig.from_env()

    assert connection.url == ""
    assert connection.token == ""
    assert connection.missing() == [
        "INFLUXDB_URL", "INFLUXDB_ORG", "INFLUXDB_BUCKET", "INFLUXDB_TOKEN"
    ]


def test_missing_token_is_a_configuration_error(influx_env, monkeypatch):
    monkeypatch.setenv("INFLUXDB_TOKEN", "   ")
    connection = ConnectionConfig.from_env()

    with pytest.raises(ConfigurationError) as exc_info:
        connection.require_complete()

    assert "INFLUXDB_TOKEN" in str(exc_info.value)
    assert "INFLUXDB_URL" not in str(exc_info.value)


def test_connection_is_immutable(influx_env):
    connection = ConnectionConfig.from_env()

    with pytest.raises(ValidationError):
        connection.token = "other"


def test_env_file_is_loaded(tmp_path, monkeypatch):
    # Register the variables so load_dotenv's writes are undone after the test
    for name in ConnectionConfig.ENV_VARS.values():
        monkeypatch.setenv(name, "placeholder")
        monkeypatch.delenv(name)
    (tmp_path / ".env").write_text(
        "INFLUXDB_URL=http://from-dotenv:8086\n"
        "INFLUXDB_ORG=dotenv-org\n"
        "INFLUXDB_BUCKET=dotenv-bucket\n"
        "INFLUXDB_TOKEN=dotenv-token\n"
    )

    connection = ConnectionConfig.from_env()

    assert connection.url == "http://from-dotenv:8086"
    assert connection.missing() == []


def test_default_service_config_tracks_three_metrics():
    config = ServiceConfig.create_default()

    assert config.metric_types == [MetricType.TEMPERATURE, MetricType.HUMIDITY, MetricType.PRESSURE]
    assert config.get_metric_style(MetricType.TEMPERATURE).unit == "℃"
    assert config.get_metric_style(MetricType.HUMIDITY).unit == "%"
    assert config.get_metric_style(MetricType.PRESSURE).unit == "hPa"
    assert config.poll_interval_seconds == 60
    assert config.query.range_hours == 24
    assert config.query.window_minutes == 5


def test_service_config_env_overrides(influx_env, monkeypatch):
    monkeypatch.setenv("POLL_INTERVAL_SECONDS", "30")
    monkeypatch.setenv("INFLUXDB_DEVICE_ID", "ESP32Client-kitchen")
    monkeypatch.setenv("DASHBOARD_PORT", "9000")
    monkeypatch.setenv("DISPLAY_TIMEZONE", "Europe/Berlin")

    config = ServiceConfig.from_env()

    assert config.poll_interval_seconds == 30
    assert config.query.device_id == "ESP32Client-kitchen"
    assert config.query.measurement == "ac_remote"
    assert config.port == 9000
    assert config.get_display_tz().key == "Europe/Berlin"
    assert config.connection.bucket == "sensors"


def test_non_integer_env_value_is_rejected(monkeypatch):
    monkeypatch.setenv("POLL_INTERVAL_SECONDS", "soon")

    with pytest.raises(ConfigurationError):
        ServiceConfig.from_env()


def test_unknown_display_timezone_is_rejected():
    config = ServiceConfig.create_default()
    config.display_timezone = "Mars/Olympus_Mons"

    with pytest.raises(ConfigurationError):
        config.get_display_tz()


@pytest.mark.parametrize("raw", ["0", "-30"])
def test_non_positive_poll_interval_is_rejected(monkeypatch, raw):
    monkeypatch.setenv("POLL_INTERVAL_SECONDS", raw)

    with pytest.raises(ConfigurationError) as exc_info:
        ServiceConfig.from_env()

    assert "POLL_INTERVAL_SECONDS" in str(exc_info.value)


def test_poll_interval_assignment_is_validated():
    config = ServiceConfig.create_default()

    with pytest.raises(ValidationError):
        config.poll_interval_seconds = 0

    assert config.poll_interval_seconds == 60
