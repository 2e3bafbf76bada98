"""
Shared fixtures: an isolated environment and a ready-to-use configuration.
"""
import pytest

from envmonitor.models import ConnectionConfig, ServiceConfig

ENV_VARS = [
    "INFLUXDB_URL",
    "INFLUXDB_ORG",
    "INFLUXDB_BUCKET",
    "INFLUXDB_TOKEN",
    "INFLUXDB_MEASUREMENT",
    "INFLUXDB_DEVICE_TAG",
    "INFLUXDB_DEVICE_ID",
    "INFLUXDB_TIMEOUT_MS",
    "POLL_INTERVAL_SECONDS",
    "DISPLAY_TIMEZONE",
    "DASHBOARD_HOST",
    "DASHBOARD_PORT",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Keep the developer's environment and .env files out of the tests."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def influx_env(monkeypatch):
    values = {
        "INFLUXDB_URL": "http://influx.local:8086",
        "INFLUXDB_ORG": "home",
        "INFLUXDB_BUCKET": "sensors",
        "INFLUXDB_TOKEN": "secret-token",
    }
    for name, value in values.items():
        monkeypatch.setenv(name, value)
    return values


@pytest.fixture
def config() -> ServiceConfig:
    """Default configuration with a complete connection and a fast poll interval."""
    config = ServiceConfig.create_default()
    config.connection = ConnectionConfig(
        url="http://influx.local:8086",
        org="home",
        bucket="sensors",
        token="secret-token",
    )
    config.poll_interval_seconds = 0.02
    config.shutdown_grace_seconds = 0.5
    return config
