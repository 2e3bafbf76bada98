"""Configuration models for the dashboard."""

import os
from pathlib import Path
from typing import ClassVar, Dict, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from pydantic import BaseModel, Field

from .sensor import MetricType, MetricStyle


class ConfigurationError(ValueError):
    """Raised when required configuration is missing or malformed."""


def _load_env_file():
    """Load environment variables from .env file in common locations."""
    env_paths = [
        Path.cwd() / ".env",  # Current directory
        Path.cwd() / "config" / ".env",
        Path(__file__).parent.parent / ".env",  # Package directory
    ]

    for env_path in env_paths:
        if env_path.exists():
            from dotenv import load_dotenv
            load_dotenv(env_path)
            break


def _env_int(name: str, default: int, positive: bool = False) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")
    if positive and value <= 0:
        raise ConfigurationError(f"{name} must be greater than zero, got {value}")
    return value


class ConnectionConfig(BaseModel):
    """InfluxDB connection parameters, read once at startup."""
    url: str = ""
    org: str = ""
    bucket: str = ""
    token: str = ""

    class Config:
        """Pydantic config."""
        frozen = True

    ENV_VARS: ClassVar[Dict[str, str]] = {
        "url": "INFLUXDB_URL",
        "org": "INFLUXDB_ORG",
        "bucket": "INFLUXDB_BUCKET",
        "token": "INFLUXDB_TOKEN",
    }

    @classmethod
    def from_env(cls) -> "ConnectionConfig":
        """Create from environment variables. Absent values become empty strings."""
        _load_env_file()
        return cls(**{field: os.getenv(var, "") for field, var in cls.ENV_VARS.items()})

    def missing(self) -> List[str]:
        """Environment variable names whose value is empty."""
        return [var for field, var in self.ENV_VARS.items() if not getattr(self, field).strip()]

    def require_complete(self) -> "ConnectionConfig":
        """Fail fast instead of querying with invalid credentials."""
        missing = self.missing()
        if missing:
            raise ConfigurationError(
                f"Missing InfluxDB connection settings: {', '.join(missing)}"
            )
        return self


class QueryConfig(BaseModel):
    """Shape of the per-metric Flux query."""
    measurement: str = Field(default="ac_remote", description="_measurement to filter on")
    device_tag: str = Field(default="client_id", description="Tag identifying the device")
    device_id: str = Field(default="ESP32Client-4f1da0d8")
    range_hours: int = Field(default=24, description="Relative query window")
    window_minutes: int = Field(default=5, description="Downsampling window")
    aggregate_fn: str = "mean"
    timeout_ms: int = Field(default=10_000, description="Query timeout in milliseconds")

    @classmethod
    def from_env(cls) -> "QueryConfig":
        """Create from environment variables."""
        _load_env_file()
        defaults = cls()
        return cls(
            measurement=os.getenv("INFLUXDB_MEASUREMENT") or defaults.measurement,
            device_tag=os.getenv("INFLUXDB_DEVICE_TAG") or defaults.device_tag,
            device_id=os.getenv("INFLUXDB_DEVICE_ID") or defaults.device_id,
            timeout_ms=_env_int("INFLUXDB_TIMEOUT_MS", defaults.timeout_ms),
        )


DEFAULT_METRICS = [
    MetricStyle(metric=MetricType.TEMPERATURE, stroke_color="#8884d8", unit="℃"),
    MetricStyle(metric=MetricType.HUMIDITY, stroke_color="#ff7300", unit="%"),
    MetricStyle(metric=MetricType.PRESSURE, stroke_color="#82ca9d", unit="hPa"),
]


class ServiceConfig(BaseModel):
    """Complete dashboard configuration."""
    connection: ConnectionConfig = Field(default_factory=ConnectionConfig)
    query: QueryConfig = Field(default_factory=QueryConfig)
    metrics: List[MetricStyle] = Field(default_factory=list)

    # Polling (in seconds)
    poll_interval_seconds: float = Field(default=60, gt=0, description="Time between fetch cycles")
    shutdown_grace_seconds: float = Field(default=5, description="Wait for an in-flight cycle on stop")
    loading_refresh_seconds: int = Field(default=2, description="Page refresh while a cycle is running")

    # Presentation
    title: str = "ENV Monitor"
    display_timezone: str = "Asia/Tokyo"
    plotly_js_url: str = "https://cdn.plot.ly/plotly-2.35.2.min.js"

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # Logging
    log_level: str = "INFO"

    class Config:
        """Pydantic config."""
        validate_assignment = True

    @property
    def metric_types(self) -> List[MetricType]:
        return [m.metric for m in self.metrics]

    def get_display_tz(self) -> ZoneInfo:
        try:
            return ZoneInfo(self.display_timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise ConfigurationError(f"Unknown display timezone: {self.display_timezone!r}")

    def get_metric_style(self, metric: MetricType) -> Optional[MetricStyle]:
        for style in self.metrics:
            if style.metric == metric:
                return style
        return None

    @classmethod
    def create_default(cls) -> "ServiceConfig":
        """Create default configuration with all metrics."""
        return cls(metrics=[style.model_copy() for style in DEFAULT_METRICS])

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        """Create default configuration overridden by environment variables."""
        _load_env_file()
        config = cls.create_default()
        config.connection = ConnectionConfig.from_env()
        config.query = QueryConfig.from_env()
        config.poll_interval_seconds = _env_int("POLL_INTERVAL_SECONDS", 60, positive=True)
        config.display_timezone = os.getenv("DISPLAY_TIMEZONE") or config.display_timezone
        config.host = os.getenv("DASHBOARD_HOST") or config.host
        config.port = _env_int("DASHBOARD_PORT", config.port)
        config.log_level = os.getenv("LOG_LEVEL") or config.log_level
        return config
