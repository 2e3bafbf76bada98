"""Data models and types for the dashboard."""

from .sensor import ChartPoint, MetricSeries, MetricType, MetricStyle
from .state import DashboardState, ViewStatus
from .config import (
    ConfigurationError,
    ConnectionConfig,
    QueryConfig,
    ServiceConfig,
)

__all__ = [
    "ChartPoint",
    "MetricSeries",
    "MetricType",
    "MetricStyle",
    "DashboardState",
    "ViewStatus",
    "ConfigurationError",
    "ConnectionConfig",
    "QueryConfig",
    "ServiceConfig",
]
