"""
Environmental Monitor Dashboard

Polls InfluxDB for temperature, humidity and pressure and serves them as
auto-refreshing area charts.
"""

from .core import PollController
from .models import ServiceConfig, MetricType, ChartPoint, MetricSeries

__version__ = "0.1.0"
__all__ = ["PollController", "ServiceConfig", "MetricType", "ChartPoint", "MetricSeries"]
