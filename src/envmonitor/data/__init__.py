"""Data access layer for the dashboard."""

from .repository import InfluxMetricRepository, MetricFetchError, build_flux_query

__all__ = ["InfluxMetricRepository", "MetricFetchError", "build_flux_query"]
