"""Metric repository backed by the InfluxDB query API."""

import asyncio
import time
from typing import Any, List, Optional
import aiohttp
import structlog
from influxdb_client.client.flux_csv_parser import FluxCsvParserException, FluxQueryException
from influxdb_client.client.influxdb_client_async import InfluxDBClientAsync
from influxdb_client.rest import ApiException

from ..models.config import ConnectionConfig, QueryConfig
from ..models.sensor import ChartPoint, MetricSeries, MetricType
from ..core.timezone_utils import to_epoch_ms

logger = structlog.get_logger()

# Transport and query failures that end a single fetch
FETCH_ERRORS = (
    ApiException,
    FluxQueryException,
    FluxCsvParserException,
    aiohttp.ClientError,
    asyncio.TimeoutError,
    OSError,
)


class MetricFetchError(Exception):
    """A single metric query failed."""

    def __init__(self, metric: MetricType, message: str):
        super().__init__(f"{metric.value}: {message}")
        self.metric = metric


def flux_string(value: str) -> str:
    """Quote a value as a Flux string literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def build_flux_query(bucket: str, metric: MetricType, query: QueryConfig) -> str:
    """Build the downsampled last-N-hours query for one field."""
    return (
        f"from(bucket: {flux_string(bucket)})\n"
        f"  |> range(start: -{query.range_hours}h)\n"
        f"  |> filter(fn: (r) => r._measurement == {flux_string(query.measurement)}"
        f" and r[{flux_string(query.device_tag)}] == {flux_string(query.device_id)})\n"
        f"  |> filter(fn: (r) => r._field == {flux_string(metric.value)})\n"
        f"  |> aggregateWindow(every: {query.window_minutes}m, fn: {query.aggregate_fn})\n"
        f"  |> yield(name: {flux_string(query.aggregate_fn)})\n"
    )


def record_to_point(metric: MetricType, record: Any) -> ChartPoint:
    """Convert one Flux record into a chart point, keeping gaps as None."""
    timestamp = record.get_time()
    if timestamp is None:
        raise MetricFetchError(metric, "row without _time")

    value = record.get_value()
    if value is None:
        return ChartPoint(time=to_epoch_ms(timestamp))

    try:
        return ChartPoint(time=to_epoch_ms(timestamp), value=float(value))
    except (TypeError, ValueError):
        raise MetricFetchError(metric, f"non-numeric _value {value!r}")


class InfluxMetricRepository:
    """Fetches one metric series per call from InfluxDB."""

    def __init__(
        self,
        connection: ConnectionConfig,
        query: QueryConfig,
        query_api: Optional[Any] = None
    ):
        """Initialize the repository.

        Args:
            connection: InfluxDB URL, organization, bucket and token
            query: Measurement, device filter and aggregation settings
            query_api: Pre-built query API; the client is created lazily otherwise
        """
        self.connection = connection
        self.query = query
        self._client: Optional[InfluxDBClientAsync] = None
        self._query_api = query_api

    async def initialize(self) -> None:
        """Create the async client. Must run inside the event loop."""
        if self._query_api is not None:
            return

        self._client = InfluxDBClientAsync(
            url=self.connection.url,
            token=self.connection.token,
            org=self.connection.org,
            timeout=self.query.timeout_ms,
        )
        self._query_api = self._client.query_api()
        logger.info(
            "InfluxDB client initialized",
            url=self.connection.url,
            org=self.connection.org,
            bucket=self.connection.bucket
        )

    async def fetch(self, metric: MetricType) -> MetricSeries:
        """Fetch the downsampled series for ``metric``.

        Raises:
            MetricFetchError: if the query is rejected or the database is unreachable
        """
        if self._query_api is None:
            await self.initialize()

        flux = build_flux_query(self.connection.bucket, metric, self.query)
        logger.debug("Executing Flux query", metric=metric.value, query=flux)

        started = time.monotonic()
        points: List[ChartPoint] = []
        try:
            records = await self._query_api.query_stream(flux, org=self.connection.org)
            try:
                async for record in records:
                    points.append(record_to_point(metric, record))
            finally:
                # Releases the HTTP response when iteration stops early
                await records.aclose()
        except FETCH_ERRORS as e:
            message = e.message if isinstance(e, FluxQueryException) else str(e)
            logger.error("Query error", metric=metric.value, error=message)
            raise MetricFetchError(metric, message) from e

        logger.debug(
            "Retrieved metric series",
            metric=metric.value,
            count=len(points),
            gaps=sum(1 for p in points if p.value is None),
            duration=round(time.monotonic() - started, 3)
        )
        return MetricSeries(metric=metric, points=points)

    async def close(self) -> None:
        """Close the client connection."""
        if self._client is not None:
            try:
                await self._client.close()
            except Exception as e:
                logger.warning("Error closing InfluxDB client", error=str(e))
            self._client = None
            self._query_api = None
            logger.info("InfluxDB client closed")
