"""Poll controller keeping the dashboard state fresh."""

from typing import Dict, List, Optional
from datetime import datetime, timezone
import asyncio
import time
import structlog

from ..models.config import ServiceConfig
from ..models.sensor import MetricSeries, MetricType
from ..models.state import DashboardState
from ..data.repository import InfluxMetricRepository

logger = structlog.get_logger()


class PollController:
    """Fetches every configured metric on start and on a fixed interval.

    Owns the only writable copy of :class:`DashboardState`. Each cycle
    publishes at most two snapshots: one when it starts (loading) and one
    after every fetch has settled.
    """

    def __init__(self, config: ServiceConfig, repository: InfluxMetricRepository):
        """Initialize the controller."""
        self.config = config
        self.repository = repository
        self.metrics: List[MetricType] = config.metric_types
        self._state = DashboardState.initial(self.metrics)

        # Service state
        self._running = False
        self._stopped = False
        self._timer_task: Optional[asyncio.Task] = None
        self._cycle_task: Optional[asyncio.Task] = None
        self.skipped_ticks = 0

        logger.info(
            "Poll controller initialized",
            metrics=[m.value for m in self.metrics],
            interval=config.poll_interval_seconds
        )

    @property
    def state(self) -> DashboardState:
        """Latest published snapshot."""
        return self._state

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start polling. The first cycle is triggered immediately."""
        if self._running:
            logger.warning("Poll controller is already running")
            return

        self._running = True
        self._stopped = False

        try:
            await self.repository.initialize()
            self._timer_task = asyncio.create_task(self._poll_loop())
            logger.info("Poll controller started")
        except Exception as e:
            self._running = False
            logger.error("Failed to start poll controller", error=str(e))
            raise

    async def stop(self) -> None:
        """Stop polling and release the repository."""
        if not self._running:
            return

        self._running = False
        self._stopped = True

        # Cancel the timer so no further cycles are scheduled
        if self._timer_task is not None:
            self._timer_task.cancel()
            await asyncio.gather(self._timer_task, return_exceptions=True)
            self._timer_task = None

        # Give an in-flight cycle a chance to settle, its results are discarded
        cycle = self._cycle_task
        if cycle is not None and not cycle.done():
            _, pending = await asyncio.wait({cycle}, timeout=self.config.shutdown_grace_seconds)
            if pending:
                cycle.cancel()
                await asyncio.gather(cycle, return_exceptions=True)
        self._cycle_task = None

        await self.repository.close()
        logger.info("Poll controller stopped")

    async def run_cycle(self) -> DashboardState:
        """Fetch all metrics concurrently and publish the outcome."""
        started = time.monotonic()
        self._publish(
            loading=True,
            error=False,
            last_cycle_started=datetime.now(timezone.utc)
        )

        results = await asyncio.gather(
            *[self.repository.fetch(metric) for metric in self.metrics],
            return_exceptions=True
        )

        if self._stopped:
            logger.info("Discarding results of cycle finished after stop")
            return self._state

        series: Dict[MetricType, MetricSeries] = dict(self._state.series)
        failed = []
        for metric, result in zip(self.metrics, results):
            if isinstance(result, BaseException):
                failed.append(metric.value)
                logger.error(
                    "Metric fetch failed",
                    metric=metric.value,
                    error=str(result),
                    error_type=type(result).__name__
                )
            else:
                series[metric] = result

        self._publish(
            loading=False,
            error=bool(failed),
            series=series,
            last_cycle_finished=datetime.now(timezone.utc),
            cycles_completed=self._state.cycles_completed + 1
        )

        logger.info(
            "Poll cycle completed",
            duration=round(time.monotonic() - started, 3),
            failed=failed,
            points={m.value: len(s.points) for m, s in series.items()}
        )
        return self._state

    def _publish(self, **changes) -> None:
        """Replace the snapshot; readers never see a half-applied cycle."""
        self._state = self._state.model_copy(update=changes)

    async def _poll_loop(self) -> None:
        """Timer task: trigger a cycle now and then every interval."""
        while self._running:
            try:
                if self._cycle_task is not None and not self._cycle_task.done():
                    self.skipped_ticks += 1
                    logger.warning(
                        "Previous poll cycle still running, skipping tick",
                        skipped_ticks=self.skipped_ticks
                    )
                else:
                    self._cycle_task = asyncio.create_task(self._guarded_cycle())
                await asyncio.sleep(self.config.poll_interval_seconds)
            except asyncio.CancelledError:
                break

    async def _guarded_cycle(self) -> None:
        try:
            await self.run_cycle()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error("Error in poll cycle", error=str(e))
            if not self._stopped:
                self._publish(loading=False, error=True)
