"""Dashboard view state."""

from datetime import datetime
from enum import Enum
from typing import Dict, Iterable, Optional
from pydantic import BaseModel, Field

from .sensor import MetricSeries, MetricType


class ViewStatus(str, Enum):
    """What the root view shows."""
    LOADING = "loading"
    ERROR = "error"
    READY = "ready"


class DashboardState(BaseModel):
    """Immutable snapshot published by the poll controller at cycle boundaries.

    The controller is the only writer; it replaces the whole snapshot rather
    than mutating it, so readers always see a consistent cycle.
    """
    loading: bool = True
    error: bool = False
    series: Dict[MetricType, MetricSeries] = Field(default_factory=dict)
    last_cycle_started: Optional[datetime] = None
    last_cycle_finished: Optional[datetime] = None
    cycles_completed: int = 0

    class Config:
        """Pydantic config."""
        frozen = True

    @property
    def status(self) -> ViewStatus:
        if self.loading:
            return ViewStatus.LOADING
        if self.error:
            return ViewStatus.ERROR
        return ViewStatus.READY

    def get_series(self, metric: MetricType) -> MetricSeries:
        """Series for a metric, empty if it was never fetched."""
        return self.series.get(metric) or MetricSeries.empty(metric)

    @classmethod
    def initial(cls, metrics: Iterable[MetricType]) -> "DashboardState":
        return cls(series={m: MetricSeries.empty(m) for m in metrics})
