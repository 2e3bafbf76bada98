"""Sensor data models."""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field


class MetricType(str, Enum):
    """Tracked metrics. The value is the InfluxDB ``_field`` name."""
    TEMPERATURE = "temperature"
    HUMIDITY = "humidity"
    PRESSURE = "pressure"


class MetricStyle(BaseModel):
    """Static per-metric display configuration."""
    metric: MetricType
    stroke_color: str = Field(description="Line color as #rrggbb")
    unit: str = ""
    display_name: Optional[str] = None
    fill_color: Optional[str] = Field(default=None, description="Area fill, defaults to the stroke at 0.3 alpha")

    @property
    def title(self) -> str:
        """Get the chart title."""
        return self.display_name or self.metric.value.capitalize()


class ChartPoint(BaseModel):
    """One sample. ``value`` is None for a sensor gap."""
    time: int = Field(description="Epoch milliseconds")
    value: Optional[float] = None

    class Config:
        """Pydantic config."""
        frozen = True


class MetricSeries(BaseModel):
    """Ordered points for one metric, in the order the database returned them."""
    metric: MetricType
    points: List[ChartPoint] = Field(default_factory=list)

    class Config:
        """Pydantic config."""
        frozen = True

    @property
    def is_empty(self) -> bool:
        return not self.points

    @property
    def last_point(self) -> Optional[ChartPoint]:
        return self.points[-1] if self.points else None

    def present_values(self) -> List[float]:
        """Values of all points that are not gaps."""
        return [p.value for p in self.points if p.value is not None]

    @classmethod
    def empty(cls, metric: MetricType) -> "MetricSeries":
        return cls(metric=metric, points=[])
