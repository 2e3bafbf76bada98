"""Area chart rendering for a single metric."""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
from zoneinfo import ZoneInfo
import plotly.graph_objects as go
import plotly.io as pio
import structlog

from ..models.sensor import ChartPoint, MetricSeries, MetricStyle
from ..core.timezone_utils import TICK_FORMAT, format_local_datetime, to_local_naive
from .colors import to_rgba

logger = structlog.get_logger()

# Shown instead of a number when no point carries a value
NO_DATA = "N/A"

CHART_HEIGHT = 400


def latest_displayable(points: Sequence[ChartPoint]) -> str:
    """Most recent present value formatted to one decimal, skipping trailing gaps."""
    for point in reversed(points):
        if point.value is not None:
            return f"{point.value:.1f}"
    return NO_DATA


def value_range(
    points: Sequence[ChartPoint],
    padding_ratio: float = 0.05
) -> Optional[Tuple[float, float]]:
    """Padded min/max of present values, or None if the series has no values.

    Gaps are ignored so they can never pull the axis down to zero.
    """
    values = [p.value for p in points if p.value is not None]
    if not values:
        return None

    low, high = min(values), max(values)
    span = high - low
    pad = span * padding_ratio if span else max(abs(high) * padding_ratio, 1.0)
    return low - pad, high + pad


def time_range(points: Sequence[ChartPoint]) -> Optional[Tuple[int, int]]:
    """Actual min/max timestamp of the series in epoch ms."""
    if not points:
        return None
    times = [p.time for p in points]
    return min(times), max(times)


@dataclass
class ChartPanel:
    """Everything the page needs to show one metric."""
    title: str
    unit: str
    latest: str
    fill_color: str
    figure: go.Figure

    @property
    def has_data(self) -> bool:
        return self.latest != NO_DATA

    @property
    def latest_label(self) -> str:
        return f"{self.latest}{self.unit}"

    def to_html(self, div_id: Optional[str] = None) -> str:
        """Chart fragment; plotly.js itself is loaded once by the page."""
        return pio.to_html(
            self.figure,
            full_html=False,
            include_plotlyjs=False,
            div_id=div_id,
            config={"displayModeBar": False, "responsive": True},
        )


class ChartRenderer:
    """Builds plotly area charts in the display timezone."""

    def __init__(self, display_tz: ZoneInfo, height: int = CHART_HEIGHT):
        """Initialize the renderer."""
        self.display_tz = display_tz
        self.height = height

    def render(
        self,
        title: str,
        series: MetricSeries,
        stroke_color: str,
        fill_color: str,
        unit: str
    ) -> ChartPanel:
        """Render one metric as an area chart with its latest-value summary."""
        points = series.points
        latest = latest_displayable(points)

        if latest == NO_DATA:
            logger.debug("No displayable value", metric=series.metric.value, points=len(points))

        figure = self._build_figure(title, points, stroke_color, fill_color, unit)
        return ChartPanel(
            title=title,
            unit=unit,
            latest=latest,
            fill_color=fill_color,
            figure=figure,
        )

    def render_style(self, style: MetricStyle, series: MetricSeries) -> ChartPanel:
        """Render using the static per-metric styling."""
        return self.render(
            style.title,
            series,
            style.stroke_color,
            style.fill_color or to_rgba(style.stroke_color),
            style.unit,
        )

    def _build_figure(
        self,
        title: str,
        points: List[ChartPoint],
        stroke_color: str,
        fill_color: str,
        unit: str
    ) -> go.Figure:
        tz = self.display_tz

        figure = go.Figure(
            go.Scatter(
                x=[to_local_naive(p.time, tz) for p in points],
                # None is drawn as a gap, never as zero
                y=[p.value for p in points],
                customdata=[format_local_datetime(p.time, tz) for p in points],
                name=title,
                mode="lines",
                line=dict(color=stroke_color, shape="spline"),
                fill="tozeroy",
                fillcolor=fill_color,
                connectgaps=False,
                hovertemplate="%{customdata}<br>%{y:.1f}" + unit + "<extra></extra>",
            )
        )

        figure.update_layout(
            height=self.height,
            margin=dict(l=10, r=10, t=10, b=30),
            showlegend=False,
            hovermode="closest",
            plot_bgcolor="white",
        )
        figure.update_xaxes(
            type="date",
            tickformat=TICK_FORMAT,
            showgrid=True,
            gridcolor="#e0e0e0",
            griddash="dash",
        )
        figure.update_yaxes(
            ticksuffix=unit,
            showgrid=True,
            gridcolor="#e0e0e0",
            griddash="dash",
        )

        x_span = time_range(points)
        if x_span:
            figure.update_xaxes(range=[to_local_naive(x_span[0], tz), to_local_naive(x_span[1], tz)])

        y_span = value_range(points)
        if y_span:
            figure.update_yaxes(range=list(y_span))

        return figure
