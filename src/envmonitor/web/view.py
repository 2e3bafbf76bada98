"""Root view composing the three metric charts."""

from typing import Any, Dict, List, Optional
import structlog

from ..models.config import ServiceConfig
from ..models.sensor import MetricType
from ..models.state import DashboardState, ViewStatus
from ..generators.chart import ChartRenderer, NO_DATA
from ..core.timezone_utils import UPDATED_AT_FORMAT, format_local_datetime

logger = structlog.get_logger()

# The other metrics are assumed to share its timestamps
REFERENCE_METRIC = MetricType.TEMPERATURE


class DashboardView:
    """Turns a state snapshot into the template context. Never mutates state."""

    def __init__(self, config: ServiceConfig, renderer: Optional[ChartRenderer] = None):
        self.config = config
        self.display_tz = config.get_display_tz()
        self.renderer = renderer or ChartRenderer(self.display_tz)

    def updated_at(self, state: DashboardState) -> str:
        """Time of the most recent reference point, gap or not."""
        last = state.get_series(REFERENCE_METRIC).last_point
        if last is None:
            return NO_DATA
        return format_local_datetime(last.time, self.display_tz, UPDATED_AT_FORMAT)

    def refresh_seconds(self, state: DashboardState) -> int:
        if state.status == ViewStatus.LOADING:
            return self.config.loading_refresh_seconds
        return max(1, int(self.config.poll_interval_seconds))

    def build_panels(self, state: DashboardState) -> List[Dict[str, Any]]:
        panels = []
        for style in self.config.metrics:
            panel = self.renderer.render_style(style, state.get_series(style.metric))
            panels.append({
                "metric": style.metric.value,
                "panel": panel,
                "chart_html": panel.to_html(div_id=f"chart-{style.metric.value}"),
            })
        return panels

    def build_context(self, state: DashboardState) -> Dict[str, Any]:
        status = state.status
        context = {
            "title": self.config.title,
            "status": status.value,
            "refresh_seconds": self.refresh_seconds(state),
            "plotly_js_url": self.config.plotly_js_url,
            "updated_at": None,
            "panels": [],
        }
        if status == ViewStatus.READY:
            context["updated_at"] = self.updated_at(state)
            context["panels"] = self.build_panels(state)
        return context
