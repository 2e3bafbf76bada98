"""FastAPI application serving the dashboard."""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Dict, Optional
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
import structlog

from ..models.config import ServiceConfig
from ..models.state import DashboardState
from ..data.repository import InfluxMetricRepository
from ..core.service import PollController
from .view import DashboardView

logger = structlog.get_logger()

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def state_payload(state: DashboardState, view: DashboardView) -> Dict[str, Any]:
    """JSON-friendly snapshot of the dashboard state."""
    return {
        "status": state.status.value,
        "loading": state.loading,
        "error": state.error,
        "updated_at": view.updated_at(state),
        "cycles_completed": state.cycles_completed,
        "last_cycle_finished": (
            state.last_cycle_finished.isoformat() if state.last_cycle_finished else None
        ),
        "series": {
            metric.value: [point.model_dump() for point in series.points]
            for metric, series in state.series.items()
        },
    }


def create_app(
    config: ServiceConfig,
    controller: Optional[PollController] = None
) -> FastAPI:
    """Build the app. Polling runs for the lifetime of the app.

    Raises:
        ConfigurationError: if the InfluxDB connection settings are incomplete
    """
    if controller is None:
        config.connection.require_complete()
        repository = InfluxMetricRepository(config.connection, config.query)
        controller = PollController(config, repository)

    view = DashboardView(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await controller.start()
        try:
            yield
        finally:
            await controller.stop()

    app = FastAPI(title=config.title, version="0.1.0", lifespan=lifespan)
    app.state.controller = controller
    app.state.view = view

    @app.get("/", response_class=HTMLResponse)
    async def dashboard(request: Request):
        context = view.build_context(controller.state)
        return templates.TemplateResponse(request, "dashboard.html", context)

    @app.get("/api/state")
    async def api_state():
        return state_payload(controller.state, view)

    @app.get("/health")
    async def health():
        state = controller.state
        return {
            "ok": controller.running,
            "status": state.status.value,
            "cycles_completed": state.cycles_completed,
        }

    logger.info("Dashboard app created", title=config.title, metrics=len(config.metrics))
    return app
