"""Main CLI interface."""

import asyncio
import logging
from typing import Optional
import typer
import structlog
import uvicorn
from rich.console import Console
from rich.table import Table

from ..models.config import ConfigurationError, ConnectionConfig, ServiceConfig
from ..models.state import DashboardState
from ..data.repository import InfluxMetricRepository
from ..core.service import PollController
from ..generators.chart import latest_displayable
from ..web.app import create_app
from ..web.view import DashboardView

console = Console()
app = typer.Typer(help="Environmental monitor dashboard")

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Bind port"),
    interval: Optional[float] = typer.Option(
        None,
        "--interval",
        help="Seconds between fetch cycles"
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level")
):
    """Serve the auto-refreshing dashboard."""
    config = _load_config(host=host, port=port, interval=interval, log_level=log_level)
    _setup_logging(config.log_level)

    try:
        dashboard = create_app(config)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(1)

    console.print("[green]Starting dashboard...[/green]")
    console.print(f"InfluxDB: {config.connection.url} (org {config.connection.org}, bucket {config.connection.bucket})")
    console.print(f"Metrics: {', '.join(m.value for m in config.metric_types)}")
    console.print(f"Listening on http://{config.host}:{config.port}")

    uvicorn.run(dashboard, host=config.host, port=config.port, log_level=config.log_level.lower())


@app.command()
def snapshot(
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level")
):
    """Run one fetch cycle and print the latest value of each metric."""
    config = _load_config(log_level=log_level)
    _setup_logging(config.log_level)

    try:
        config.connection.require_complete()
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(1)

    state = asyncio.run(_run_snapshot(config))
    view = DashboardView(config)

    table = Table(title=f"Snapshot (updated at {view.updated_at(state)})")
    table.add_column("Metric", style="cyan")
    table.add_column("Latest", style="green")
    table.add_column("Points", style="yellow")
    table.add_column("Gaps", style="magenta")

    for style in config.metrics:
        series = state.get_series(style.metric)
        gaps = sum(1 for p in series.points if p.value is None)
        table.add_row(
            style.title,
            f"{latest_displayable(series.points)}{style.unit}" if series.present_values() else "No data",
            str(len(series.points)),
            str(gaps)
        )

    console.print(table)

    if state.error:
        console.print("[red]Failed to fetch data.[/red]")
        raise typer.Exit(1)


@app.command("check-config")
def check_config():
    """Show which InfluxDB connection variables are set."""
    connection = ConnectionConfig.from_env()
    missing = set(connection.missing())

    console.print("[green]Environment Variable Status:[/green]")
    for var_name in ConnectionConfig.ENV_VARS.values():
        if var_name in missing:
            console.print(f"✗ {var_name}: [red]Missing[/red]")
        else:
            console.print(f"✓ {var_name}: [green]Set[/green]")

    if missing:
        console.print("\n[red]Dashboard cannot connect to InfluxDB[/red]")
        console.print("Please set the missing environment variables in your .env file")
        raise typer.Exit(1)


async def _run_snapshot(config: ServiceConfig) -> DashboardState:
    """Run a single cycle without the polling timer."""
    repository = InfluxMetricRepository(config.connection, config.query)
    controller = PollController(config, repository)

    try:
        await repository.initialize()
        return await controller.run_cycle()
    finally:
        await repository.close()


def _load_config(
    host: Optional[str] = None,
    port: Optional[int] = None,
    interval: Optional[float] = None,
    log_level: Optional[str] = None
) -> ServiceConfig:
    """Load configuration from the environment, then apply CLI overrides."""
    try:
        config = ServiceConfig.from_env()
        config.get_display_tz()
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(1)

    if host:
        config.host = host
    if port:
        config.port = port
    if interval is not None:
        if interval <= 0:
            console.print(f"[red]Configuration error: --interval must be greater than zero, got {interval}[/red]")
            raise typer.Exit(1)
        config.poll_interval_seconds = interval
    if log_level:
        config.log_level = log_level

    return config


def _setup_logging(log_level: str) -> None:
    """Setup logging configuration."""
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(level=level)
    logging.getLogger().setLevel(level)


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
