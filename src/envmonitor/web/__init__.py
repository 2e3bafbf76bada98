"""Browser-facing dashboard."""

from .app import create_app
from .view import DashboardView

__all__ = ["create_app", "DashboardView"]
