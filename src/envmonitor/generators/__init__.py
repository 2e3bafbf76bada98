"""Chart generation modules."""

from .chart import ChartRenderer, ChartPanel, latest_displayable, value_range, NO_DATA
from .colors import hex_to_rgb, to_rgba

__all__ = [
    "ChartRenderer",
    "ChartPanel",
    "latest_displayable",
    "value_range",
    "NO_DATA",
    "hex_to_rgb",
    "to_rgba",
]
