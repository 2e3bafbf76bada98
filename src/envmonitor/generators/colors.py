"""Color helpers for chart styling."""

from typing import Tuple

# Area fill opacity relative to the stroke color
FILL_ALPHA = 0.3


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    """Convert hex color string to RGB tuple."""
    hex_color = hex_color.lstrip('#')
    if len(hex_color) == 3:
        hex_color = "".join(c * 2 for c in hex_color)
    if len(hex_color) != 6:
        raise ValueError(f"Invalid hex color: #{hex_color}")
    return tuple(int(hex_color[i:i+2], 16) for i in (0, 2, 4))


def to_rgba(hex_color: str, alpha: float = FILL_ALPHA) -> str:
    """CSS ``rgba()`` string for a hex color, e.g. ``#8884d8`` -> ``rgba(136, 132, 216, 0.3)``."""
    r, g, b = hex_to_rgb(hex_color)
    alpha = max(0.0, min(1.0, alpha))  # Clamp to [0, 1]
    return f"rgba({r}, {g}, {b}, {alpha:g})"
