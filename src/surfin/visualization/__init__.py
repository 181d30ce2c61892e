"""Rendering of forecasts for terminals and browsers.

Forecasts are first turned into a format-agnostic View (lines of styled
spans), then encoded by a backend: ANSI codes for terminals, CSS classes
for HTML.
"""

from .base import OutputFormat, Renderer
from .colors import (
    RATING_COLORS,
    color_to_ansi,
    color_to_hex,
    css_class,
    rating_legend,
)
from .markup import MarkupRenderer
from .render import get_renderer, render, render_message, render_spots
from .terminal import TerminalRenderer
from .view import (
    Line,
    Span,
    Style,
    View,
    compass_to_arrow,
    forecast_view,
    message_view,
    spots_view,
)

__all__ = [
    "Line",
    "MarkupRenderer",
    "OutputFormat",
    "RATING_COLORS",
    "Renderer",
    "Span",
    "Style",
    "TerminalRenderer",
    "View",
    "color_to_ansi",
    "color_to_hex",
    "compass_to_arrow",
    "css_class",
    "forecast_view",
    "get_renderer",
    "message_view",
    "rating_legend",
    "render",
    "render_message",
    "render_spots",
    "spots_view",
]
