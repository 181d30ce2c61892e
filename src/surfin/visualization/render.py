"""Entry points for rendering forecasts and spot listings."""

from typing import Iterable, Optional, Sequence

from surfin.forecast.models import Forecast
from surfin.spots.models import Spot
from surfin.visualization.base import OutputFormat, Renderer
from surfin.visualization.markup import MarkupRenderer
from surfin.visualization.terminal import TerminalRenderer
from surfin.visualization.view import forecast_view, message_view, spots_view

RENDERERS: dict[OutputFormat, type[Renderer]] = {
    OutputFormat.TERMINAL: TerminalRenderer,
    OutputFormat.MARKUP: MarkupRenderer,
}


def get_renderer(output_format: OutputFormat | str) -> Renderer:
    """Renderer for a format ("terminal" or "markup").

    Raises:
        ValueError: If the format is unknown
    """
    return RENDERERS[OutputFormat(output_format)]()


def render(
    forecast: Forecast,
    output_format: OutputFormat | str = OutputFormat.TERMINAL,
    spot: Optional[Spot] = None,
    notes: Sequence[str] = (),
) -> str:
    """Render a classified forecast.

    Example:
        >>> print(render(result.forecast, "terminal", spot=folly))
        Folly Beach  #450  units: us  updated 2024-06-01 12:00 UTC
        ...
    """
    return get_renderer(output_format).render(forecast_view(forecast, spot, notes))


def render_spots(
    spots: Iterable[Spot],
    output_format: OutputFormat | str = OutputFormat.TERMINAL,
    title: Optional[str] = None,
) -> str:
    """Render a "name : id" listing of spots."""
    return get_renderer(output_format).render(spots_view(spots, title))


def render_message(
    lines: Sequence[str],
    output_format: OutputFormat | str = OutputFormat.TERMINAL,
    title: str = "surfin",
) -> str:
    """Render a short message, e.g. an error shown instead of a forecast."""
    return get_renderer(output_format).render(message_view(lines, title))
