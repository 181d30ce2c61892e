"""Format-agnostic view model for forecasts and spot listings.

A View is an ordered sequence of lines, each a sequence of styled spans.
Backends (terminal, markup) only decide how a Span's style is encoded;
everything about layout, wording and colors is decided here.

Layout of a forecast view (90 columns wide):
- header: spot name, id, units, fetch time, rating legend
- swell graph: breaking height of every period, colored by rating
- one bordered table per local day: time, rating, surf, swell trains,
  wind, air temperature
"""

from dataclasses import dataclass
from datetime import date, datetime
from itertools import groupby
from typing import Iterable, Optional, Sequence

from surfin.forecast.models import Forecast, ForecastPeriod, SwellComponent
from surfin.forecast.rating import Color, rating_label
from surfin.spots.models import Spot
from surfin.visualization.colors import rating_legend

# Total width of the output. Narrower terminals wrap, so keep it small.
VIEWPORT_WIDTH = 90
# Viewport width minus the border chars
INTERIOR_WIDTH = VIEWPORT_WIDTH - 2

GRAPH_HEIGHT = 10
# Headroom above the tallest wave, by swell unit
GRAPH_BUFFER = {"ft": 1.0, "m": 0.5}

DAY_LEGEND_WIDTH = 11
# Three-hourly periods give 8 columns a day; longer days wrap into more tables
DAY_MAX_COLUMNS = 8

NO_DATA_TEXT = "No forecast data available"
NO_SPOTS_TEXT = "No spots available"

LINE_VERT = "│"
LINE_HORIZONTAL = "─"
CORNER_TOP_LEFT = "┌"
CORNER_TOP_RIGHT = "┐"
CORNER_BTM_LEFT = "└"
CORNER_BTM_RIGHT = "┘"
TEE_LEFT = "┤"
TEE_RIGHT = "├"

# Arrow points the way the wind/swell travels (provider gives where it comes from)
COMPASS_ARROWS = {
    "N": "↓",
    "NNE": "↙", "NE": "↙", "ENE": "↙",
    "E": "←",
    "ESE": "↖", "SE": "↖", "SSE": "↖",
    "S": "↑",
    "SSW": "↗", "SW": "↗", "WSW": "↗",
    "W": "→",
    "WNW": "↘", "NW": "↘", "NNW": "↘",
}


@dataclass(frozen=True)
class Style:
    """Style attributes of a span."""

    fg: Optional[Color] = None
    bold: bool = False

    @property
    def is_plain(self) -> bool:
        return self.fg is None and not self.bold


PLAIN = Style()


@dataclass(frozen=True)
class Span:
    """A contiguous piece of text with one style. Never contains newlines."""

    text: str
    style: Style = PLAIN


Line = tuple[Span, ...]


@dataclass(frozen=True)
class View:
    """Styled lines plus a document title."""

    lines: tuple[Line, ...]
    title: str = ""

    def plain_text(self) -> str:
        """Text content without any styling."""
        return "\n".join("".join(span.text for span in line) for line in self.lines)


def compass_to_arrow(compass_direction: str) -> str:
    """Arrow for a 16-point compass direction ("·" if unknown).

    Examples:
        >>> compass_to_arrow("NE")
        '↙'
    """
    return COMPASS_ARROWS.get(compass_direction.upper(), "·")


def format_time(value: datetime) -> str:
    """12-hour clock label, e.g. "3pm"."""
    hour = value.hour % 12 or 12
    suffix = "am" if value.hour < 12 else "pm"
    return f"{hour}{suffix}"


# =============================================================================
# FORECAST VIEW
# =============================================================================

def forecast_view(
    forecast: Forecast,
    spot: Optional[Spot] = None,
    notes: Sequence[str] = (),
) -> View:
    """Build the view of a classified forecast.

    Args:
        forecast: Forecast whose periods carry a color
        spot: Spot the forecast belongs to (for the header)
        notes: Extra lines shown under the header (e.g. stale warnings)

    Returns:
        View; an empty forecast yields a "no data" placeholder
    """
    title = spot.canonical_name if spot is not None else f"Spot {forecast.spot_id}"
    lines: list[Line] = list(_header(forecast, title))

    for note in notes:
        lines.append((Span(note, Style(bold=True)),))

    lines.append(())
    if forecast.is_empty:
        lines.append((Span(NO_DATA_TEXT),))
        return View(tuple(lines), title=title)

    lines.extend(_graph(forecast.periods))
    for day, periods in _group_by_day(forecast.periods):
        for start in range(0, len(periods), DAY_MAX_COLUMNS):
            lines.append(())
            lines.extend(_day_table(day, periods[start:start + DAY_MAX_COLUMNS]))

    return View(tuple(lines), title=title)


def _header(forecast: Forecast, title: str) -> list[Line]:
    fetched = forecast.fetched_at.strftime("%Y-%m-%d %H:%M UTC")
    legend: list[Span] = [Span("Rating: ")]
    for i, (color, label, stars) in enumerate(rating_legend()):
        if i:
            legend.append(Span("  "))
        legend.append(Span(label, Style(fg=color, bold=True)))
        legend.append(Span(f" ({stars} faded stars)"))

    return [
        (
            Span(title, Style(bold=True)),
            Span(f"  #{forecast.spot_id}  units: {forecast.unit_system.value}  updated {fetched}"),
        ),
        tuple(legend),
    ]


def _group_by_day(periods: Iterable[ForecastPeriod]) -> list[tuple[date, list[ForecastPeriod]]]:
    """Split periods by local calendar day, keeping order."""
    return [
        (day, list(group))
        for day, group in groupby(periods, key=lambda p: p.local_timestamp.date())
    ]


# =============================================================================
# BORDERS
# =============================================================================

def _bordered(title: str, inner: list[Line]) -> list[Line]:
    """Wrap lines of width INTERIOR_WIDTH in a box with a tabbed title."""
    title = f" {title[:INTERIOR_WIDTH - 4]} "
    tab_edge = LINE_HORIZONTAL * len(title)

    top = f"{CORNER_TOP_LEFT}{tab_edge}{CORNER_TOP_RIGHT}"
    mid = f"{TEE_LEFT}{title}{TEE_RIGHT}"
    btm = f"{CORNER_BTM_LEFT}{tab_edge}{CORNER_BTM_RIGHT}"

    lines: list[Line] = [
        (Span(f"{top:^{VIEWPORT_WIDTH}}".rstrip()),),
        (Span(f"{CORNER_TOP_LEFT}{mid:─^{INTERIOR_WIDTH}}{CORNER_TOP_RIGHT}"),),
        (Span(f"{LINE_VERT}{btm:^{INTERIOR_WIDTH}}{LINE_VERT}"),),
    ]
    for line in inner:
        lines.append((Span(LINE_VERT),) + line + (Span(LINE_VERT),))
    lines.append((Span(f"{CORNER_BTM_LEFT}{LINE_HORIZONTAL * INTERIOR_WIDTH}{CORNER_BTM_RIGHT}"),))
    return lines


def _cell(text: str, width: int, color: Optional[Color] = None) -> Span:
    """Centered, clipped table cell."""
    return Span(f"{text[:width]:^{width}}", Style(fg=color))


def _blank(width: int) -> Span:
    return Span(" " * width)


# =============================================================================
# SWELL GRAPH
# =============================================================================

def _graph(periods: Sequence[ForecastPeriod]) -> list[Line]:
    """Bordered step graph of max breaking height across all periods."""
    unit = periods[0].swell.unit
    max_height = max(p.swell.max_breaking_height for p in periods) + GRAPH_BUFFER.get(unit, 1.0)

    legend_max = f"{max_height:.1f}"
    legend_min = f"{0.0:.1f}"
    number_width = max(len(legend_max), len(legend_min))
    legend_top = f" {legend_max:>{number_width}} {unit} "
    legend_bottom = f" {legend_min:>{number_width}} {unit} "
    legend_width = len(legend_top)

    # Every bin needs a column plus a boundary column
    max_bins = (INTERIOR_WIDTH - legend_width + 1) // 2
    periods = periods[:max_bins]

    num_bins = len(periods)
    bin_width = (INTERIOR_WIDTH - legend_width - (num_bins - 1)) // num_bins
    right_margin = INTERIOR_WIDTH - legend_width - (num_bins - 1) - num_bins * bin_width

    # Row index of each bin's top edge (0 = top of graph)
    levels = [
        GRAPH_HEIGHT - round(p.swell.max_breaking_height / max_height * GRAPH_HEIGHT)
        for p in periods
    ]

    lines: list[Line] = []
    for y in range(GRAPH_HEIGHT):
        if y == 0:
            legend = legend_top
        elif y == GRAPH_HEIGHT - 1:
            legend = legend_bottom
        else:
            legend = " " * legend_width

        line: list[Span] = [Span(legend)]
        for x, period in enumerate(periods):
            if x:
                line.append(Span(_boundary_char(levels[x - 1], levels[x], y), Style(fg=period.color)))
            line.append(Span(_bin_char(levels[x], y) * bin_width, Style(fg=period.color)))
        line.append(_blank(right_margin))
        lines.append(tuple(line))

    first = min(p.local_timestamp for p in periods)
    last = max(p.local_timestamp for p in periods)
    return _bordered(f"{first:%a %b %d} - {last:%a %b %d}", lines)


def _bin_char(level: int, y: int) -> str:
    if y == level:
        return LINE_HORIZONTAL
    if y > level:
        return "."
    return " "


def _boundary_char(previous: int, current: int, y: int) -> str:
    """Character joining two adjacent bins at row y."""
    if y < previous and y < current:
        return " "
    if y > previous and y > current:
        return "."
    if min(previous, current) < y < max(previous, current):
        return LINE_VERT
    if previous == current:
        return LINE_HORIZONTAL
    if current > previous:
        # Stepping down
        return CORNER_BTM_LEFT if y == current else CORNER_TOP_RIGHT
    # Stepping up
    return CORNER_TOP_LEFT if y == current else CORNER_BTM_RIGHT


# =============================================================================
# DAY TABLE
# =============================================================================

def _day_table(day: date, periods: Sequence[ForecastPeriod]) -> list[Line]:
    num_columns = len(periods)
    bin_width = (INTERIOR_WIDTH - num_columns - DAY_LEGEND_WIDTH) // num_columns
    right_margin = INTERIOR_WIDTH - DAY_LEGEND_WIDTH - num_columns * (bin_width + 1)

    def row(legend: str, cells: Iterable[Span]) -> Line:
        spans = [Span(f"{legend:^{DAY_LEGEND_WIDTH}}")]
        for cell in cells:
            spans.append(_blank(1))
            spans.append(cell)
        spans.append(_blank(right_margin))
        return tuple(spans)

    skip = (_blank(INTERIOR_WIDTH),)

    rows: list[Line] = [
        row("Time", (_cell(format_time(p.local_timestamp), bin_width) for p in periods)),
        row("Rating", (_cell(_stars(p), bin_width, p.color) for p in periods)),
        row("Surf", (_cell(_surf(p), bin_width, p.color) for p in periods)),
        skip,
    ]

    for label, pick in (("Primary", _primary), ("Secondary", _secondary)):
        components = [pick(p) for p in periods]
        if not any(components):
            continue
        units = [p.swell.unit for p in periods]
        rows.append(row("", (
            _cell(f"{c.height:.1f} {u}" if c else "", bin_width) for c, u in zip(components, units)
        )))
        rows.append(row(label, (
            _cell(f"{c.period:g}s" if c else "", bin_width) for c in components
        )))
        rows.append(row("Swell", (
            _cell(_direction(c.compass_direction, c.direction) if c else "", bin_width)
            for c in components
        )))
        rows.append(skip)

    rows.append(row("", (_cell(f"{p.wind.speed:g} {p.wind.unit}", bin_width) for p in periods)))
    rows.append(row("Wind", (
        _cell(_direction(p.wind.compass_direction, p.wind.direction), bin_width) for p in periods
    )))
    rows.append(skip)
    rows.append(row("Air", (
        _cell(f"{p.condition.temperature:g} {p.condition.unit}", bin_width) for p in periods
    )))

    return _bordered(f"{day:%a %b %d}", rows)


def _primary(period: ForecastPeriod) -> Optional[SwellComponent]:
    return period.swell.primary


def _secondary(period: ForecastPeriod) -> Optional[SwellComponent]:
    return period.swell.secondary


def _stars(period: ForecastPeriod) -> str:
    stars = "★" * period.solid_stars + "☆" * period.faded_stars
    if stars:
        return stars
    return rating_label(period.color) if period.color else "-"


def _surf(period: ForecastPeriod) -> str:
    swell = period.swell
    return f"{swell.min_breaking_height:g}-{swell.max_breaking_height:g}{swell.unit}"


def _direction(compass_direction: str, degrees: float) -> str:
    return f"{compass_to_arrow(compass_direction)} {degrees:.0f}°"


# =============================================================================
# SPOT LISTING
# =============================================================================

def spots_view(spots: Iterable[Spot], title: Optional[str] = None) -> View:
    """Aligned "name : id" listing, sorted by name.

    Args:
        spots: Spots to list
        title: Optional bold first line
    """
    spots = sorted(spots, key=lambda s: (s.canonical_name, s.id))
    lines: list[Line] = []
    if title:
        lines.append((Span(title, Style(bold=True)),))

    if not spots:
        lines.append((Span(NO_SPOTS_TEXT),))
        return View(tuple(lines), title=title or "Spots")

    name_width = max(len(s.canonical_name) for s in spots)
    for spot in spots:
        lines.append((
            Span(f"{spot.canonical_name:>{name_width}} : "),
            Span(str(spot.id), Style(bold=True)),
        ))
    return View(tuple(lines), title=title or "Spots")


def message_view(lines: Sequence[str], title: str = "surfin") -> View:
    """Plain message (errors, hints) with a bold first line."""
    view_lines: list[Line] = []
    for i, text in enumerate(lines):
        view_lines.append((Span(text, Style(bold=i == 0)),))
    return View(tuple(view_lines), title=title)
