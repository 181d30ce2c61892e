"""Three-tier color rating derived from the provider's star counts.

The provider does not expose shore-relative wind quality, so the number of
"faded" stars stands in for it. This is a known approximation; keep the
classifier isolated so a better signal can replace it.
"""

from dataclasses import replace
from enum import Enum
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from surfin.forecast.models import Forecast

MAX_STARS = 5


class Color(str, Enum):
    """Condition classification of a forecast period."""

    GREEN = "green"
    BLUE = "blue"
    RED = "red"


# (max_faded_stars, color, label)
RATING_SCALE = [
    (1, Color.GREEN, "Clean"),
    (2, Color.BLUE, "Fair"),
    (MAX_STARS, Color.RED, "Poor"),
]

Classifier = Callable[[int], Color]


def classify_rating(faded_stars: int) -> Color:
    """Map a faded-star count to a color.

    Args:
        faded_stars: Provider faded-star count (0-5)

    Returns:
        GREEN for 0-1, BLUE for 2, RED for 3-5

    Raises:
        ValueError: If faded_stars is outside 0-5

    Examples:
        >>> classify_rating(0)
        <Color.GREEN: 'green'>
        >>> classify_rating(4)
        <Color.RED: 'red'>
    """
    if not 0 <= faded_stars <= MAX_STARS:
        raise ValueError(f"faded_stars must be between 0 and {MAX_STARS}, got {faded_stars}")

    for threshold, color, _ in RATING_SCALE:
        if faded_stars <= threshold:
            return color

    return RATING_SCALE[-1][1]


def rating_label(color: Color) -> str:
    """Human-readable label for a color (e.g. "Clean")."""
    for _, scale_color, label in RATING_SCALE:
        if scale_color == color:
            return label
    raise ValueError(f"Unknown color: {color}")


def annotate_forecast(
    forecast: "Forecast",
    classifier: Classifier = classify_rating,
) -> "Forecast":
    """Return a copy of the forecast with every period's color set."""
    periods = tuple(
        replace(period, color=classifier(period.faded_stars))
        for period in forecast.periods
    )
    return replace(forecast, periods=periods)
