"""Color definitions for rendered forecasts.

Each rating color is available in the formats the backends need:
- ANSI SGR codes for terminals
- Hex strings and CSS class names for HTML
- Legend entries (label + description) for both
"""

from surfin.forecast.rating import RATING_SCALE, Color


# =============================================================================
# RATING COLOR SCALE
# =============================================================================

# (color, hex_color, ansi_code)
RATING_COLORS = [
    (Color.GREEN, "#2E8B57", "32"),  # Sea green
    (Color.BLUE, "#1E90FF", "34"),  # Dodger blue
    (Color.RED, "#DC143C", "31"),  # Crimson
]

ANSI_RESET = "\x1b[0m"
ANSI_BOLD = "1"

CSS_CLASS_PREFIX = "rating-"


def color_to_hex(color: Color) -> str:
    """Convert a rating color to a hex color string.

    Examples:
        >>> color_to_hex(Color.GREEN)
        '#2E8B57'
    """
    for scale_color, hex_color, _ in RATING_COLORS:
        if scale_color == color:
            return hex_color
    raise ValueError(f"Unknown color: {color}")


def color_to_ansi(color: Color) -> str:
    """ANSI SGR foreground code for a rating color (e.g. "32")."""
    for scale_color, _, ansi_code in RATING_COLORS:
        if scale_color == color:
            return ansi_code
    raise ValueError(f"Unknown color: {color}")


def ansi_sequence(*codes: str) -> str:
    """Build an SGR escape sequence from codes.

    Examples:
        >>> ansi_sequence("1", "32")
        '\\x1b[1;32m'
    """
    return f"\x1b[{';'.join(codes)}m"


def css_class(color: Color) -> str:
    """CSS class name for a rating color (e.g. "rating-green")."""
    return f"{CSS_CLASS_PREFIX}{Color(color).value}"


# =============================================================================
# LEGEND
# =============================================================================

def rating_legend() -> list[tuple[Color, str, str]]:
    """(color, label, faded-star range) for each rating, best first.

    Examples:
        >>> rating_legend()[0]
        (<Color.GREEN: 'green'>, 'Clean', '0-1')
    """
    legend = []
    lower = 0
    for threshold, color, label in RATING_SCALE:
        stars = f"{lower}-{threshold}" if threshold > lower else f"{threshold}"
        legend.append((color, label, stars))
        lower = threshold + 1
    return legend


def rating_stylesheet() -> str:
    """CSS rules for the rating classes used by the markup backend."""
    rules = [
        f".{css_class(color)} {{ color: {hex_color}; }}"
        for color, hex_color, _ in RATING_COLORS
    ]
    rules.append(".bold { font-weight: bold; }")
    return "\n".join(rules)
