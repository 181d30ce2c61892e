"""Rendering for terminals (ANSI escape codes)."""

from surfin.visualization.base import Renderer
from surfin.visualization.colors import ANSI_BOLD, ANSI_RESET, ansi_sequence, color_to_ansi
from surfin.visualization.view import Span, View


class TerminalRenderer(Renderer):
    """Plain text with ANSI SGR codes for colored and bold spans."""

    media_type = "text/plain"

    def render(self, view: View) -> str:
        lines = ["".join(_encode(span) for span in line) for line in view.lines]
        return "\n".join(lines) + "\n"


def _encode(span: Span) -> str:
    if span.style.is_plain or not span.text:
        return span.text

    codes = []
    if span.style.bold:
        codes.append(ANSI_BOLD)
    if span.style.fg is not None:
        codes.append(color_to_ansi(span.style.fg))
    return f"{ansi_sequence(*codes)}{span.text}{ANSI_RESET}"
