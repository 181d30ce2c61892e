"""Rendering for browsers (standalone HTML document)."""

from html import escape

from surfin.visualization.base import Renderer
from surfin.visualization.colors import css_class, rating_stylesheet
from surfin.visualization.view import Span, View

PAGE_STYLE = """\
body { background: #fdfdfd; color: #222; margin: 2em; }
pre.forecast { font-family: "DejaVu Sans Mono", Menlo, Consolas, monospace; line-height: 1.2; }"""


class MarkupRenderer(Renderer):
    """HTML page; colors are encoded as CSS classes (rating-green etc.)."""

    media_type = "text/html"

    def render(self, view: View) -> str:
        body = "\n".join("".join(_encode(span) for span in line) for line in view.lines)
        title = escape(view.title or "surfin")
        return (
            "<!DOCTYPE html>\n"
            '<html lang="en">\n'
            "<head>\n"
            '<meta charset="utf-8">\n'
            f"<title>{title}</title>\n"
            "<style>\n"
            f"{PAGE_STYLE}\n"
            f"{rating_stylesheet()}\n"
            "</style>\n"
            "</head>\n"
            "<body>\n"
            f'<pre class="forecast">\n{body}\n</pre>\n'
            "</body>\n"
            "</html>\n"
        )


def _encode(span: Span) -> str:
    text = escape(span.text)
    if span.style.is_plain or not span.text:
        return text

    classes = []
    if span.style.fg is not None:
        classes.append(css_class(span.style.fg))
    if span.style.bold:
        classes.append("bold")
    return f'<span class="{" ".join(classes)}">{text}</span>'
