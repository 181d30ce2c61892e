"""Renderer interface shared by the output backends."""

from abc import ABC, abstractmethod
from enum import Enum

from surfin.visualization.view import View


class OutputFormat(str, Enum):
    """Target document format."""

    TERMINAL = "terminal"
    MARKUP = "markup"


class Renderer(ABC):
    """Turns a View into a document.

    Backends only encode styles; they never classify, convert units or
    change layout. Rendering is pure: the same View always produces the
    same string.
    """

    #: Content type of the rendered document
    media_type: str = "text/plain"

    @abstractmethod
    def render(self, view: View) -> str:
        """Render a view to a document."""
