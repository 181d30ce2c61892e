"""Surf forecasts for terminals and browsers.

Resolves messy spot names to provider spot ids, caches provider forecasts,
classifies each period as green/blue/red and renders the result as ANSI text
or HTML.
"""

__version__ = "0.1.0"
