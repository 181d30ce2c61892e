"""Normalization of free-text spot names and queries."""

import re

SEPARATOR = "-"

_SEPARATOR_RUN = re.compile(r"[\s_\-]+")
_PUNCTUATION = re.compile(r"[^\w\-]")


def normalize(text: str) -> str:
    """Normalize a spot name or query for matching.

    Lowercases, collapses runs of whitespace, hyphens and underscores into a
    single ``-``, strips every other punctuation character and trims
    separators from both ends.

    Examples:
        >>> normalize("Folly Beach")
        'folly-beach'
        >>> normalize("  St. Augustine__Pier ")
        'st-augustine-pier'
        >>> normalize("FollyBeach")
        'follybeach'
    """
    text = _SEPARATOR_RUN.sub(SEPARATOR, text.strip().lower())
    text = _PUNCTUATION.sub("", text)
    text = _SEPARATOR_RUN.sub(SEPARATOR, text)
    return text.strip(SEPARATOR)


def compact(normalized: str) -> str:
    """Drop separators so "folly-beach" and "follybeach" compare equal."""
    return normalized.replace(SEPARATOR, "")


def words(normalized: str) -> list[str]:
    """Split a normalized string into its words."""
    return [w for w in normalized.split(SEPARATOR) if w]
