"""Resolution of user-supplied spot identifiers.

Matching is deterministic string matching over names registered at index-build
time, never fuzzy scoring. When several distinct spots match equally the
resolver returns all of them and leaves the choice to the caller.
"""

import logging
from dataclasses import dataclass, field
from typing import Union

from surfin.spots.index import SpotIndex
from surfin.spots.models import Spot
from surfin.spots.normalize import normalize, words

logger = logging.getLogger(__name__)

# Maximum suggestions attached to a NotFound result
MAX_SUGGESTIONS = 10
# Query words shorter than this are not used for suggestions
MIN_SUGGESTION_WORD = 3


@dataclass(frozen=True)
class Resolved:
    """The query identifies exactly one spot."""

    spot: Spot


@dataclass(frozen=True)
class Ambiguous:
    """Several distinct spots match; the caller must disambiguate."""

    query: str
    candidates: tuple[Spot, ...]


@dataclass(frozen=True)
class NotFound:
    """No spot matches the query.

    Attributes:
        query: The raw query
        suggestions: Spots matching individual words of the query, for display
    """

    query: str
    suggestions: tuple[Spot, ...] = field(default_factory=tuple)


ResolveResult = Union[Resolved, Ambiguous, NotFound]


class AliasResolver:
    """Turns a raw spot token into zero, one or many candidate spots.

    Resolution order:
    1. A numeric token is a direct spot id lookup.
    2. Exact match on a registered name or alias.
    3. Substring match on registered names and aliases.

    Example:
        >>> resolver = AliasResolver(index)
        >>> resolver.resolve("Folly-Beach")
        Resolved(spot=Spot(id=450, canonical_name='Folly Beach', ...))
    """

    def __init__(self, index: SpotIndex):
        self.index = index

    def resolve(self, query: str) -> ResolveResult:
        """Resolve a query to a spot.

        Args:
            query: Raw user input, e.g. "Folly-Beach", "450", "ormond"

        Returns:
            Resolved, Ambiguous or NotFound
        """
        normalized = normalize(query)
        if not normalized:
            return NotFound(query)

        if normalized.isascii() and normalized.isdigit():
            spot = self.index.find_by_id(int(normalized))
            if spot is None:
                logger.debug(f"No spot with id {normalized}")
                return NotFound(query)
            return Resolved(spot)

        exact = self.index.find_by_exact_alias(normalized)
        if exact:
            return self._result(query, self.index.rank(exact))

        matches = self.index.find_by_substring(normalized)
        if matches:
            return self._result(query, matches)

        logger.debug(f"No spot matches {query!r} ({normalized})")
        return NotFound(query, self.suggest(normalized))

    def suggest(self, normalized: str) -> tuple[Spot, ...]:
        """Spots matching any single word of the query."""
        found: dict[int, Spot] = {}
        for word in words(normalized):
            if len(word) < MIN_SUGGESTION_WORD:
                continue
            for spot in self.index.find_by_substring(word):
                found.setdefault(spot.id, spot)
        return tuple(self.index.rank(found.values())[:MAX_SUGGESTIONS])

    @staticmethod
    def _result(query: str, spots: list[Spot]) -> ResolveResult:
        if len(spots) == 1:
            return Resolved(spots[0])
        logger.debug(f"{query!r} is ambiguous between {[s.id for s in spots]}")
        return Ambiguous(query, tuple(spots))
