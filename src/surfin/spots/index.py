"""In-memory index of spot metadata loaded from the crawled snapshot.

The index is built once at startup and never mutated afterwards, so it can be
shared by concurrent requests without locking. A refreshed snapshot replaces
the whole index.
"""

import json
import logging
from collections import defaultdict
from pathlib import Path
from typing import Iterable, Optional

from pydantic import TypeAdapter, ValidationError

from surfin.spots.locator import nearest_spot
from surfin.spots.models import Spot, SpotRecord, SpotSnapshot
from surfin.spots.normalize import compact, normalize

logger = logging.getLogger(__name__)

_RECORDS = TypeAdapter(list[SpotRecord])


class LoadError(Exception):
    """Raised when the spot snapshot is missing, malformed or empty."""


class SpotIndex:
    """Immutable lookup structure over all known spots.

    Every spot is registered under its normalized canonical name and each
    normalized alias, both as-is ("folly-beach") and in compact form
    ("follybeach").

    Example:
        >>> index = SpotIndex.from_snapshot("data/spots.json")
        >>> index.find_by_id(450).canonical_name
        'Folly Beach'
    """

    def __init__(self, spots: Iterable[Spot]):
        """Build lookup tables.

        Args:
            spots: Spot records in snapshot order

        Raises:
            LoadError: If two spots share an id
        """
        self._spots: tuple[Spot, ...] = tuple(spots)
        self._by_id: dict[int, Spot] = {}
        self._by_key: dict[str, set[int]] = defaultdict(set)
        self._names: dict[int, tuple[str, ...]] = {}

        for spot in self._spots:
            if spot.id in self._by_id:
                raise LoadError(f"Duplicate spot id {spot.id} ({spot.canonical_name})")
            self._by_id[spot.id] = spot

            names = sorted(
                {normalize(spot.canonical_name), *(normalize(a) for a in spot.aliases)} - {""}
            )
            self._names[spot.id] = tuple(names)
            for name in names:
                self._by_key[name].add(spot.id)
                self._by_key[compact(name)].add(spot.id)

    @classmethod
    def from_snapshot(cls, path: Path | str) -> "SpotIndex":
        """Load the index from a snapshot JSON file.

        Accepts either a top-level list of records or ``{"spots": [...]}``.

        Raises:
            LoadError: If the file is missing, not JSON, fails validation,
                has duplicate ids or contains no spots
        """
        path = Path(path)
        try:
            with open(path) as f:
                raw = json.load(f)
        except FileNotFoundError as e:
            raise LoadError(f"Couldn't find spot snapshot at {path}") from e
        except (OSError, json.JSONDecodeError) as e:
            raise LoadError(f"Couldn't parse spot snapshot {path}: {e}") from e

        try:
            if isinstance(raw, dict):
                records = SpotSnapshot.model_validate(raw).spots
            else:
                records = _RECORDS.validate_python(raw)
        except ValidationError as e:
            raise LoadError(f"Invalid spot snapshot {path}: {e}") from e

        if not records:
            raise LoadError(f"Spot snapshot {path} contains no spots")

        index = cls(spot_from_record(r) for r in records)
        logger.info(f"Loaded {len(index)} spots from {path}")
        return index

    @property
    def spots(self) -> tuple[Spot, ...]:
        """All spots in snapshot order."""
        return self._spots

    def __len__(self) -> int:
        return len(self._spots)

    def __iter__(self):
        return iter(self._spots)

    def names_of(self, spot: Spot) -> tuple[str, ...]:
        """Normalized names (canonical + aliases) registered for a spot."""
        return self._names.get(spot.id, ())

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def find_by_id(self, spot_id: int) -> Optional[Spot]:
        """Get spot by provider id."""
        return self._by_id.get(spot_id)

    def find_by_exact_alias(self, normalized: str) -> set[Spot]:
        """All spots registered under exactly this name.

        Args:
            normalized: Output of normalize(); matched as-is and compacted
        """
        ids = self._by_key.get(normalized, set()) | self._by_key.get(compact(normalized), set())
        return {self._by_id[i] for i in ids}

    def find_by_substring(self, normalized: str) -> list[Spot]:
        """Spots with any registered name containing the query.

        Names are compared in compact form so separators in either the query
        or the name don't prevent a match.

        Ranked by the length of the shortest matching name, then that name
        alphabetically, then spot id.
        """
        needle = compact(normalized)
        if not needle:
            return []

        best: dict[int, tuple[int, str, int]] = {}
        for spot in self._spots:
            for name in self._names[spot.id]:
                if needle in compact(name):
                    rank = (len(name), name, spot.id)
                    if spot.id not in best or rank < best[spot.id]:
                        best[spot.id] = rank

        return [self._by_id[rank[2]] for rank in sorted(best.values())]

    def rank(self, spots: Iterable[Spot]) -> list[Spot]:
        """Order spots by shortest registered name, then name, then id."""
        def key(spot: Spot) -> tuple[int, str, int]:
            names = self._names.get(spot.id) or (normalize(spot.canonical_name),)
            shortest = min(names, key=lambda n: (len(n), n))
            return (len(shortest), shortest, spot.id)

        return sorted(spots, key=key)

    def nearest(self, lat: float, lon: float) -> Spot:
        """Closest spot by great-circle distance (ties: lowest id)."""
        return nearest_spot(self._spots, lat, lon)


def spot_from_record(record: SpotRecord) -> Spot:
    """Convert a validated snapshot record into a Spot."""
    aliases = frozenset(a for a in (normalize(x) for x in record.aliases) if a)
    return Spot(
        id=record.id,
        canonical_name=record.name.strip(),
        lat=record.lat,
        lon=record.lon,
        utc_offset_seconds=record.utc_offset,
        aliases=aliases,
    )
