"""Tests for spot name normalization."""

import pytest

from surfin.spots.normalize import compact, normalize, words


class TestNormalize:
    """Tests for normalize()."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Folly Beach", "folly-beach"),
            ("Folly-Beach", "folly-beach"),
            ("folly_beach", "folly-beach"),
            ("  Folly   Beach  ", "folly-beach"),
            ("FollyBeach", "follybeach"),
            ("St. Augustine Pier", "st-augustine-pier"),
            ("--Ormond--", "ormond"),
            ("450", "450"),
        ],
    )
    def test_normalize(self, text, expected):
        assert normalize(text) == expected

    def test_empty_and_punctuation_only(self):
        """Input without word characters normalizes to empty."""
        assert normalize("") == ""
        assert normalize("   ") == ""
        assert normalize("?!.") == ""

    def test_idempotent(self):
        once = normalize("  St. Augustine__Pier ")
        assert normalize(once) == once

    def test_punctuation_between_separators_collapses(self):
        """Removing punctuation must not leave double separators."""
        assert normalize("Rockaway . 90th St") == "rockaway-90th-st"


class TestCompactAndWords:
    """Tests for compact() and words()."""

    def test_compact(self):
        assert compact("folly-beach") == "follybeach"
        assert compact("follybeach") == "follybeach"

    def test_words(self):
        assert words("folly-beach-pier") == ["folly", "beach", "pier"]
        assert words("") == []
