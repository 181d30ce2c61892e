"""Tests for the faded-star color rating."""

from datetime import datetime, timezone

import pytest

from surfin.forecast.models import UnitSystem
from surfin.forecast.rating import (
    MAX_STARS,
    RATING_SCALE,
    Color,
    annotate_forecast,
    classify_rating,
    rating_label,
)
from surfin.forecast.schemas import parse_forecast

from conftest import make_payload


class TestClassifyRating:
    """Tests for classify_rating()."""

    @pytest.mark.parametrize(
        "faded,expected",
        [
            (0, Color.GREEN),
            (1, Color.GREEN),
            (2, Color.BLUE),
            (3, Color.RED),
            (4, Color.RED),
            (5, Color.RED),
        ],
    )
    def test_thresholds(self, faded, expected):
        assert classify_rating(faded) == expected

    def test_total_over_valid_range(self):
        """Every valid count maps to exactly one color."""
        for faded in range(MAX_STARS + 1):
            assert classify_rating(faded) in set(Color)

    @pytest.mark.parametrize("faded", [-1, 6, 100])
    def test_out_of_range(self, faded):
        with pytest.raises(ValueError):
            classify_rating(faded)

    def test_scale_ends_at_max_stars(self):
        assert RATING_SCALE[-1][0] == MAX_STARS


class TestRatingLabel:
    """Tests for rating_label()."""

    def test_labels(self):
        assert rating_label(Color.GREEN) == "Clean"
        assert rating_label(Color.BLUE) == "Fair"
        assert rating_label(Color.RED) == "Poor"

    def test_unknown_color(self):
        with pytest.raises(ValueError):
            rating_label("purple")


class TestAnnotateForecast:
    """Tests for annotate_forecast()."""

    def test_colors_every_period(self):
        forecast = parse_forecast(make_payload((0, 2, 4)), 450, UnitSystem.US)

        annotated = annotate_forecast(forecast)

        assert [p.color for p in annotated.periods] == [Color.GREEN, Color.BLUE, Color.RED]

    def test_does_not_mutate_input(self):
        forecast = parse_forecast(make_payload((0,)), 450, UnitSystem.US)

        annotate_forecast(forecast)

        assert forecast.periods[0].color is None

    def test_keeps_everything_else(self):
        fetched_at = datetime(2024, 6, 1, tzinfo=timezone.utc)
        forecast = parse_forecast(make_payload((1, 3)), 450, UnitSystem.EU, fetched_at=fetched_at)

        annotated = annotate_forecast(forecast)

        assert annotated.spot_id == 450
        assert annotated.unit_system == UnitSystem.EU
        assert annotated.fetched_at == fetched_at
        assert [p.timestamp for p in annotated.periods] == [p.timestamp for p in forecast.periods]

    def test_custom_classifier(self):
        forecast = parse_forecast(make_payload((0, 5)), 450, UnitSystem.US)

        annotated = annotate_forecast(forecast, classifier=lambda faded: Color.BLUE)

        assert {p.color for p in annotated.periods} == {Color.BLUE}
