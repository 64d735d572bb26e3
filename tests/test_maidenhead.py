"""Tests for chuk_mcp_los.core.maidenhead (grid locator codec)."""

import pytest

from chuk_mcp_los.core.errors import InvalidLocator
from chuk_mcp_los.core.geodesy import GeoPoint
from chuk_mcp_los.core.maidenhead import (
    all_precisions,
    is_valid_locator,
    locator_center,
    normalize_locator,
    squares_in_bounds,
    tile_span,
    to_bounds,
    to_locator,
)


# ── Encoding ───────────────────────────────────────────────────────


class TestToLocator:
    """Coordinate -> locator."""

    def test_w1aw_subsquare(self):
        assert to_locator(GeoPoint(41.714775, -72.727260), 6) == "FN31pr"

    def test_default_precision_is_six(self):
        assert len(to_locator(GeoPoint(41.714775, -72.727260))) == 6

    @pytest.mark.parametrize("precision", [2, 4, 6, 8, 10])
    def test_length_matches_precision(self, precision):
        assert len(to_locator(GeoPoint(51.5, -0.12), precision)) == precision

    def test_precisions_are_prefixes(self):
        point = GeoPoint(-33.8688, 151.2093)
        full = to_locator(point, 10)
        for precision in (2, 4, 6, 8):
            assert full.startswith(to_locator(point, precision))

    def test_field_upper_subsquare_lower(self):
        loc = to_locator(GeoPoint(41.06, 28.87), 10)
        assert loc[:2].isupper()
        assert loc[2:4].isdigit()
        assert loc[4:6].islower()
        assert loc[6:8].isdigit()
        assert loc[8:10].islower()

    def test_southwest_corner_of_world(self):
        assert to_locator(GeoPoint(-90.0, -180.0), 6) == "AA00aa"

    def test_northeast_corner_clamped_into_grid(self):
        assert to_locator(GeoPoint(90.0, 180.0), 6) == "RR99xx"

    def test_invalid_precision_raises(self):
        with pytest.raises(InvalidLocator):
            to_locator(GeoPoint(0.0, 0.0), 3)

    def test_invalid_precision_is_value_error(self):
        with pytest.raises(ValueError):
            to_locator(GeoPoint(0.0, 0.0), 12)


# ── Decoding ───────────────────────────────────────────────────────


class TestToBounds:
    """Locator -> bounds."""

    def test_kn41kb_corners(self):
        bounds = to_bounds("KN41kb")
        assert bounds.southwest.lat == pytest.approx(41.0 + 1 / 24)
        assert bounds.southwest.lng == pytest.approx(28.0 + 10 / 12)
        assert bounds.northeast.lat == pytest.approx(41.0 + 2 / 24)
        assert bounds.northeast.lng == pytest.approx(28.0 + 11 / 12)

    def test_kn41kb_spans(self):
        bounds = to_bounds("KN41kb")
        assert bounds.lat_span == pytest.approx(1 / 24)
        assert bounds.lng_span == pytest.approx(2 / 24)

    def test_kn41kb_center_round_trips(self):
        center = to_bounds("KN41kb").center
        assert normalize_locator(to_locator(center, 6)) == "KN41KB"

    def test_case_insensitive(self):
        assert to_bounds("kn41KB") == to_bounds("KN41kb")

    def test_field_spans(self):
        bounds = to_bounds("JO")
        assert bounds.lng_span == pytest.approx(20.0)
        assert bounds.lat_span == pytest.approx(10.0)
        assert bounds.southwest == GeoPoint(50.0, 0.0)

    def test_square_bounds(self):
        bounds = to_bounds("FN31")
        assert bounds.southwest.lat == pytest.approx(41.0)
        assert bounds.southwest.lng == pytest.approx(-74.0)
        assert bounds.center.lat == pytest.approx(41.5)
        assert bounds.center.lng == pytest.approx(-73.0)

    def test_northeast_clipped_at_pole(self):
        bounds = to_bounds("RR")
        assert bounds.northeast.lat == 90.0
        assert bounds.northeast.lng == 180.0

    def test_center_inside_bounds(self):
        bounds = to_bounds("IO91wm48")
        assert bounds.contains(bounds.center)

    def test_locator_center(self):
        assert locator_center("FN31") == to_bounds("FN31").center

    @pytest.mark.parametrize(
        "locator",
        ["", "K", "KN4", "KN41k", "SS00", "KN4a", "KN41ky", "KN41kb5", "KN41kb58aa00", "K141"],
    )
    def test_invalid_locators_raise(self, locator):
        with pytest.raises(InvalidLocator):
            to_bounds(locator)


class TestRoundTrip:
    """Encoding then decoding lands back inside the same square."""

    @pytest.mark.parametrize(
        "lat,lng",
        [(0.0, 0.0), (41.714775, -72.72726), (-33.8688, 151.2093), (89.99, -179.99), (-45.513, 0.017)],
    )
    @pytest.mark.parametrize("precision", [2, 6, 10])
    def test_point_inside_its_square(self, lat, lng, precision):
        point = GeoPoint(lat, lng)
        assert to_bounds(to_locator(point, precision)).contains(point)

    def test_center_reencodes_to_same_locator(self):
        for locator in ("AA", "JJ55", "KN41kb", "IO91wm48", "FN31pr22xx"):
            assert to_locator(locator_center(locator), len(locator)) == locator


# ── Validation helpers ─────────────────────────────────────────────


class TestValidation:
    def test_valid(self):
        assert is_valid_locator("KN41kb")
        assert is_valid_locator("kn41")
        assert is_valid_locator(" FN31pr ")

    def test_invalid(self):
        assert not is_valid_locator("KN41kbz")
        assert not is_valid_locator("XX00")
        assert not is_valid_locator(None)

    def test_normalize(self):
        assert normalize_locator("  kn41kb ") == "KN41KB"


class TestAllPrecisions:
    def test_keys_and_values(self):
        result = all_precisions(GeoPoint(41.714775, -72.727260))
        assert list(result) == ["field", "square", "subsquare", "extended", "super_extended"]
        assert result["field"] == "FN"
        assert result["square"] == "FN31"
        assert result["subsquare"] == "FN31pr"
        assert len(result["super_extended"]) == 10


class TestTileSpan:
    def test_square(self):
        assert tile_span(4) == (2.0, 1.0)

    def test_subsquare(self):
        lng, lat = tile_span(6)
        assert lng == pytest.approx(1 / 12)
        assert lat == pytest.approx(1 / 24)

    def test_invalid(self):
        with pytest.raises(InvalidLocator):
            tile_span(5)


# ── Enumeration ────────────────────────────────────────────────────


class TestSquaresInBounds:
    def test_two_by_two_squares(self):
        squares = squares_in_bounds(GeoPoint(40.5, 20.5), GeoPoint(41.5, 23.5), 4)
        assert squares == ["KN00", "KN10", "KN01", "KN11"]

    def test_box_inside_one_square(self):
        squares = squares_in_bounds(GeoPoint(41.1, 28.1), GeoPoint(41.2, 28.2), 4)
        assert squares == ["KN41"]

    def test_aligned_edges_do_not_add_extra_row(self):
        squares = squares_in_bounds(GeoPoint(40.0, 20.0), GeoPoint(42.0, 24.0), 4)
        assert len(squares) == 4

    def test_fields(self):
        squares = squares_in_bounds(GeoPoint(-90.0, -180.0), GeoPoint(90.0, 180.0), 2)
        assert len(squares) == 18 * 18
        assert squares[0] == "AA"
        assert squares[-1] == "RR"

    def test_too_many_squares(self):
        with pytest.raises(ValueError, match="exceeding max"):
            squares_in_bounds(GeoPoint(-60.0, -180.0), GeoPoint(60.0, 180.0), 6)

    def test_custom_limit(self):
        with pytest.raises(ValueError):
            squares_in_bounds(GeoPoint(40.5, 20.5), GeoPoint(41.5, 23.5), 4, max_squares=3)

    def test_inverted_longitudes(self):
        with pytest.raises(ValueError):
            squares_in_bounds(GeoPoint(40.0, 25.0), GeoPoint(41.0, 20.0), 4)

    def test_inverted_latitudes(self):
        with pytest.raises(ValueError):
            squares_in_bounds(GeoPoint(42.0, 20.0), GeoPoint(41.0, 25.0), 4)
