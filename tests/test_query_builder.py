"""
Unit tests for Overpass query construction.
"""
import math
import pytest

from landuse_api.domain.exceptions import QueryBuildError
from landuse_api.domain.models import Category, Point
from landuse_api.services.domain.query_builder import (
    SpatialQueryBuilder,
    format_number,
    validate_radius,
)


CENTER = Point(latitude=43.65064, longitude=11.46387)


class TestQueryContent:
    """Tests for the generated query text."""

    def test_radius_and_center_encoded(self):
        """Bounding predicate should encode exactly the radius and center."""
        builder = SpatialQueryBuilder()

        query = builder.build(CENTER, 5000, {Category.FARMLAND, Category.PLANTATION})

        assert "(around:5000,43.65064,11.46387)" in query
        assert query.count("around:") == 2  # way and relation statements

    def test_only_requested_categories_matched(self):
        """Alternation should contain only the requested categories, anchored."""
        builder = SpatialQueryBuilder()

        query = builder.build(CENTER, 5000, {Category.FARMLAND, Category.PLANTATION})

        assert '["landuse"~"^(farmland|plantation)$"]' in query
        for other in (Category.ORCHARD, Category.VINEYARD, Category.GREENHOUSE_HORTICULTURE):
            assert other.value not in query

    def test_full_geometry_requested(self):
        builder = SpatialQueryBuilder(timeout_seconds=25)

        query = builder.build(CENTER, 1000, [Category.ORCHARD])

        assert query.startswith("[out:json][timeout:25];")
        assert query.rstrip().endswith("out body geom;")

    def test_relations_can_be_excluded(self):
        builder = SpatialQueryBuilder(include_relations=False)

        query = builder.build(CENTER, 1000, [Category.ORCHARD])

        assert "relation" not in query
        assert query.count("way[") == 1

    def test_fractional_radius_kept(self):
        builder = SpatialQueryBuilder()

        query = builder.build(CENTER, 2500.5, [Category.VINEYARD])

        assert "(around:2500.5," in query

    def test_zero_radius_is_valid(self):
        """Radius 0 yields an empty-region query, not an error."""
        builder = SpatialQueryBuilder()

        query = builder.build(CENTER, 0, [Category.FARMLAND])

        assert "(around:0,43.65064,11.46387)" in query


class TestDeterminism:
    """Equal inputs must produce byte-identical queries."""

    def test_category_order_is_stable(self):
        builder = SpatialQueryBuilder()

        first = builder.build(CENTER, 3000, [Category.VINEYARD, Category.FARMLAND, Category.ORCHARD])
        second = builder.build(CENTER, 3000, [Category.ORCHARD, Category.VINEYARD, Category.FARMLAND])

        assert first == second
        assert "^(farmland|orchard|vineyard)$" in first

    def test_string_categories_accepted(self):
        builder = SpatialQueryBuilder()

        assert builder.build(CENTER, 3000, ["farmland"]) == builder.build(
            CENTER, 3000, [Category.FARMLAND]
        )


class TestValidation:
    """Tests for rejected inputs."""

    @pytest.mark.parametrize("radius", [-1, -0.001, math.inf, math.nan, "far"])
    def test_invalid_radius(self, radius):
        builder = SpatialQueryBuilder()

        with pytest.raises(QueryBuildError):
            builder.build(CENTER, radius, [Category.FARMLAND])

    def test_empty_categories(self):
        builder = SpatialQueryBuilder()

        with pytest.raises(QueryBuildError, match="At least one"):
            builder.build(CENTER, 1000, set())

    def test_unknown_category(self):
        builder = SpatialQueryBuilder()

        with pytest.raises(QueryBuildError, match="Unknown land-use category"):
            builder.build(CENTER, 1000, ["meadow"])

    def test_query_build_error_is_value_error(self):
        with pytest.raises(ValueError):
            validate_radius(-5)


class TestFormatNumber:
    def test_integral_values(self):
        assert format_number(5000.0) == "5000"
        assert format_number(0) == "0"

    def test_fractional_values(self):
        assert format_number(43.65063986776146) == "43.65063986776146"

    def test_tiny_values_avoid_exponent_notation(self):
        assert format_number(1e-05) == "0.00001"
        assert format_number(2.5e-7) == "0.00000025"

    def test_tiny_radius_in_query(self):
        query = SpatialQueryBuilder().build(CENTER, 1e-05, {Category.FARMLAND})

        assert "(around:0.00001,43.65064,11.46387)" in query
        assert "e-" not in query
