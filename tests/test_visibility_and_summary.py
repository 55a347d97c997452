"""
Unit tests for the visibility filter and dashboard summary.
"""
import pytest

from landuse_api.domain.models import FALLBACK_COLOR, Category, ToggleState, color_for
from landuse_api.services.domain.summary import summarize
from landuse_api.services.domain.visibility_filter import visible


class TestToggleState:
    def test_all_visible_by_default(self):
        toggles = ToggleState()

        assert all(toggles.is_visible(category) for category in Category)

    def test_toggle_flips(self):
        toggles = ToggleState()

        assert toggles.toggle(Category.ORCHARD) is False
        assert toggles.toggle("orchard") is True

    def test_as_dict_in_category_order(self):
        toggles = ToggleState()
        toggles.set(Category.VINEYARD, False)

        assert list(toggles.as_dict()) == [c.value for c in Category]
        assert toggles.as_dict()["vineyard"] is False


class TestCategoryColors:
    def test_known_categories(self):
        assert color_for(Category.ORCHARD) == "#7FFF00"
        assert color_for("greenhouse_horticulture") == "#00CED1"

    def test_unknown_value_falls_back_to_gray(self):
        assert color_for("meadow") == FALLBACK_COLOR == "#cccccc"

    def test_geojson_carries_category_color(self, sample_collection):
        geojson = sample_collection.to_geojson()

        colors = [f["properties"]["color"] for f in geojson["features"]]
        assert colors == ["#FFD700", "#8B008B", "#FFD700"]


class TestVisibilityFilter:
    """Tests for the toggle-based filter."""

    def test_all_visible(self, sample_collection):
        result = visible(sample_collection.features, ToggleState())

        assert result == sample_collection.features

    def test_hidden_category_removed_order_preserved(self, sample_collection):
        toggles = ToggleState()
        toggles.set(Category.VINEYARD, False)

        result = visible(sample_collection.features, toggles)

        assert [f.id for f in result] == ["way-1", "way-3"]

    def test_count_matches_toggled_categories(self, sample_collection):
        toggles = ToggleState()
        toggles.set(Category.FARMLAND, False)

        result = visible(sample_collection.features, toggles)

        expected = sum(1 for f in sample_collection.features if toggles.is_visible(f.category))
        assert len(result) == expected == 1

    def test_recomputed_after_toggle_change(self, sample_collection):
        """No stale snapshot: the same toggles object re-read on each call."""
        toggles = ToggleState()
        before = visible(sample_collection.features, toggles)
        toggles.set(Category.FARMLAND, False)
        after = visible(sample_collection.features, toggles)

        assert len(before) == 3
        assert len(after) == 1


class TestSummary:
    """Tests for aggregates over the visible parcels."""

    def test_totals(self, sample_collection):
        summary = summarize(sample_collection.features, 14914.9, 160)

        assert summary.feature_count == 3
        assert summary.total_area_m2 == 500.0
        assert summary.total_area_km2 == pytest.approx(0.0005)
        assert summary.total_production == 14914.9
        # 500 m² = 0.05 ha at 160 kg/ha
        assert summary.requirement_kg == pytest.approx(8.0)

    def test_breakdown_in_category_order(self, sample_collection):
        summary = summarize(sample_collection.features, 14914.9, 160)

        assert [item.category for item in summary.categories] == [
            Category.FARMLAND, Category.VINEYARD,
        ]
        farmland = summary.categories[0]
        assert farmland.area_m2 == 200.0
        assert farmland.feature_count == 2
        assert farmland.color == "#FFD700"

    def test_summary_follows_filter(self, sample_collection):
        """Area totals and allocation totals come from the same filtered view."""
        toggles = ToggleState()
        toggles.set(Category.VINEYARD, False)

        summary = summarize(visible(sample_collection.features, toggles), 14914.9, 160)

        assert summary.total_area_m2 == 200.0
        assert summary.total_allocated == pytest.approx(2 * 2982.98)
        assert [item.category for item in summary.categories] == [Category.FARMLAND]

    def test_empty(self):
        summary = summarize((), 14914.9, 160)

        assert summary.feature_count == 0
        assert summary.requirement_kg == 0
        assert summary.categories == []
