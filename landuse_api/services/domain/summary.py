"""
Domain service: dashboard aggregates over the visible parcels.
"""
from dataclasses import dataclass, field
from typing import Sequence

from landuse_api.domain.models import Category, Feature

SQ_METERS_PER_HECTARE = 10_000
SQ_METERS_PER_KM2 = 1_000_000


@dataclass(frozen=True)
class CategoryBreakdown:
    """Area and allocation totals for one category."""
    category: Category
    area_m2: float
    allocated_quantity: float
    feature_count: int

    @property
    def color(self) -> str:
        return self.category.color


@dataclass(frozen=True)
class Summary:
    """Totals shown next to the map."""
    feature_count: int
    total_area_m2: float
    total_allocated: float
    total_production: float
    requirement_kg: float
    categories: list[CategoryBreakdown] = field(default_factory=list)

    @property
    def total_area_km2(self) -> float:
        return self.total_area_m2 / SQ_METERS_PER_KM2


def summarize(
    visible_features: Sequence[Feature],
    total_production: float,
    required_kg_per_hectare: float,
) -> Summary:
    """
    Aggregate the visible parcels.

    Args:
        visible_features: Output of the visibility filter
        total_production: Total fertilizer produced (liters)
        required_kg_per_hectare: Fertilizer requirement per hectare

    Returns:
        Summary with a per-category breakdown in category order,
        limited to categories that have visible parcels
    """
    breakdown = []
    for category in Category:
        members = [f for f in visible_features if f.category == category]
        if not members:
            continue
        breakdown.append(CategoryBreakdown(
            category=category,
            area_m2=sum(f.area_m2 for f in members),
            allocated_quantity=sum(f.allocated_quantity for f in members),
            feature_count=len(members),
        ))

    total_area = sum(f.area_m2 for f in visible_features)
    return Summary(
        feature_count=len(visible_features),
        total_area_m2=total_area,
        total_allocated=sum(f.allocated_quantity for f in visible_features),
        total_production=total_production,
        requirement_kg=total_area / SQ_METERS_PER_HECTARE * required_kg_per_hectare,
        categories=breakdown,
    )
