"""
Domain models for land-use parcels and fertilizer allocation.

These models represent the core domain entities and should be independent
of any infrastructure concerns (API clients, HTTP, etc.).
"""
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional
from pydantic import BaseModel, Field


class Category(str, Enum):
    """Land-use classes, in display order (OSM ``landuse`` tag values)."""
    FARMLAND = "farmland"
    PLANTATION = "plantation"
    ORCHARD = "orchard"
    VINEYARD = "vineyard"
    GREENHOUSE_HORTICULTURE = "greenhouse_horticulture"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")

    @property
    def color(self) -> str:
        return CATEGORY_COLORS[self]

    @classmethod
    def ordered(cls, categories: Iterable["Category"]) -> list["Category"]:
        """Return the given categories in the fixed display order."""
        wanted = set(categories)
        return [category for category in cls if category in wanted]


CATEGORY_COLORS: Mapping[Category, str] = MappingProxyType({
    Category.FARMLAND: "#FFD700",
    Category.PLANTATION: "#8B4513",
    Category.ORCHARD: "#7FFF00",
    Category.VINEYARD: "#8B008B",
    Category.GREENHOUSE_HORTICULTURE: "#00CED1",
})

FALLBACK_COLOR = "#cccccc"


def color_for(category: Any) -> str:
    """Display color for a category value, gray for anything unknown."""
    try:
        return CATEGORY_COLORS[Category(category)]
    except ValueError:
        return FALLBACK_COLOR


class Point(BaseModel):
    """A latitude/longitude pair in decimal degrees."""
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)

    class Config:
        frozen = True

    def as_lonlat(self) -> list[float]:
        return [self.longitude, self.latitude]


class Feature(BaseModel):
    """One land-use parcel polygon."""
    id: str = Field(description="Stable identifier, e.g. 'way-123'")
    osm_type: str
    osm_id: int
    category: Category
    ring: tuple[Point, ...] = Field(
        description="Closed exterior ring (first point repeated last)"
    )
    name: Optional[str] = None
    area_m2: float = Field(default=0.0, ge=0)
    allocated_quantity: float = Field(default=0.0, ge=0)

    class Config:
        frozen = True

    @property
    def area_km2(self) -> float:
        return self.area_m2 / 1e6

    def to_geojson(self) -> dict[str, Any]:
        return {
            "type": "Feature",
            "id": self.id,
            "geometry": {
                "type": "Polygon",
                "coordinates": [[point.as_lonlat() for point in self.ring]],
            },
            "properties": {
                "osm_type": self.osm_type,
                "osm_id": self.osm_id,
                "landuse": self.category.value,
                "name": self.name,
                "color": color_for(self.category),
                "area": self.area_m2,
                "fertilizer": self.allocated_quantity,
            },
        }


class FeatureCollection(BaseModel):
    """
    Ordered parcels produced by one fetch cycle.

    Never updated in place: each fetch produces a new collection.
    """
    features: tuple[Feature, ...] = ()
    radius_m: Optional[float] = None
    total_area_m2: float = 0.0
    total_quantity: float = 0.0

    class Config:
        frozen = True

    @property
    def allocation_degenerate(self) -> bool:
        """True when there is no area to allocate over (all allocations are 0)."""
        return self.total_area_m2 <= 0

    def __len__(self) -> int:
        return len(self.features)

    def get(self, feature_id: str) -> Optional[Feature]:
        for feature in self.features:
            if feature.id == feature_id:
                return feature
        return None

    def to_geojson(self, features: Optional[Iterable[Feature]] = None) -> dict[str, Any]:
        """GeoJSON FeatureCollection of this collection (or a filtered subset of it)."""
        selected = self.features if features is None else features
        return {
            "type": "FeatureCollection",
            "features": [feature.to_geojson() for feature in selected],
        }


class ToggleState(BaseModel):
    """Per-category visibility, all visible by default."""
    visible: dict[Category, bool] = Field(
        default_factory=lambda: {category: True for category in Category}
    )

    def is_visible(self, category: Category) -> bool:
        return self.visible.get(category, False)

    def set(self, category: Category, visible: bool) -> None:
        self.visible[Category(category)] = visible

    def toggle(self, category: Category) -> bool:
        category = Category(category)
        self.visible[category] = not self.is_visible(category)
        return self.visible[category]

    def as_dict(self) -> dict[str, bool]:
        return {category.value: self.is_visible(category) for category in Category}


def compute_total_quantity(raw_input: float, conversion_ratio: float) -> float:
    """Total producible quantity from a raw input volume and conversion ratio."""
    if raw_input < 0 or conversion_ratio < 0:
        raise ValueError("raw input and conversion ratio must be non-negative")
    return raw_input * conversion_ratio
