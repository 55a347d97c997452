"""
API request and response models using Pydantic.
"""
from typing import Any, List, Optional
from pydantic import BaseModel, Field


class RadiusRequest(BaseModel):
    """New search radius from the radius control."""
    radius_km: float = Field(
        ge=0,
        description="Search radius in kilometers",
        examples=[5.0]
    )


class ToggleRequest(BaseModel):
    """New visibility for one category."""
    visible: bool = Field(description="Whether parcels of this category are shown")


class ClickRequest(BaseModel):
    """Location clicked on the base map."""
    latitude: float = Field(ge=-90, le=90, examples=[43.7])
    longitude: float = Field(ge=-180, le=180, examples=[11.3])


class CategoryInfo(BaseModel):
    """One land-use category with its legend color and toggle."""
    category: str
    label: str
    color: str
    visible: bool


class CategoriesResponse(BaseModel):
    """Ordered categories for the layer toggles."""
    categories: List[CategoryInfo]


class QueryResponse(BaseModel):
    """Query text that would be sent for a radius."""
    radius_m: float
    query: str


class FetchStatusResponse(BaseModel):
    """Fetch coordinator status after a radius change."""
    state: str
    request_token: int
    pending_radius_m: Optional[float] = None
    debounce_seconds: float


class RadiusControlResponse(BaseModel):
    """Radius control settings and the current fetch status."""
    initial_radius_km: float
    step_km: float
    min_radius_km: float = 0.0
    state: str
    pending_radius_m: Optional[float] = None
    published_radius_m: Optional[float] = None
    debounce_seconds: float


class ParcelsResponse(BaseModel):
    """Latest published parcels, filtered by the current toggles."""
    state: str
    radius_m: Optional[float] = Field(
        default=None,
        description="Radius of the published collection (null before the first fetch)"
    )
    total_feature_count: int
    visible_feature_count: int
    allocation_degenerate: bool
    last_error: Optional[str] = None
    geojson: dict[str, Any] = Field(
        description="GeoJSON FeatureCollection of the visible parcels"
    )


class CategorySummary(BaseModel):
    """Per-category totals for the area chart."""
    category: str
    label: str
    color: str
    feature_count: int
    area_m2: float
    area_km2: float
    allocated_quantity: float


class SummaryResponse(BaseModel):
    """Totals over the visible parcels."""
    feature_count: int
    total_area_m2: float
    total_area_km2: float
    total_allocated_liters: float
    total_production_liters: float
    requirement_kg: float
    categories: List[CategorySummary]

    class Config:
        json_schema_extra = {
            "example": {
                "feature_count": 2,
                "total_area_m2": 400.0,
                "total_area_km2": 0.0004,
                "total_allocated_liters": 14914.9,
                "total_production_liters": 14914.9,
                "requirement_kg": 6.4,
                "categories": [],
            }
        }


class StyleModel(BaseModel):
    fill_color: str
    weight: int
    color: str
    fill_opacity: float


class OverlayModel(BaseModel):
    category: str
    area_km2: float
    allocated_quantity: float
    text: str


class InteractionResponse(BaseModel):
    """Highlight state, style and overlay for one parcel."""
    feature_id: str
    state: str
    style: StyleModel
    overlay: Optional[OverlayModel] = None


class DistanceResponse(BaseModel):
    """Distance from the reference point to a clicked location."""
    latitude: float
    longitude: float
    distance_m: float
    distance_km: float


class MarkerResponse(BaseModel):
    """Point of interest and its fertilizer production."""
    name: str
    latitude: float
    longitude: float
    raw_input_liters: float
    conversion_ratio: float
    total_production_liters: float
