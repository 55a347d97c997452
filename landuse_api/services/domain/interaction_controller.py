"""
Domain service: hover highlighting, parcel overlays and click distance.

Hover styling is expressed as a state transition returning a view for the
rendering layer; no rendered shape is mutated here.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional
import logging

from landuse_api.domain.models import Feature, Point
from landuse_api.utils.geo_projection import geodesic_distance_m

logger = logging.getLogger(__name__)


class HighlightState(str, Enum):
    NORMAL = "normal"
    HIGHLIGHTED = "highlighted"


@dataclass(frozen=True)
class FeatureStyle:
    """Polygon style consumed by the rendering surface."""
    fill_color: str
    weight: int = 1
    color: str = "#555"
    fill_opacity: float = 0.6


@dataclass(frozen=True)
class Overlay:
    """Informational popup anchored to a highlighted parcel."""
    feature_id: str
    category: str
    area_km2: float
    allocated_quantity: float

    @property
    def text(self) -> str:
        return (
            f"Type: {self.category}\n"
            f"Area: {self.area_km2:.2f} km²\n"
            f"Fertilizer: {self.allocated_quantity:.2f} L"
        )


@dataclass(frozen=True)
class InteractionView:
    """What the rendering surface should show for one parcel."""
    feature_id: str
    state: HighlightState
    style: FeatureStyle
    overlay: Optional[Overlay] = None


@dataclass(frozen=True)
class DistanceMeasurement:
    """Result of a click on the base map."""
    origin: Point
    target: Point
    distance_m: float

    @property
    def distance_km(self) -> float:
        return self.distance_m / 1000


def base_style(feature: Feature) -> FeatureStyle:
    return FeatureStyle(fill_color=feature.category.color)


def highlighted_style(feature: Feature) -> FeatureStyle:
    return FeatureStyle(fill_color=feature.category.color, weight=3, fill_opacity=0.9)


def overlay_for(feature: Feature) -> Overlay:
    return Overlay(
        feature_id=feature.id,
        category=feature.category.value,
        area_km2=round(feature.area_km2, 2),
        allocated_quantity=round(feature.allocated_quantity, 2),
    )


class InteractionController:
    """
    Tracks the Normal/Highlighted state of rendered parcels and the last
    click distance. Reads allocation data, never changes it.
    """

    def __init__(self, reference_point: Point):
        self.reference_point = reference_point
        self._highlighted: set[str] = set()
        self.last_distance: Optional[DistanceMeasurement] = None

    def state_of(self, feature_id: str) -> HighlightState:
        if feature_id in self._highlighted:
            return HighlightState.HIGHLIGHTED
        return HighlightState.NORMAL

    def view(self, feature: Feature) -> InteractionView:
        if self.state_of(feature.id) is HighlightState.HIGHLIGHTED:
            return InteractionView(
                feature_id=feature.id,
                state=HighlightState.HIGHLIGHTED,
                style=highlighted_style(feature),
                overlay=overlay_for(feature),
            )
        return InteractionView(
            feature_id=feature.id,
            state=HighlightState.NORMAL,
            style=base_style(feature),
        )

    def hover_enter(self, feature: Feature) -> InteractionView:
        self._highlighted.add(feature.id)
        return self.view(feature)

    def hover_exit(self, feature: Feature) -> InteractionView:
        # Always back to normal, even without a matching enter
        self._highlighted.discard(feature.id)
        return self.view(feature)

    def reset(self) -> None:
        """Drop all highlights (the parcels they refer to were replaced)."""
        if self._highlighted:
            logger.debug(f"Clearing {len(self._highlighted)} highlights")
        self._highlighted = set()

    def click(self, target: Point) -> DistanceMeasurement:
        measurement = DistanceMeasurement(
            origin=self.reference_point,
            target=target,
            distance_m=geodesic_distance_m(self.reference_point, target),
        )
        self.last_distance = measurement
        logger.info(f"Distance: {measurement.distance_km:.2f} km")
        return measurement
