"""
Application service: per-process map state shared by the HTTP handlers.
"""
import logging
from typing import Optional

from landuse_api.domain.models import Feature, FeatureCollection, Point, ToggleState
from landuse_api.services.application.fetch_coordinator import FetchCoordinator
from landuse_api.services.application.landuse_service import LandUseService
from landuse_api.services.domain.interaction_controller import InteractionController
from landuse_api.services.domain.summary import Summary, summarize
from landuse_api.services.domain.visibility_filter import visible

logger = logging.getLogger(__name__)


class MapSession:
    """
    Owns the state that outlives a single fetch: toggles, the fetch
    coordinator and the interaction controller.

    Published collections replace the previous one wholesale and clear any
    hover highlights that referred to it.
    """

    def __init__(
        self,
        service: LandUseService,
        reference_point: Point,
        debounce_seconds: float,
        required_kg_per_hectare: float,
    ):
        self.service = service
        self.required_kg_per_hectare = required_kg_per_hectare
        self.toggles = ToggleState()
        self.interaction = InteractionController(reference_point)
        self.coordinator = FetchCoordinator(
            service.fetch_collection,
            debounce_seconds=debounce_seconds,
        )
        self.coordinator.subscribe(self._on_published)

    def _on_published(self, collection: FeatureCollection) -> None:
        self.interaction.reset()

    @property
    def collection(self) -> FeatureCollection:
        """Latest published collection, empty before the first fetch."""
        latest = self.coordinator.latest
        return latest if latest is not None else FeatureCollection()

    def visible_features(self) -> tuple[Feature, ...]:
        return visible(self.collection.features, self.toggles)

    def find_visible(self, feature_id: str) -> Optional[Feature]:
        for feature in self.visible_features():
            if feature.id == feature_id:
                return feature
        return None

    def summary(self) -> Summary:
        return summarize(
            self.visible_features(),
            total_production=self.service.total_quantity,
            required_kg_per_hectare=self.required_kg_per_hectare,
        )

    async def close(self) -> None:
        await self.coordinator.aclose()
