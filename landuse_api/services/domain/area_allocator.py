"""
Domain service: parcel area and proportional fertilizer allocation.
"""
import logging
from typing import Callable, Optional, Sequence
import numpy as np

from landuse_api.domain.models import Feature, FeatureCollection
from landuse_api.utils.geo_projection import project_ring_to_meters
from landuse_api.utils.spatial_helpers import planar_polygon_area

logger = logging.getLogger(__name__)


def ring_area_m2(feature: Feature) -> float:
    """Planar area of a feature's ring in its local UTM zone, in m²."""
    return planar_polygon_area(project_ring_to_meters(feature.ring))


def distribute_quantity(areas: Sequence[float], total_quantity: float) -> list[float]:
    """
    Split ``total_quantity`` proportionally to ``areas``.

    When the areas sum to zero nothing is allocated and every share is 0.

    Args:
        areas: Non-negative areas
        total_quantity: Quantity to distribute

    Returns:
        One share per area, in input order
    """
    weights = np.asarray(areas, dtype=float)
    if weights.size == 0:
        return []

    total_area = float(weights.sum())
    if total_area <= 0:
        return [0.0] * len(weights)

    shares = total_quantity * weights / total_area
    return [float(share) for share in shares]


class AreaAllocator:
    """
    Computes per-parcel area and allocates a fixed quantity across parcels.

    Allocation is recomputed from scratch for every collection; equal areas
    always receive equal shares, independent of category.
    """

    def __init__(self, area_fn: Optional[Callable[[Feature], float]] = None):
        """
        Initialize the allocator.

        Args:
            area_fn: Area function, defaults to the projected planar area
        """
        self.area_fn = area_fn or ring_area_m2

    def allocate(
        self,
        features: Sequence[Feature],
        total_quantity: float,
        radius_m: Optional[float] = None,
    ) -> FeatureCollection:
        """
        Return a new collection with ``area_m2`` and ``allocated_quantity`` set.

        Args:
            features: Features with ring geometry
            total_quantity: Total quantity to distribute
            radius_m: Search radius the features were fetched for

        Returns:
            FeatureCollection with areas and allocations
        """
        if total_quantity < 0:
            raise ValueError(f"Total quantity must be non-negative, got {total_quantity}")

        areas = [self._safe_area(feature) for feature in features]
        shares = distribute_quantity(areas, total_quantity)
        total_area = float(sum(areas))

        if features and total_area <= 0:
            logger.warning(
                f"Total area of {len(features)} features is zero, nothing allocated"
            )

        allocated = tuple(
            feature.model_copy(update={"area_m2": area, "allocated_quantity": share})
            for feature, area, share in zip(features, areas, shares)
        )

        logger.info(
            f"Allocated {total_quantity:.2f} over {len(allocated)} features "
            f"({total_area / 1e6:.2f} km²)"
        )
        return FeatureCollection(
            features=allocated,
            radius_m=radius_m,
            total_area_m2=total_area,
            total_quantity=total_quantity,
        )

    def _safe_area(self, feature: Feature) -> float:
        area = float(self.area_fn(feature))
        if not np.isfinite(area) or area < 0:
            logger.debug(f"Non-finite or negative area for {feature.id}, using 0")
            return 0.0
        return area
