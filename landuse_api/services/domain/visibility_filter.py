"""
Domain service: visible parcels for the current toggle state.
"""
from typing import Iterable

from landuse_api.domain.models import Feature, ToggleState


def visible(features: Iterable[Feature], toggles: ToggleState) -> tuple[Feature, ...]:
    """
    Features whose category is toggled on, in their original order.

    Both the rendered layer and every aggregate are computed from this
    result so the map and the numbers always agree.
    """
    return tuple(feature for feature in features if toggles.is_visible(feature.category))
