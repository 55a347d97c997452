"""
Domain service: Overpass QL query construction.
"""
import math
import logging
from typing import Iterable

import numpy as np

from landuse_api.domain.exceptions import QueryBuildError
from landuse_api.domain.models import Category, Point

logger = logging.getLogger(__name__)


def format_number(value: float) -> str:
    """Render a number in plain positional notation, without a trailing '.0'."""
    if float(value).is_integer():
        return str(int(value))
    # Overpass QL does not accept exponent notation
    return np.format_float_positional(float(value), trim="-")


def validate_radius(radius_m: float) -> float:
    """Return the radius as a float, rejecting negative or non-finite values."""
    try:
        radius = float(radius_m)
    except (TypeError, ValueError):
        raise QueryBuildError(f"Radius must be a number, got {radius_m!r}")
    if not math.isfinite(radius) or radius < 0:
        raise QueryBuildError(f"Radius must be a finite number >= 0, got {radius_m!r}")
    return radius


class SpatialQueryBuilder:
    """
    Builds the bounded land-use query sent to the Overpass API.

    The output is a pure function of its inputs. Categories are always
    emitted in the fixed ``Category`` order so identical requests produce
    byte-identical queries.
    """

    def __init__(self, timeout_seconds: int = 25, include_relations: bool = True):
        self.timeout_seconds = timeout_seconds
        self.include_relations = include_relations

    def build(
        self,
        center: Point,
        radius_m: float,
        categories: Iterable[Category],
    ) -> str:
        """
        Build a query for all land-use polygons of the given categories
        within ``radius_m`` of ``center``, with full geometry.

        Args:
            center: Query center
            radius_m: Search radius in meters (0 is valid)
            categories: Land-use categories to match

        Returns:
            Overpass QL query text

        Raises:
            QueryBuildError: If the radius is negative/non-finite or no
                valid category is given
        """
        radius = validate_radius(radius_m)
        ordered = self._validate_categories(categories)

        pattern = "^(" + "|".join(category.value for category in ordered) + ")$"
        around = (
            f"(around:{format_number(radius)},"
            f"{format_number(center.latitude)},{format_number(center.longitude)})"
        )
        statements = [f'  way["landuse"~"{pattern}"]{around};']
        if self.include_relations:
            statements.append(
                f'  relation["landuse"~"{pattern}"]["type"="multipolygon"]{around};'
            )

        query = "\n".join([
            f"[out:json][timeout:{self.timeout_seconds}];",
            "(",
            *statements,
            ");",
            "out body geom;",
        ])
        logger.debug(f"Built query for radius {radius}m and {len(ordered)} categories")
        return query

    @staticmethod
    def _validate_categories(categories: Iterable[Category]) -> list[Category]:
        resolved = set()
        for category in categories:
            try:
                resolved.add(Category(category))
            except ValueError:
                raise QueryBuildError(f"Unknown land-use category: {category!r}")
        if not resolved:
            raise QueryBuildError("At least one land-use category is required")
        return Category.ordered(resolved)
