"""
Domain service: Overpass topology to polygon features.

Reconstructs closed parcel rings from the nodes/ways/relations graph
returned by the Overpass API. Geometry only: areas and allocations are
left at zero for the allocator.
"""
import logging
from typing import Any, Optional

from landuse_api.domain.exceptions import ConversionError
from landuse_api.domain.models import Category, Feature, FeatureCollection, Point
from landuse_api.utils.spatial_helpers import (
    MIN_RING_VERTICES,
    Coordinate,
    close_ring,
    count_distinct,
    stitch_rings,
)

logger = logging.getLogger(__name__)


class TopologyConverter:
    """
    Converts raw Overpass JSON into a FeatureCollection.

    Failures are isolated per element: a way or relation that cannot form
    a ring, or carries no recognized ``landuse`` tag, is dropped and the
    rest of the batch is converted.
    """

    def convert(self, raw: Any) -> FeatureCollection:
        """
        Convert an Overpass response document.

        Args:
            raw: Parsed JSON document with an ``elements`` list

        Returns:
            FeatureCollection with ring geometry set

        Raises:
            ConversionError: If the document itself is malformed
        """
        if not isinstance(raw, dict) or not isinstance(raw.get("elements"), list):
            raise ConversionError("Overpass response has no 'elements' list")

        elements = [e for e in raw["elements"] if isinstance(e, dict)]
        nodes = self._index_nodes(elements)

        features: list[Feature] = []
        dropped = 0
        for element in elements:
            element_type = element.get("type")
            if element_type not in ("way", "relation") or "id" not in element:
                continue

            category = self._category_of(element)
            if category is None:
                continue

            try:
                if element_type == "way":
                    features.append(self._convert_way(element, category, nodes))
                else:
                    features.extend(self._convert_relation(element, category, nodes))
            except ConversionError as e:
                dropped += 1
                logger.warning(f"Dropping {e.element_id}: {e.message}")

        logger.info(f"Converted {len(features)} features ({dropped} dropped)")
        return FeatureCollection(features=tuple(features))

    @staticmethod
    def _index_nodes(elements: list[dict]) -> dict[int, Coordinate]:
        nodes = {}
        for element in elements:
            if element.get("type") == "node" and "lat" in element and "lon" in element:
                nodes[element["id"]] = (float(element["lat"]), float(element["lon"]))
        return nodes

    @staticmethod
    def _category_of(element: dict) -> Optional[Category]:
        tags = element.get("tags") or {}
        landuse = tags.get("landuse")
        if landuse is None:
            # Untagged ways are usually relation members
            return None
        try:
            return Category(landuse)
        except ValueError:
            logger.warning(
                f"Dropping {element.get('type')}/{element.get('id')}: "
                f"unrecognized landuse '{landuse}'"
            )
            return None

    def _convert_way(
        self,
        way: dict,
        category: Category,
        nodes: dict[int, Coordinate],
    ) -> Feature:
        element_id = f"way/{way.get('id')}"
        coordinates = self._way_coordinates(way, nodes, element_id)
        return self._build_feature(
            way,
            category,
            feature_id=f"way-{way['id']}",
            coordinates=coordinates,
            element_id=element_id,
        )

    def _convert_relation(
        self,
        relation: dict,
        category: Category,
        nodes: dict[int, Coordinate],
    ) -> list[Feature]:
        element_id = f"relation/{relation.get('id')}"
        segments = []
        for member in relation.get("members") or []:
            if member.get("type") != "way" or member.get("role") not in ("outer", ""):
                continue
            segments.append(
                self._way_coordinates(member, nodes, f"{element_id} member {member.get('ref')}")
            )

        if not segments:
            raise ConversionError("relation has no outer ways", element_id=element_id)

        try:
            rings = stitch_rings(segments)
        except ValueError as e:
            raise ConversionError(str(e), element_id=element_id)

        return [
            self._build_feature(
                relation,
                category,
                feature_id=f"relation-{relation['id']}-{index}",
                coordinates=ring,
                element_id=element_id,
            )
            for index, ring in enumerate(rings)
        ]

    @staticmethod
    def _way_coordinates(
        way: dict,
        nodes: dict[int, Coordinate],
        element_id: str,
    ) -> list[Coordinate]:
        """Ring coordinates from embedded geometry, falling back to node references."""
        geometry = way.get("geometry")
        if geometry is not None:
            coordinates = []
            for vertex in geometry:
                try:
                    coordinates.append((float(vertex["lat"]), float(vertex["lon"])))
                except (KeyError, TypeError, ValueError):
                    raise ConversionError("missing node geometry", element_id=element_id)
            return coordinates

        refs = way.get("nodes")
        if not refs:
            raise ConversionError("way has neither geometry nor nodes", element_id=element_id)

        coordinates = []
        for ref in refs:
            if ref not in nodes:
                raise ConversionError(f"missing node geometry for node {ref}", element_id=element_id)
            coordinates.append(nodes[ref])
        return coordinates

    @staticmethod
    def _build_feature(
        element: dict,
        category: Category,
        feature_id: str,
        coordinates: list[Coordinate],
        element_id: str,
    ) -> Feature:
        if count_distinct(coordinates) < MIN_RING_VERTICES:
            raise ConversionError(
                f"ring needs at least {MIN_RING_VERTICES} distinct points, "
                f"got {count_distinct(coordinates)}",
                element_id=element_id,
            )

        try:
            ring = tuple(
                Point(latitude=lat, longitude=lon)
                for lat, lon in close_ring(coordinates)
            )
        except ValueError as e:
            raise ConversionError(f"invalid coordinates: {e}", element_id=element_id)
        return Feature(
            id=feature_id,
            osm_type=element["type"],
            osm_id=int(element["id"]),
            category=category,
            ring=ring,
            name=(element.get("tags") or {}).get("name"),
        )
