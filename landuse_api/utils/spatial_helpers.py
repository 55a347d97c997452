"""
Spatial helper functions.

Provides utilities for:
- Ring closing and vertex counting
- Stitching way segments into closed rings
- Planar polygon area with degenerate-geometry fallback
"""
import math
import logging
from shapely.geometry import Polygon

logger = logging.getLogger(__name__)

Coordinate = tuple[float, float]

MIN_RING_VERTICES = 3


def close_ring(coordinates: list[Coordinate]) -> list[Coordinate]:
    """
    Return the ring with its first coordinate repeated at the end.

    Args:
        coordinates: Ordered coordinates, closed or open

    Returns:
        Closed list of coordinates
    """
    if coordinates and coordinates[0] != coordinates[-1]:
        return [*coordinates, coordinates[0]]
    return list(coordinates)


def count_distinct(coordinates: list[Coordinate]) -> int:
    """Number of distinct coordinates in a ring."""
    return len(set(coordinates))


def stitch_rings(segments: list[list[Coordinate]]) -> list[list[Coordinate]]:
    """
    Join open way segments end to end into closed rings.

    Segments may be reversed to connect. Already-closed segments are
    returned as rings of their own.

    Args:
        segments: Ordered coordinate lists (e.g. outer members of a relation)

    Returns:
        List of closed rings

    Raises:
        ValueError: If the segments cannot be joined into closed rings
    """
    pending = [list(segment) for segment in segments if segment]
    rings = []

    while pending:
        current = pending.pop(0)
        while current[0] != current[-1]:
            for index, segment in enumerate(pending):
                if segment[0] == current[-1]:
                    current.extend(segment[1:])
                elif segment[-1] == current[-1]:
                    current.extend(reversed(segment[:-1]))
                elif segment[-1] == current[0]:
                    current[:0] = segment[:-1]
                elif segment[0] == current[0]:
                    current[:0] = list(reversed(segment[1:]))
                else:
                    continue
                del pending[index]
                break
            else:
                raise ValueError(
                    f"Open ring: no segment continues from {current[-1]}"
                )
        rings.append(current)

    logger.debug(f"Stitched {len(segments)} segments into {len(rings)} rings")
    return rings


def planar_polygon_area(coordinates: list[Coordinate]) -> float:
    """
    Area of a planar polygon in the units of its coordinates squared.

    Degenerate polygons (fewer than three distinct vertices, collinear,
    self-intersecting or otherwise invalid) have area 0.

    Args:
        coordinates: (x, y) ring coordinates

    Returns:
        Non-negative area
    """
    if count_distinct(coordinates) < MIN_RING_VERTICES:
        return 0.0

    polygon = Polygon(coordinates)
    if not polygon.is_valid:
        logger.debug("Invalid polygon geometry, using area 0")
        return 0.0

    area = float(polygon.area)
    if not math.isfinite(area):
        return 0.0
    return area
