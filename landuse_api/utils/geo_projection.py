"""
Geospatial projection utilities for coordinate transformations.
"""
from functools import lru_cache
from typing import Sequence, Tuple, List
from pyproj import Geod, Transformer

from landuse_api.domain.models import Point


_GEOD = Geod(ellps="WGS84")


def get_utm_zone(longitude: float) -> int:
    """
    Calculate the UTM zone number from longitude.

    Args:
        longitude: Longitude in degrees

    Returns:
        UTM zone number (1-60)
    """
    return min(int((longitude + 180) / 6) + 1, 60)


def get_utm_crs(longitude: float, latitude: float) -> str:
    """
    Get the appropriate UTM CRS (Coordinate Reference System) for a location.

    Args:
        longitude: Longitude in degrees
        latitude: Latitude in degrees

    Returns:
        EPSG code for the UTM zone
    """
    zone = get_utm_zone(longitude)
    # Northern hemisphere: EPSG:326XX, Southern hemisphere: EPSG:327XX
    hemisphere = "6" if latitude >= 0 else "7"
    return f"EPSG:32{hemisphere}{zone:02d}"


@lru_cache(maxsize=16)
def _get_transformer(utm_crs: str) -> Transformer:
    return Transformer.from_crs(
        "EPSG:4326",  # WGS84 (lat/lon)
        utm_crs,      # UTM zone
        always_xy=True  # Ensure (lon, lat) -> (x, y) order
    )


def project_ring_to_meters(ring: Sequence[Point]) -> List[Tuple[float, float]]:
    """
    Project a ring of points to planar UTM coordinates in meters.

    The UTM zone is chosen from the first point of the ring, so all
    vertices of one parcel share a single planar system.

    Args:
        ring: Ordered points in degrees

    Returns:
        List of (x, y) coordinates in meters
    """
    if not ring:
        raise ValueError("Ring cannot be empty")

    first = ring[0]
    transformer = _get_transformer(get_utm_crs(first.longitude, first.latitude))

    projected = []
    for point in ring:
        x, y = transformer.transform(point.longitude, point.latitude)
        projected.append((x, y))

    return projected


def geodesic_distance_m(origin: Point, target: Point) -> float:
    """
    Distance along the WGS84 ellipsoid between two points.

    Args:
        origin: Start point
        target: End point

    Returns:
        Distance in meters
    """
    _, _, distance = _GEOD.inv(
        origin.longitude, origin.latitude,
        target.longitude, target.latitude,
    )
    return float(distance)
