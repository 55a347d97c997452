"""
Dependency injection for FastAPI.
"""
from typing import Annotated, Optional
from fastapi import Depends

from landuse_api.config import settings
from landuse_api.domain.models import Point
from landuse_api.infrastructure.overpass_client import get_api_client
from landuse_api.services.application.landuse_service import LandUseService
from landuse_api.services.application.map_session import MapSession
from landuse_api.services.domain.area_allocator import AreaAllocator
from landuse_api.services.domain.query_builder import SpatialQueryBuilder
from landuse_api.services.domain.topology_converter import TopologyConverter


def build_landuse_service() -> LandUseService:
    """
    Factory for LandUseService wired from settings.

    Returns:
        LandUseService instance
    """
    return LandUseService(
        api_client=get_api_client(),
        query_builder=SpatialQueryBuilder(
            timeout_seconds=settings.overpass_query_timeout,
            include_relations=settings.overpass_include_relations,
        ),
        converter=TopologyConverter(),
        allocator=AreaAllocator(),
        center=Point(latitude=settings.poi_latitude, longitude=settings.poi_longitude),
        total_quantity=settings.total_quantity,
    )


# Singleton instance
_map_session: Optional[MapSession] = None


def get_map_session() -> MapSession:
    """
    Get or create the process-wide map session.

    Returns:
        MapSession instance
    """
    global _map_session
    if _map_session is None:
        _map_session = MapSession(
            service=build_landuse_service(),
            reference_point=Point(
                latitude=settings.reference_latitude,
                longitude=settings.reference_longitude,
            ),
            debounce_seconds=settings.debounce_seconds,
            required_kg_per_hectare=settings.required_kg_per_hectare,
        )
    return _map_session


async def close_map_session() -> None:
    """Cancel outstanding work of the current map session, if any, and forget it."""
    global _map_session
    if _map_session is not None:
        await _map_session.close()
    _map_session = None


# Type aliases for cleaner route signatures
MapSessionDep = Annotated[MapSession, Depends(get_map_session)]
