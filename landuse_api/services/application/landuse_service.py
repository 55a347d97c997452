"""
Application service: one land-use fetch cycle.
"""
import logging
from typing import Iterable, Optional

from landuse_api.domain.models import Category, FeatureCollection, Point
from landuse_api.infrastructure.overpass_client import OverpassClient
from landuse_api.services.domain.area_allocator import AreaAllocator
from landuse_api.services.domain.query_builder import SpatialQueryBuilder
from landuse_api.services.domain.topology_converter import TopologyConverter

logger = logging.getLogger(__name__)


class LandUseService:
    """
    Application service for land-use parcel acquisition.

    Coordinates infrastructure and domain services only: build the query,
    fetch the topology, convert it and allocate the total quantity.
    """

    def __init__(
        self,
        api_client: OverpassClient,
        query_builder: SpatialQueryBuilder,
        converter: TopologyConverter,
        allocator: AreaAllocator,
        center: Point,
        total_quantity: float,
        categories: Optional[Iterable[Category]] = None,
    ):
        """
        Initialize the service with dependencies.

        Args:
            api_client: Overpass client for data fetching
            query_builder: Builds the bounded query text
            converter: Turns raw topology into polygon features
            allocator: Computes areas and allocations
            center: Fixed point of interest
            total_quantity: Quantity distributed over each collection
            categories: Categories to fetch, all by default
        """
        self.api_client = api_client
        self.query_builder = query_builder
        self.converter = converter
        self.allocator = allocator
        self.center = center
        self.total_quantity = total_quantity
        self.categories = tuple(Category.ordered(categories or Category))

    def build_query(self, radius_m: float) -> str:
        return self.query_builder.build(self.center, radius_m, self.categories)

    async def fetch_collection(self, radius_m: float) -> FeatureCollection:
        """
        Fetch and compute the parcel collection for a radius.

        Args:
            radius_m: Search radius in meters

        Returns:
            FeatureCollection with areas and allocations

        Raises:
            QueryBuildError: If the radius is invalid
            FetchError: If the data source fails
            ConversionError: If the response document is malformed
        """
        query = self.build_query(radius_m)
        logger.info(f"Fetching land use within {radius_m:.0f}m of "
                    f"({self.center.latitude}, {self.center.longitude})")

        raw = await self.api_client.run_query(query)
        converted = self.converter.convert(raw)

        return self.allocator.allocate(
            converted.features,
            self.total_quantity,
            radius_m=radius_m,
        )
