"""
Unit tests for the fetch cycle and the map session.
"""
import pytest
from unittest.mock import AsyncMock

from landuse_api.domain.exceptions import FetchError, QueryBuildError
from landuse_api.domain.models import Category, Point, compute_total_quantity
from landuse_api.infrastructure.overpass_client import OverpassClient
from landuse_api.services.application.landuse_service import LandUseService
from landuse_api.services.application.map_session import MapSession
from landuse_api.services.domain.area_allocator import AreaAllocator
from landuse_api.services.domain.interaction_controller import HighlightState
from landuse_api.services.domain.query_builder import SpatialQueryBuilder
from landuse_api.services.domain.topology_converter import TopologyConverter

from helpers import CENTER


TOTAL = compute_total_quantity(213070, 0.07)


@pytest.fixture
def mock_api_client(overpass_response):
    """Create a mock Overpass client."""
    mock_client = AsyncMock(spec=OverpassClient)
    mock_client.run_query.return_value = overpass_response
    return mock_client


@pytest.fixture
def service(mock_api_client) -> LandUseService:
    return LandUseService(
        api_client=mock_api_client,
        query_builder=SpatialQueryBuilder(),
        converter=TopologyConverter(),
        allocator=AreaAllocator(),
        center=CENTER,
        total_quantity=TOTAL,
    )


class TestLandUseService:
    """Tests for one fetch cycle."""

    @pytest.mark.asyncio
    async def test_fetch_collection(self, service, mock_api_client):
        collection = await service.fetch_collection(5000)

        query = mock_api_client.run_query.await_args.args[0]
        assert "(around:5000,43.65064,11.46387)" in query
        assert len(collection) == 3
        assert collection.radius_m == 5000
        assert all(f.area_m2 > 0 for f in collection.features)
        assert sum(f.allocated_quantity for f in collection.features) == pytest.approx(TOTAL, rel=1e-6)

    @pytest.mark.asyncio
    async def test_all_categories_queried_by_default(self, service):
        query = service.build_query(1000)

        assert "^(farmland|plantation|orchard|vineyard|greenhouse_horticulture)$" in query

    @pytest.mark.asyncio
    async def test_invalid_radius_never_fetches(self, service, mock_api_client):
        with pytest.raises(QueryBuildError):
            await service.fetch_collection(-1)

        mock_api_client.run_query.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_fetch_error_propagates(self, service, mock_api_client):
        mock_api_client.run_query.side_effect = FetchError("down")

        with pytest.raises(FetchError):
            await service.fetch_collection(1000)

    @pytest.mark.asyncio
    async def test_empty_response(self, service, mock_api_client):
        mock_api_client.run_query.return_value = {"elements": []}

        collection = await service.fetch_collection(0)

        assert len(collection) == 0
        assert collection.allocation_degenerate


class TestMapSession:
    """Tests for session wiring."""

    @pytest.mark.asyncio
    async def test_publication_resets_highlights(self, service):
        session = MapSession(
            service=service,
            reference_point=Point(latitude=43.7696, longitude=11.2558),
            debounce_seconds=0.01,
            required_kg_per_hectare=160,
        )
        session.coordinator.request_radius(5000)
        await session.coordinator.settle()

        feature = session.find_visible("way-101")
        session.interaction.hover_enter(feature)
        session.coordinator.request_radius(6000)
        await session.coordinator.settle()

        assert session.interaction.state_of("way-101") is HighlightState.NORMAL
        assert session.collection.radius_m == 6000

    @pytest.mark.asyncio
    async def test_summary_uses_visible_features(self, service):
        session = MapSession(
            service=service,
            reference_point=Point(latitude=43.7696, longitude=11.2558),
            debounce_seconds=0.01,
            required_kg_per_hectare=160,
        )
        session.coordinator.request_radius(5000)
        await session.coordinator.settle()

        session.toggles.set(Category.VINEYARD, False)
        summary = session.summary()

        assert summary.feature_count == 2
        assert session.find_visible("way-102") is None
        assert summary.total_production == pytest.approx(TOTAL)

    def test_empty_before_first_fetch(self, service):
        session = MapSession(
            service=service,
            reference_point=Point(latitude=43.7696, longitude=11.2558),
            debounce_seconds=0.01,
            required_kg_per_hectare=160,
        )

        assert len(session.collection) == 0
        assert session.visible_features() == ()
