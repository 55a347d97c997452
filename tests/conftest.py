"""
Shared pytest fixtures for all tests.

This module provides common fixtures including:
- Sample Overpass responses
- Sample parcels
- FastAPI test client
"""
import pytest
from fastapi.testclient import TestClient

from landuse_api.main import app
from landuse_api.domain.models import Category, FeatureCollection

from helpers import geometry, make_feature


# ============================================================
# Sample Data Fixtures
# ============================================================

@pytest.fixture
def overpass_response() -> dict:
    """Overpass 'out body geom' response with two ways and one relation."""
    return {
        "version": 0.6,
        "generator": "Overpass API",
        "elements": [
            {
                "type": "way",
                "id": 101,
                "nodes": [1, 2, 3, 4, 1],
                "geometry": geometry(
                    (43.650, 11.460), (43.650, 11.461),
                    (43.651, 11.461), (43.651, 11.460), (43.650, 11.460),
                ),
                "tags": {"landuse": "farmland", "name": "Campo Nord"},
            },
            {
                "type": "way",
                "id": 102,
                "nodes": [5, 6, 7, 8, 5],
                "geometry": geometry(
                    (43.652, 11.462), (43.652, 11.464),
                    (43.654, 11.464), (43.654, 11.462), (43.652, 11.462),
                ),
                "tags": {"landuse": "vineyard"},
            },
            {
                "type": "relation",
                "id": 900,
                "members": [
                    {
                        "type": "way",
                        "ref": 201,
                        "role": "outer",
                        "geometry": geometry((43.660, 11.470), (43.660, 11.472), (43.662, 11.472)),
                    },
                    {
                        "type": "way",
                        "ref": 202,
                        "role": "outer",
                        "geometry": geometry((43.662, 11.472), (43.662, 11.470), (43.660, 11.470)),
                    },
                ],
                "tags": {"landuse": "orchard", "type": "multipolygon"},
            },
        ],
    }


@pytest.fixture
def sample_collection() -> FeatureCollection:
    """Allocated collection of three parcels in two categories."""
    return FeatureCollection(
        features=(
            make_feature("way-1", Category.FARMLAND, area_m2=100.0, allocated_quantity=2982.98),
            make_feature("way-2", Category.VINEYARD, area_m2=300.0, allocated_quantity=8948.94),
            make_feature("way-3", Category.FARMLAND, area_m2=100.0, allocated_quantity=2982.98),
        ),
        radius_m=5000.0,
        total_area_m2=500.0,
        total_quantity=14914.9,
    )


# ============================================================
# FastAPI Test Client Fixtures
# ============================================================

@pytest.fixture
def test_client() -> TestClient:
    """Create a synchronous test client for FastAPI."""
    return TestClient(app)
