"""
API router for land-use parcel endpoints.
"""
from fastapi import APIRouter, HTTPException, Path, Query, Request, status
from typing import Annotated

from landuse_api.api.dependencies import MapSessionDep
from landuse_api.api.rate_limit import RADIUS_RATE_LIMIT, limiter
from landuse_api.api.v1.models.responses import (
    CategoriesResponse,
    CategoryInfo,
    CategorySummary,
    ClickRequest,
    DistanceResponse,
    FetchStatusResponse,
    InteractionResponse,
    MarkerResponse,
    OverlayModel,
    ParcelsResponse,
    QueryResponse,
    RadiusControlResponse,
    RadiusRequest,
    StyleModel,
    SummaryResponse,
    ToggleRequest,
)
from landuse_api.config import settings
from landuse_api.domain.exceptions import QueryBuildError
from landuse_api.domain.models import Category, Point
from landuse_api.services.domain.interaction_controller import InteractionView


router = APIRouter(
    prefix="/landuse",
    tags=["landuse"],
)

FeatureIdPath = Annotated[str, Path(description="Parcel identifier, e.g. 'way-123'")]


def _km_to_m(radius_km: float) -> float:
    return radius_km * 1000


def _check_step(radius_km: float, step_km: float) -> None:
    """Reject radii the radius control cannot produce."""
    if step_km <= 0:
        return
    steps = radius_km / step_km
    if abs(steps - round(steps)) > 1e-9:
        raise HTTPException(
            status_code=400,
            detail=f"Radius must be a multiple of {step_km} km, got {radius_km}",
        )


def _interaction_response(view: InteractionView) -> InteractionResponse:
    overlay = None
    if view.overlay is not None:
        overlay = OverlayModel(
            category=view.overlay.category,
            area_km2=view.overlay.area_km2,
            allocated_quantity=view.overlay.allocated_quantity,
            text=view.overlay.text,
        )
    return InteractionResponse(
        feature_id=view.feature_id,
        state=view.state.value,
        style=StyleModel(
            fill_color=view.style.fill_color,
            weight=view.style.weight,
            color=view.style.color,
            fill_opacity=view.style.fill_opacity,
        ),
        overlay=overlay,
    )


@router.get(
    "/categories",
    response_model=CategoriesResponse,
    summary="List land-use categories",
)
async def get_categories(session: MapSessionDep) -> CategoriesResponse:
    """Categories in display order with legend colors and current toggles."""
    return CategoriesResponse(categories=[
        CategoryInfo(
            category=category.value,
            label=category.label,
            color=category.color,
            visible=session.toggles.is_visible(category),
        )
        for category in Category
    ])


@router.put(
    "/toggles/{category}",
    response_model=CategoriesResponse,
    summary="Show or hide a category",
)
async def set_toggle(
    category: Annotated[Category, Path(description="Land-use category")],
    body: ToggleRequest,
    session: MapSessionDep,
) -> CategoriesResponse:
    """
    Update the visibility of one category.

    Affects the parcels layer and every summary figure alike.
    """
    session.toggles.set(category, body.visible)
    return await get_categories(session)


@router.get(
    "/query",
    response_model=QueryResponse,
    summary="Preview the Overpass query for a radius",
    responses={400: {"description": "Invalid radius"}},
)
async def get_query(
    radius_km: Annotated[float, Query(description="Search radius in kilometers")],
    session: MapSessionDep,
) -> QueryResponse:
    radius_m = _km_to_m(radius_km)
    try:
        query = session.service.build_query(radius_m)
    except QueryBuildError as e:
        raise HTTPException(status_code=400, detail=e.message)
    return QueryResponse(radius_m=radius_m, query=query)


@router.get(
    "/radius",
    response_model=RadiusControlResponse,
    summary="Radius control settings and fetch status",
)
async def get_radius(session: MapSessionDep) -> RadiusControlResponse:
    coordinator = session.coordinator
    return RadiusControlResponse(
        initial_radius_km=settings.initial_radius_km,
        step_km=settings.radius_step_km,
        state=coordinator.state.value,
        pending_radius_m=coordinator.pending_radius_m,
        published_radius_m=session.collection.radius_m,
        debounce_seconds=coordinator.debounce_seconds,
    )


@router.put(
    "/radius",
    response_model=FetchStatusResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Change the search radius",
    description="""
    Register a new search radius.

    The radius must be a multiple of the configured step.
    The fetch is debounced: it is dispatched once the radius has stopped
    changing for the debounce window. Results of superseded requests are
    discarded, so the latest radius always wins.
    """,
    responses={
        400: {"description": "Invalid radius"},
        429: {"description": "Rate limit exceeded"},
    },
)
@limiter.limit(RADIUS_RATE_LIMIT)
async def set_radius(
    request: Request,
    body: RadiusRequest,
    session: MapSessionDep,
) -> FetchStatusResponse:
    _check_step(body.radius_km, settings.radius_step_km)
    coordinator = session.coordinator
    try:
        token = coordinator.request_radius(_km_to_m(body.radius_km))
    except QueryBuildError as e:
        raise HTTPException(status_code=400, detail=e.message)

    return FetchStatusResponse(
        state=coordinator.state.value,
        request_token=token,
        pending_radius_m=coordinator.pending_radius_m,
        debounce_seconds=coordinator.debounce_seconds,
    )


@router.get(
    "/parcels",
    response_model=ParcelsResponse,
    summary="Get the visible parcels",
)
async def get_parcels(session: MapSessionDep) -> ParcelsResponse:
    """
    Latest published parcels filtered by the category toggles.

    After a failed fetch the previous parcels are still returned, with the
    failure reported in ``last_error``.
    """
    collection = session.collection
    visible_features = session.visible_features()
    last_error = session.coordinator.last_error

    return ParcelsResponse(
        state=session.coordinator.state.value,
        radius_m=collection.radius_m,
        total_feature_count=len(collection),
        visible_feature_count=len(visible_features),
        allocation_degenerate=collection.allocation_degenerate,
        last_error=last_error.message if last_error else None,
        geojson=collection.to_geojson(visible_features),
    )


@router.get(
    "/summary",
    response_model=SummaryResponse,
    summary="Get totals for the visible parcels",
)
async def get_summary(session: MapSessionDep) -> SummaryResponse:
    summary = session.summary()
    return SummaryResponse(
        feature_count=summary.feature_count,
        total_area_m2=summary.total_area_m2,
        total_area_km2=summary.total_area_km2,
        total_allocated_liters=summary.total_allocated,
        total_production_liters=summary.total_production,
        requirement_kg=summary.requirement_kg,
        categories=[
            CategorySummary(
                category=item.category.value,
                label=item.category.label,
                color=item.color,
                feature_count=item.feature_count,
                area_m2=item.area_m2,
                area_km2=item.area_m2 / 1e6,
                allocated_quantity=item.allocated_quantity,
            )
            for item in summary.categories
        ],
    )


@router.post(
    "/parcels/{feature_id}/hover",
    response_model=InteractionResponse,
    summary="Highlight a parcel",
    responses={404: {"description": "Parcel not visible"}},
)
async def hover_enter(feature_id: FeatureIdPath, session: MapSessionDep) -> InteractionResponse:
    feature = session.find_visible(feature_id)
    if feature is None:
        raise HTTPException(status_code=404, detail=f"Parcel '{feature_id}' is not visible")
    return _interaction_response(session.interaction.hover_enter(feature))


@router.delete(
    "/parcels/{feature_id}/hover",
    response_model=InteractionResponse,
    summary="Remove a parcel highlight",
    responses={404: {"description": "Parcel not found"}},
)
async def hover_exit(feature_id: FeatureIdPath, session: MapSessionDep) -> InteractionResponse:
    """
    Return a parcel to its normal style.

    Hidden parcels are accepted too, so a highlight never outlives a
    category toggle.
    """
    feature = session.collection.get(feature_id)
    if feature is None:
        raise HTTPException(status_code=404, detail=f"Parcel '{feature_id}' not found")
    return _interaction_response(session.interaction.hover_exit(feature))


@router.post(
    "/distance",
    response_model=DistanceResponse,
    summary="Measure distance from the reference point",
)
async def measure_distance(body: ClickRequest, session: MapSessionDep) -> DistanceResponse:
    measurement = session.interaction.click(
        Point(latitude=body.latitude, longitude=body.longitude)
    )
    return DistanceResponse(
        latitude=body.latitude,
        longitude=body.longitude,
        distance_m=measurement.distance_m,
        distance_km=measurement.distance_km,
    )


@router.get(
    "/marker",
    response_model=MarkerResponse,
    summary="Point of interest details",
)
async def get_marker(session: MapSessionDep) -> MarkerResponse:
    center = session.service.center
    return MarkerResponse(
        name=settings.poi_name,
        latitude=center.latitude,
        longitude=center.longitude,
        raw_input_liters=settings.raw_input_liters,
        conversion_ratio=settings.conversion_ratio,
        total_production_liters=session.service.total_quantity,
    )
