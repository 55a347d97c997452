"""
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from landuse_api.config import settings
from landuse_api.middleware.error_handler import ErrorHandlerMiddleware
from landuse_api.api.rate_limit import limiter
from landuse_api.api.v1.routers import landuse

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events using the modern FastAPI pattern.
    """
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(f"Point of interest: {settings.poi_name} "
                f"({settings.poi_latitude}, {settings.poi_longitude})")
    logger.info(f"Total production: {settings.total_quantity:.2f} L, "
                f"debounce: {settings.debounce_seconds}s")
    logger.info(f"Rate limit: {settings.rate_limit_requests} requests/minute")

    if settings.fetch_on_startup:
        from landuse_api.api.dependencies import get_map_session
        get_map_session().coordinator.request_radius(settings.initial_radius_km * 1000)

    yield

    # Shutdown
    from landuse_api.api.dependencies import close_map_session
    from landuse_api.infrastructure.overpass_client import close_api_client
    logger.info("Shutting down application...")
    await close_map_session()
    await close_api_client()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Land-use parcels and fertilizer allocation around a point of interest.

    Parcels (farmland, plantations, orchards, vineyards, greenhouses) are
    fetched from OpenStreetMap through the Overpass API, and the fertilizer
    produced from the collected raw input is allocated across them in
    proportion to their area.

    ## Pipeline

    1. Build a bounded Overpass query for the search radius
    2. Convert the returned nodes/ways/relations into closed polygon rings
    3. Project each ring to its UTM zone and measure its area
    4. Allocate the total production proportionally to area
    5. Filter by the category toggles for display and summaries

    Radius changes are debounced and the most recent request always wins;
    a failed fetch keeps the previous parcels on display.
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add CORS middleware with configurable origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add global error handling middleware
app.add_middleware(ErrorHandlerMiddleware)

# Include routers
app.include_router(landuse.router, prefix="/api/v1")


@app.get("/", tags=["health"])
async def root():
    """
    Root endpoint for health check.

    Returns:
        Status message
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
    }


@app.get("/health", tags=["health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        Health status
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
    }
