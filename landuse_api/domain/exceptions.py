"""
Error taxonomy for the land-use acquisition and allocation pipeline.

- ``QueryBuildError``  - invalid radius or category set, rejected before any fetch.
- ``FetchError``       - network, timeout, non-2xx or unparseable upstream response.
- ``ConversionError``  - malformed topology; raised per feature and handled by
  dropping that feature.

A zero total area is not an error: the allocator falls back to zero
allocations and flags the collection as ``allocation_degenerate``.
"""
from typing import Optional


class LandUsePipelineError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(self, message: str = ""):
        self.message = message
        super().__init__(message)


class QueryBuildError(LandUsePipelineError, ValueError):
    """Raised when a spatial query cannot be built from the given inputs."""


class FetchError(LandUsePipelineError):
    """Raised when the spatial data source cannot deliver a usable response."""

    def __init__(self, message: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code or 502


class ConversionError(LandUsePipelineError):
    """Raised when raw topology cannot be turned into a polygon feature."""

    def __init__(self, message: str = "", element_id: Optional[str] = None):
        super().__init__(message)
        self.element_id = element_id
