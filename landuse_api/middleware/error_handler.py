"""
Global error handling middleware.

Pipeline errors never reach this layer: fetches run in the coordinator's
background task and are reported through ``last_error`` on ``/parcels``,
and routes translate radius validation errors themselves.
"""
import logging
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Callable


logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Turns any exception escaping a route into a JSON 500 response."""

    async def dispatch(self, request: Request, call_next: Callable):
        try:
            return await call_next(request)
        except Exception as e:
            logger.exception(
                f"Unhandled exception on {request.method} {request.url.path}: {e}"
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error": "Internal server error",
                    "detail": "An unexpected error occurred",
                    "path": request.url.path,
                }
            )
