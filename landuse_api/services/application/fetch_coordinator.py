"""
Application service: debounced, last-request-wins fetch lifecycle.

State machine::

    IDLE --radius change--> PENDING_DEBOUNCE --window elapsed--> IN_FLIGHT --done--> IDLE
                            PENDING_DEBOUNCE --radius change--> PENDING_DEBOUNCE (timer restarts)

Every radius change takes a new request token. A fetch that completes
with a token other than the latest one is discarded, so published
collections are ordered by request time rather than response time.
All state is touched from the event loop thread only.
"""
import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional

from landuse_api.domain.exceptions import FetchError, LandUsePipelineError
from landuse_api.domain.models import FeatureCollection
from landuse_api.services.domain.query_builder import validate_radius

logger = logging.getLogger(__name__)

Fetcher = Callable[[float], Awaitable[FeatureCollection]]
CollectionSubscriber = Callable[[FeatureCollection], None]
FailureSubscriber = Callable[[LandUsePipelineError], None]


class FetchState(str, Enum):
    IDLE = "idle"
    PENDING_DEBOUNCE = "pending_debounce"
    IN_FLIGHT = "in_flight"


class FetchCoordinator:
    """
    The only component that triggers network-bound work.

    Radius changes are debounced (trailing); the most recent request wins.
    On failure the previously published collection is retained.
    """

    def __init__(self, fetch: Fetcher, debounce_seconds: float = 0.5):
        """
        Initialize the coordinator.

        Args:
            fetch: Coroutine function producing a collection for a radius in meters
            debounce_seconds: Quiet period after the last radius change
        """
        self._fetch = fetch
        self.debounce_seconds = debounce_seconds

        self.state = FetchState.IDLE
        self.latest: Optional[FeatureCollection] = None
        self.last_error: Optional[LandUsePipelineError] = None
        self.pending_radius_m: Optional[float] = None
        self.dispatch_count = 0

        self._token = 0
        self._debounce_task: Optional[asyncio.Task] = None
        self._in_flight: set[asyncio.Task] = set()
        self._subscribers: list[CollectionSubscriber] = []
        self._failure_subscribers: list[FailureSubscriber] = []

    @property
    def token(self) -> int:
        """Token of the most recent radius change."""
        return self._token

    def subscribe(self, callback: CollectionSubscriber) -> None:
        self._subscribers.append(callback)

    def on_failure(self, callback: FailureSubscriber) -> None:
        self._failure_subscribers.append(callback)

    def request_radius(self, radius_m: float) -> int:
        """
        Register a radius change and (re)start the debounce window.

        Must be called from within the running event loop.

        Args:
            radius_m: New search radius in meters

        Returns:
            The request token assigned to this change

        Raises:
            QueryBuildError: If the radius is invalid (no state changes)
        """
        radius = validate_radius(radius_m)
        loop = asyncio.get_running_loop()

        self._token += 1
        token = self._token

        if self._debounce_task is not None and not self._debounce_task.done():
            self._debounce_task.cancel()
            logger.debug(f"Debounce restarted for radius {radius}m")

        self.pending_radius_m = radius
        self.state = FetchState.PENDING_DEBOUNCE
        self._debounce_task = loop.create_task(self._debounce(token, radius))
        return token

    async def _debounce(self, token: int, radius_m: float) -> None:
        await asyncio.sleep(self.debounce_seconds)
        if token != self._token:
            return

        task = asyncio.get_running_loop().create_task(self._run(token, radius_m))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _run(self, token: int, radius_m: float) -> None:
        if token == self._token:
            self.state = FetchState.IN_FLIGHT
        self.dispatch_count += 1
        logger.info(f"Dispatching fetch #{token} for radius {radius_m}m")

        try:
            collection = await self._fetch(radius_m)
        except LandUsePipelineError as e:
            self._fail(token, radius_m, e)
            return
        except Exception as e:
            # Background task boundary: report instead of losing the exception
            logger.exception(f"Unexpected error in fetch #{token}")
            self._fail(token, radius_m, FetchError(f"Unexpected error: {e}"))
            return

        if token != self._token:
            logger.info(
                f"Discarding stale result for radius {radius_m}m "
                f"(request #{token}, latest #{self._token})"
            )
            return

        self.latest = collection
        self.last_error = None
        self.pending_radius_m = None
        self.state = FetchState.IDLE
        logger.info(f"Published {len(collection)} features for radius {radius_m}m")
        self._notify(self._subscribers, collection)

    def _fail(self, token: int, radius_m: float, error: LandUsePipelineError) -> None:
        if token != self._token:
            logger.debug(f"Ignoring failure of stale request #{token}: {error}")
            return

        self.last_error = error
        self.pending_radius_m = None
        self.state = FetchState.IDLE
        logger.error(f"Fetch for radius {radius_m}m failed: {error}")
        self._notify(self._failure_subscribers, error)

    @staticmethod
    def _notify(callbacks: list, payload) -> None:
        for callback in list(callbacks):
            try:
                callback(payload)
            except Exception:
                logger.exception("Subscriber callback failed")

    def _outstanding(self) -> list[asyncio.Task]:
        tasks = list(self._in_flight)
        if self._debounce_task is not None:
            tasks.append(self._debounce_task)
        return [task for task in tasks if not task.done()]

    async def settle(self) -> None:
        """Wait until no debounce window or fetch is outstanding."""
        while True:
            pending = self._outstanding()
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def aclose(self) -> None:
        """Cancel outstanding work (application shutdown)."""
        pending = self._outstanding()
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self.state = FetchState.IDLE
