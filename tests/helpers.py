"""
Test helpers shared by the test modules: parcel builders and fake fetchers.
"""
import asyncio

from landuse_api.domain.models import Category, Feature, FeatureCollection, Point

CENTER = Point(latitude=43.65064, longitude=11.46387)

def square_ring(lat: float, lon: float, size: float = 0.001) -> tuple[Point, ...]:
    """Closed square ring with its south-west corner at (lat, lon)."""
    corners = [
        (lat, lon),
        (lat, lon + size),
        (lat + size, lon + size),
        (lat + size, lon),
        (lat, lon),
    ]
    return tuple(Point(latitude=a, longitude=b) for a, b in corners)

def make_feature(
    feature_id: str,
    category: Category = Category.FARMLAND,
    area_m2: float = 0.0,
    allocated_quantity: float = 0.0,
) -> Feature:
    osm_id = int(feature_id.split("-")[1])
    return Feature(
        id=feature_id,
        osm_type="way",
        osm_id=osm_id,
        category=category,
        ring=square_ring(43.65, 11.46),
        area_m2=area_m2,
        allocated_quantity=allocated_quantity,
    )

def geometry(*coords: tuple[float, float]) -> list[dict]:
    return [{"lat": lat, "lon": lon} for lat, lon in coords]


class GatedFetcher:
    """
    Fake fetch function whose calls block until released per radius.

    Records the radius of every dispatched call.
    """

    def __init__(self, error: Exception = None):
        self.calls: list[float] = []
        self.gates: dict[float, asyncio.Event] = {}
        self.error = error

    def gate(self, radius_m: float) -> asyncio.Event:
        return self.gates.setdefault(radius_m, asyncio.Event())

    def release(self, radius_m: float) -> None:
        self.gate(radius_m).set()

    async def __call__(self, radius_m: float) -> FeatureCollection:
        self.calls.append(radius_m)
        await self.gate(radius_m).wait()
        if self.error is not None:
            raise self.error
        return FeatureCollection(
            features=(make_feature("way-1", area_m2=radius_m, allocated_quantity=1.0),),
            radius_m=radius_m,
            total_area_m2=radius_m,
            total_quantity=1.0,
        )

class InstantFetcher(GatedFetcher):
    """Fake fetch function that resolves immediately."""

    def gate(self, radius_m: float) -> asyncio.Event:
        event = super().gate(radius_m)
        event.set()
        return event

async def wait_until(condition, timeout: float = 2.0) -> None:
    """Poll the event loop until condition() is true."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not condition():
        if loop.time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.005)
