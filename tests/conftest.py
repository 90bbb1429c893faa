"""Pytest configuration and fixtures."""

import logging
import os

import httpx
import pytest
from dotenv import load_dotenv

from floormap import FloorMapClient
from floormap.models import Location

# Configure logging for tests
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

# Load environment variables
load_dotenv()

BASE_URL = "http://floormap.test"

SAMPLE_FLOORS = [
    {"id": "f9", "code": "9", "name": "Ninth", "imageUrl": "/floor-plans/9.png", "showInPublic": False, "sortOrder": 2},
    {"id": "f5", "code": "5", "name": "Fifth", "imageUrl": "/floor-plans/5.png", "showInPublic": True, "sortOrder": 1},
]

SAMPLE_LOCATIONS = [
    {
        "id": "ws-1",
        "name": "Ivanov I.",
        "type": "workstation",
        "status": "occupied",
        "floor": "5",
        "x": 12.5,
        "y": 40,
        "width": 80,
        "height": 60,
        "employee": "Ivanov Ivan",
        "inventoryId": "INV-001",
        "customFields": {"department": "Finance"},
        "createdAt": "2024-03-01T10:00:00Z",
    },
    {
        "id": "sock-1",
        "name": "R-5-11",
        "type": "socket",
        "status": "available",
        "floor": "5",
        "x": 55,
        "y": 70,
        "customFields": {"port": "Gi1/0/11", "Status": "notconnect", "StatusLastSync": "2024-03-01T10:00:00Z"},
    },
]


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (requires a live floor-map server)",
    )


class FakeApi:
    """In-memory floor-map server for httpx.MockTransport."""

    def __init__(self):
        self.routes: dict[str, tuple[int, object]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, path: str, payload=None, status_code: int = 200) -> None:
        self.routes[path] = (status_code, payload)

    def count(self, path: str) -> int:
        return sum(1 for r in self.requests if r.url.path == path)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"message": "Not found"})

        status_code, payload = route
        if callable(payload):
            payload = payload(request)
        if isinstance(payload, bytes):
            return httpx.Response(status_code, content=payload)
        return httpx.Response(status_code, json=payload)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def api():
    """Fake API with floors, locations and a few icon folders."""
    fake = FakeApi()
    fake.add("/api/floors", SAMPLE_FLOORS)
    fake.add("/api/locations", SAMPLE_LOCATIONS)
    fake.add("/api/icons/ac", {"icons": [{"name": "ac.svg", "url": "/icons/ac/ac.svg"}]})
    fake.add("/api/icons/user/activ", {"icons": [{"name": "pc.svg", "url": "/icons/user/activ/pc.svg"}]})
    return fake


@pytest.fixture
def client(api):
    """FloorMapClient talking to the fake API."""
    with FloorMapClient(base_url=BASE_URL, transport=api.transport) as c:
        yield c


@pytest.fixture
def make_location():
    """Factory for Location objects with sensible defaults."""

    def _make(location_id: str, x: float | None = 50, y: float | None = 50, **kwargs) -> Location:
        return Location(id=location_id, x=x, y=y, **kwargs)

    return _make


@pytest.fixture(scope="session")
def base_url():
    """Get the live server URL from the environment.

    Raises:
        pytest.skip: If FLOORMAP_BASE_URL is not set
    """
    url = os.getenv("FLOORMAP_BASE_URL")
    if not url:
        pytest.skip("FLOORMAP_BASE_URL environment variable not set")
    return url


@pytest.fixture
def live_client(base_url):
    """Create a client for the live server."""
    client = FloorMapClient(base_url=base_url)

    yield client

    # Cleanup
    client.close()
