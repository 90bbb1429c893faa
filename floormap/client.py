"""Clients for the floor-map HTTP API (floors, locations, icon listings)."""

import logging

import httpx
from pydantic import ValidationError as PydanticValidationError

from .config import FloorMapConfig
from .exceptions import NetworkError, ParseError
from .models import Floor, IconFile, Location
from .utils import API_PATHS, DEFAULT_HEADERS, build_url, encode_category

logger = logging.getLogger(__name__)


def _parse_floor(values: dict) -> Floor:
    return Floor(
        id=str(values.get("id", "")),
        code=str(values.get("code", "")),
        name=values.get("name"),
        image_url=values.get("imageUrl"),
        mime_type=values.get("mimeType"),
        show_in_public=values.get("showInPublic", True) is not False,
        sort_order=values.get("sortOrder") or 0,
    )


def _parse_location(values: dict) -> Location:
    return Location(
        id=values.get("id", ""),
        name=values.get("name") or "",
        type=values.get("type") or "workstation",
        status=values.get("status"),
        floor=str(values.get("floor", "5")),
        x=values.get("x"),
        y=values.get("y"),
        width=values.get("width") or 80,
        height=values.get("height") or 60,
        capacity=values.get("capacity"),
        equipment=values.get("equipment"),
        employee=values.get("employee"),
        inventory_id=values.get("inventoryId"),
        custom_color=values.get("customColor"),
        custom_fields=values.get("customFields", {}),
        created_at=values.get("createdAt"),
        updated_at=values.get("updatedAt"),
    )


def _parse_floors(data) -> list[Floor]:
    if not isinstance(data, list):
        raise ParseError(f"Expected a list of floors, got {type(data).__name__}")
    try:
        floors = [_parse_floor(values) for values in data]
    except (AttributeError, PydanticValidationError) as e:
        raise ParseError(f"Failed to parse floors: {e}") from e
    return sorted(floors, key=lambda f: f.sort_order)


def _parse_locations(data) -> list[Location]:
    if not isinstance(data, list):
        raise ParseError(f"Expected a list of locations, got {type(data).__name__}")
    try:
        return [_parse_location(values) for values in data]
    except (AttributeError, PydanticValidationError) as e:
        raise ParseError(f"Failed to parse locations: {e}") from e


def _parse_icons(data) -> list[IconFile]:
    icons = data.get("icons") if isinstance(data, dict) else None
    if not icons:
        return []
    try:
        return [IconFile(url=icon["url"], name=icon.get("name", "")) for icon in icons]
    except (TypeError, KeyError, AttributeError, PydanticValidationError) as e:
        raise ParseError(f"Failed to parse icon listing: {e}") from e


def _json(response: httpx.Response, what: str):
    try:
        return response.json()
    except ValueError as e:
        raise ParseError(f"Invalid JSON in {what} response: {e}") from e


class FloorMapClient:
    """Synchronous client for the floor-map API."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize floor-map client.

        Args:
            base_url: Server URL (default: read from FLOORMAP_BASE_URL env var)
            timeout: Request timeout in seconds (default: FLOORMAP_TIMEOUT env var or 30)
            transport: Optional httpx transport (e.g., httpx.MockTransport in tests)

        Raises:
            ConfigurationError: If no base URL is provided and none is in env vars
        """
        self.config = FloorMapConfig.from_env(base_url=base_url, timeout=timeout)
        self.base_url = self.config.base_url
        self._client = httpx.Client(
            headers=DEFAULT_HEADERS,
            follow_redirects=True,
            timeout=self.config.timeout,
            transport=transport,
        )

        logger.debug(f"Initialized FloorMapClient for {self.base_url}")

    def _get(self, url: str) -> httpx.Response:
        logger.debug(f"GET {url}")
        try:
            response = self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise NetworkError(f"Request to {url} failed: {e}") from e
        return response

    def get_floors(self, public_only: bool = False) -> list[Floor]:
        """Get all floors sorted by display order.

        Args:
            public_only: Only return floors shown in public mode

        Returns:
            List of Floor objects

        Raises:
            NetworkError: If the request fails
            ParseError: If the response is malformed
        """
        url = build_url(self.base_url, API_PATHS["floors"])
        floors = _parse_floors(_json(self._get(url), "floors"))
        logger.info(f"Retrieved {len(floors)} floors")

        if public_only:
            return [f for f in floors if f.show_in_public]
        return floors

    def get_locations(self, floor: str | None = None) -> list[Location]:
        """Get locations, optionally restricted to one floor.

        Args:
            floor: Floor code (e.g., '5'); None returns all floors

        Returns:
            List of Location objects

        Raises:
            NetworkError: If the request fails
            ParseError: If the response is malformed
        """
        url = build_url(self.base_url, API_PATHS["locations"], floor=floor)
        locations = _parse_locations(_json(self._get(url), "locations"))
        logger.info(f"Retrieved {len(locations)} locations (floor: {floor or 'all'})")
        return locations

    def get_location(self, location_id: str) -> Location | None:
        """Get a single location by id.

        Args:
            location_id: Location id

        Returns:
            Location object, or None if it does not exist

        Raises:
            NetworkError: If the request fails
            ParseError: If the response is malformed
        """
        url = build_url(self.base_url, API_PATHS["locations"], location_id)
        try:
            response = self._get(url)
        except NetworkError as e:
            if isinstance(e.__cause__, httpx.HTTPStatusError) and e.__cause__.response.status_code == 404:
                return None
            raise

        data = _json(response, "location")
        try:
            return _parse_location(data)
        except (AttributeError, PydanticValidationError) as e:
            raise ParseError(f"Failed to parse location {location_id}: {e}") from e

    def get_icons(self, category: str) -> list[IconFile]:
        """Get the icon files available for a category.

        Args:
            category: Icon folder (e.g., 'ac', 'user/activ')

        Returns:
            List of IconFile objects (empty if the category has none)

        Raises:
            NetworkError: If the request fails
            ParseError: If the response is malformed
        """
        url = f"{self.base_url}{API_PATHS['icons']}/{encode_category(category)}"
        icons = _parse_icons(_json(self._get(url), "icons"))
        logger.debug(f"Retrieved {len(icons)} icons for category '{category}'")
        return icons

    def get_bytes(self, url: str) -> bytes:
        """Download an asset (icon, floor plan image).

        Args:
            url: Absolute URL or path relative to the server root

        Returns:
            Response body

        Raises:
            NetworkError: If the request fails
        """
        if not url.startswith(("http://", "https://")):
            url = build_url(self.base_url, url)
        return self._get(url).content

    def close(self) -> None:
        """Close the client session."""
        self._client.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()


class AsyncFloorMapClient:
    """Asynchronous client for the floor-map API."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize async floor-map client.

        Args:
            base_url: Server URL (default: read from FLOORMAP_BASE_URL env var)
            timeout: Request timeout in seconds (default: FLOORMAP_TIMEOUT env var or 30)
            transport: Optional httpx transport (e.g., httpx.MockTransport in tests)

        Raises:
            ConfigurationError: If no base URL is provided and none is in env vars
        """
        self.config = FloorMapConfig.from_env(base_url=base_url, timeout=timeout)
        self.base_url = self.config.base_url
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

        logger.debug(f"Initialized AsyncFloorMapClient for {self.base_url}")

    async def __aenter__(self):
        """Async context manager entry."""
        self._client = httpx.AsyncClient(
            headers=DEFAULT_HEADERS,
            follow_redirects=True,
            timeout=self.config.timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _get(self, url: str) -> httpx.Response:
        if self._client is None:
            raise RuntimeError("AsyncFloorMapClient must be used as an async context manager")
        logger.debug(f"GET {url}")
        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise NetworkError(f"Request to {url} failed: {e}") from e
        return response

    async def get_floors(self, public_only: bool = False) -> list[Floor]:
        """Get all floors sorted by display order.

        Args:
            public_only: Only return floors shown in public mode

        Returns:
            List of Floor objects

        Raises:
            NetworkError: If the request fails
            ParseError: If the response is malformed
        """
        url = build_url(self.base_url, API_PATHS["floors"])
        floors = _parse_floors(_json(await self._get(url), "floors"))
        logger.info(f"Retrieved {len(floors)} floors")

        if public_only:
            return [f for f in floors if f.show_in_public]
        return floors

    async def get_locations(self, floor: str | None = None) -> list[Location]:
        """Get locations, optionally restricted to one floor.

        Args:
            floor: Floor code (e.g., '5'); None returns all floors

        Returns:
            List of Location objects

        Raises:
            NetworkError: If the request fails
            ParseError: If the response is malformed
        """
        url = build_url(self.base_url, API_PATHS["locations"], floor=floor)
        locations = _parse_locations(_json(await self._get(url), "locations"))
        logger.info(f"Retrieved {len(locations)} locations (floor: {floor or 'all'})")
        return locations

    async def get_location(self, location_id: str) -> Location | None:
        """Get a single location by id.

        Args:
            location_id: Location id

        Returns:
            Location object, or None if it does not exist

        Raises:
            NetworkError: If the request fails
            ParseError: If the response is malformed
        """
        url = build_url(self.base_url, API_PATHS["locations"], location_id)
        try:
            response = await self._get(url)
        except NetworkError as e:
            if isinstance(e.__cause__, httpx.HTTPStatusError) and e.__cause__.response.status_code == 404:
                return None
            raise

        data = _json(response, "location")
        try:
            return _parse_location(data)
        except (AttributeError, PydanticValidationError) as e:
            raise ParseError(f"Failed to parse location {location_id}: {e}") from e

    async def get_icons(self, category: str) -> list[IconFile]:
        """Get the icon files available for a category.

        Args:
            category: Icon folder (e.g., 'ac', 'user/activ')

        Returns:
            List of IconFile objects (empty if the category has none)

        Raises:
            NetworkError: If the request fails
            ParseError: If the response is malformed
        """
        url = f"{self.base_url}{API_PATHS['icons']}/{encode_category(category)}"
        icons = _parse_icons(_json(await self._get(url), "icons"))
        logger.debug(f"Retrieved {len(icons)} icons for category '{category}'")
        return icons

    async def get_bytes(self, url: str) -> bytes:
        """Download an asset (icon, floor plan image).

        Args:
            url: Absolute URL or path relative to the server root

        Returns:
            Response body

        Raises:
            NetworkError: If the request fails
        """
        if not url.startswith(("http://", "https://")):
            url = build_url(self.base_url, url)
        return (await self._get(url)).content
