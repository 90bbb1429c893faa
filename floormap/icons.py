"""Process-lifetime caches for marker icons and images.

Icon listings are fetched once per category and shared by every marker, so
drawing a hundred workstations costs one request per icon folder, not one per
marker. Entries are written once per key and never evicted; call ``clear()``
when tearing the application down.
"""

import asyncio
import logging
from collections.abc import Iterable
from io import BytesIO

from PIL import Image

from .client import AsyncFloorMapClient, FloorMapClient
from .exceptions import NetworkError, ParseError
from .models import IconFile, IconSet, Location, LocationType

logger = logging.getLogger(__name__)

# Workstation icons live in per-status subfolders of 'user/'
WORKSTATION_STATUS_FOLDERS = {
    "occupied": "activ",
    "available": "nonactiv",
    "maintenance": "repair",
}

# Icon folder for each location type
LOCATION_TYPE_CATEGORIES = {
    LocationType.COMMON_AREA.value: "common area",
    LocationType.MEETING_ROOM.value: "negotiation room",
    LocationType.EQUIPMENT.value: "print",
    LocationType.CAMERA.value: "Камера",
    LocationType.AC.value: "ac",
    LocationType.WORKSTATION.value: "workstation",
}

# (IconSet field, category, status) loaded at startup
PRELOAD_CATEGORIES = [
    ("common_area", "common area", None),
    ("meeting_room", "negotiation room", None),
    ("equipment", "print", None),
    ("camera", "Камера", None),
    ("ac", "ac", None),
    ("workstation_activ", "workstation", "occupied"),
    ("workstation_nonactiv", "workstation", "available"),
    ("workstation_repair", "workstation", "maintenance"),
]


def icon_category(category: str, status: str | None = None) -> str:
    """Get the icon folder actually requested for a category.

    Args:
        category: Icon category (e.g., 'ac', 'workstation')
        status: Location status, only used for workstations

    Returns:
        Folder path, e.g. 'user/activ' for an occupied workstation
    """
    if category == "workstation" and status:
        return f"user/{WORKSTATION_STATUS_FOLDERS.get(status, status)}"
    return category


def location_icon_category(location: Location) -> str | None:
    """Get the icon folder for a location, or None for types without icons."""
    category = LOCATION_TYPE_CATEGORIES.get(location.type)
    if category is None:
        return None
    return icon_category(category, (location.status or "").lower() or None)


class IconsCache:
    """Memoized icon listings backed by a synchronous client."""

    def __init__(self, client: FloorMapClient):
        """Initialize an empty cache.

        Args:
            client: Client used to fetch icon listings
        """
        self._client = client
        self._icons: dict[str, list[IconFile]] = {}

    def get_icons(self, category: str, status: str | None = None) -> list[IconFile]:
        """Get the icons of a category, fetching them on first use.

        A failed fetch returns an empty list and is retried on the next call.

        Args:
            category: Icon category (e.g., 'ac', 'workstation')
            status: Location status, only used for workstations

        Returns:
            List of IconFile objects
        """
        key = icon_category(category, status)
        if key in self._icons:
            logger.debug(f"Icon cache hit for '{key}'")
            return list(self._icons[key])

        try:
            icons = self._client.get_icons(key)
        except (NetworkError, ParseError) as e:
            logger.warning(f"Failed to load icons for '{key}': {e}")
            return []

        self._icons[key] = icons
        return list(icons)

    def icons_for(self, location: Location) -> list[IconFile]:
        """Get the icons matching a location's type and status."""
        category = location_icon_category(location)
        return self.get_icons(category) if category else []

    def preload(self) -> IconSet:
        """Load every startup category.

        Returns:
            IconSet with one list per category
        """
        loaded = {name: self.get_icons(category, status) for name, category, status in PRELOAD_CATEGORIES}
        logger.info(f"Preloaded {sum(len(v) for v in loaded.values())} icons")
        return IconSet(**loaded, is_loading=False)

    def clear(self) -> None:
        """Drop every cached listing."""
        self._icons.clear()
        logger.debug("Cleared icon cache")


class AsyncIconsCache:
    """Memoized icon listings backed by an asynchronous client.

    Concurrent requests for the same category share one in-flight fetch.
    """

    def __init__(self, client: AsyncFloorMapClient):
        """Initialize an empty cache.

        Args:
            client: Client used to fetch icon listings (already entered)
        """
        self._client = client
        self._icons: dict[str, list[IconFile]] = {}
        self._pending: dict[str, asyncio.Task] = {}

    @property
    def is_loading(self) -> bool:
        """Check whether any category is still being fetched."""
        return bool(self._pending)

    async def _fetch(self, key: str) -> list[IconFile]:
        try:
            icons = await self._client.get_icons(key)
        except (NetworkError, ParseError) as e:
            logger.warning(f"Failed to load icons for '{key}': {e}")
            return []

        self._icons[key] = icons
        return icons

    async def get_icons(self, category: str, status: str | None = None) -> list[IconFile]:
        """Get the icons of a category, fetching them on first use.

        A failed fetch returns an empty list and is retried on the next call.

        Args:
            category: Icon category (e.g., 'ac', 'workstation')
            status: Location status, only used for workstations

        Returns:
            List of IconFile objects
        """
        key = icon_category(category, status)
        if key in self._icons:
            logger.debug(f"Icon cache hit for '{key}'")
            return list(self._icons[key])

        task = self._pending.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch(key))
            self._pending[key] = task
            task.add_done_callback(lambda _t, key=key: self._pending.pop(key, None))

        # A cancelled caller stops waiting; the fetch still completes for the others
        return list(await asyncio.shield(task))

    async def icons_for(self, location: Location) -> list[IconFile]:
        """Get the icons matching a location's type and status."""
        category = location_icon_category(location)
        return await self.get_icons(category) if category else []

    async def preload(self) -> IconSet:
        """Load every startup category concurrently.

        Returns:
            IconSet with one list per category
        """
        results = await asyncio.gather(
            *(self.get_icons(category, status) for _, category, status in PRELOAD_CATEGORIES)
        )
        loaded = {name: icons for (name, _, _), icons in zip(PRELOAD_CATEGORIES, results)}
        logger.info(f"Preloaded {sum(len(v) for v in loaded.values())} icons")
        return IconSet(**loaded, is_loading=self.is_loading)

    def clear(self) -> None:
        """Drop every cached listing."""
        self._icons.clear()
        logger.debug("Cleared icon cache")


def _decode(url: str, data: bytes) -> Image.Image | None:
    try:
        image = Image.open(BytesIO(data))
        image.load()
    except OSError as e:
        logger.warning(f"Failed to decode image {url}: {e}")
        return None
    return image


class ImageCache:
    """Downloaded icon and floor-plan images, keyed by URL."""

    def __init__(self, client: FloorMapClient):
        """Initialize an empty cache.

        Args:
            client: Client used to download images
        """
        self._client = client
        self._data: dict[str, bytes] = {}

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, url: str) -> bool:
        return url in self._data

    def get(self, url: str) -> bytes | None:
        """Get the raw bytes of an image, downloading it on first use.

        Returns:
            Image bytes, or None if the download failed
        """
        if url in self._data:
            return self._data[url]

        try:
            data = self._client.get_bytes(url)
        except NetworkError as e:
            logger.warning(f"Failed to load image {url}: {e}")
            return None

        self._data[url] = data
        return data

    def open_image(self, url: str) -> Image.Image | None:
        """Get a decoded raster image (PNG, JPEG, WebP).

        Returns:
            Pillow image, or None if the download or decoding failed
        """
        data = self.get(url)
        if data is None:
            return None
        return _decode(url, data)

    def preload(self, icons: Iterable[IconFile]) -> int:
        """Download icons ahead of use.

        Returns:
            Number of icons now available in the cache
        """
        urls = {icon.url for icon in icons if icon.url}
        loaded = sum(1 for url in sorted(urls) if self.get(url) is not None)
        logger.debug(f"Preloaded {loaded}/{len(urls)} icon images")
        return loaded

    def clear(self) -> None:
        """Drop every cached image."""
        self._data.clear()
        logger.debug("Cleared image cache")


class AsyncImageCache:
    """Downloaded icon and floor-plan images, keyed by URL, for async hosts.

    Concurrent downloads of the same URL share one in-flight request.
    """

    def __init__(self, client: AsyncFloorMapClient):
        """Initialize an empty cache.

        Args:
            client: Client used to download images (already entered)
        """
        self._client = client
        self._data: dict[str, bytes] = {}
        self._pending: dict[str, asyncio.Task] = {}

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, url: str) -> bool:
        return url in self._data

    async def _fetch(self, url: str) -> bytes | None:
        try:
            data = await self._client.get_bytes(url)
        except NetworkError as e:
            logger.warning(f"Failed to load image {url}: {e}")
            return None

        self._data[url] = data
        return data

    async def get(self, url: str) -> bytes | None:
        """Get the raw bytes of an image, downloading it on first use.

        Returns:
            Image bytes, or None if the download failed
        """
        if url in self._data:
            return self._data[url]

        task = self._pending.get(url)
        if task is None:
            task = asyncio.ensure_future(self._fetch(url))
            self._pending[url] = task
            task.add_done_callback(lambda _t, url=url: self._pending.pop(url, None))

        return await asyncio.shield(task)

    async def open_image(self, url: str) -> Image.Image | None:
        """Get a decoded raster image (PNG, JPEG, WebP).

        Returns:
            Pillow image, or None if the download or decoding failed
        """
        data = await self.get(url)
        if data is None:
            return None
        return _decode(url, data)

    async def preload(self, icons: Iterable[IconFile]) -> int:
        """Download icons ahead of use, concurrently.

        Returns:
            Number of icons now available in the cache
        """
        urls = sorted({icon.url for icon in icons if icon.url})
        results = await asyncio.gather(*(self.get(url) for url in urls))
        loaded = sum(1 for data in results if data is not None)
        logger.debug(f"Preloaded {loaded}/{len(urls)} icon images")
        return loaded

    def clear(self) -> None:
        """Drop every cached image."""
        self._data.clear()
        logger.debug("Cleared image cache")
