"""Floor map view: location store, clustering stage and render stage wired together.

The view holds the current inputs (locations, search query, viewport, floor
image) and recomputes derived state only when one of them changed. Hosts call
the setters from their event handlers and then :meth:`FloorMapView.refresh`
(e.g., once per animation frame).
"""

import logging
from collections.abc import Callable, Iterable, Sequence

from PIL import Image
from pydantic import ValidationError as PydanticValidationError

from .clustering import MarkerClusterer
from .exceptions import ClusteringError, ValidationError
from .icons import ImageCache
from .models import ClusterItem, ImageSize, Location, MarkerItem, Viewport
from .render import MarkerRenderer
from .search import LocationSearch

logger = logging.getLogger(__name__)


class FloorMapView:
    """Interactive floor map state for one floor."""

    def __init__(
        self,
        width: int,
        height: int,
        on_items: Callable[[list[MarkerItem | ClusterItem]], None] | None = None,
        on_filtered: Callable[[list[Location]], None] | None = None,
        clustering: bool = True,
    ):
        """Initialize an empty view.

        Args:
            width: Container width in pixels
            height: Container height in pixels
            on_items: Called once per render pass with the items drawn
            on_filtered: Called when search narrows or widens the location set
            clustering: Whether markers are clustered at low zoom
        """
        self.clusterer = MarkerClusterer()
        self.renderer = MarkerRenderer(width, height)
        self.clustering = clustering

        self.viewport = Viewport()
        self.image_size = ImageSize()
        self.is_image_loaded = False
        self.highlighted_ids: set[str] = set()
        self.found_id: str | None = None
        self.items: list[MarkerItem | ClusterItem] = []

        self._on_items = on_items
        self._locations: list[Location] = []
        self._visible: list[Location] = []
        self._dirty = True

        self.search = LocationSearch([], on_filtered=on_filtered, on_find=self._focus)

    @property
    def locations(self) -> list[Location]:
        """Get every location of the floor."""
        return list(self._locations)

    @property
    def visible_locations(self) -> list[Location]:
        """Get the locations left after search filtering."""
        return list(self._visible)

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    def _invalidate(self) -> None:
        self._dirty = True

    def _update_visible(self) -> None:
        self._visible = self.search.results
        self._invalidate()

    def set_locations(self, locations: Sequence[Location]) -> None:
        """Replace the floor's location snapshot (after a fetch or an update)."""
        self._locations = list(locations)
        self.search.set_locations(self._locations)
        self._update_visible()
        logger.debug(f"View received {len(self._locations)} locations")

    def set_query(self, query: str) -> None:
        """Filter the drawn locations by a search query."""
        self.search.set_query(query)
        self._update_visible()

    def close_search(self) -> None:
        """Clear the search and show every location again."""
        self.search.close()
        self._update_visible()

    def set_viewport(self, viewport: Viewport) -> None:
        """Apply a new pan offset and scale."""
        if viewport != self.viewport:
            self.viewport = viewport
            self._invalidate()

    def zoom_to(self, scale: float) -> None:
        """Change the scale, keeping the pan offset.

        Raises:
            ValidationError: If scale is not positive
        """
        try:
            viewport = Viewport(pan_x=self.viewport.pan_x, pan_y=self.viewport.pan_y, scale=scale)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid scale {scale}: {e}") from e
        self.set_viewport(viewport)

    def pan_by(self, dx: float, dy: float) -> None:
        """Move the view by a screen-space offset."""
        self.set_viewport(
            Viewport(pan_x=self.viewport.pan_x + dx, pan_y=self.viewport.pan_y + dy, scale=self.viewport.scale)
        )

    def resize(self, width: int, height: int) -> None:
        """Follow a container resize."""
        self.renderer.resize(width, height)
        self._invalidate()

    def set_floor_image(self, image_size: ImageSize, loaded: bool = True) -> None:
        """Record the floor plan image size once it has loaded."""
        self.image_size = image_size
        self.is_image_loaded = loaded
        self._invalidate()

    def load_floor_image(self, url: str, images: ImageCache) -> Image.Image | None:
        """Load the floor plan through an image cache and record its size.

        Returns:
            The decoded image, or None if it could not be loaded
        """
        image = images.open_image(url)
        if image is None:
            self.set_floor_image(ImageSize(), loaded=False)
            return None
        self.set_floor_image(ImageSize(width=image.width, height=image.height))
        return image

    def highlight(self, location_ids: Iterable[str]) -> None:
        """Replace the set of highlighted locations."""
        self.highlighted_ids = set(location_ids)
        self._invalidate()

    def clear_highlight(self, location_id: str) -> None:
        """Remove one location from the highlighted set."""
        self.highlighted_ids.discard(location_id)
        if self.found_id == location_id:
            self.found_id = None
        self._invalidate()

    def find(self, location_id: str | None = None) -> str | None:
        """Select a location through search: highlight it and center the view on it.

        Args:
            location_id: Location to select (default: first search result)

        Returns:
            The selected id, or None when nothing matched
        """
        return self.search.find(location_id)

    def _focus(self, location_id: str) -> None:
        location = next((loc for loc in self._locations if loc.id == location_id), None)
        if location is None:
            logger.warning(f"Cannot focus unknown location {location_id}")
            return

        self.found_id = location_id
        self.highlighted_ids.add(location_id)
        if self.is_image_loaded:
            self.viewport = self.viewport.centered_on(
                location, self.image_size, self.renderer.width, self.renderer.height
            )
        self._invalidate()

    def refresh(self, force: bool = False) -> Image.Image | None:
        """Recompute render items and repaint if any input changed.

        Args:
            force: Repaint even when nothing changed

        Returns:
            The drawing surface, or None when nothing is drawn
        """
        if not self._dirty and not force:
            return self.renderer.surface

        if self.clustering:
            items = self.clusterer.cluster(self._visible, self.viewport.scale)
        else:
            items = [MarkerItem(location=location) for location in self._visible]

        surface = self.renderer.render(
            items,
            self.image_size,
            self.viewport,
            self.is_image_loaded,
            highlighted_ids=self.highlighted_ids,
            found_id=self.found_id,
        )
        self.items = items
        self._dirty = False

        if self._on_items:
            self._on_items(items)
        return surface

    def item_at(self, screen_x: float, screen_y: float) -> MarkerItem | ClusterItem | None:
        """Find the marker or cluster drawn under a point of the surface."""
        return self.renderer.marker_at(screen_x, screen_y)

    def expand_cluster(self, cluster: ClusterItem) -> list[Location]:
        """Get the locations grouped in a drawn cluster.

        Returns:
            Member locations, or an empty list if the cluster is stale
        """
        try:
            return self.clusterer.expand(cluster.cluster_id)
        except ClusteringError as e:
            logger.warning(f"Cannot expand {cluster.id}: {e}")
            return []
