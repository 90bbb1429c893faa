"""Location search by name or department."""

import logging
from collections.abc import Callable, Sequence

from .models import Location

logger = logging.getLogger(__name__)

SUGGESTION_LIMIT = 5


def filter_locations(locations: Sequence[Location], query: str) -> list[Location]:
    """Filter locations by name or department substring.

    Args:
        locations: Locations to search
        query: Search query (case-insensitive); blank returns everything

    Returns:
        Matching locations in input order
    """
    q = (query or "").strip().lower()
    if not q:
        return list(locations)

    return [
        loc
        for loc in locations
        if q in (loc.name or "").lower() or q in loc.department.lower()
    ]


class LocationSearch:
    """Search box state for the floor map.

    Keeps the query and notifies the host when the filtered set changes, so a
    sidebar list can stay in sync with the markers that are drawn.
    """

    def __init__(
        self,
        locations: Sequence[Location],
        on_filtered: Callable[[list[Location]], None] | None = None,
        on_find: Callable[[str], None] | None = None,
    ):
        """Initialize search state.

        Args:
            locations: Locations of the active floor
            on_filtered: Called with the filtered locations whenever they change
            on_find: Called with the id of the location the user picked
        """
        self._locations = list(locations)
        self._on_filtered = on_filtered
        self._on_find = on_find
        self._last_key: tuple[str, ...] | None = None

        self.query = ""
        self.is_open = False

        self._notify()

    @property
    def results(self) -> list[Location]:
        """Get the locations currently selected by the search box."""
        if not self.is_open:
            return list(self._locations)
        return filter_locations(self._locations, self.query)

    def _notify(self) -> None:
        results = self.results
        key = tuple(loc.id for loc in results)
        if key == self._last_key:
            return
        self._last_key = key
        logger.debug(f"Search results changed: {len(results)} locations")
        if self._on_filtered:
            self._on_filtered(results)

    def open(self) -> None:
        """Open the search box."""
        self.is_open = True
        self._notify()

    def close(self) -> None:
        """Close the search box, clearing the query and restoring all locations."""
        self.is_open = False
        self.query = ""
        self._notify()

    def set_query(self, query: str) -> None:
        """Update the query (opens the search box if needed)."""
        self.is_open = True
        self.query = query
        self._notify()

    def set_locations(self, locations: Sequence[Location]) -> None:
        """Replace the searched locations (e.g., after switching floors)."""
        self._locations = list(locations)
        self._notify()

    def suggestions(self, limit: int = SUGGESTION_LIMIT) -> list[Location]:
        """Get the first matches to show under the search box."""
        if not self.query.strip():
            return []
        return self.results[:limit]

    def find(self, location_id: str | None = None) -> str | None:
        """Select a location, defaulting to the first match.

        Args:
            location_id: Id of a picked suggestion (default: first result)

        Returns:
            The selected location id, or None when nothing matches
        """
        if location_id is None:
            results = self.results
            if not self.query.strip() or not results:
                return None
            location_id = results[0].id

        logger.info(f"Find location {location_id}")
        if self._on_find:
            self._on_find(location_id)
        return location_id
