"""Pydantic models for the floor map.

You can import from specific modules:
    from floormap.models.location import Location, Floor
    from floormap.models.render import MarkerItem, ClusterItem, Viewport

Or from the main models module:
    from floormap.models import Location, MarkerItem, Viewport
"""

# Icon models
from .icons import IconFile, IconSet

# Location models
from .location import (
    SOCKET_STATUS_KEYS,
    Floor,
    Location,
    LocationStatus,
    LocationType,
    SocketFields,
)

# Render models
from .render import ClusterItem, ImageSize, MarkerItem, RenderItem, Viewport

__all__ = [
    # Location models
    "Location",
    "LocationType",
    "LocationStatus",
    "SocketFields",
    "SOCKET_STATUS_KEYS",
    "Floor",
    # Render models
    "MarkerItem",
    "ClusterItem",
    "RenderItem",
    "ImageSize",
    "Viewport",
    # Icon models
    "IconFile",
    "IconSet",
]
