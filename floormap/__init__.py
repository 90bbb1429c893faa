"""floormap - Office floor-plan markers: clustering, status colors, search and rendering."""

__version__ = "0.1.0"

# Clients
from .client import AsyncFloorMapClient, FloorMapClient

# Pipeline
from .clustering import MarkerClusterer, SpatialIndex, should_cluster, zoom_for_scale
from .config import FloorMapConfig

# Exceptions
from .exceptions import (
    ClusteringError,
    ConfigurationError,
    FloorMapError,
    NetworkError,
    ParseError,
    ValidationError,
)

# Caches
from .icons import AsyncIconsCache, AsyncImageCache, IconsCache, ImageCache, icon_category

# Models
from .models import (
    ClusterItem,
    Floor,
    IconFile,
    IconSet,
    ImageSize,
    Location,
    LocationStatus,
    LocationType,
    MarkerItem,
    RenderItem,
    SocketFields,
    Viewport,
)
from .render import MarkerPaint, MarkerRenderer, layout
from .search import LocationSearch, filter_locations
from .status import socket_status_color, status_color
from .view import FloorMapView

# Utilities
from .utils import build_url, clamp_percent, port_label

__all__ = [
    # Version
    "__version__",
    # Clients
    "FloorMapClient",
    "AsyncFloorMapClient",
    "FloorMapConfig",
    # Pipeline
    "FloorMapView",
    "MarkerClusterer",
    "SpatialIndex",
    "should_cluster",
    "zoom_for_scale",
    "MarkerRenderer",
    "MarkerPaint",
    "layout",
    "status_color",
    "socket_status_color",
    "LocationSearch",
    "filter_locations",
    # Caches
    "IconsCache",
    "AsyncIconsCache",
    "ImageCache",
    "AsyncImageCache",
    "icon_category",
    # Models
    "Location",
    "LocationType",
    "LocationStatus",
    "SocketFields",
    "Floor",
    "MarkerItem",
    "ClusterItem",
    "RenderItem",
    "ImageSize",
    "Viewport",
    "IconFile",
    "IconSet",
    # Exceptions
    "FloorMapError",
    "NetworkError",
    "ParseError",
    "ValidationError",
    "ConfigurationError",
    "ClusteringError",
    # Utilities
    "build_url",
    "clamp_percent",
    "port_label",
]
