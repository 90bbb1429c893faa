"""Utility functions for floormap package."""

import math
import re
from urllib.parse import quote

# Common headers for requests
DEFAULT_HEADERS = {
    "User-Agent": "floormap/0.1.0",
    "Accept": "application/json, */*;q=0.8",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
}

# Floor-map API endpoints, relative to the base URL
API_PATHS = {
    "floors": "/api/floors",
    "locations": "/api/locations",
    "icons": "/api/icons",
}

PORT_NUMBER_RE = re.compile(r"/(\d+)$")


def build_url(base: str, *parts: str, **params) -> str:
    """Build URL with path parts and query parameters.

    Args:
        base: Base URL
        *parts: URL path parts
        **params: Query parameters

    Returns:
        Complete URL
    """
    url = base.rstrip("/")
    if parts:
        url += "/" + "/".join(str(p).strip("/") for p in parts)

    if params:
        query_parts = [f"{k}={quote(str(v))}" for k, v in params.items() if v is not None]
        if query_parts:
            url += "?" + "&".join(query_parts)

    return url


def encode_category(category: str) -> str:
    """Encode an icon category as a single URL path segment.

    Subfolder categories such as ``user/activ`` keep their slash encoded
    (``user%2Factiv``) so the server receives them as one parameter.
    """
    return quote(category, safe="")


def clamp_percent(value: float) -> float:
    """Clamp a coordinate into the 0-100 percentage range."""
    return max(0.0, min(100.0, value))


def coordinate_or_zero(value) -> float:
    """Return a usable coordinate, substituting 0 for missing or non-finite values."""
    if value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def port_label(port: str | None, name: str | None) -> str:
    """Get the short label drawn on a socket marker.

    Args:
        port: Switch port identifier (e.g., 'Gi1/0/11')
        name: Location name used as fallback

    Returns:
        Trailing port number, or the first four characters of the name
    """
    fallback = (name or "")[:4]
    if not port:
        return fallback
    match = PORT_NUMBER_RE.search(str(port))
    return match.group(1) if match else fallback
