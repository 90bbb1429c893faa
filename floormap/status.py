"""Marker color resolution from location status."""

import logging

from .models import Location, LocationStatus, SocketFields

logger = logging.getLogger(__name__)

# Palette (Tailwind shades used by the web map)
COLOR_OK = "#10b981"  # emerald-500
COLOR_INFO = "#3b82f6"  # blue-500
COLOR_NEUTRAL = "#6b7280"  # gray-500
COLOR_UNKNOWN = "#64748b"  # slate-500
COLOR_DOWN = "#ef4444"  # red-500
COLOR_MAINTENANCE = "#f59e0b"  # amber-500
COLOR_ALERT = "#dc2626"  # red-600
COLOR_ALERT_RING = "#fca5a5"  # red-300
COLOR_STROKE = "#ffffff"

STATUS_COLORS = {
    LocationStatus.AVAILABLE.value: COLOR_OK,
    LocationStatus.OCCUPIED.value: COLOR_INFO,
    LocationStatus.MAINTENANCE.value: COLOR_NEUTRAL,
}

# Down tokens are checked before up tokens; the first group that matches wins.
SOCKET_DOWN_SUBSTRINGS = ("notconnect", "not connected", "down", "disabled")
SOCKET_DOWN_EXACT = ("no",)
SOCKET_UP_SUBSTRINGS = ("connect", "connected")
SOCKET_UP_EXACT = ("up",)


def socket_status_color(raw_status: str) -> str:
    """Map a normalized switch link status to a marker color.

    Args:
        raw_status: Lowercased status as reported by the switch (e.g., 'notconnect')

    Returns:
        Hex color
    """
    if not raw_status:
        return COLOR_MAINTENANCE
    if raw_status in SOCKET_DOWN_EXACT or any(s in raw_status for s in SOCKET_DOWN_SUBSTRINGS):
        return COLOR_DOWN
    if raw_status in SOCKET_UP_EXACT or any(s in raw_status for s in SOCKET_UP_SUBSTRINGS):
        return COLOR_OK
    return COLOR_UNKNOWN


def status_color(location: Location) -> str:
    """Resolve the fill color of a location marker.

    Sockets are colored by the live link status found in ``custom_fields``;
    every other type by its application status. Never raises: malformed data
    resolves to the unknown color.

    Args:
        location: Location to color

    Returns:
        Hex color
    """
    try:
        if location.is_socket:
            fields = SocketFields.from_custom_fields(location.custom_fields)
            return socket_status_color(fields.status)
        return STATUS_COLORS.get(str(location.status or "").lower(), COLOR_UNKNOWN)
    except (TypeError, ValueError, AttributeError) as e:
        logger.debug(f"Falling back to unknown color for location {getattr(location, 'id', '?')}: {e}")
        return COLOR_UNKNOWN
