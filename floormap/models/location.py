"""Pydantic models for floors and the locations plotted on them."""

from collections.abc import Mapping
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from ..utils import coordinate_or_zero


class LocationType(str, Enum):
    """Kinds of points of interest on a floor plan."""

    WORKSTATION = "workstation"
    MEETING_ROOM = "meeting-room"
    SOCKET = "socket"
    EQUIPMENT = "equipment"
    CAMERA = "camera"
    AC = "ac"
    COMMON_AREA = "common-area"


class LocationStatus(str, Enum):
    """Application-level status of a non-socket location."""

    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"


# Keys that may carry a socket's live link status, checked in this order
SOCKET_STATUS_KEYS = ("Status", "status", "CiscoStatus", "ciscoStatus")

_KNOWN_SOCKET_KEYS = {*SOCKET_STATUS_KEYS, "port", "StatusLastSync", "department"}


class SocketFields(BaseModel):
    """Typed view over the vendor metadata stored in ``Location.custom_fields``.

    The raw mapping is heterogeneous: switch synchronisation writes the link
    status under several differently cased keys. This view normalises the
    known keys and keeps everything else in ``extra``.
    """

    port: str | None = None
    status: str = ""
    status_last_sync: str | None = None
    department: str | None = None
    extra: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}

    @classmethod
    def from_custom_fields(cls, custom_fields: Any) -> "SocketFields":
        """Build the view from a raw ``custom_fields`` value.

        Args:
            custom_fields: Raw mapping as stored on the location

        Returns:
            SocketFields instance

        Raises:
            TypeError: If custom_fields is not a mapping
        """
        if custom_fields is None:
            return cls()
        if not isinstance(custom_fields, Mapping):
            raise TypeError(f"custom_fields must be a mapping, got {type(custom_fields).__name__}")

        raw_status = ""
        for key in SOCKET_STATUS_KEYS:
            value = custom_fields.get(key)
            if value:
                raw_status = value
                break

        port = custom_fields.get("port")
        last_sync = custom_fields.get("StatusLastSync")
        department = custom_fields.get("department")

        return cls(
            port=str(port) if port else None,
            status=str(raw_status).strip().lower(),
            status_last_sync=str(last_sync) if last_sync else None,
            department=str(department) if department else None,
            extra={k: v for k, v in custom_fields.items() if k not in _KNOWN_SOCKET_KEYS},
        )


class Location(BaseModel):
    """A point of interest on a floor plan.

    ``x`` and ``y`` are percentages (0-100) of the floor image width and
    height. Missing or unusable coordinates are kept as ``None`` and read as 0.
    """

    id: str = Field(description="Unique identifier (UUID)")
    name: str = Field(default="", description="Display name (room name, employee name, port)")
    type: str = Field(default=LocationType.WORKSTATION.value, description="Location kind")
    status: str | None = Field(default=LocationStatus.AVAILABLE.value, description="Application status")
    floor: str = Field(default="5", description="Floor code (e.g., '5', '9')")
    x: float | None = Field(default=None, description="X position as % of image width")
    y: float | None = Field(default=None, description="Y position as % of image height")
    width: float = Field(default=80, description="Nominal marker width in source pixels")
    height: float = Field(default=60, description="Nominal marker height in source pixels")
    capacity: int | None = None
    equipment: str | None = None
    employee: str | None = None
    inventory_id: str | None = None
    custom_color: str | None = None
    custom_fields: Any = Field(default_factory=dict, description="Vendor-specific metadata")
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"frozen": True}

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        return str(value)

    @field_validator("x", "y", mode="before")
    @classmethod
    def _coerce_coordinate(cls, value):
        if value is None:
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None

    @property
    def position(self) -> tuple[float, float]:
        """Get (x, y) percentages with missing values read as 0."""
        return coordinate_or_zero(self.x), coordinate_or_zero(self.y)

    @property
    def is_socket(self) -> bool:
        """Check if this location is a network socket."""
        return self.type == LocationType.SOCKET.value

    @property
    def department(self) -> str:
        """Get the department stored in custom fields, if any."""
        if isinstance(self.custom_fields, Mapping):
            return str(self.custom_fields.get("department") or "")
        return ""

    @property
    def socket_fields(self) -> SocketFields:
        """Get the typed view of custom fields (empty for malformed data)."""
        try:
            return SocketFields.from_custom_fields(self.custom_fields)
        except TypeError:
            return SocketFields()


class Floor(BaseModel):
    """Office floor with its plan image."""

    id: str
    code: str = Field(description="Short code matching Location.floor (e.g., '5', '9')")
    name: str | None = None
    image_url: str | None = None
    mime_type: str | None = None
    show_in_public: bool = True
    sort_order: int = 0

    model_config = {"frozen": True}

    @property
    def display_name(self) -> str:
        """Get the name shown in floor pickers."""
        return self.name or self.code
