"""Pydantic models shared by the clustering and render stages."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from ..utils import clamp_percent
from .location import Location

# Zoom applied when centering on a found location, unless already closer
FIND_MIN_SCALE = 1.75
FIND_MAX_SCALE = 3.0


class MarkerItem(BaseModel):
    """Render item wrapping a single location."""

    kind: Literal["marker"] = "marker"
    location: Location

    model_config = {"frozen": True}

    @property
    def id(self) -> str:
        return self.location.id


class ClusterItem(BaseModel):
    """Render item aggregating nearby locations at low zoom."""

    kind: Literal["cluster"] = "cluster"
    id: str = Field(description="Synthetic id, 'cluster-<cluster_id>'")
    cluster_id: int
    count: int = Field(description="Number of locations in the cluster")
    x: float = Field(description="Centroid X as % of image width")
    y: float = Field(description="Centroid Y as % of image height")
    zoom: float = Field(description="Zoom level the clustering pass was computed for")

    model_config = {"frozen": True}

    @property
    def label(self) -> str:
        """Get the count label drawn inside the cluster."""
        return "99+" if self.count > 99 else str(self.count)


RenderItem = Annotated[MarkerItem | ClusterItem, Field(discriminator="kind")]


class ImageSize(BaseModel):
    """Intrinsic size of the floor plan image in pixels."""

    width: float = 0
    height: float = 0

    model_config = {"frozen": True}

    def to_pixels(self, x_percent: float, y_percent: float) -> tuple[float, float]:
        """Convert percentage coordinates to image pixels."""
        return self.width * x_percent / 100, self.height * y_percent / 100


class Viewport(BaseModel):
    """Pan offset and uniform scale of the floor-plan view.

    A point ``p`` in image pixels appears on screen at ``pan + p * scale``.
    """

    pan_x: float = 0
    pan_y: float = 0
    scale: float = Field(default=1.0, gt=0, description="Uniform zoom factor (1.0 = 100%)")

    model_config = {"frozen": True}

    def image_to_screen(self, x: float, y: float) -> tuple[float, float]:
        """Convert image pixels to screen pixels."""
        return self.pan_x + x * self.scale, self.pan_y + y * self.scale

    def screen_to_image(self, screen_x: float, screen_y: float) -> tuple[float, float]:
        """Convert screen pixels to image pixels."""
        return (screen_x - self.pan_x) / self.scale, (screen_y - self.pan_y) / self.scale

    def screen_to_percent(
        self, screen_x: float, screen_y: float, image_size: ImageSize
    ) -> tuple[float, float]:
        """Convert a screen click to clamped percentage coordinates for placement.

        Args:
            screen_x: Click X on the drawing surface
            screen_y: Click Y on the drawing surface
            image_size: Intrinsic floor image size

        Returns:
            (x, y) percentages clamped into [0, 100]
        """
        if image_size.width <= 0 or image_size.height <= 0:
            return 0.0, 0.0
        x, y = self.screen_to_image(screen_x, screen_y)
        return (
            clamp_percent(x / image_size.width * 100),
            clamp_percent(y / image_size.height * 100),
        )

    def centered_on(
        self,
        location: Location,
        image_size: ImageSize,
        container_width: float,
        container_height: float,
    ) -> "Viewport":
        """Get the viewport that zooms in on a location and centers it.

        Args:
            location: Location to bring into view
            image_size: Intrinsic floor image size
            container_width: Width of the view container in pixels
            container_height: Height of the view container in pixels

        Returns:
            New Viewport; this one is left unchanged
        """
        scale = min(FIND_MAX_SCALE, max(self.scale, FIND_MIN_SCALE))
        marker_x, marker_y = image_size.to_pixels(*location.position)
        return Viewport(
            pan_x=container_width / 2 - marker_x * scale,
            pan_y=container_height / 2 - marker_y * scale,
            scale=scale,
        )
