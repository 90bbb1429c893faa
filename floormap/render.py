"""Marker rendering onto a single raster drawing surface.

All markers of a pass are painted into one RGBA image the size of the view
container, instead of one widget per marker. Each pass starts from a cleared
surface and draws with the view transform (translate by the pan offset, then
scale uniformly) applied to every shape.
"""

import logging
import math
from collections.abc import Collection, Sequence
from dataclasses import dataclass

from PIL import Image, ImageDraw, ImageFont

from .exceptions import ValidationError
from .models import ClusterItem, ImageSize, Location, MarkerItem, Viewport
from .status import COLOR_ALERT, COLOR_ALERT_RING, COLOR_STROKE, status_color
from .utils import port_label

logger = logging.getLogger(__name__)

MARKER_RADIUS = 15
HIGHLIGHT_RADIUS = 18
RING_OFFSET = 8
STROKE_WIDTH = 2
LABEL_FONT_SIZE = 10
HIT_TOLERANCE = 5

CLUSTER_MIN_DIAMETER = 40
CLUSTER_MAX_DIAMETER = 80
CLUSTER_COLOR_LARGE = "#dc2626"  # red-600, more than 30 markers
CLUSTER_COLOR_MEDIUM = "#f97316"  # orange-500, more than 10 markers
CLUSTER_COLOR_SMALL = "#facc15"  # yellow-400
LABEL_COLOR = "#ffffff"


@dataclass(frozen=True)
class MarkerPaint:
    """One circle to paint, in image pixel coordinates (before the view transform)."""

    item: MarkerItem | ClusterItem
    x: float
    y: float
    radius: float
    fill: str
    stroke: str = COLOR_STROKE
    ring_radius: float | None = None
    ring_color: str | None = None
    label: str | None = None
    font_size: float = LABEL_FONT_SIZE

    @property
    def item_id(self) -> str:
        return self.item.id

    @property
    def has_ring(self) -> bool:
        return self.ring_radius is not None


def cluster_fill(count: int) -> str:
    """Get the fill color of a cluster by its size."""
    if count > 30:
        return CLUSTER_COLOR_LARGE
    if count > 10:
        return CLUSTER_COLOR_MEDIUM
    return CLUSTER_COLOR_SMALL


def cluster_diameter(count: int) -> float:
    """Get the drawn diameter of a cluster by its size."""
    return min(CLUSTER_MAX_DIAMETER, CLUSTER_MIN_DIAMETER + count)


def _marker_paint(item: MarkerItem, image_size: ImageSize, highlighted: bool) -> MarkerPaint:
    location = item.location
    x, y = image_size.to_pixels(*location.position)
    radius = HIGHLIGHT_RADIUS if highlighted else MARKER_RADIUS

    label = None
    if location.is_socket and location.name:
        label = port_label(location.socket_fields.port, location.name)

    return MarkerPaint(
        item=item,
        x=x,
        y=y,
        radius=radius,
        fill=COLOR_ALERT if highlighted else status_color(location),
        ring_radius=radius + RING_OFFSET if highlighted else None,
        ring_color=COLOR_ALERT_RING if highlighted else None,
        label=label,
    )


def _cluster_paint(item: ClusterItem, image_size: ImageSize, highlighted: bool) -> MarkerPaint:
    x, y = image_size.to_pixels(item.x, item.y)
    diameter = cluster_diameter(item.count)
    radius = diameter / 2
    return MarkerPaint(
        item=item,
        x=x,
        y=y,
        radius=radius,
        fill=cluster_fill(item.count),
        ring_radius=radius + RING_OFFSET if highlighted else None,
        ring_color=COLOR_ALERT_RING if highlighted else None,
        label=item.label,
        font_size=max(LABEL_FONT_SIZE, diameter * 0.4),
    )


def layout(
    items: Sequence[MarkerItem | ClusterItem | Location],
    image_size: ImageSize,
    highlighted_ids: Collection[str] = (),
    found_id: str | None = None,
) -> list[MarkerPaint]:
    """Compute the paint list for a pass, in input order.

    Args:
        items: Render items, or plain locations when the caller does not cluster
        image_size: Intrinsic floor image size
        highlighted_ids: Ids of locations drawn with the alert style
        found_id: Id of the location (or cluster) selected by search

    Returns:
        One MarkerPaint per item
    """
    paints = []
    for item in items:
        if isinstance(item, Location):
            item = MarkerItem(location=item)
        highlighted = item.id in highlighted_ids or item.id == found_id
        if isinstance(item, ClusterItem):
            paints.append(_cluster_paint(item, image_size, highlighted))
        else:
            paints.append(_marker_paint(item, image_size, highlighted))
    return paints


class MarkerRenderer:
    """Render stage: paints render items onto one shared drawing surface."""

    def __init__(self, width: int, height: int):
        """Initialize the renderer.

        Args:
            width: Surface width in pixels (the view container width)
            height: Surface height in pixels (the view container height)

        Raises:
            ValidationError: If the size is not positive
        """
        self.width = 0
        self.height = 0
        self.resize(width, height)

        self.surface: Image.Image | None = None
        self._paints: list[MarkerPaint] = []
        self._viewport: Viewport | None = None
        self._fonts: dict[int, ImageFont.ImageFont | ImageFont.FreeTypeFont] = {}

    def resize(self, width: int, height: int) -> None:
        """Match the surface to its container (on mount and on window resize).

        Raises:
            ValidationError: If the size is not positive
        """
        if width <= 0 or height <= 0:
            raise ValidationError(f"Surface size must be positive, got {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        logger.debug(f"Drawing surface resized to {self.width}x{self.height}")

    def _font(self, size: float):
        key = max(1, round(size))
        if key not in self._fonts:
            self._fonts[key] = ImageFont.load_default(size=key)
        return self._fonts[key]

    def render(
        self,
        items: Sequence[MarkerItem | ClusterItem | Location],
        image_size: ImageSize,
        viewport: Viewport,
        is_image_loaded: bool,
        highlighted_ids: Collection[str] = (),
        found_id: str | None = None,
    ) -> Image.Image | None:
        """Paint a full pass.

        Args:
            items: Render items from the clustering stage (or plain locations)
            image_size: Intrinsic floor image size
            viewport: Current pan offset and scale
            is_image_loaded: Whether the floor image has finished loading
            highlighted_ids: Ids of highlighted locations
            found_id: Id of the location selected by search

        Returns:
            The drawing surface, or None when the image is not loaded or
            there is nothing to draw
        """
        if not is_image_loaded or not items:
            self.surface = None
            self._paints = []
            self._viewport = None
            return None

        paints = layout(items, image_size, highlighted_ids, found_id)

        surface = Image.new("RGBA", (self.width, self.height), (0, 0, 0, 0))
        draw = ImageDraw.Draw(surface)
        for paint in paints:
            self._paint(draw, paint, viewport)

        self.surface = surface
        self._paints = paints
        self._viewport = viewport
        logger.debug(f"Rendered {len(paints)} items at scale {viewport.scale:.2f}")
        return surface

    def _paint(self, draw: ImageDraw.ImageDraw, paint: MarkerPaint, viewport: Viewport) -> None:
        scale = viewport.scale
        cx, cy = viewport.image_to_screen(paint.x, paint.y)
        line_width = max(1, round(STROKE_WIDTH * scale))

        r = paint.radius * scale
        draw.ellipse((cx - r, cy - r, cx + r, cy + r), fill=paint.fill, outline=paint.stroke, width=line_width)

        if paint.ring_radius is not None:
            ring = paint.ring_radius * scale
            draw.ellipse((cx - ring, cy - ring, cx + ring, cy + ring), outline=paint.ring_color, width=line_width)

        if paint.label:
            font = self._font(paint.font_size * scale)
            left, top, right, bottom = draw.textbbox((0, 0), paint.label, font=font)
            draw.text(
                (cx - (left + right) / 2, cy - (top + bottom) / 2),
                paint.label,
                fill=LABEL_COLOR,
                font=font,
            )

    def marker_at(self, screen_x: float, screen_y: float) -> MarkerItem | ClusterItem | None:
        """Find the item painted under a point of the surface in the last pass.

        Args:
            screen_x: X on the drawing surface
            screen_y: Y on the drawing surface

        Returns:
            The first item in paint order within its radius (plus a small
            tolerance) of the point, or None
        """
        if self._viewport is None or self._viewport.scale <= 0:
            return None
        x, y = self._viewport.screen_to_image(screen_x, screen_y)
        for paint in self._paints:
            if math.hypot(x - paint.x, y - paint.y) < paint.radius + HIT_TOLERANCE:
                return paint.item
        return None
