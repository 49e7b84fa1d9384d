"""
Rectangle-to-window zoom.

Converts a rectangle selected on the render surface into a new view that
fits the selection. Only zooming in is supported; every degenerate selection
leaves the view untouched.
"""

import math
import logging
from dataclasses import dataclass
from typing import Optional

from .viewport import Point, ViewportModel

logger = logging.getLogger(__name__)

# Selections smaller than this (pixels, either axis) are treated as accidental
MIN_SELECTION_PIXELS = 10.0


@dataclass(frozen=True)
class ImageRect:
    """Placement of the render surface in pointer coordinates."""

    x: float
    y: float
    width: float
    height: float

    def contains(self, pos: Point) -> bool:
        return (self.x <= pos[0] <= self.x + self.width and
                self.y <= pos[1] <= self.y + self.height)

    @property
    def is_degenerate(self) -> bool:
        return not (math.isfinite(self.width) and math.isfinite(self.height) and
                    self.width > 0 and self.height > 0)

    def to_relative(self, pos: Point) -> Point:
        """Position relative to the surface, clamped to [0, 1] per axis."""
        rel_x = (pos[0] - self.x) / self.width
        rel_y = (pos[1] - self.y) / self.height
        return min(1.0, max(0.0, rel_x)), min(1.0, max(0.0, rel_y))


def selection_is_large_enough(start: Point, end: Point) -> bool:
    return (abs(end[0] - start[0]) >= MIN_SELECTION_PIXELS and
            abs(end[1] - start[1]) >= MIN_SELECTION_PIXELS)


def zoom_to_rectangle(start: Point, end: Point, image_rect: ImageRect,
                      viewport: ViewportModel, width: int, height: int) -> Optional[ViewportModel]:
    """
    Compute the view that fits a selected rectangle.

    Args:
        start, end: Opposite corners of the selection in pointer coordinates
        image_rect: Where the render surface sits in pointer coordinates
        viewport: Current view (not modified)
        width, height: Pixel buffer size the view is rendered at

    Returns:
        A new viewport centered on the selection, or None if the selection
        is too small, degenerate, or would not zoom in
    """
    if not selection_is_large_enough(start, end):
        logger.debug(f"Ignoring selection {start} -> {end}: smaller than {MIN_SELECTION_PIXELS}px")
        return None
    if image_rect.is_degenerate:
        logger.debug(f"Ignoring selection on degenerate surface {image_rect}")
        return None

    top_left = (min(start[0], end[0]), min(start[1], end[1]))
    bottom_right = (max(start[0], end[0]), max(start[1], end[1]))

    rel_start_x, rel_start_y = image_rect.to_relative(top_left)
    rel_end_x, rel_end_y = image_rect.to_relative(bottom_right)

    left, right, top, bottom = viewport.bounds(width, height)
    width_range = right - left
    height_range = bottom - top

    selected_left = left + rel_start_x * width_range
    selected_right = left + rel_end_x * width_range
    selected_top = top + rel_start_y * height_range
    selected_bottom = top + rel_end_y * height_range

    selected_width = selected_right - selected_left
    selected_height = selected_bottom - selected_top
    if selected_width <= 0.0 or selected_height <= 0.0:
        # Selection collapsed after clamping to the surface
        logger.debug("Ignoring selection outside the render surface")
        return None

    zoom_factor = min(width_range / selected_width, height_range / selected_height)
    if not math.isfinite(zoom_factor) or zoom_factor <= 1.0:
        logger.debug(f"Ignoring selection with zoom factor {zoom_factor}")
        return None

    new_center = ((selected_left + selected_right) / 2.0,
                  (selected_top + selected_bottom) / 2.0)
    new_zoom = viewport.zoom * zoom_factor
    if not math.isfinite(new_zoom):
        return None

    result = viewport.copy()
    result.set_view(new_center, new_zoom)
    logger.debug(f"Zoom to rectangle: center={new_center}, factor={zoom_factor:.3f}")
    return result
