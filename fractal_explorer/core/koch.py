"""
Koch curve generation and rasterization.

The curve is built from a single horizontal base segment by recursively
replacing each segment with four shorter ones forming an outward equilateral
bump. Subdivision depth follows the zoom level so that zooming in reveals
finer structure.
"""

import math
import logging
from typing import List, Optional, Tuple

import numpy as np

from .math_functions import ComplexPlane
from .viewport import Point, ViewportModel

logger = logging.getLogger(__name__)

Segment = Tuple[Point, Point]

MAX_DEPTH = 5

# Relative length of the base segment (plane length = BASE_LENGTH / zoom)
BASE_LENGTH = 2.0

CURVE_COLOR = (0, 255, 0)

# Half-width of the square stamped at every sample point (3x3 block)
STAMP_RADIUS = 1

_BUMP_HEIGHT = math.sqrt(3.0) / 2.0


def koch_depth(zoom: float) -> int:
    """Subdivision depth for a zoom level, in [0, MAX_DEPTH]."""
    return min(int(max(math.log2(zoom) + 1.0, 0.0)), MAX_DEPTH)


def base_segment(viewport: ViewportModel) -> Segment:
    """Horizontal segment of length 2/zoom centered on the view."""
    size = BASE_LENGTH / viewport.zoom
    cx, cy = viewport.center
    return (cx - size / 2.0, cy), (cx + size / 2.0, cy)


def generate_segments(start: Point, end: Point, depth: int,
                      segments: Optional[List[Segment]] = None) -> List[Segment]:
    """
    Recursively subdivide a segment into ``4 ** depth`` Koch segments.

    Args:
        start, end: Segment endpoints in plane space
        depth: Remaining subdivision levels
        segments: Output list to extend (a new list is created if omitted)

    Returns:
        The list of generated segments, in curve order
    """
    if segments is None:
        segments = []

    if depth == 0:
        segments.append((start, end))
        return segments

    dx = end[0] - start[0]
    dy = end[1] - start[1]
    length = math.sqrt(dx * dx + dy * dy)

    if length == 0.0:
        # No direction to build a bump on; keep the count at 4 ** depth
        segments.extend([(start, end)] * (4 ** depth))
        return segments

    p1 = start
    p2 = (start[0] + dx / 3.0, start[1] + dy / 3.0)
    p4 = (start[0] + 2.0 * dx / 3.0, start[1] + 2.0 * dy / 3.0)
    p5 = end

    mid_x = (p2[0] + p4[0]) / 2.0
    mid_y = (p2[1] + p4[1]) / 2.0
    height = (length / 3.0) * _BUMP_HEIGHT
    normal_x = -dy / length
    normal_y = dx / length
    p3 = (mid_x + normal_x * height, mid_y + normal_y * height)

    generate_segments(p1, p2, depth - 1, segments)
    generate_segments(p2, p3, depth - 1, segments)
    generate_segments(p3, p4, depth - 1, segments)
    generate_segments(p4, p5, depth - 1, segments)
    return segments


def draw_segment(image: np.ndarray, plane: ComplexPlane, segment: Segment,
                 color=CURVE_COLOR) -> bool:
    """
    Rasterize one plane-space segment into ``image`` as a 3 pixel wide line.

    Returns:
        True if the segment was drawn, False if it was skipped
    """
    (x0, y0), (x1, y1) = segment
    fsx, fsy = plane.plane_to_pixel(x0, y0)
    fex, fey = plane.plane_to_pixel(x1, y1)
    if not all(math.isfinite(v) for v in (fsx, fsy, fex, fey)):
        logger.debug(f"Skipping segment with non-finite pixel coordinates: {segment}")
        return False

    sx, sy, ex, ey = int(fsx), int(fsy), int(fex), int(fey)

    height, width = image.shape[:2]
    if (max(sx, ex) < -STAMP_RADIUS or min(sx, ex) >= width + STAMP_RADIUS or
            max(sy, ey) < -STAMP_RADIUS or min(sy, ey) >= height + STAMP_RADIUS):
        return False

    steps = max(abs(ex - sx), abs(ey - sy), 1)
    t = np.arange(steps + 1, dtype=np.float64) / steps
    xs = (sx + t * (ex - sx)).astype(np.int64)
    ys = (sy + t * (ey - sy)).astype(np.int64)

    offsets = np.arange(-STAMP_RADIUS, STAMP_RADIUS + 1)
    ox, oy = np.meshgrid(offsets, offsets)
    px = (xs[:, None] + ox.ravel()[None, :]).ravel()
    py = (ys[:, None] + oy.ravel()[None, :]).ravel()

    visible = (px >= 0) & (px < width) & (py >= 0) & (py < height)
    image[py[visible], px[visible]] = color
    return True


def render_koch(viewport: ViewportModel, width: int, height: int) -> np.ndarray:
    """
    Render the Koch curve for the current view.

    Returns:
        uint8 RGB array (height, width, 3) with a green curve on black
    """
    image = np.zeros((height, width, 3), dtype=np.uint8)
    bounds = viewport.bounds(width, height)
    if not (math.isfinite(bounds.width) and math.isfinite(bounds.height) and
            bounds.width > 0.0 and bounds.height > 0.0):
        # Extent below float resolution around the center
        logger.debug(f"Koch view collapsed at zoom {viewport.zoom:.3e}; nothing to draw")
        return image
    plane = ComplexPlane(bounds, width, height)

    depth = koch_depth(viewport.zoom)
    start, end = base_segment(viewport)
    segments = generate_segments(start, end, depth)

    drawn = sum(draw_segment(image, plane, segment) for segment in segments)
    logger.debug(f"Koch depth {depth}: {len(segments)} segments, {drawn} drawn")
    return image
