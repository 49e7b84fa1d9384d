"""
Viewport state for fractal exploration.

This module owns the single mutable piece of exploration state: the view
window (center, zoom), the active fractal variant and the Julia constant.
The visible region of the plane is derived on demand for a given pixel
buffer size.
"""

import math
import logging
from copy import copy
from dataclasses import dataclass
from enum import Enum
from typing import Dict, NamedTuple, Optional, Tuple

logger = logging.getLogger(__name__)

Point = Tuple[float, float]

# Vertical extent of the view at zoom 1.0
CANONICAL_EXTENT = 3.0

# Julia constant components are confined to [-JULIA_C_LIMIT, JULIA_C_LIMIT]
JULIA_C_LIMIT = 2.0


class FractalVariant(Enum):
    """Fractal families the explorer can display."""

    MANDELBROT = "mandelbrot"
    JULIA = "julia"
    KOCH = "koch"

    @property
    def label(self) -> str:
        return _VARIANT_LABELS[self]

    @classmethod
    def from_name(cls, name: str) -> "FractalVariant":
        """Look up a variant by its value (case-insensitive)."""
        try:
            return cls(name.strip().lower())
        except ValueError:
            available = ', '.join(v.value for v in cls)
            raise ValueError(f"Unknown fractal variant '{name}'. Available: {available}") from None


_VARIANT_LABELS = {
    FractalVariant.MANDELBROT: "Mandelbrot Set",
    FractalVariant.JULIA: "Julia Set",
    FractalVariant.KOCH: "Koch Curve",
}

# Canonical (center, zoom) applied on variant switch or explicit reset
CANONICAL_VIEWS: Dict[FractalVariant, Tuple[Point, float]] = {
    FractalVariant.MANDELBROT: ((-0.5, 0.0), 1.0),
    FractalVariant.JULIA: ((0.0, 0.0), 1.5),
    FractalVariant.KOCH: ((0.0, -0.2), 0.8),
}

# Named Julia constants
JULIA_PRESETS: Dict[str, Point] = {
    'dragon': (-0.7269, 0.1889),
    'spiral': (-0.75, 0.11),
    'lightning': (-0.4, 0.6),
    'douady_rabbit': (-0.123, 0.745),
}

_PRESET_ALIASES = {
    'rabbit': 'douady_rabbit',
}


def preset_key(name: str) -> str:
    """Normalize a preset name ("Douady Rabbit", "douady-rabbit", ...) to its key."""
    key = name.strip().lower().replace(' ', '_').replace('-', '_')
    key = _PRESET_ALIASES.get(key, key)
    if key not in JULIA_PRESETS:
        available = ', '.join(JULIA_PRESETS.keys())
        raise ValueError(f"Unknown Julia preset '{name}'. Available: {available}")
    return key


def clamp_julia_component(value: float) -> float:
    return min(JULIA_C_LIMIT, max(-JULIA_C_LIMIT, float(value)))


def max_iterations_for_zoom(zoom: float) -> int:
    """
    Iteration budget for a zoom level.

    Starts at 255 and grows by 100 per decade of magnification, capped at
    1000. Zoom levels below 1.0 never reduce the 255 floor.
    """
    boost = max(0.0, math.log10(zoom) * 100.0)
    return min(int(255.0 + boost), 1000)


class WindowBounds(NamedTuple):
    """Visible plane rectangle. ``top`` maps to pixel row 0."""

    left: float
    right: float
    top: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top


def _is_valid_zoom(zoom: float) -> bool:
    return math.isfinite(zoom) and zoom > 0.0


@dataclass
class ViewportModel:
    """Current view window and fractal parameters."""

    center: Point = CANONICAL_VIEWS[FractalVariant.MANDELBROT][0]
    zoom: float = CANONICAL_VIEWS[FractalVariant.MANDELBROT][1]
    variant: FractalVariant = FractalVariant.MANDELBROT
    julia_c: Point = JULIA_PRESETS['dragon']

    def __post_init__(self):
        if not _is_valid_zoom(self.zoom):
            raise ValueError(f"zoom must be positive and finite, got {self.zoom}")
        self.center = (float(self.center[0]), float(self.center[1]))
        self.julia_c = (clamp_julia_component(self.julia_c[0]),
                        clamp_julia_component(self.julia_c[1]))

    @classmethod
    def for_variant(cls, variant: FractalVariant, **kwargs) -> "ViewportModel":
        """Create a viewport showing the canonical view of ``variant``."""
        center, zoom = CANONICAL_VIEWS[variant]
        return cls(center=center, zoom=zoom, variant=variant, **kwargs)

    def copy(self) -> "ViewportModel":
        return copy(self)

    def extents(self, width: int, height: int) -> Tuple[float, float]:
        """Return (horizontal, vertical) plane extent for a pixel buffer size."""
        height_range = CANONICAL_EXTENT / self.zoom
        width_range = height_range * (width / height)
        return width_range, height_range

    def bounds(self, width: int, height: int) -> WindowBounds:
        """Visible plane rectangle for a ``width`` x ``height`` pixel buffer."""
        width_range, height_range = self.extents(width, height)
        cx, cy = self.center
        return WindowBounds(
            left=cx - width_range / 2.0,
            right=cx + width_range / 2.0,
            top=cy - height_range / 2.0,
            bottom=cy + height_range / 2.0,
        )

    def max_iterations(self) -> int:
        return max_iterations_for_zoom(self.zoom)

    def reset(self, variant: Optional[FractalVariant] = None) -> None:
        """Restore the canonical view, switching variant first if one is given."""
        if variant is not None:
            self.variant = variant
        self.center, self.zoom = CANONICAL_VIEWS[self.variant]
        logger.debug(f"Reset view for {self.variant.value}: center={self.center}, zoom={self.zoom}")

    def pan(self, pixel_delta: Point, width: int, height: int) -> None:
        """
        Move the view by a pointer drag of ``pixel_delta`` pixels.

        The view moves opposite to the pointer so the content follows it.
        """
        if width <= 0 or height <= 0:
            logger.debug(f"Ignoring pan on empty surface {width}x{height}")
            return
        width_range, height_range = self.extents(width, height)
        scale_x = width_range / width
        scale_y = height_range / height
        self.nudge(-pixel_delta[0] * scale_x, -pixel_delta[1] * scale_y)

    def nudge(self, dx: float, dy: float) -> None:
        """Translate the center by a plane-space delta."""
        new_x = self.center[0] + dx
        new_y = self.center[1] + dy
        if not (math.isfinite(new_x) and math.isfinite(new_y)):
            logger.debug(f"Ignoring non-finite translation ({dx}, {dy})")
            return
        self.center = (new_x, new_y)

    def zoom_by(self, factor: float) -> None:
        """Multiply zoom by ``factor``; values above 1 zoom in."""
        new_zoom = self.zoom * factor
        if not (_is_valid_zoom(factor) and _is_valid_zoom(new_zoom)):
            logger.debug(f"Rejected zoom factor {factor} at zoom {self.zoom}")
            return
        self.zoom = new_zoom

    def set_view(self, center: Point, zoom: float) -> None:
        """Assign center and zoom together."""
        if not (_is_valid_zoom(zoom) and math.isfinite(center[0]) and math.isfinite(center[1])):
            logger.debug(f"Rejected view center={center}, zoom={zoom}")
            return
        self.center = (float(center[0]), float(center[1]))
        self.zoom = float(zoom)

    def set_julia_c(self, real: float, imag: float) -> None:
        self.julia_c = (clamp_julia_component(real), clamp_julia_component(imag))

    def apply_preset(self, name: str) -> None:
        """Set the Julia constant to a named preset."""
        self.julia_c = JULIA_PRESETS[preset_key(name)]
