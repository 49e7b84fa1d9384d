"""
Coloring algorithms for escape-time fractal rendering.

Each fractal variant has its own gamma-corrected piecewise gradient. Points
that reached the iteration cap are painted black. All palettes work on whole
iteration arrays and produce uint8 RGB images.
"""

import numpy as np
from typing import Dict, Tuple
from abc import ABC, abstractmethod
import logging

from ..core.math_functions import IterationResult
from ..core.viewport import FractalVariant

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]

INSIDE_COLOR: RGB = (0, 0, 0)


class GradientPalette(ABC):
    """Maps normalized escape counts to RGB colors."""

    name = "gradient"
    gamma = 1.0

    def normalize(self, result: IterationResult) -> np.ndarray:
        """Gamma-corrected position in [0, 1) for escaped points."""
        return result.get_normalized_iterations() ** self.gamma

    @abstractmethod
    def channels(self, t: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Compute RGB channels for gradient positions.

        Args:
            t: Gradient positions in [0, 1)

        Returns:
            Tuple of float channel arrays in [0, 255]
        """
        pass

    def color_of(self, iteration: int, max_iter: int) -> RGB:
        """Color of a single escape count."""
        if iteration >= max_iter:
            return INSIDE_COLOR
        pixel = self.apply(IterationResult(np.array([iteration]), max_iter))[0]
        return tuple(int(c) for c in pixel)

    def apply(self, result: IterationResult) -> np.ndarray:
        """
        Color an iteration result.

        Returns:
            uint8 RGB array with shape result.shape + (3,)
        """
        t = self.normalize(result)
        r, g, b = self.channels(t)
        rgb = np.stack([r, g, b], axis=-1)
        # Truncation toward zero; all channels are non-negative
        rgb = rgb.astype(np.uint8)
        rgb[result.interior] = INSIDE_COLOR
        return rgb


class HotGradient(GradientPalette):
    """black -> red -> yellow -> green -> cyan -> white in five 0.2 bands."""

    name = "hot"
    gamma = 0.5

    def channels(self, t):
        full = np.full_like(t, 255.0)
        zero = np.zeros_like(t)

        bands = [t < 0.2, t < 0.4, t < 0.6, t < 0.8]
        ramp = [
            t * 5.0 * 255.0,
            (t - 0.2) * 5.0 * 255.0,
            (t - 0.4) * 5.0 * 255.0,
            (t - 0.6) * 5.0 * 255.0,
        ]
        last_ramp = (t - 0.8) * 5.0 * 255.0
        # Yellow -> green subtracts the truncated ramp
        falling = 255.0 - np.trunc(ramp[2])

        r = np.select(bands, [ramp[0], full, falling, zero], default=last_ramp)
        g = np.select(bands, [zero, ramp[1], full, full], default=full)
        b = np.select(bands, [zero, zero, zero, ramp[3]], default=full)
        return r, g, b


class RainbowGradient(GradientPalette):
    """red -> orange -> yellow -> green -> cyan -> blue -> magenta over six hue bands."""

    name = "rainbow"
    gamma = 0.7

    def channels(self, t):
        hue = t * 6.0
        band = hue.astype(np.int64)
        f = hue - np.floor(hue)

        full = np.full_like(t, 255.0)
        zero = np.zeros_like(t)

        bands = [band == 0, band == 1, band == 2, band == 3, band == 4]
        r = np.select(bands, [full, full, 255.0 * (1.0 - f), zero, zero], default=f * 255.0)
        g = np.select(bands, [f * 165.0, 165.0 + f * 90.0, full, full, 255.0 * (1.0 - f)],
                      default=zero)
        b = np.select(bands, [zero, zero, zero, f * 255.0, full], default=full)
        return r, g, b


class ColoringEngine:
    """Chooses the palette for each escape-time variant."""

    def __init__(self):
        self.palettes: Dict[FractalVariant, GradientPalette] = {
            FractalVariant.MANDELBROT: HotGradient(),
            FractalVariant.JULIA: RainbowGradient(),
        }

    def get_palette(self, variant: FractalVariant) -> GradientPalette:
        palette = self.palettes.get(variant)
        if palette is None:
            raise ValueError(f"No escape-time palette for variant '{variant.value}'")
        return palette

    def render_color_image(self, result: IterationResult, variant: FractalVariant) -> np.ndarray:
        """Color an iteration result with the palette of ``variant``."""
        return self.get_palette(variant).apply(result)
