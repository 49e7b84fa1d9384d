"""
Fractal type definitions.

Each fractal variant is a FractalType that turns a viewport and a pixel
buffer size into an RGB image. Escape-time fractals (Mandelbrot, Julia)
share the iteration and coloring pipeline; the Koch curve is a separate
geometric renderer and never enters the escape-time path.
"""

import numpy as np
from typing import Dict, Optional, Tuple
from abc import ABC, abstractmethod
import logging

from .koch import render_koch
from .math_functions import ComplexPlane, FractalIterator, IterationResult
from .viewport import CANONICAL_VIEWS, FractalVariant, Point, ViewportModel
from ..rendering.coloring import ColoringEngine

logger = logging.getLogger(__name__)


class FractalType(ABC):
    """Abstract base class for fractal types."""

    variant: FractalVariant

    @property
    def name(self) -> str:
        return self.variant.label

    @property
    def canonical_view(self) -> Tuple[Point, float]:
        """Default (center, zoom) for this fractal."""
        return CANONICAL_VIEWS[self.variant]

    @abstractmethod
    def render(self, viewport: ViewportModel, width: int, height: int) -> np.ndarray:
        """
        Render the fractal for a view.

        Args:
            viewport: Current view
            width, height: Pixel buffer size

        Returns:
            uint8 RGB array (height, width, 3)
        """
        pass

    @abstractmethod
    def get_description(self) -> str:
        pass


class EscapeTimeFractal(FractalType):
    """Common pipeline for z <- z^2 + c fractals."""

    def __init__(self, coloring_engine: Optional[ColoringEngine] = None):
        self.coloring_engine = coloring_engine or ColoringEngine()

    @abstractmethod
    def iterate(self, iterator: FractalIterator, px: np.ndarray, py: np.ndarray,
                viewport: ViewportModel) -> IterationResult:
        """Run the iteration for plane coordinate grids."""
        pass

    def compute(self, viewport: ViewportModel, width: int, height: int,
                row_start: int = 0, row_end: Optional[int] = None) -> IterationResult:
        """
        Compute escape counts for a band of pixel rows.

        Rows are always mapped with the full buffer geometry so that bands
        computed separately assemble into the same image as a single pass.
        """
        plane = ComplexPlane(viewport.bounds(width, height), width, height)
        px, py = plane.create_coordinate_arrays(row_start, row_end)
        iterator = FractalIterator(viewport.max_iterations())
        return self.iterate(iterator, px, py, viewport)

    def colorize(self, result: IterationResult) -> np.ndarray:
        return self.coloring_engine.render_color_image(result, self.variant)

    def render(self, viewport: ViewportModel, width: int, height: int) -> np.ndarray:
        return self.colorize(self.compute(viewport, width, height))


class MandelbrotSet(EscapeTimeFractal):
    """Mandelbrot set: z0 = 0, c is the plane point."""

    variant = FractalVariant.MANDELBROT

    def iterate(self, iterator, px, py, viewport):
        return iterator.mandelbrot_iteration(px, py)

    def get_description(self) -> str:
        return "Mandelbrot set: z_{n+1} = z_n^2 + c, where c is the plane coordinate and z_0 = 0"


class JuliaSet(EscapeTimeFractal):
    """Julia set: z0 is the plane point, c is the viewport's Julia constant."""

    variant = FractalVariant.JULIA

    def iterate(self, iterator, px, py, viewport):
        return iterator.julia_iteration(px, py, viewport.julia_c)

    def get_description(self) -> str:
        return "Julia set: z_{n+1} = z_n^2 + c, where c is fixed and z_0 is the plane coordinate"


class KochCurve(FractalType):
    """Koch curve drawn from a single base segment."""

    variant = FractalVariant.KOCH

    def render(self, viewport, width, height):
        return render_koch(viewport, width, height)

    def get_description(self) -> str:
        return "Koch curve: each segment is replaced by four with an outward equilateral bump"


class FractalRegistry:
    """Registry mapping variants to their fractal implementations."""

    _fractals: Dict[FractalVariant, type] = {
        FractalVariant.MANDELBROT: MandelbrotSet,
        FractalVariant.JULIA: JuliaSet,
        FractalVariant.KOCH: KochCurve,
    }

    @classmethod
    def get(cls, variant) -> type:
        """
        Get a fractal class by variant or variant name.

        Args:
            variant: FractalVariant or its string value

        Returns:
            Fractal class
        """
        if isinstance(variant, str):
            variant = FractalVariant.from_name(variant)
        return cls._fractals[variant]

    @classmethod
    def create_fractal(cls, variant) -> FractalType:
        return cls.get(variant)()

    @classmethod
    def list_fractals(cls) -> Dict[str, str]:
        """Available fractals and their descriptions."""
        return {variant.value: fractal_class().get_description()
                for variant, fractal_class in cls._fractals.items()}


def render_fractal(viewport: ViewportModel, width: int, height: int) -> np.ndarray:
    """Render the active variant of ``viewport`` with the default pipeline."""
    return FractalRegistry.create_fractal(viewport.variant).render(viewport, width, height)
