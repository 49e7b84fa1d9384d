"""
Interactive fractal exploration library.

This library renders the Mandelbrot set, Julia sets and the Koch curve into
RGB pixel buffers, and turns pan, zoom and rectangle-selection gestures into
changes of the viewed region of the plane.

Example usage:
    >>> from fractal_explorer import FractalExplorer, RenderConfig, PointerDown, PointerDrag, PointerUp
    >>> explorer = FractalExplorer(RenderConfig(width=600, height=400))
    >>> explorer.handle(PointerDown((100, 100), fine_select=True))
    >>> explorer.handle(PointerDrag((300, 250)))
    >>> explorer.handle(PointerUp())
    >>> image = explorer.frame()
"""

__version__ = "1.0.0"
__author__ = "Fractal Explorer Team"

from fractal_explorer.core.viewport import FractalVariant, ViewportModel, WindowBounds, JULIA_PRESETS
from fractal_explorer.core.fractal_types import FractalRegistry, MandelbrotSet, JuliaSet, KochCurve
from fractal_explorer.core.zoom_rect import ImageRect, zoom_to_rectangle
from fractal_explorer.interaction.controller import InteractionController
from fractal_explorer.interaction.events import KeyAction, Key, PointerDown, PointerDrag, PointerUp, Scroll
from fractal_explorer.rendering.image_output import ImageExporter

# Main API classes
from fractal_explorer.api import FractalRenderer, FractalExplorer, RenderConfig

__all__ = [
    "FractalExplorer",
    "FractalRenderer",
    "RenderConfig",
    "FractalVariant",
    "ViewportModel",
    "WindowBounds",
    "JULIA_PRESETS",
    "FractalRegistry",
    "MandelbrotSet",
    "JuliaSet",
    "KochCurve",
    "ImageRect",
    "zoom_to_rectangle",
    "InteractionController",
    "KeyAction",
    "Key",
    "PointerDown",
    "PointerDrag",
    "PointerUp",
    "Scroll",
    "ImageExporter",
]
