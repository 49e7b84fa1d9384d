"""
Main API classes for fractal rendering and exploration.

This module provides the high-level interface: FractalRenderer turns a
viewport into a pixel buffer using the configured backend, and
FractalExplorer ties a viewport, an interaction controller and a renderer
together so that a UI only has to forward events and display frames.
"""

import numpy as np
from typing import Optional
from dataclasses import dataclass
from pathlib import Path
import logging
import time

from .core.fractal_types import EscapeTimeFractal, FractalRegistry
from .core.viewport import ViewportModel
from .core.zoom_rect import ImageRect
from .interaction.controller import InteractionController, StatusSnapshot
from .interaction.events import InputEvent
from .acceleration.numba_backend import get_numba_accelerator, is_numba_available
from .acceleration.multiprocessing import get_multiprocessing_accelerator
from .rendering.image_output import ImageExporter, RenderMetadata

logger = logging.getLogger(__name__)


@dataclass
class RenderConfig:
    """Configuration for fractal rendering."""

    # Pixel buffer size
    width: int = 1200
    height: int = 800

    # Escape-time backend: 'numpy', 'numba' or 'multiprocessing'
    accelerator: str = 'numpy'
    num_processes: Optional[int] = None
    band_rows: int = 64

    def validate(self):
        """Validate configuration parameters."""
        if self.width <= 0 or self.height <= 0:
            raise ValueError("Width and height must be positive")

        if self.accelerator not in ('numpy', 'numba', 'multiprocessing'):
            raise ValueError(f"Unknown accelerator '{self.accelerator}'")

        if self.band_rows < 1:
            raise ValueError("band_rows must be >= 1")


class FractalRenderer:
    """Renders viewports to RGB pixel buffers."""

    def __init__(self, config: Optional[RenderConfig] = None):
        """
        Initialize fractal renderer.

        Args:
            config: Rendering configuration (uses defaults if None)
        """
        self.config = config or RenderConfig()
        self.config.validate()
        self.backend = self._select_backend()
        self.last_render_time = 0.0

        logger.info(f"FractalRenderer initialized: {self.config.width}x{self.config.height}, "
                    f"backend={self.backend}")

    def _select_backend(self) -> str:
        if self.config.accelerator == 'numba' and not is_numba_available():
            logger.warning("Numba requested but not installed - using NumPy backend")
            return 'numpy'
        return self.config.accelerator

    def render(self, viewport: ViewportModel) -> np.ndarray:
        """
        Render the active variant of a viewport.

        Returns:
            uint8 RGB array (height, width, 3)
        """
        start_time = time.time()
        width, height = self.config.width, self.config.height
        fractal = FractalRegistry.create_fractal(viewport.variant)

        logger.debug(f"Rendering {fractal.name}: center={viewport.center}, zoom={viewport.zoom:.3e}")

        if isinstance(fractal, EscapeTimeFractal) and self.backend == 'numba':
            result = get_numba_accelerator().compute(viewport, width, height)
            image = fractal.colorize(result)
        elif isinstance(fractal, EscapeTimeFractal) and self.backend == 'multiprocessing':
            accelerator = get_multiprocessing_accelerator(self.config.num_processes,
                                                          self.config.band_rows)
            image = accelerator.render(viewport, width, height)
        else:
            image = fractal.render(viewport, width, height)

        self.last_render_time = time.time() - start_time
        logger.info(f"Rendered {fractal.name} in {self.last_render_time:.2f}s")
        return image


class FractalExplorer:
    """Interactive exploration session."""

    def __init__(self, config: Optional[RenderConfig] = None,
                 viewport: Optional[ViewportModel] = None,
                 image_rect: Optional[ImageRect] = None):
        self.renderer = FractalRenderer(config)
        self.viewport = viewport or ViewportModel()
        self.controller = InteractionController(
            self.viewport, self.renderer.config.width, self.renderer.config.height, image_rect
        )
        self.current_image: Optional[np.ndarray] = None

    def handle(self, event: InputEvent) -> None:
        self.controller.handle(event)

    def frame(self) -> np.ndarray:
        """Current image, re-rendered only if the view changed."""
        if self.current_image is None or self.controller.dirty:
            self.current_image = self.renderer.render(self.viewport)
            self.controller.clear_dirty()
        return self.current_image

    def status(self) -> StatusSnapshot:
        return self.controller.status()

    def save(self, path) -> Path:
        """Save the current frame with its render metadata."""
        image = self.frame()
        config = self.renderer.config
        metadata = RenderMetadata.from_viewport(self.viewport, config.width, config.height,
                                                self.renderer.last_render_time)
        return ImageExporter().save_image(image, Path(path), metadata)
