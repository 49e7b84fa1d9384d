"""
Numba JIT compilation backend for escape-time computation.

This module provides a JIT-compiled per-pixel kernel that performs exactly
the same floating-point operations as the NumPy path, parallelized over
rows with ``prange``. Numba is an optional dependency (the ``accel`` extra).
"""

import numpy as np
import logging

from ..core.math_functions import ESCAPE_RADIUS_SQ, ComplexPlane, IterationResult
from ..core.viewport import FractalVariant, ViewportModel

logger = logging.getLogger(__name__)

# Check for Numba availability
try:
    import numba
    NUMBA_AVAILABLE = True
    logger.info(f"Numba available: {numba.__version__}")
except ImportError:
    numba = None
    NUMBA_AVAILABLE = False
    logger.warning("Numba not available - JIT acceleration disabled")

_kernel = None


def is_numba_available() -> bool:
    return NUMBA_AVAILABLE


def _escape_time_kernel(z_real, z_imag, c_real, c_imag, max_iter, escape_radius_sq):
    """
    Escape-time iteration over a grid.

    Args:
        z_real, z_imag: Initial z components, shape (rows, width)
        c_real, c_imag: c components, same shape
        max_iter: Iteration cap
        escape_radius_sq: Squared escape radius

    Returns:
        int32 iteration counts
    """
    height, width = z_real.shape
    iterations = np.zeros((height, width), dtype=np.int32)

    for i in numba.prange(height):
        for j in range(width):
            zx = z_real[i, j]
            zy = z_imag[i, j]
            cx = c_real[i, j]
            cy = c_imag[i, j]

            n = 0
            while zx * zx + zy * zy < escape_radius_sq and n < max_iter:
                xtemp = zx * zx - zy * zy + cx
                zy = 2.0 * zx * zy + cy
                zx = xtemp
                n += 1
            iterations[i, j] = n

    return iterations


def _get_kernel():
    global _kernel
    if _kernel is None:
        logger.info("Compiling escape-time kernel with Numba")
        _kernel = numba.njit(parallel=True)(_escape_time_kernel)
    return _kernel


class NumbaAccelerator:
    """Numba-accelerated escape-time computation."""

    def __init__(self):
        self.available = NUMBA_AVAILABLE
        if not self.available:
            logger.warning("Numba not available - acceleration disabled")

    def compute(self, viewport: ViewportModel, width: int, height: int) -> IterationResult:
        """
        Compute escape counts for the whole buffer.

        Returns:
            IterationResult identical to the NumPy path
        """
        if not self.available:
            raise RuntimeError("Numba not available")

        plane = ComplexPlane(viewport.bounds(width, height), width, height)
        px, py = plane.create_coordinate_arrays()

        if viewport.variant is FractalVariant.MANDELBROT:
            z_real, z_imag = np.zeros_like(px), np.zeros_like(py)
            c_real, c_imag = px, py
        elif viewport.variant is FractalVariant.JULIA:
            z_real, z_imag = px, py
            c_real = np.full_like(px, viewport.julia_c[0])
            c_imag = np.full_like(py, viewport.julia_c[1])
        else:
            raise ValueError(f"Variant '{viewport.variant.value}' is not an escape-time fractal")

        max_iter = viewport.max_iterations()
        iterations = _get_kernel()(
            np.ascontiguousarray(z_real), np.ascontiguousarray(z_imag),
            np.ascontiguousarray(c_real), np.ascontiguousarray(c_imag),
            max_iter, ESCAPE_RADIUS_SQ,
        )
        return IterationResult(iterations, max_iter)


_numba_accelerator = None


def get_numba_accelerator() -> NumbaAccelerator:
    """Get the shared Numba accelerator instance."""
    global _numba_accelerator
    if _numba_accelerator is None:
        _numba_accelerator = NumbaAccelerator()
    return _numba_accelerator
