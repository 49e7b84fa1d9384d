"""
Core mathematical functions for fractal iteration.

This module provides the pixel <-> plane coordinate mapping shared by every
renderer and the escape-time iteration used for the Mandelbrot and Julia
sets. All arithmetic is float64; the iteration is written on separate real
and imaginary arrays so that every backend performs the exact same sequence
of floating-point operations per pixel.
"""

import math
import numpy as np
from typing import Tuple, Union
import logging

from .viewport import WindowBounds

logger = logging.getLogger(__name__)

ArrayLike = Union[float, np.ndarray]

# |z|^2 threshold (escape radius 2)
ESCAPE_RADIUS_SQ = 4.0


class ComplexPlane:
    """Maps between pixel coordinates and a plane window."""

    def __init__(self, bounds: WindowBounds, width: int, height: int):
        """
        Initialize plane window and resolution.

        Args:
            bounds: Visible plane rectangle
            width, height: Pixel buffer resolution
        """
        if width <= 0 or height <= 0:
            raise ValueError("Width and height must be positive")

        self.bounds = bounds
        self.width = width
        self.height = height

    def pixel_to_plane(self, x: ArrayLike, y: ArrayLike) -> Tuple[ArrayLike, ArrayLike]:
        """Map pixel coordinates (scalars or arrays) to plane coordinates."""
        left, right, top, bottom = self.bounds
        px = left + (x / self.width) * (right - left)
        py = top + (y / self.height) * (bottom - top)
        return px, py

    def plane_to_pixel(self, px: float, py: float) -> Tuple[float, float]:
        """
        Map a plane point to fractional pixel coordinates.

        Returns (nan, nan) when either extent has collapsed to zero.
        """
        left, right, top, bottom = self.bounds
        if right == left or bottom == top:
            return math.nan, math.nan
        x = (px - left) / (right - left) * self.width
        y = (py - top) / (bottom - top) * self.height
        return x, y

    def create_coordinate_arrays(self, row_start: int = 0,
                                 row_end: int = None) -> Tuple[np.ndarray, np.ndarray]:
        """
        Create plane coordinate grids for a band of pixel rows.

        Args:
            row_start, row_end: Pixel row range (defaults to the whole buffer)

        Returns:
            Tuple of (real, imag) arrays of shape (rows, width)
        """
        if row_end is None:
            row_end = self.height
        xs = np.arange(self.width, dtype=np.float64)
        ys = np.arange(row_start, row_end, dtype=np.float64)
        px, py = self.pixel_to_plane(xs, ys)
        return np.meshgrid(px, py)


class IterationResult:
    """Escape-time iteration counts for a grid of points."""

    def __init__(self, iterations: np.ndarray, max_iter: int):
        self.iterations = iterations
        self.max_iter = max_iter
        self.shape = iterations.shape

    @property
    def interior(self) -> np.ndarray:
        """Points that never escaped (presumed members of the set)."""
        return self.iterations >= self.max_iter

    def get_normalized_iterations(self) -> np.ndarray:
        """Iteration counts scaled to [0, 1]."""
        return self.iterations.astype(np.float64) / self.max_iter


class FractalIterator:
    """Escape-time iteration of z <- z^2 + c."""

    def __init__(self, max_iter: int = 255):
        """
        Initialize fractal iterator.

        Args:
            max_iter: Iteration cap; points reaching it are treated as interior
        """
        if max_iter <= 0:
            raise ValueError("max_iter must be positive")
        self.max_iter = max_iter

    def escape_time_point(self, zx: float, zy: float, cx: float, cy: float) -> int:
        """Iteration count for a single starting point."""
        iteration = 0
        while zx * zx + zy * zy < ESCAPE_RADIUS_SQ and iteration < self.max_iter:
            xtemp = zx * zx - zy * zy + cx
            zy = 2.0 * zx * zy + cy
            zx = xtemp
            iteration += 1
        return iteration

    def escape_time(self, zx: ArrayLike, zy: ArrayLike,
                    cx: ArrayLike, cy: ArrayLike) -> IterationResult:
        """
        Vectorized escape-time iteration.

        Inputs broadcast against each other, so a scalar ``c`` (Julia) or a
        scalar ``z0`` (Mandelbrot) may be combined with coordinate grids.
        Escaped points are dropped from the working set each step.

        Returns:
            IterationResult with counts in [0, max_iter]
        """
        shape = np.broadcast(zx, zy, cx, cy).shape
        zx, zy, cx, cy = (
            np.broadcast_to(np.asarray(a, dtype=np.float64), shape).ravel().copy()
            for a in (zx, zy, cx, cy)
        )

        iterations = np.zeros(zx.size, dtype=np.int32)
        index = np.arange(zx.size)

        for _ in range(self.max_iter):
            active = zx * zx + zy * zy < ESCAPE_RADIUS_SQ
            if not active.all():
                index = index[active]
                if index.size == 0:
                    break
                zx, zy, cx, cy = zx[active], zy[active], cx[active], cy[active]

            xtemp = zx * zx - zy * zy + cx
            zy = 2.0 * zx * zy + cy
            zx = xtemp
            iterations[index] += 1

        return IterationResult(iterations.reshape(shape), self.max_iter)

    def mandelbrot_iteration(self, px: ArrayLike, py: ArrayLike) -> IterationResult:
        """Mandelbrot: z0 = 0, c = plane point."""
        return self.escape_time(0.0, 0.0, px, py)

    def julia_iteration(self, px: ArrayLike, py: ArrayLike,
                        c: Tuple[float, float]) -> IterationResult:
        """Julia: z0 = plane point, c = fixed constant."""
        return self.escape_time(px, py, c[0], c[1])
