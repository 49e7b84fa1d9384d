"""
Multiprocessing backend for parallel escape-time rendering.

The pixel buffer is split into horizontal bands of rows that are rendered in
worker processes. Every band is mapped with the geometry of the full buffer,
so the assembled image is identical to a single-pass render. The buffer is
only returned once all bands have completed.
"""

import numpy as np
from typing import List, Optional
import multiprocessing as mp
import logging
import time
from dataclasses import dataclass
from concurrent.futures import ProcessPoolExecutor, as_completed

from ..core.fractal_types import EscapeTimeFractal, FractalRegistry
from ..core.viewport import ViewportModel

logger = logging.getLogger(__name__)


@dataclass
class BandSpec:
    """Specification for a band of rows in parallel rendering."""
    band_id: int
    row_start: int
    row_end: int


@dataclass
class BandResult:
    """Rendered pixels for one band."""
    band_id: int
    row_start: int
    pixels: np.ndarray
    processing_time: float


def create_band_grid(height: int, band_rows: int = 64) -> List[BandSpec]:
    """
    Split ``height`` rows into consecutive bands.

    Args:
        height: Total image height
        band_rows: Target rows per band

    Returns:
        List of BandSpec objects covering every row exactly once
    """
    band_rows = max(1, band_rows)
    bands = [BandSpec(band_id=i, row_start=start, row_end=min(start + band_rows, height))
             for i, start in enumerate(range(0, height, band_rows))]
    logger.debug(f"Created {len(bands)} bands of up to {band_rows} rows")
    return bands


def process_band(viewport: ViewportModel, width: int, height: int, band: BandSpec) -> BandResult:
    """Render one band of rows; runs in a worker process."""
    start_time = time.time()

    fractal = FractalRegistry.create_fractal(viewport.variant)
    if not isinstance(fractal, EscapeTimeFractal):
        raise ValueError(f"Variant '{viewport.variant.value}' is not an escape-time fractal")

    result = fractal.compute(viewport, width, height, band.row_start, band.row_end)
    pixels = fractal.colorize(result)

    return BandResult(
        band_id=band.band_id,
        row_start=band.row_start,
        pixels=pixels,
        processing_time=time.time() - start_time,
    )


def assemble_bands(band_results: List[BandResult], width: int, height: int) -> np.ndarray:
    """Place band pixels into a full RGB buffer."""
    image = np.zeros((height, width, 3), dtype=np.uint8)
    for band in band_results:
        rows = band.pixels.shape[0]
        image[band.row_start:band.row_start + rows] = band.pixels
    return image


def get_optimal_process_count() -> int:
    return max(1, mp.cpu_count())


class MultiprocessingAccelerator:
    """Band-parallel escape-time rendering across worker processes."""

    def __init__(self, num_processes: Optional[int] = None, band_rows: int = 64):
        """
        Initialize multiprocessing accelerator.

        Args:
            num_processes: Number of worker processes (None for CPU count)
            band_rows: Rows per band
        """
        if num_processes is None:
            self.num_processes = get_optimal_process_count()
        else:
            self.num_processes = max(1, num_processes)

        self.band_rows = band_rows
        logger.info(f"Multiprocessing accelerator: {self.num_processes} processes, {band_rows}-row bands")

    def render(self, viewport: ViewportModel, width: int, height: int) -> np.ndarray:
        """
        Render an escape-time fractal using parallel bands.

        Returns:
            uint8 RGB array (height, width, 3)
        """
        start_time = time.time()
        bands = create_band_grid(height, self.band_rows)

        band_results = []
        with ProcessPoolExecutor(max_workers=self.num_processes) as executor:
            futures = [executor.submit(process_band, viewport, width, height, band) for band in bands]
            for future in as_completed(futures):
                band_results.append(future.result())

        image = assemble_bands(band_results, width, height)

        total_time = time.time() - start_time
        processing_time = sum(br.processing_time for br in band_results)
        logger.info(f"Parallel rendering complete: {total_time:.2f}s total, "
                    f"{processing_time:.2f}s processing time across {len(bands)} bands")
        return image


def get_multiprocessing_accelerator(num_processes: Optional[int] = None,
                                    band_rows: int = 64) -> MultiprocessingAccelerator:
    return MultiprocessingAccelerator(num_processes, band_rows)
