import numpy as np
import pytest

from fractal_explorer.acceleration.multiprocessing import (
    BandSpec,
    MultiprocessingAccelerator,
    assemble_bands,
    create_band_grid,
    process_band,
)
from fractal_explorer.acceleration import numba_backend
from fractal_explorer.core.fractal_types import JuliaSet, MandelbrotSet
from fractal_explorer.core.viewport import FractalVariant, ViewportModel


def test_band_grid_covers_every_row_once():
    bands = create_band_grid(100, 32)
    assert [(b.row_start, b.row_end) for b in bands] == [(0, 32), (32, 64), (64, 96), (96, 100)]
    assert [b.band_id for b in bands] == [0, 1, 2, 3]


def test_band_grid_single_band():
    assert create_band_grid(10, 64) == [BandSpec(0, 0, 10)]


def test_bands_assemble_to_single_pass_image():
    vp = ViewportModel(center=(-0.75, 0.1), zoom=3.0)
    bands = create_band_grid(30, 7)
    # Out of order, as completed futures would deliver them
    results = [process_band(vp, 40, 30, band) for band in reversed(bands)]
    image = assemble_bands(results, 40, 30)
    np.testing.assert_array_equal(image, MandelbrotSet().render(vp, 40, 30))


def test_process_band_rejects_koch():
    vp = ViewportModel.for_variant(FractalVariant.KOCH)
    with pytest.raises(ValueError):
        process_band(vp, 10, 10, BandSpec(0, 0, 10))


def test_parallel_render_matches_numpy():
    vp = ViewportModel.for_variant(FractalVariant.JULIA)
    vp.apply_preset('spiral')
    accelerator = MultiprocessingAccelerator(num_processes=2, band_rows=8)
    image = accelerator.render(vp, 40, 30)
    np.testing.assert_array_equal(image, JuliaSet().render(vp, 40, 30))


def test_process_count_is_at_least_one():
    assert MultiprocessingAccelerator(num_processes=0).num_processes == 1


def test_numba_unavailable_raises(monkeypatch):
    accelerator = numba_backend.NumbaAccelerator()
    monkeypatch.setattr(accelerator, 'available', False)
    with pytest.raises(RuntimeError):
        accelerator.compute(ViewportModel(), 10, 10)


@pytest.mark.parametrize("variant", [FractalVariant.MANDELBROT, FractalVariant.JULIA])
def test_numba_matches_numpy(variant):
    pytest.importorskip("numba")
    vp = ViewportModel.for_variant(variant)
    vp.zoom_by(2.0)
    fractal = MandelbrotSet() if variant is FractalVariant.MANDELBROT else JuliaSet()

    result = numba_backend.get_numba_accelerator().compute(vp, 48, 32)
    expected = fractal.compute(vp, 48, 32)
    assert result.max_iter == expected.max_iter
    np.testing.assert_array_equal(result.iterations, expected.iterations)


def test_numba_rejects_koch():
    pytest.importorskip("numba")
    with pytest.raises(ValueError):
        numba_backend.NumbaAccelerator().compute(ViewportModel.for_variant(FractalVariant.KOCH), 10, 10)
