import numpy as np
import pytest

from fractal_explorer import api
from fractal_explorer.api import FractalExplorer, FractalRenderer, RenderConfig
from fractal_explorer.core.viewport import FractalVariant, ViewportModel
from fractal_explorer.interaction.events import Key, KeyAction, Scroll
from fractal_explorer.rendering.image_output import read_png_metadata

SMALL = RenderConfig(width=60, height=40)


@pytest.mark.parametrize("kwargs", [
    {'width': 0},
    {'height': -1},
    {'accelerator': 'cuda'},
    {'band_rows': 0},
])
def test_render_config_validation(kwargs):
    with pytest.raises(ValueError):
        RenderConfig(**kwargs).validate()


@pytest.mark.parametrize("variant", list(FractalVariant))
def test_renderer_produces_rgb_buffer(variant):
    renderer = FractalRenderer(RenderConfig(width=60, height=40))
    image = renderer.render(ViewportModel.for_variant(variant))
    assert image.shape == (40, 60, 3)
    assert image.dtype == np.uint8
    assert renderer.last_render_time >= 0.0


def test_missing_numba_falls_back_to_numpy(monkeypatch):
    monkeypatch.setattr(api, 'is_numba_available', lambda: False)
    renderer = FractalRenderer(RenderConfig(width=20, height=10, accelerator='numba'))
    assert renderer.backend == 'numpy'


def test_multiprocessing_backend_draws_koch_directly():
    renderer = FractalRenderer(RenderConfig(width=60, height=40, accelerator='multiprocessing',
                                            num_processes=1))
    image = renderer.render(ViewportModel.for_variant(FractalVariant.KOCH))
    assert image[:, :, 1].any()


def test_frame_is_cached_until_view_changes():
    explorer = FractalExplorer(RenderConfig(width=60, height=40))
    first = explorer.frame()
    assert explorer.frame() is first
    assert not explorer.controller.dirty

    explorer.handle(Scroll(1.0))
    second = explorer.frame()
    assert second is not first


def test_toggle_panel_does_not_rerender():
    explorer = FractalExplorer(RenderConfig(width=60, height=40))
    first = explorer.frame()
    explorer.handle(Key(KeyAction.TOGGLE_PANEL))
    assert explorer.frame() is first


def test_status_reflects_events():
    explorer = FractalExplorer(RenderConfig(width=60, height=40))
    explorer.handle(Key(KeyAction.ZOOM_IN))
    assert explorer.status().zoom == pytest.approx(1.5)


def test_save_writes_png_with_metadata(tmp_path):
    vp = ViewportModel.for_variant(FractalVariant.JULIA)
    vp.apply_preset('lightning')
    explorer = FractalExplorer(RenderConfig(width=60, height=40), vp)

    path = explorer.save(tmp_path / "julia.png")
    assert path.exists()

    metadata = read_png_metadata(path)
    assert metadata.variant == 'julia'
    assert metadata.resolution == (60, 40)
    assert metadata.julia_c == (-0.4, 0.6)
    assert metadata.zoom == 1.5
