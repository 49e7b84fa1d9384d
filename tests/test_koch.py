import math

import numpy as np
import pytest

from fractal_explorer.core.koch import (
    CURVE_COLOR,
    base_segment,
    draw_segment,
    generate_segments,
    koch_depth,
    render_koch,
)
from fractal_explorer.core.math_functions import ComplexPlane
from fractal_explorer.core.viewport import FractalVariant, ViewportModel


@pytest.mark.parametrize("zoom,depth", [
    (0.1, 0),
    (0.8, 0),
    (1.0, 1),
    (2.0, 2),
    (3.9, 2),
    (16.0, 5),
    (1024.0, 5),
])
def test_depth_follows_zoom(zoom, depth):
    assert koch_depth(zoom) == depth


@pytest.mark.parametrize("depth", range(6))
def test_segment_count_is_power_of_four(depth):
    assert len(generate_segments((0.0, 0.0), (1.0, 0.0), depth)) == 4 ** depth


def test_depth_zero_returns_input_segment():
    assert generate_segments((0.5, 1.0), (2.0, -3.0), 0) == [((0.5, 1.0), (2.0, -3.0))]


def test_single_subdivision_builds_equilateral_bump():
    segments = generate_segments((0.0, 0.0), (3.0, 0.0), 1)
    peak_height = math.sqrt(3.0) / 2.0
    expected = [
        ((0.0, 0.0), (1.0, 0.0)),
        ((1.0, 0.0), (1.5, peak_height)),
        ((1.5, peak_height), (2.0, 0.0)),
        ((2.0, 0.0), (3.0, 0.0)),
    ]
    for (start, end), (exp_start, exp_end) in zip(segments, expected):
        assert start == pytest.approx(exp_start)
        assert end == pytest.approx(exp_end)


def test_segments_form_a_continuous_path():
    segments = generate_segments((-1.0, 0.0), (1.0, 0.0), 4)
    assert segments[0][0] == (-1.0, 0.0)
    assert segments[-1][1] == pytest.approx((1.0, 0.0))
    for (_, end), (start, _) in zip(segments, segments[1:]):
        assert end == pytest.approx(start)


def test_zero_length_segment_keeps_count():
    segments = generate_segments((1.0, 1.0), (1.0, 1.0), 3)
    assert len(segments) == 64
    assert all(seg == ((1.0, 1.0), (1.0, 1.0)) for seg in segments)


def test_base_segment_spans_two_over_zoom():
    vp = ViewportModel.for_variant(FractalVariant.KOCH)
    start, end = base_segment(vp)
    assert start == pytest.approx((-1.25, -0.2))
    assert end == pytest.approx((1.25, -0.2))


def test_render_draws_green_curve_on_black():
    vp = ViewportModel.for_variant(FractalVariant.KOCH)
    image = render_koch(vp, 120, 80)

    assert image.shape == (80, 120, 3)
    assert image.dtype == np.uint8

    colors = {tuple(c) for c in image.reshape(-1, 3)}
    assert colors == {(0, 0, 0), CURVE_COLOR}

    # Base segment runs through the middle row between x ~33 and x ~86
    assert tuple(image[40, 60]) == CURVE_COLOR
    assert tuple(image[0, 0]) == (0, 0, 0)
    assert tuple(image[40, 5]) == (0, 0, 0)


def test_render_deeper_curve_leaves_baseline():
    vp = ViewportModel(center=(0.0, 0.0), zoom=2.0, variant=FractalVariant.KOCH)
    image = render_koch(vp, 120, 80)
    green_rows = np.unique(np.nonzero(image[:, :, 1])[0])
    # Bumps add rows beyond the 3 pixel wide baseline
    assert len(green_rows) > 3


def _plane(width=50, height=50):
    return ComplexPlane(ViewportModel(center=(0.0, 0.0)).bounds(width, height), width, height)


def test_offscreen_segment_is_skipped():
    image = np.zeros((50, 50, 3), dtype=np.uint8)
    assert not draw_segment(image, _plane(), ((100.0, 100.0), (200.0, 100.0)))
    assert not image.any()


def test_non_finite_segment_is_skipped():
    image = np.zeros((50, 50, 3), dtype=np.uint8)
    assert not draw_segment(image, _plane(), ((math.inf, 0.0), (0.0, 0.0)))
    assert not draw_segment(image, _plane(), ((math.nan, 0.0), (0.0, 0.0)))
    assert not image.any()


def test_zero_length_segment_stamps_a_block():
    image = np.zeros((50, 50, 3), dtype=np.uint8)
    assert draw_segment(image, _plane(), ((0.0, 0.0), (0.0, 0.0)))
    assert np.count_nonzero(image[:, :, 1]) == 9


def test_segment_partly_offscreen_is_clipped():
    image = np.zeros((50, 50, 3), dtype=np.uint8)
    assert draw_segment(image, _plane(), ((-10.0, 0.0), (0.0, 0.0)))
    assert image[:, 0, 1].any()


@pytest.mark.parametrize("zoom", [1e18, 1e50, 1e300])
def test_collapsed_view_renders_black(zoom):
    vp = ViewportModel(center=(0.0, -0.2), zoom=zoom, variant=FractalVariant.KOCH)
    image = render_koch(vp, 60, 40)
    assert image.shape == (40, 60, 3)
    assert not image.any()


def test_deep_but_resolvable_view_still_draws():
    vp = ViewportModel(center=(0.0, -0.2), zoom=1e15, variant=FractalVariant.KOCH)
    assert render_koch(vp, 60, 40)[:, :, 1].any()


def test_draw_segment_on_collapsed_plane_is_skipped():
    plane = ComplexPlane(ViewportModel(center=(0.0, -0.2), zoom=1e18).bounds(60, 40), 60, 40)
    image = np.zeros((40, 60, 3), dtype=np.uint8)
    assert not draw_segment(image, plane, ((0.0, -0.2), (1e-18, -0.2)))
    assert not image.any()
