import math

import pytest

from fractal_explorer.core.viewport import (
    CANONICAL_VIEWS,
    FractalVariant,
    ViewportModel,
    WindowBounds,
    max_iterations_for_zoom,
    preset_key,
)


def test_default_view_is_canonical_mandelbrot():
    vp = ViewportModel()
    assert vp.variant is FractalVariant.MANDELBROT
    assert vp.center == (-0.5, 0.0)
    assert vp.zoom == 1.0
    assert vp.julia_c == (-0.7269, 0.1889)


def test_bounds_at_canonical_mandelbrot_view():
    bounds = ViewportModel().bounds(1200, 800)
    assert isinstance(bounds, WindowBounds)
    assert bounds.left == pytest.approx(-2.75)
    assert bounds.right == pytest.approx(1.75)
    assert bounds.top == pytest.approx(-1.5)
    assert bounds.bottom == pytest.approx(1.5)
    assert bounds.width == pytest.approx(4.5)
    assert bounds.height == pytest.approx(3.0)


def test_bounds_shrink_with_zoom_and_follow_aspect():
    bounds = ViewportModel(center=(1.0, 2.0), zoom=3.0).bounds(400, 400)
    assert bounds.width == pytest.approx(1.0)
    assert bounds.height == pytest.approx(1.0)
    assert (bounds.left + bounds.right) / 2 == pytest.approx(1.0)
    assert (bounds.top + bounds.bottom) / 2 == pytest.approx(2.0)


@pytest.mark.parametrize("variant", list(FractalVariant))
def test_reset_applies_canonical_view_regardless_of_prior_state(variant):
    vp = ViewportModel(center=(12.5, -7.0), zoom=3.7e6)
    vp.reset(variant)
    center, zoom = CANONICAL_VIEWS[variant]
    assert vp.variant is variant
    assert vp.center == center
    assert vp.zoom == zoom


def test_reset_koch_is_exact():
    vp = ViewportModel.for_variant(FractalVariant.JULIA)
    vp.zoom_by(42.0)
    vp.pan((13, -9), 1200, 800)
    vp.reset(FractalVariant.KOCH)
    assert vp.center == (0.0, -0.2)
    assert vp.zoom == 0.8


def test_reset_without_variant_keeps_variant():
    vp = ViewportModel.for_variant(FractalVariant.JULIA)
    vp.zoom_by(10.0)
    vp.reset()
    assert vp.variant is FractalVariant.JULIA
    assert vp.zoom == 1.5


def test_pan_moves_view_against_pointer():
    vp = ViewportModel()
    vp.pan((10, 0), 1200, 800)
    # 4.5 plane units across 1200 pixels
    assert vp.center[0] == pytest.approx(-0.5 - 10 * 4.5 / 1200)
    assert vp.center[1] == 0.0

    vp.pan((0, -20), 1200, 800)
    assert vp.center[1] == pytest.approx(20 * 3.0 / 800)


@pytest.mark.parametrize("delta,zoom", [((37, -12), 1.0), ((-250.5, 99.25), 1e6), ((3, 4), 0.01)])
def test_pan_then_inverse_pan_restores_center(delta, zoom):
    vp = ViewportModel(center=(-0.743, 0.131), zoom=zoom)
    before = vp.center
    vp.pan(delta, 1200, 800)
    vp.pan((-delta[0], -delta[1]), 1200, 800)
    assert vp.center[0] == pytest.approx(before[0], rel=1e-9)
    assert vp.center[1] == pytest.approx(before[1], rel=1e-9)


def test_pan_on_empty_surface_is_ignored():
    vp = ViewportModel()
    vp.pan((10, 10), 0, 800)
    assert vp.center == (-0.5, 0.0)


@pytest.mark.parametrize("factor", [1.1, 0.9, 1.5, 0.67, 1234.5])
def test_zoom_by_then_inverse_restores_zoom(factor):
    vp = ViewportModel(zoom=2.5)
    vp.zoom_by(factor)
    vp.zoom_by(1.0 / factor)
    assert vp.zoom == pytest.approx(2.5)


@pytest.mark.parametrize("factor", [0.0, -2.0, math.nan, math.inf])
def test_zoom_by_rejects_invalid_factors(factor):
    vp = ViewportModel(zoom=2.0)
    vp.zoom_by(factor)
    assert vp.zoom == 2.0


def test_zoom_by_rejects_overflow_and_underflow():
    vp = ViewportModel(zoom=1e300)
    vp.zoom_by(1e10)
    assert vp.zoom == 1e300

    vp = ViewportModel(zoom=1e-300)
    vp.zoom_by(1e-30)
    assert vp.zoom == 1e-300


def test_constructor_rejects_non_positive_zoom():
    with pytest.raises(ValueError):
        ViewportModel(zoom=0.0)
    with pytest.raises(ValueError):
        ViewportModel(zoom=math.inf)


def test_set_view_rejects_non_finite_values():
    vp = ViewportModel()
    vp.set_view((math.nan, 0.0), 2.0)
    vp.set_view((0.0, 0.0), -1.0)
    assert vp.center == (-0.5, 0.0)
    assert vp.zoom == 1.0

    vp.set_view((0.25, 0.5), 4.0)
    assert vp.center == (0.25, 0.5)
    assert vp.zoom == 4.0


def test_nudge_translates_center():
    vp = ViewportModel(center=(0.0, 0.0))
    vp.nudge(0.1, -0.2)
    assert vp.center == pytest.approx((0.1, -0.2))


def test_julia_constant_is_clamped():
    vp = ViewportModel()
    vp.set_julia_c(3.0, -5.0)
    assert vp.julia_c == (2.0, -2.0)

    assert ViewportModel(julia_c=(-9.0, 0.5)).julia_c == (-2.0, 0.5)


@pytest.mark.parametrize("name,expected", [
    ("dragon", (-0.7269, 0.1889)),
    ("Spiral", (-0.75, 0.11)),
    ("lightning", (-0.4, 0.6)),
    ("Douady Rabbit", (-0.123, 0.745)),
    ("rabbit", (-0.123, 0.745)),
])
def test_apply_preset_sets_both_components(name, expected):
    vp = ViewportModel(julia_c=(0.0, 0.0))
    vp.apply_preset(name)
    assert vp.julia_c == expected


def test_unknown_preset_raises():
    with pytest.raises(ValueError, match="Unknown Julia preset"):
        preset_key("snowflake")


@pytest.mark.parametrize("zoom,expected", [
    (1.0, 255),
    (0.5, 255),
    (1e-6, 255),
    (10.0, 355),
    (100.0, 455),
    (1e7, 955),
    (1e8, 1000),
    (1e300, 1000),
])
def test_max_iterations_for_zoom(zoom, expected):
    assert max_iterations_for_zoom(zoom) == expected


def test_variant_lookup_by_name():
    assert FractalVariant.from_name("Julia") is FractalVariant.JULIA
    assert FractalVariant.KOCH.label == "Koch Curve"
    with pytest.raises(ValueError, match="Unknown fractal variant"):
        FractalVariant.from_name("burning_ship")


def test_copy_is_independent():
    vp = ViewportModel()
    other = vp.copy()
    other.zoom_by(2.0)
    assert vp.zoom == 1.0
