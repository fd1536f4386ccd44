from __future__ import annotations

import pytest

from domain.models import Point, Size
from domain.services.viewport import MAX_SCALE, MIN_SCALE, Viewport


@pytest.mark.parametrize("scale", [0.5, 0.75, 1.0, 1.37, 2.0])
@pytest.mark.parametrize("pan", [Point(0, 0), Point(-340.5, 120.25), Point(999, -1e4)])
@pytest.mark.parametrize("point", [Point(0, 0), Point(13.3, -7.1), Point(1920, 1080)])
def test_world_screen_roundtrip(scale: float, pan: Point, point: Point) -> None:
    viewport = Viewport(pan=pan, scale=scale)

    back = viewport.world_to_screen(viewport.screen_to_world(point))

    assert back.x == pytest.approx(point.x)
    assert back.y == pytest.approx(point.y)


def test_screen_to_world_applies_pan_then_scale() -> None:
    viewport = Viewport(pan=Point(100, 50), scale=2.0)

    assert viewport.screen_to_world(Point(300, 250)) == Point(100, 100)
    assert viewport.world_to_screen(Point(100, 100)) == Point(300, 250)


@pytest.mark.parametrize(("requested", "expected"), [(2.05, 2.0), (0.4, 0.5), (1.3, 1.3)])
def test_zoom_is_clamped(requested: float, expected: float) -> None:
    viewport = Viewport().zoomed_to(requested)

    assert viewport.scale == pytest.approx(expected)


def test_zoom_keeps_pan() -> None:
    viewport = Viewport(pan=Point(40, -20), scale=1.0)

    zoomed = viewport.zoomed_by(0.5)

    assert zoomed.pan == Point(40, -20)
    assert zoomed.scale == pytest.approx(1.5)


def test_wheel_zoom_uses_sensitivity() -> None:
    viewport = Viewport()

    assert viewport.wheel_zoom(-100).scale == pytest.approx(1.1)
    assert viewport.wheel_zoom(100).scale == pytest.approx(0.9)
    assert viewport.wheel_zoom(-5000).scale == MAX_SCALE
    assert viewport.wheel_zoom(5000).scale == MIN_SCALE


def test_constructor_clamps_scale() -> None:
    assert Viewport(scale=10).scale == MAX_SCALE


def test_panning_is_one_to_one_in_screen_pixels() -> None:
    viewport = Viewport(pan=Point(10, 10), scale=2.0)

    assert viewport.panned_by(5, -3).pan == Point(15, 7)


def test_view_center_accounts_for_pan_and_scale() -> None:
    viewport = Viewport(pan=Point(-200, 100), scale=2.0)

    center = viewport.view_center(Size(800, 600))

    assert center == Point(300, 100)
    assert Viewport().view_center() == Point(400, 300)


def test_grid_background_follows_view() -> None:
    grid = Viewport(pan=Point(7, 9), scale=1.5).grid_background()

    assert grid.spacing == pytest.approx(30)
    assert grid.offset == Point(7, 9)


@pytest.mark.parametrize(("scale", "percent"), [(1.0, 100), (0.5, 50), (1.25, 125), (2.0, 200)])
def test_zoom_percent(scale: float, percent: int) -> None:
    assert Viewport(scale=scale).zoom_percent() == percent
