"""Test viewport fitting."""
import math

import pytest

from app.services.viewport import (
    DEFAULT_ZOOM_TABLE,
    FALLBACK_VIEWPORT,
    SINGLE_POINT_ZOOM,
    Bounds,
    MercatorBoundsRefiner,
    Padding,
    Viewport,
    ZoomBreakpoint,
    ZoomTable,
    bounds_for,
    fit_viewport,
    is_valid_coordinate,
    zoom_for_span,
)


def test_empty_input_returns_fallback():
    assert fit_viewport([]) == FALLBACK_VIEWPORT
    assert FALLBACK_VIEWPORT.center == (29.7604, -95.3698)
    assert FALLBACK_VIEWPORT.zoom == 12.0


def test_unset_sentinel_is_ignored():
    assert fit_viewport([(0.0, 0.0)]) == FALLBACK_VIEWPORT
    assert fit_viewport([(0.0, 0.0), (29.7604, -95.3698)]).zoom == SINGLE_POINT_ZOOM


def test_single_point_centers_on_it():
    viewport = fit_viewport([(29.7604, -95.3698)])

    assert viewport.latitude == 29.7604
    assert viewport.longitude == -95.3698
    assert viewport.zoom == SINGLE_POINT_ZOOM == 14.0


def test_equator_and_prime_meridian_points_are_valid():
    assert is_valid_coordinate(0.0, 10.0)
    assert is_valid_coordinate(51.4779, 0.0)

    viewport = fit_viewport([(0.0, 10.0), (0.0, 10.5)])
    assert viewport.center == (0.0, 10.25)
    assert viewport.zoom == 12.0


@pytest.mark.parametrize("lat, lng", [
    (float("nan"), 10.0),
    (10.0, float("inf")),
    (90.5, 10.0),
    (-91.0, 10.0),
    (10.0, 180.5),
    (10.0, -181.0),
])
def test_out_of_range_coordinates_are_invalid(lat, lng):
    assert not is_valid_coordinate(lat, lng)
    assert fit_viewport([(lat, lng)]) == FALLBACK_VIEWPORT


def test_bounding_box_center():
    coords = [(29.7604, -95.3698), (30.2672, -97.7431), (29.4241, -98.4936)]

    viewport = fit_viewport(coords)
    bounds = bounds_for(coords)

    assert bounds == Bounds(min_lat=29.4241, min_lng=-98.4936, max_lat=30.2672, max_lng=-95.3698)
    assert viewport.latitude == pytest.approx((29.4241 + 30.2672) / 2)
    assert viewport.longitude == pytest.approx((-98.4936 + -95.3698) / 2)
    # Longitude span is about 3.1 degrees
    assert viewport.zoom == 8.0


@pytest.mark.parametrize("span, zoom", [
    (45.0, 5.0),
    (10.0001, 5.0),
    (10.0, 8.0),
    (1.5, 8.0),
    (1.0, 12.0),
    (0.5, 12.0),
    (0.1, 15.0),
    (0.05, 15.0),
    (0.01, 17.0),
    (0.0, 17.0),
])
def test_zoom_for_span_breakpoints(span, zoom):
    assert zoom_for_span(span) == zoom


def test_wider_span_never_zooms_in():
    base = (29.7604, -95.3698)
    spans = [0.001, 0.005, 0.02, 0.08, 0.3, 0.9, 2.0, 7.0, 15.0, 40.0]

    zooms = [fit_viewport([base, (base[0] + span, base[1])]).zoom for span in spans]

    assert zooms == sorted(zooms, reverse=True)


def test_custom_zoom_table():
    table = ZoomTable(
        breakpoints=(ZoomBreakpoint(min_span=2.0, zoom=6.0),),
        closest_zoom=11.0,
    )

    assert fit_viewport([(10.0, 10.0), (13.0, 10.0)], table=table).zoom == 6.0
    assert fit_viewport([(10.0, 10.0), (11.0, 10.0)], table=table).zoom == 11.0


def test_zoom_table_rejects_non_monotonic_order():
    with pytest.raises(ValueError):
        ZoomTable(
            breakpoints=(ZoomBreakpoint(1.0, 8.0), ZoomBreakpoint(10.0, 5.0)),
            closest_zoom=17.0,
        )
    with pytest.raises(ValueError):
        ZoomTable(
            breakpoints=(ZoomBreakpoint(10.0, 8.0), ZoomBreakpoint(1.0, 5.0)),
            closest_zoom=17.0,
        )
    with pytest.raises(ValueError):
        ZoomTable(breakpoints=(ZoomBreakpoint(10.0, 8.0),), closest_zoom=4.0)


def test_default_table_breakpoints():
    assert [(step.min_span, step.zoom) for step in DEFAULT_ZOOM_TABLE.breakpoints] == [
        (10.0, 5.0), (1.0, 8.0), (0.1, 12.0), (0.01, 15.0),
    ]
    assert DEFAULT_ZOOM_TABLE.closest_zoom == 17.0


COORDS = [(29.7604, -95.3698), (29.7499, -95.3584)]


def test_refined_zoom_is_clamped():
    def too_close(bounds, padding):
        return Viewport(1.0, 2.0, 25.0)

    def too_far(bounds, padding):
        return Viewport(1.0, 2.0, 3.0)

    assert fit_viewport(COORDS, refiner=too_close) == Viewport(1.0, 2.0, 18.0)
    assert fit_viewport(COORDS, refiner=too_far) == Viewport(1.0, 2.0, 10.0)


def test_refiner_receives_bounds_and_padding():
    seen = {}

    def refiner(bounds, padding):
        seen["bounds"] = bounds
        seen["padding"] = padding
        return Viewport(29.75, -95.36, 15.5)

    viewport = fit_viewport(COORDS, refiner=refiner)

    assert viewport == Viewport(29.75, -95.36, 15.5)
    assert seen["bounds"] == bounds_for(COORDS)
    assert seen["padding"] == Padding(top=100, left=80, bottom=150, right=80)


def test_refiner_returning_nothing_keeps_coarse_viewport():
    assert fit_viewport(COORDS, refiner=lambda bounds, padding: None) == fit_viewport(COORDS)


def test_failing_refiner_keeps_coarse_viewport():
    def broken(bounds, padding):
        raise RuntimeError("map view not laid out")

    assert fit_viewport(COORDS, refiner=broken) == fit_viewport(COORDS)


def test_refiner_not_called_for_degenerate_input():
    def refiner(bounds, padding):
        raise AssertionError("should not be called")

    assert fit_viewport([], refiner=refiner) == FALLBACK_VIEWPORT
    assert fit_viewport([(29.7604, -95.3698)], refiner=refiner).zoom == SINGLE_POINT_ZOOM


def test_mercator_refiner_fits_width():
    refiner = MercatorBoundsRefiner(512, 512)
    bounds = Bounds(min_lat=10.0, min_lng=-1.0, max_lat=10.0, max_lng=1.0)

    viewport = refiner(bounds, Padding(top=0, left=0, bottom=0, right=0))

    # 2 degrees of longitude fill 512 px: 256 * 2**zoom / 360 * 2 == 512
    assert viewport.zoom == pytest.approx(math.log2(360))
    assert viewport.longitude == pytest.approx(0.0)
    assert viewport.latitude == pytest.approx(10.0)


def test_mercator_refiner_shifts_center_for_uneven_padding():
    refiner = MercatorBoundsRefiner(512, 512)
    bounds = Bounds(min_lat=10.0, min_lng=-1.0, max_lat=11.0, max_lng=1.0)

    even = refiner(bounds, Padding(top=50, left=0, bottom=50, right=0))
    top_heavy = refiner(bounds, Padding(top=100, left=0, bottom=0, right=0))
    left_heavy = refiner(bounds, Padding(top=0, left=100, bottom=0, right=0))

    assert even.latitude == pytest.approx(bounds.center[0], abs=0.01)
    assert even.longitude == pytest.approx(0.0)
    # Extra room at the top pushes the route down, so the camera moves north
    assert top_heavy.latitude > even.latitude
    assert left_heavy.longitude < 0.0


def test_mercator_refiner_gives_up_on_impossible_fits():
    refiner = MercatorBoundsRefiner(390, 844)
    bounds = Bounds(min_lat=10.0, min_lng=-1.0, max_lat=11.0, max_lng=1.0)
    point = Bounds(min_lat=10.0, min_lng=1.0, max_lat=10.0, max_lng=1.0)

    assert refiner(bounds, Padding(top=500, left=0, bottom=400, right=0)) is None
    assert refiner(point, Padding()) is None


def test_fit_viewport_with_mercator_refiner():
    coords = [(29.7604, -95.3698), (29.7499, -95.3584), (29.7172, -95.4018), (29.6197, -95.6349)]

    coarse = fit_viewport(coords)
    refined = fit_viewport(coords, refiner=MercatorBoundsRefiner(390, 844))

    assert coarse.zoom == 12.0
    assert 10.0 <= refined.zoom <= 18.0
    assert refined != coarse
