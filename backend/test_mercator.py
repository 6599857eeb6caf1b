"""Test Web Mercator conversion."""
import pytest

from app.services.mercator import (
    MAX_LATITUDE,
    ORIGIN_SHIFT,
    clamped_lnglat_to_mercator,
    lnglat_to_mercator,
    mercator_to_lnglat,
    pixels_per_meter,
)


def test_origin_maps_to_zero():
    x, y = lnglat_to_mercator(0.0, 0.0)
    assert x == pytest.approx(0.0)
    assert y == pytest.approx(0.0, abs=1e-6)


def test_antimeridian_is_origin_shift():
    x, _ = lnglat_to_mercator(180.0, 0.0)
    assert x == pytest.approx(ORIGIN_SHIFT)


def test_max_latitude_is_square_world():
    _, y = lnglat_to_mercator(0.0, MAX_LATITUDE)
    assert y == pytest.approx(ORIGIN_SHIFT, rel=1e-6)


def test_poles_are_out_of_bounds():
    assert lnglat_to_mercator(0.0, 90.0) is None
    assert lnglat_to_mercator(0.0, -90.0) is None


def test_clamped_projection_handles_poles():
    assert clamped_lnglat_to_mercator(10.0, 90.0) == lnglat_to_mercator(10.0, MAX_LATITUDE)


def test_inverse_projection():
    lng, lat = -118.39483, 33.87554

    back_lng, back_lat = mercator_to_lnglat(*lnglat_to_mercator(lng, lat))

    assert back_lng == pytest.approx(lng)
    assert back_lat == pytest.approx(lat)


def test_pixels_per_meter_doubles_each_zoom():
    assert pixels_per_meter(0.0) * 2 ** 12 == pytest.approx(pixels_per_meter(12.0))
    # The whole world is one 256 px tile at zoom 0
    assert pixels_per_meter(0.0) * 2 * ORIGIN_SHIFT == pytest.approx(256.0)
