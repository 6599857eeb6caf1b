"""Web Mercator (EPSG:3857) projection helpers shared by the viewport fitter and preview renderer."""

import math
from typing import Optional, Tuple

EARTH_RADIUS = 6378137.0
ORIGIN_SHIFT = 2.0 * math.pi * EARTH_RADIUS / 2.0

# Web Mercator is undefined at the poles; map SDKs clip to this latitude.
MAX_LATITUDE = 85.05112878


def lnglat_to_mercator(lng: float, lat: float) -> Optional[Tuple[float, float]]:
    """
    Convert WGS84 lng/lat to Web Mercator coordinates.

    Args:
        lng: Longitude in degrees
        lat: Latitude in degrees

    Returns:
        (x, y) in Web Mercator meters, or None if out of bounds
    """
    if lat <= -90.0 or lat >= 90.0:
        return None

    x = lng * math.pi / 180.0 * EARTH_RADIUS
    y = math.log(math.tan((math.pi * 0.25) + (0.5 * lat * math.pi / 180.0))) * EARTH_RADIUS

    return (x, y)


def clamped_lnglat_to_mercator(lng: float, lat: float) -> Tuple[float, float]:
    """Project to Web Mercator after clipping latitude to the renderable band."""
    lat = max(-MAX_LATITUDE, min(MAX_LATITUDE, lat))
    return lnglat_to_mercator(lng, lat)


def mercator_to_lnglat(x: float, y: float) -> Tuple[float, float]:
    """
    Convert Web Mercator meters back to WGS84.

    Returns:
        (lng, lat) in degrees
    """
    lng = x / EARTH_RADIUS * 180.0 / math.pi
    lat = (2.0 * math.atan(math.exp(y / EARTH_RADIUS)) - math.pi / 2.0) * 180.0 / math.pi
    return (lng, lat)


def pixels_per_meter(zoom: float, tile_size: int = 256) -> float:
    """Screen pixels per Web Mercator meter at a (possibly fractional) zoom level."""
    world_pixels = tile_size * (2.0 ** zoom)
    return world_pixels / (2.0 * ORIGIN_SHIFT)
