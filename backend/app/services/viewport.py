"""
Viewport fitting for route display.

Given the coordinates of a route (decoded path, stop markers or both), pick a
map center and zoom level that frames all of them. The coarse result comes
from a span-to-zoom lookup table; an optional refiner standing in for the
rendering surface may then compute a padded, bounds-fitting camera.

Nothing in this module raises on bad input. Invalid coordinates are dropped
and degenerate inputs fall back to fixed viewports.
"""

import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol, Tuple

from app.services.mercator import (
    clamped_lnglat_to_mercator,
    mercator_to_lnglat,
    pixels_per_meter,
)

logger = logging.getLogger(__name__)

Coordinate = Tuple[float, float]


@dataclass(frozen=True)
class Viewport:
    """Map center plus zoom level (larger zoom = closer in)."""

    latitude: float
    longitude: float
    zoom: float

    @property
    def center(self) -> Coordinate:
        return (self.latitude, self.longitude)

    def to_dict(self) -> dict:
        return {
            "center": {"lat": self.latitude, "lng": self.longitude},
            "zoom": self.zoom,
        }


@dataclass(frozen=True)
class Bounds:
    """Lat/lng bounding box of a set of coordinates."""

    min_lat: float
    min_lng: float
    max_lat: float
    max_lng: float

    @property
    def center(self) -> Coordinate:
        return ((self.min_lat + self.max_lat) / 2, (self.min_lng + self.max_lng) / 2)

    @property
    def span(self) -> float:
        """Largest of the latitude and longitude extents, in degrees."""
        return max(self.max_lat - self.min_lat, self.max_lng - self.min_lng)


@dataclass(frozen=True)
class Padding:
    """Screen-space insets, in pixels, kept clear around the fitted bounds."""

    top: float = 100.0
    left: float = 80.0
    bottom: float = 150.0
    right: float = 80.0


@dataclass(frozen=True)
class ZoomBreakpoint:
    """Spans strictly wider than min_span degrees get this zoom."""

    min_span: float
    zoom: float


@dataclass(frozen=True)
class ZoomTable:
    """
    Span-to-zoom lookup table.

    Breakpoints are checked in order, widest first. Spans narrower than every
    breakpoint get closest_zoom. Tables must keep the "wider span, lower zoom"
    ordering.
    """

    breakpoints: Tuple[ZoomBreakpoint, ...]
    closest_zoom: float

    def __post_init__(self):
        previous = None
        for step in self.breakpoints:
            if previous is not None:
                if step.min_span >= previous.min_span:
                    raise ValueError("Zoom breakpoints must be ordered by decreasing span")
                if step.zoom < previous.zoom:
                    raise ValueError("Zoom must not decrease as the span narrows")
            previous = step
        if previous is not None and self.closest_zoom < previous.zoom:
            raise ValueError("closest_zoom must be at least the last breakpoint zoom")


# Tuned by eye against the Google Maps iOS projection.
DEFAULT_ZOOM_TABLE = ZoomTable(
    breakpoints=(
        ZoomBreakpoint(min_span=10.0, zoom=5.0),   # Very wide area
        ZoomBreakpoint(min_span=1.0, zoom=8.0),    # Large city area
        ZoomBreakpoint(min_span=0.1, zoom=12.0),   # City district
        ZoomBreakpoint(min_span=0.01, zoom=15.0),  # Neighborhood
    ),
    closest_zoom=17.0,  # Street level
)

# Downtown Houston, shown when there is nothing to frame.
FALLBACK_VIEWPORT = Viewport(latitude=29.7604, longitude=-95.3698, zoom=12.0)
SINGLE_POINT_ZOOM = 14.0

REFINED_MIN_ZOOM = 10.0
REFINED_MAX_ZOOM = 18.0

DEFAULT_PADDING = Padding()


class BoundsRefiner(Protocol):
    """Rendering-surface hook: camera that fits bounds inside padding insets."""

    def __call__(self, bounds: Bounds, padding: Padding) -> Optional[Viewport]:
        ...


def is_valid_coordinate(lat: float, lng: float) -> bool:
    """Check that a coordinate is finite, in range, and not the (0, 0) "unset" sentinel."""
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return False
    if lat == 0.0 and lng == 0.0:
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0


def valid_coordinates(coordinates: Iterable[Coordinate]) -> List[Coordinate]:
    """Filter coordinates down to the valid ones, preserving order."""
    valid = []
    for lat, lng in coordinates:
        if is_valid_coordinate(lat, lng):
            valid.append((lat, lng))
        else:
            logger.debug("Skipping invalid coordinate (%s, %s)", lat, lng)
    return valid


def bounds_for(coordinates: Iterable[Coordinate]) -> Optional[Bounds]:
    """Bounding box of the valid coordinates, or None when there are none."""
    valid = valid_coordinates(coordinates)
    if not valid:
        return None

    lats = [lat for lat, _ in valid]
    lngs = [lng for _, lng in valid]
    return Bounds(min_lat=min(lats), min_lng=min(lngs), max_lat=max(lats), max_lng=max(lngs))


def zoom_for_span(span: float, table: ZoomTable = DEFAULT_ZOOM_TABLE) -> float:
    """Look up the zoom level for a span in degrees."""
    for step in table.breakpoints:
        if span > step.min_span:
            return step.zoom
    return table.closest_zoom


def fit_viewport(
    coordinates: Iterable[Coordinate],
    table: ZoomTable = DEFAULT_ZOOM_TABLE,
    refiner: Optional[BoundsRefiner] = None,
    padding: Padding = DEFAULT_PADDING,
) -> Viewport:
    """
    Compute a viewport that frames every valid coordinate.

    Args:
        coordinates: (lat, lng) pairs in any order
        table: Span-to-zoom lookup table
        refiner: Optional bounds-fitting camera from the rendering surface
        padding: Insets passed to the refiner

    Returns:
        Viewport; FALLBACK_VIEWPORT when no coordinate is valid
    """
    valid = valid_coordinates(coordinates)

    if not valid:
        return FALLBACK_VIEWPORT

    if len(valid) == 1:
        lat, lng = valid[0]
        return Viewport(latitude=lat, longitude=lng, zoom=SINGLE_POINT_ZOOM)

    bounds = bounds_for(valid)
    center_lat, center_lng = bounds.center
    viewport = Viewport(
        latitude=center_lat,
        longitude=center_lng,
        zoom=zoom_for_span(bounds.span, table),
    )

    if refiner is None:
        return viewport

    try:
        refined = refiner(bounds, padding)
    except Exception as e:
        logger.warning("Viewport refinement failed, keeping coarse viewport: %s", e)
        return viewport

    if refined is None:
        return viewport

    return Viewport(
        latitude=refined.latitude,
        longitude=refined.longitude,
        zoom=max(REFINED_MIN_ZOOM, min(REFINED_MAX_ZOOM, refined.zoom)),
    )


class MercatorBoundsRefiner:
    """
    Headless stand-in for a map widget's "camera for bounds with insets".

    Finds the largest fractional Web Mercator zoom at which the bounds fit in
    a width x height pixel map once the padding is taken off, and shifts the
    center so the bounds sit in the middle of the padded area.
    """

    def __init__(self, width: int, height: int, tile_size: int = 256, max_zoom: float = 21.0):
        self.width = width
        self.height = height
        self.tile_size = tile_size
        self.max_zoom = max_zoom

    def __call__(self, bounds: Bounds, padding: Padding) -> Optional[Viewport]:
        available_width = self.width - padding.left - padding.right
        available_height = self.height - padding.top - padding.bottom
        if available_width <= 0 or available_height <= 0:
            return None

        min_x, min_y = clamped_lnglat_to_mercator(bounds.min_lng, bounds.min_lat)
        max_x, max_y = clamped_lnglat_to_mercator(bounds.max_lng, bounds.max_lat)
        extent_x = max_x - min_x
        extent_y = max_y - min_y
        if extent_x <= 0 and extent_y <= 0:
            return None

        # Zoom at which one meter is one pixel, then scale down to fit.
        base_scale = pixels_per_meter(0.0, self.tile_size)
        scales = []
        if extent_x > 0:
            scales.append(available_width / (extent_x * base_scale))
        if extent_y > 0:
            scales.append(available_height / (extent_y * base_scale))
        zoom = min(self.max_zoom, math.log2(min(scales)))

        # Offset of the padded area's center from the map center, in meters.
        scale = pixels_per_meter(zoom, self.tile_size)
        offset_x = (padding.left - padding.right) / 2.0 / scale
        offset_y = (padding.bottom - padding.top) / 2.0 / scale

        center_x = (min_x + max_x) / 2.0 - offset_x
        center_y = (min_y + max_y) / 2.0 - offset_y
        lng, lat = mercator_to_lnglat(center_x, center_y)

        return Viewport(latitude=lat, longitude=lng, zoom=zoom)
