"""
Turn an optimized route into what the map needs: markers, a path and a viewport.

Every display path (fresh results, history, favorites, previews) goes through
build_route_display so the polyline decoding and viewport fitting live in one
place.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from app.config import settings
from app.services.directions import OptimizedRoute
from app.services.polyline import decode_polyline
from app.services.viewport import (
    MercatorBoundsRefiner,
    Viewport,
    fit_viewport,
    valid_coordinates,
)

logger = logging.getLogger(__name__)

PATH_SOURCE_POLYLINE = "polyline"
PATH_SOURCE_MARKERS = "markers"


@dataclass
class Marker:
    """Numbered pin for one stop."""

    number: int
    latitude: float
    longitude: float
    type: str
    title: str
    snippet: str

    def to_dict(self) -> Dict:
        return {
            "number": self.number,
            "lat": self.latitude,
            "lng": self.longitude,
            "type": self.type,
            "title": self.title,
            "snippet": self.snippet,
        }


@dataclass
class RouteDisplay:
    markers: List[Marker]
    path: List[Tuple[float, float]]
    path_source: str
    viewport: Viewport
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "markers": [marker.to_dict() for marker in self.markers],
            "path": [[lat, lng] for lat, lng in self.path],
            "path_source": self.path_source,
            "viewport": self.viewport.to_dict(),
            "warnings": self.warnings,
        }


def default_refiner() -> MercatorBoundsRefiner:
    """Refiner sized to the configured client map."""
    return MercatorBoundsRefiner(settings.MAP_WIDTH, settings.MAP_HEIGHT)


def marker_coordinates(route: OptimizedRoute) -> List[Tuple[float, float]]:
    """Stop coordinates in visiting order: first leg start, then every leg end."""
    if not route.legs:
        return []
    coordinates = [route.legs[0].start_location]
    coordinates.extend(leg.end_location for leg in route.legs)
    return coordinates


def display_for_path(
    path_coordinates: List[Tuple[float, float]],
    extra_coordinates: Optional[List[Tuple[float, float]]] = None,
    refiner: Optional[MercatorBoundsRefiner] = None,
) -> Viewport:
    """Fit a viewport around a path plus any extra points such as markers."""
    coordinates = list(path_coordinates) + list(extra_coordinates or [])
    return fit_viewport(coordinates, refiner=refiner)


def build_route_display(
    route: OptimizedRoute,
    refiner: Optional[MercatorBoundsRefiner] = None,
) -> RouteDisplay:
    """
    Build markers, path and viewport for an optimized route.

    The path is the decoded overview polyline. When it is missing or decodes
    to nothing, straight lines between the markers are used instead.

    Args:
        route: Optimized route from the directions service
        refiner: Bounds refiner; defaults to one sized to the configured map

    Returns:
        RouteDisplay
    """
    warnings = []
    stop_coordinates = marker_coordinates(route)

    markers = []
    for index, stop in enumerate(route.optimized_stops):
        if index >= len(stop_coordinates):
            continue
        lat, lng = stop_coordinates[index]
        markers.append(Marker(
            number=index + 1,
            latitude=lat,
            longitude=lng,
            type=stop.type,
            title=stop.display_name,
            snippet=stop.address,
        ))

    path = decode_polyline(route.polyline) if route.polyline else []
    if path:
        path_source = PATH_SOURCE_POLYLINE
    else:
        if route.polyline:
            warnings.append("Route polyline could not be decoded; showing straight lines")
            logger.warning("Polyline decoding failed, falling back to straight lines")
        path = valid_coordinates(stop_coordinates)
        path_source = PATH_SOURCE_MARKERS

    viewport = display_for_path(
        path,
        extra_coordinates=stop_coordinates,
        refiner=refiner if refiner is not None else default_refiner(),
    )

    logger.debug(
        "Route display: %d markers, %d path points (%s), zoom %.2f",
        len(markers), len(path), path_source, viewport.zoom,
    )

    return RouteDisplay(
        markers=markers,
        path=path,
        path_source=path_source,
        viewport=viewport,
        warnings=warnings,
    )


def build_polyline_display(
    polyline: Optional[str],
    start_title: str = "",
    end_title: str = "",
    refiner: Optional[MercatorBoundsRefiner] = None,
) -> RouteDisplay:
    """
    Display for a stored route where only the overview polyline survives.

    Start and end markers sit on the first and last decoded points.
    """
    path = decode_polyline(polyline) if polyline else []
    warnings = []
    if polyline and not path:
        warnings.append("Route polyline could not be decoded")

    markers = []
    if path:
        start_lat, start_lng = path[0]
        end_lat, end_lng = path[-1]
        markers.append(Marker(1, start_lat, start_lng, "start", start_title, ""))
        markers.append(Marker(2, end_lat, end_lng, "end", end_title, ""))

    viewport = display_for_path(path, refiner=refiner if refiner is not None else default_refiner())
    return RouteDisplay(
        markers=markers,
        path=path,
        path_source=PATH_SOURCE_POLYLINE,
        viewport=viewport,
        warnings=warnings,
    )
