"""Route optimization, viewport and preview endpoints."""
import logging
from datetime import date
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_directions_client, get_user_id
from app.errors import ErrorKind, RouteCalculationError, RouteNotFound, UsageLimitExceeded
from app.schemas import OptimizeRouteRequest, ViewportRequest
from app.services.directions import DirectionsService
from app.services.history import HistoryService
from app.services.polyline import decode_polyline
from app.services.preferences import PreferencesService, format_distance
from app.services.route_display import build_polyline_display, build_route_display, default_refiner
from app.services.route_preview import render_route_preview
from app.services.usage import UsageService
from app.services.viewport import fit_viewport

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/routes", tags=["routes"])


@router.post("/optimize")
async def optimize_route(
    body: OptimizeRouteRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
    client: Optional[httpx.AsyncClient] = Depends(get_directions_client),
):
    """
    Calculate the best visiting order for the stops and the driving route.

    Counts against the user's daily limit and, when the user has auto-save
    on, records the route in history. The slot is reserved before calling
    the directions provider and given back if no route comes out of it.
    """
    day = date.today()
    if not UsageService.reserve(db, user_id, day):
        error = UsageLimitExceeded("Daily route limit reached. Try again tomorrow.")
        logger.info("User %s hit the daily route limit", user_id)
        raise HTTPException(status_code=429, detail=error.to_detail())

    prefs = PreferencesService.get_preferences(db, user_id)
    consider_traffic = body.consider_traffic
    if consider_traffic is None:
        consider_traffic = prefs.default_traffic_enabled

    end_location = body.end_location
    if body.is_round_trip or not end_location:
        end_location = body.start_location

    try:
        route = await DirectionsService.calculate_optimized_route(
            start_location=body.start_location,
            end_location=end_location,
            stops=body.stops,
            consider_traffic=consider_traffic,
            client=client,
        )
    except RouteCalculationError as e:
        UsageService.release(db, user_id, day)
        status_code = 503 if e.kind == ErrorKind.NETWORK_ERROR else 502
        raise HTTPException(status_code=status_code, detail=e.to_detail())

    route_id = None
    if prefs.auto_save_routes:
        saved = HistoryService.save_route(db, user_id, route)
        route_id = saved.id

    display = build_route_display(route)

    return {
        "route_id": route_id,
        "route": route.to_dict(),
        "display": display.to_dict(),
        "formatted_distance": format_distance(route.total_distance_meters, prefs.distance_unit),
        "is_favorited": HistoryService.is_favorited(db, user_id, route),
        "usage": UsageService.summary(db, user_id),
    }


@router.post("/viewport")
async def compute_viewport(body: ViewportRequest, refine: bool = Query(False)):
    """
    Decode a polyline and/or take raw coordinates and return the viewport framing them.

    A polyline that is cut off decodes to the points before the cut; the
    response reports how many were decoded.
    """
    path = decode_polyline(body.polyline, precision=body.precision) if body.polyline else []
    coordinates = path + [(point.lat, point.lng) for point in body.coordinates]

    viewport = fit_viewport(coordinates, refiner=default_refiner() if refine else None)

    return {
        "decoded_points": len(path),
        "path": [[lat, lng] for lat, lng in path],
        "viewport": viewport.to_dict(),
    }


@router.get("/{route_id}/display")
async def saved_route_display(
    route_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
):
    """Markers, path and viewport for a route in history."""
    try:
        saved = HistoryService.get_route(db, user_id, route_id)
    except RouteNotFound as e:
        raise HTTPException(status_code=404, detail=e.to_detail())

    display = build_polyline_display(
        saved.polyline,
        start_title=saved.start_location_display_name or saved.start_location,
        end_title=saved.end_location_display_name or saved.end_location,
    )
    return {"route": HistoryService.to_dict(saved), "display": display.to_dict()}


@router.get("/{route_id}/preview.png")
async def saved_route_preview(
    route_id: int,
    width: int = Query(600, ge=64, le=2048),
    height: int = Query(400, ge=64, le=2048),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
):
    """Render a PNG preview of a route in history."""
    try:
        saved = HistoryService.get_route(db, user_id, route_id)
    except RouteNotFound as e:
        raise HTTPException(status_code=404, detail=e.to_detail())

    display = build_polyline_display(saved.polyline)
    png_bytes = render_route_preview(display, width=width, height=height)

    return Response(
        content=png_bytes,
        media_type="image/png",
        headers={
            "Cache-Control": "private, max-age=3600",
            "X-Path-Points": str(len(display.path)),
        },
    )
