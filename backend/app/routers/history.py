"""Route history and favorites endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_user_id
from app.errors import RouteNotFound
from app.schemas import FavoriteRequest, FavoriteUpdate, RouteSummary
from app.services.directions import OptimizedRoute, RouteStop
from app.services.history import HistoryService

router = APIRouter(prefix="/api", tags=["history"])


def _route_from_summary(summary: RouteSummary) -> OptimizedRoute:
    """Rebuild enough of an OptimizedRoute from what the client sent back."""
    return OptimizedRoute(
        start_location=summary.start_location,
        end_location=summary.end_location,
        stops=summary.stops,
        consider_traffic=summary.consider_traffic,
        total_distance=summary.total_distance,
        estimated_time=summary.estimated_time,
        total_distance_meters=0,
        total_duration_seconds=0,
        optimized_stops=[
            RouteStop(address=stop.address, name=stop.name, original_input=stop.name, type=stop.type)
            for stop in summary.optimized_stops
        ],
        polyline=summary.polyline,
    )


def _not_found(e: RouteNotFound) -> HTTPException:
    return HTTPException(status_code=404, detail=e.to_detail())


@router.get("/history")
async def get_history(
    limit: Optional[int] = Query(None, ge=1, le=200, description="Maximum routes to return"),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
):
    """Get the user's recent routes, newest first."""
    routes = HistoryService.load_history(db, user_id, limit=limit)
    return {
        "count": len(routes),
        "routes": [HistoryService.to_dict(route) for route in routes],
    }


@router.delete("/history")
async def clear_history(
    keep_favorites: bool = Query(True),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
):
    deleted = HistoryService.clear_history(db, user_id, keep_favorites=keep_favorites)
    return {"success": True, "deleted": deleted}


@router.delete("/history/{route_id}")
async def delete_history_route(
    route_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
):
    try:
        HistoryService.delete_route(db, user_id, route_id)
    except RouteNotFound as e:
        raise _not_found(e)
    return {"success": True}


@router.get("/history/{route_id}/request")
async def get_route_request(
    route_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
):
    """Inputs to recalculate a saved route, with the stop names it was saved with."""
    try:
        saved = HistoryService.get_route(db, user_id, route_id)
    except RouteNotFound as e:
        raise _not_found(e)
    return HistoryService.to_route_request(saved).to_dict()


@router.get("/favorites")
async def get_favorites(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
):
    routes = HistoryService.load_favorites(db, user_id)
    return {
        "count": len(routes),
        "routes": [HistoryService.to_dict(route) for route in routes],
    }


@router.post("/favorites")
async def add_favorite(
    body: FavoriteRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
):
    """
    Favorite a route, either by history id or by its content.

    Favoriting by content reuses a matching history entry when there is one.
    """
    if body.route_id is not None:
        try:
            saved = HistoryService.set_favorite(
                db, user_id, body.route_id, True, custom_name=body.custom_name or None
            )
        except RouteNotFound as e:
            raise _not_found(e)
    elif body.route is not None:
        saved = HistoryService.save_favorite(db, user_id, _route_from_summary(body.route), body.custom_name)
    else:
        raise HTTPException(status_code=400, detail="Provide either route_id or route")

    return HistoryService.to_dict(saved)


@router.post("/favorites/remove")
async def remove_favorite_by_route(
    body: RouteSummary,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
):
    """Unfavorite every saved copy of a route."""
    updated = HistoryService.remove_favorite(db, user_id, _route_from_summary(body))
    return {"success": True, "updated": updated}


@router.post("/favorites/check")
async def check_favorite(
    body: RouteSummary,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
):
    return {"is_favorited": HistoryService.is_favorited(db, user_id, _route_from_summary(body))}


@router.put("/favorites/{route_id}")
async def update_favorite(
    route_id: int,
    body: FavoriteUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
):
    try:
        saved = HistoryService.set_favorite(db, user_id, route_id, body.is_favorite, body.custom_name)
    except RouteNotFound as e:
        raise _not_found(e)
    return HistoryService.to_dict(saved)


@router.delete("/favorites/{route_id}")
async def delete_favorite(
    route_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
):
    """Unfavorite a route; it stays in history."""
    try:
        saved = HistoryService.set_favorite(db, user_id, route_id, False)
    except RouteNotFound as e:
        raise _not_found(e)
    return HistoryService.to_dict(saved)
