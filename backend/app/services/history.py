"""Route history and favorites service."""
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.errors import RouteNotFound
from app.models import SavedRoute
from app.services.directions import OptimizedRoute, RouteStop, STOP_END, STOP_START, STOP_STOP

logger = logging.getLogger(__name__)

MAX_ROUTE_NAME_LENGTH = 50


@dataclass
class RouteRequest:
    """Inputs needed to recalculate a saved route."""

    start_location: str
    end_location: str
    stops: List[str]
    consider_traffic: bool
    is_round_trip: bool = False
    display_stops: List[RouteStop] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "start_location": self.start_location,
            "end_location": self.end_location,
            "stops": self.stops,
            "consider_traffic": self.consider_traffic,
            "is_round_trip": self.is_round_trip,
            "display_stops": [stop.to_dict() for stop in self.display_stops],
        }


def extract_business_name(address: str) -> str:
    """First comma separated part of an address, or the whole string."""
    if "," in address:
        return address.split(",")[0].strip()
    return address


def extract_location_name(address: str) -> str:
    """
    Short location name from a full address.

    Street addresses ("123 Main St, Austin, TX") use the second part, which is
    usually the city.
    """
    components = address.split(",")
    first = components[0].strip()
    if not first:
        return "Unknown"
    if first[0].isdigit() and len(components) > 1:
        return components[1].strip()
    return first


def generate_route_name(start_location: str, end_location: str, now: Optional[datetime] = None) -> str:
    """User-friendly route name such as "Costco → Home"."""
    route_name = f"{extract_location_name(start_location)} → {extract_location_name(end_location)}"
    if len(route_name) > MAX_ROUTE_NAME_LENGTH:
        now = now or datetime.now()
        return f"Route from {now.strftime('%b %d, %Y at %I:%M %p')}"
    return route_name


class HistoryService:
    """Service for saving, listing and favoriting calculated routes."""

    @staticmethod
    def save_route(db: Session, user_id: str, route: OptimizedRoute) -> SavedRoute:
        """
        Save a calculated route to the user's history.

        Args:
            db: Database session
            user_id: Owner
            route: Optimized route from the directions service

        Returns:
            The new SavedRoute
        """
        saved = SavedRoute(user_id=user_id, is_favorite=False)
        HistoryService._apply_route(saved, route)
        saved.route_name = generate_route_name(route.start_location, route.end_location)

        db.add(saved)
        db.commit()
        db.refresh(saved)

        logger.info("Route saved to history: %s", saved.route_name)
        return saved

    @staticmethod
    def load_history(db: Session, user_id: str, limit: Optional[int] = None) -> List[SavedRoute]:
        """Most recent routes first, capped at ROUTE_HISTORY_LIMIT by default."""
        return (
            db.query(SavedRoute)
            .filter(SavedRoute.user_id == user_id)
            .order_by(SavedRoute.created_at.desc(), SavedRoute.id.desc())
            .limit(limit or settings.ROUTE_HISTORY_LIMIT)
            .all()
        )

    @staticmethod
    def get_route(db: Session, user_id: str, route_id: int) -> SavedRoute:
        """
        Fetch one of the user's saved routes.

        Raises:
            RouteNotFound: If the route does not exist or belongs to someone else
        """
        saved = db.query(SavedRoute).filter(
            SavedRoute.id == route_id,
            SavedRoute.user_id == user_id,
        ).first()
        if not saved:
            raise RouteNotFound(f"Route {route_id} not found")
        return saved

    @staticmethod
    def delete_route(db: Session, user_id: str, route_id: int) -> None:
        saved = HistoryService.get_route(db, user_id, route_id)
        db.delete(saved)
        db.commit()
        logger.info("Deleted route: %s", saved.route_name or "Unnamed Route")

    @staticmethod
    def clear_history(db: Session, user_id: str, keep_favorites: bool = True) -> int:
        """Delete history rows, keeping favorites unless told otherwise. Returns rows deleted."""
        query = db.query(SavedRoute).filter(SavedRoute.user_id == user_id)
        if keep_favorites:
            query = query.filter(SavedRoute.is_favorite.is_(False))
        deleted = query.delete(synchronize_session=False)
        db.commit()
        logger.info("Cleared %d routes from history", deleted)
        return deleted

    @staticmethod
    def _matching_routes(db: Session, user_id: str, route: OptimizedRoute):
        """Saved routes with the same start, end and total distance."""
        return db.query(SavedRoute).filter(
            SavedRoute.user_id == user_id,
            SavedRoute.start_location == route.start_location,
            SavedRoute.end_location == route.end_location,
            SavedRoute.total_distance == route.total_distance,
        )

    @staticmethod
    def save_favorite(db: Session, user_id: str, route: OptimizedRoute, custom_name: str = "") -> SavedRoute:
        """
        Mark a route as a favorite, creating it when it is not in history yet.

        Args:
            db: Database session
            user_id: Owner
            route: Route to favorite
            custom_name: User-defined name; empty keeps the generated name

        Returns:
            The favorited SavedRoute
        """
        custom_name = (custom_name or "").strip()
        saved = HistoryService._matching_routes(db, user_id, route).order_by(SavedRoute.created_at.desc()).first()

        if saved:
            logger.info("Marked existing route %d as favorite", saved.id)
        else:
            saved = SavedRoute(user_id=user_id)
            HistoryService._apply_route(saved, route)
            db.add(saved)
            logger.info("Created new favorite route")

        saved.is_favorite = True
        saved.custom_name = custom_name or None
        saved.route_name = custom_name or saved.route_name or generate_route_name(
            route.start_location, route.end_location
        )

        db.commit()
        db.refresh(saved)
        return saved

    @staticmethod
    def remove_favorite(db: Session, user_id: str, route: OptimizedRoute) -> int:
        """Clear the favorite flag on every matching route. Returns rows updated."""
        routes = HistoryService._matching_routes(db, user_id, route).all()
        for saved in routes:
            saved.is_favorite = False
        db.commit()
        logger.info("Removed favorite status from %d routes", len(routes))
        return len(routes)

    @staticmethod
    def set_favorite(db: Session, user_id: str, route_id: int, is_favorite: bool,
                     custom_name: Optional[str] = None) -> SavedRoute:
        """Favorite or unfavorite a saved route by id, optionally renaming it."""
        saved = HistoryService.get_route(db, user_id, route_id)
        saved.is_favorite = is_favorite
        if custom_name is not None:
            custom_name = custom_name.strip()
            saved.custom_name = custom_name or None
            if custom_name:
                saved.route_name = custom_name
        db.commit()
        db.refresh(saved)
        logger.info("Route %d favorite=%s", saved.id, is_favorite)
        return saved

    @staticmethod
    def load_favorites(db: Session, user_id: str) -> List[SavedRoute]:
        return (
            db.query(SavedRoute)
            .filter(SavedRoute.user_id == user_id, SavedRoute.is_favorite.is_(True))
            .order_by(SavedRoute.created_at.desc(), SavedRoute.id.desc())
            .all()
        )

    @staticmethod
    def is_favorited(db: Session, user_id: str, route: OptimizedRoute) -> bool:
        return HistoryService._matching_routes(db, user_id, route).filter(
            SavedRoute.is_favorite.is_(True)
        ).count() > 0

    @staticmethod
    def to_route_request(saved: SavedRoute) -> RouteRequest:
        """
        Convert a saved route back into a request that can be recalculated.

        Stops keep the display names recorded when the route was saved.
        """
        stops = saved.stop_list
        stop_display_names = saved.stop_display_name_list

        start_name = saved.start_location_display_name or extract_business_name(saved.start_location)
        end_name = saved.end_location_display_name or extract_business_name(saved.end_location)

        display_stops = [RouteStop(
            address=saved.start_location,
            name=start_name,
            original_input=start_name,
            type=STOP_START,
        )]
        for index, stop in enumerate(stops):
            name = stop_display_names[index] if index < len(stop_display_names) else extract_business_name(stop)
            display_stops.append(RouteStop(address=stop, name=name, original_input=name, type=STOP_STOP))
        display_stops.append(RouteStop(
            address=saved.end_location,
            name=end_name,
            original_input=end_name,
            type=STOP_END,
        ))

        return RouteRequest(
            start_location=saved.start_location,
            end_location=saved.end_location,
            stops=stops,
            consider_traffic=saved.consider_traffic,
            display_stops=display_stops,
        )

    @staticmethod
    def _apply_route(saved: SavedRoute, route: OptimizedRoute) -> None:
        """Copy route inputs, results and display names onto a SavedRoute."""
        saved.start_location = route.start_location
        saved.end_location = route.end_location
        saved.total_distance = route.total_distance
        saved.estimated_time = route.estimated_time
        saved.consider_traffic = route.consider_traffic
        saved.polyline = route.polyline
        saved.stops = json.dumps(route.stops) if route.stops else None

        if route.optimized_stops:
            first = route.optimized_stops[0]
            last = route.optimized_stops[-1]
            saved.start_location_display_name = first.name or extract_business_name(route.start_location)
            saved.end_location_display_name = last.name or extract_business_name(route.end_location)

            middle = route.optimized_stops[1:-1]
            names = [stop.name or extract_business_name(stop.address) for stop in middle]
            saved.stop_display_names = json.dumps(names) if names else None
            saved.waypoint_order = json.dumps([stop.address for stop in route.optimized_stops])
        else:
            saved.start_location_display_name = extract_business_name(route.start_location)
            saved.end_location_display_name = extract_business_name(route.end_location)

    @staticmethod
    def to_dict(saved: SavedRoute) -> dict:
        return {
            "id": saved.id,
            "route_name": saved.route_name,
            "custom_name": saved.custom_name,
            "start_location": saved.start_location,
            "end_location": saved.end_location,
            "start_location_display_name": saved.start_location_display_name,
            "end_location_display_name": saved.end_location_display_name,
            "stops": saved.stop_list,
            "stop_display_names": saved.stop_display_name_list,
            "waypoint_order": saved.waypoint_order_list,
            "total_distance": saved.total_distance,
            "estimated_time": saved.estimated_time,
            "consider_traffic": saved.consider_traffic,
            "is_favorite": saved.is_favorite,
            "has_polyline": bool(saved.polyline),
            "created_at": saved.created_at.isoformat(),
        }
