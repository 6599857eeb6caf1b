"""Google Directions API service for multi-stop route optimization."""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import httpx

from app.config import settings
from app.errors import ErrorKind, RouteCalculationError

logger = logging.getLogger(__name__)

METERS_PER_MILE = 1609.34

STOP_START = "start"
STOP_STOP = "stop"
STOP_END = "end"


@dataclass
class RouteStop:
    """One stop of an optimized route, in visiting order."""

    address: str  # Full street address from Google
    name: str  # Business name (user input or extracted)
    original_input: str  # What the user originally typed
    type: str  # start, stop, end
    distance: Optional[str] = None
    duration: Optional[str] = None

    @property
    def display_name(self) -> str:
        """Best name to show for this stop."""
        if self.name and self.name != self.address:
            return self.name

        if "," in self.address:
            first_part = self.address.split(",")[0].strip()
            if first_part and not first_part[0].isdigit():
                return first_part

        return self.original_input or self.address

    def to_dict(self) -> Dict:
        return {
            "address": self.address,
            "name": self.name,
            "original_input": self.original_input,
            "display_name": self.display_name,
            "type": self.type,
            "distance": self.distance,
            "duration": self.duration,
        }


@dataclass
class RouteLeg:
    """Driving leg between two consecutive stops."""

    distance_meters: int
    duration_seconds: int
    duration_in_traffic_seconds: Optional[int]
    start_address: str
    end_address: str
    start_location: Tuple[float, float]
    end_location: Tuple[float, float]

    def to_dict(self) -> Dict:
        return {
            "distance_meters": self.distance_meters,
            "duration_seconds": self.duration_seconds,
            "duration_in_traffic_seconds": self.duration_in_traffic_seconds,
            "start_address": self.start_address,
            "end_address": self.end_address,
            "start_location": {"lat": self.start_location[0], "lng": self.start_location[1]},
            "end_location": {"lat": self.end_location[0], "lng": self.end_location[1]},
        }


@dataclass
class OptimizedRoute:
    """Result of a route optimization request."""

    start_location: str
    end_location: str
    stops: List[str]
    consider_traffic: bool
    total_distance: str
    estimated_time: str
    total_distance_meters: int
    total_duration_seconds: int
    optimized_stops: List[RouteStop] = field(default_factory=list)
    polyline: Optional[str] = None
    legs: List[RouteLeg] = field(default_factory=list)
    waypoint_order: List[int] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "start_location": self.start_location,
            "end_location": self.end_location,
            "stops": self.stops,
            "consider_traffic": self.consider_traffic,
            "total_distance": self.total_distance,
            "estimated_time": self.estimated_time,
            "total_distance_meters": self.total_distance_meters,
            "total_duration_seconds": self.total_duration_seconds,
            "optimized_stops": [stop.to_dict() for stop in self.optimized_stops],
            "polyline": self.polyline,
            "legs": [leg.to_dict() for leg in self.legs],
            "waypoint_order": self.waypoint_order,
        }


def format_duration(total_seconds: int) -> str:
    """Format seconds as "H hr M min" or "M min"."""
    total_minutes = total_seconds // 60
    if total_minutes >= 60:
        return f"{total_minutes // 60} hr {total_minutes % 60} min"
    return f"{total_minutes} min"


class DirectionsService:
    """Service for interacting with the Google Directions API."""

    @staticmethod
    def build_params(
        start_location: str,
        end_location: str,
        stops: List[str],
        consider_traffic: bool,
    ) -> Dict[str, str]:
        """
        Build query parameters for an optimized directions request.

        Args:
            start_location: Origin as typed or picked by the user
            end_location: Destination
            stops: Intermediate stops, in input order (empty entries ignored)
            consider_traffic: Request live-traffic durations

        Returns:
            Query parameter dictionary
        """
        params = {
            "origin": start_location,
            "destination": end_location,
        }

        waypoints = [stop for stop in stops if stop]
        if waypoints:
            params["waypoints"] = "optimize:true|" + "|".join(waypoints)

        if consider_traffic:
            params["departure_time"] = "now"
            params["traffic_model"] = "best_guess"

        params["key"] = settings.GOOGLE_API_KEY
        return params

    @staticmethod
    async def calculate_optimized_route(
        start_location: str,
        end_location: str,
        stops: List[str],
        consider_traffic: bool = False,
        client: Optional[httpx.AsyncClient] = None,
    ) -> OptimizedRoute:
        """
        Ask Google for the best visiting order and driving route.

        Args:
            start_location: Origin
            end_location: Destination
            stops: Intermediate stops
            consider_traffic: Use duration_in_traffic for time estimates
            client: Optional HTTP client (a new one is created when omitted)

        Returns:
            OptimizedRoute

        Raises:
            RouteCalculationError: If the request fails or Google returns an error status
        """
        params = DirectionsService.build_params(start_location, end_location, stops, consider_traffic)
        logger.info(
            "Requesting optimized route: %s -> %s via %d stops (traffic=%s)",
            start_location, end_location, len([s for s in stops if s]), consider_traffic,
        )

        try:
            if client is None:
                async with httpx.AsyncClient(timeout=settings.DIRECTIONS_TIMEOUT_S) as own_client:
                    response = await own_client.get(settings.GOOGLE_DIRECTIONS_URL, params=params)
            else:
                response = await client.get(settings.GOOGLE_DIRECTIONS_URL, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            logger.error("Directions request failed: %s", e)
            raise RouteCalculationError(
                f"Directions request failed: {e}", kind=ErrorKind.NETWORK_ERROR
            ) from e
        except ValueError as e:
            logger.error("Directions response was not JSON: %s", e)
            raise RouteCalculationError("No data received from API") from e

        return DirectionsService.parse_directions_response(
            payload,
            start_location=start_location,
            end_location=end_location,
            stops=stops,
            consider_traffic=consider_traffic,
        )

    @staticmethod
    def parse_directions_response(
        payload: Dict,
        start_location: str,
        end_location: str,
        stops: List[str],
        consider_traffic: bool,
    ) -> OptimizedRoute:
        """
        Parse a Directions API response into an OptimizedRoute.

        Stop names keep what the user typed (often a business name) rather than
        the street address Google resolved it to.

        Raises:
            RouteCalculationError: If the status is not OK or no route came back
        """
        status = payload.get("status", "UNKNOWN_ERROR")
        routes = payload.get("routes") or []
        if status != "OK" or not routes:
            logger.warning("Directions API returned status %s", status)
            raise RouteCalculationError.api_error(status)

        route = routes[0]
        try:
            legs = [DirectionsService._parse_leg(leg) for leg in route.get("legs", [])]
        except (KeyError, TypeError, ValueError) as e:
            logger.error("Failed to parse directions response: %s", e)
            raise RouteCalculationError(f"Failed to parse API response: {e}") from e
        if not legs:
            raise RouteCalculationError.api_error("ZERO_RESULTS")

        total_distance_meters = sum(leg.distance_meters for leg in legs)
        total_duration_seconds = 0
        for leg in legs:
            if consider_traffic and leg.duration_in_traffic_seconds is not None:
                total_duration_seconds += leg.duration_in_traffic_seconds
            else:
                total_duration_seconds += leg.duration_seconds

        waypoint_order = list(route.get("waypoint_order") or [])
        original_stops = [stop for stop in stops if stop]

        optimized_stops = [
            RouteStop(
                address=legs[0].start_address,
                name=start_location,
                original_input=start_location,
                type=STOP_START,
            )
        ]

        for index, leg in enumerate(legs[:-1]):
            waypoint_index = waypoint_order[index] if index < len(waypoint_order) else index
            if waypoint_index < len(original_stops):
                stop_name = original_stops[waypoint_index]
            else:
                stop_name = leg.end_address

            optimized_stops.append(RouteStop(
                address=leg.end_address,
                name=stop_name,
                original_input=stop_name,
                type=STOP_STOP,
                distance=f"{leg.distance_meters / METERS_PER_MILE:.1f} mi",
                duration=f"{leg.duration_seconds // 60} min",
            ))

        optimized_stops.append(RouteStop(
            address=legs[-1].end_address,
            name=end_location,
            original_input=end_location,
            type=STOP_END,
        ))

        overview = route.get("overview_polyline") or {}

        logger.info(
            "Route calculated: %d legs, %d m, %d s",
            len(legs), total_distance_meters, total_duration_seconds,
        )

        return OptimizedRoute(
            start_location=start_location,
            end_location=end_location,
            stops=original_stops,
            consider_traffic=consider_traffic,
            total_distance=f"{total_distance_meters / METERS_PER_MILE:.1f} miles",
            estimated_time=format_duration(total_duration_seconds),
            total_distance_meters=total_distance_meters,
            total_duration_seconds=total_duration_seconds,
            optimized_stops=optimized_stops,
            polyline=overview.get("points"),
            legs=legs,
            waypoint_order=waypoint_order,
        )

    @staticmethod
    def _parse_leg(leg: Dict) -> RouteLeg:
        """Parse one leg of a Directions API route."""
        traffic = leg.get("duration_in_traffic")
        start = leg.get("start_location") or {}
        end = leg.get("end_location") or {}

        return RouteLeg(
            distance_meters=int(leg["distance"]["value"]),
            duration_seconds=int(leg["duration"]["value"]),
            duration_in_traffic_seconds=int(traffic["value"]) if traffic else None,
            start_address=leg.get("start_address", ""),
            end_address=leg.get("end_address", ""),
            start_location=(float(start.get("lat", 0.0)), float(start.get("lng", 0.0))),
            end_location=(float(end.get("lat", 0.0)), float(end.get("lng", 0.0))),
        )
