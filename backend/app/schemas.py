"""Request bodies for the JSON endpoints."""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class LatLng(BaseModel):
    lat: float
    lng: float


class OptimizeRouteRequest(BaseModel):
    start_location: str = Field(min_length=1)
    end_location: Optional[str] = None  # Defaults to start_location for round trips
    stops: List[str] = Field(default_factory=list)
    is_round_trip: bool = False
    consider_traffic: Optional[bool] = None  # None uses the user's default


class ViewportRequest(BaseModel):
    polyline: Optional[str] = None
    coordinates: List[LatLng] = Field(default_factory=list)
    precision: int = Field(default=5, ge=1, le=7)


class StopSummary(BaseModel):
    address: str
    name: str = ""
    type: Literal["start", "stop", "end"] = "stop"


class RouteSummary(BaseModel):
    """A calculated route as the client holds it, used to favorite or unfavorite by content."""

    start_location: str
    end_location: str
    stops: List[str] = Field(default_factory=list)
    total_distance: str
    estimated_time: str
    consider_traffic: bool = False
    polyline: Optional[str] = None
    optimized_stops: List[StopSummary] = Field(default_factory=list)


class FavoriteRequest(BaseModel):
    route_id: Optional[int] = None
    route: Optional[RouteSummary] = None
    custom_name: str = ""


class FavoriteUpdate(BaseModel):
    is_favorite: bool
    custom_name: Optional[str] = None


class AddressCreate(BaseModel):
    label: str = Field(min_length=1)
    full_address: str = Field(min_length=1)
    display_name: str = ""
    address_type: Literal["home", "work", "custom"] = "custom"


class AddressUpdate(BaseModel):
    label: str = Field(min_length=1)
    full_address: str = Field(min_length=1)
    display_name: str = ""


class PreferencesUpdate(BaseModel):
    default_round_trip: Optional[bool] = None
    default_traffic_enabled: Optional[bool] = None
    auto_save_routes: Optional[bool] = None
    distance_unit: Optional[Literal["miles", "kilometers"]] = None
