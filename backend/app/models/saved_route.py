"""SavedRoute model for route history and favorites."""
import json
from datetime import datetime
from typing import List
from sqlalchemy import Column, Integer, String, DateTime, Boolean, Text

from app.database import Base


class SavedRoute(Base):
    """
    A calculated route kept in the user's history.

    Stops, stop display names and the optimized waypoint order are stored as
    JSON lists of strings.
    """
    __tablename__ = "saved_routes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)

    # What the user asked for
    start_location = Column(String, nullable=False)
    end_location = Column(String, nullable=False)
    stops = Column(Text, nullable=True)
    consider_traffic = Column(Boolean, nullable=False, default=False)

    # What came back
    total_distance = Column(String, nullable=False)  # "12.3 miles"
    estimated_time = Column(String, nullable=False)  # "1 hr 5 min"
    waypoint_order = Column(Text, nullable=True)
    polyline = Column(Text, nullable=True)  # Overview polyline from the directions provider

    # Naming
    route_name = Column(String, nullable=True)
    custom_name = Column(String, nullable=True)
    start_location_display_name = Column(String, nullable=True)
    end_location_display_name = Column(String, nullable=True)
    stop_display_names = Column(Text, nullable=True)

    is_favorite = Column(Boolean, nullable=False, default=False, index=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<SavedRoute(id={self.id}, name='{self.route_name}', favorite={self.is_favorite})>"

    @property
    def stop_list(self) -> List[str]:
        return _load_string_list(self.stops)

    @property
    def stop_display_name_list(self) -> List[str]:
        return _load_string_list(self.stop_display_names)

    @property
    def waypoint_order_list(self) -> List[str]:
        return _load_string_list(self.waypoint_order)


def _load_string_list(value) -> List[str]:
    if not value:
        return []
    try:
        decoded = json.loads(value)
    except ValueError:
        # Rows written before stops were JSON encoded
        return [part for part in value.split("|||") if part]
    return [str(item) for item in decoded] if isinstance(decoded, list) else []
