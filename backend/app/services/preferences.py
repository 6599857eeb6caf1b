"""User preferences and unit formatting."""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.models import UserPreferences

logger = logging.getLogger(__name__)

UNIT_MILES = "miles"
UNIT_KILOMETERS = "kilometers"
DISTANCE_UNITS = (UNIT_MILES, UNIT_KILOMETERS)

DEFAULTS = {
    "default_round_trip": False,
    "default_traffic_enabled": True,
    "auto_save_routes": True,
    "distance_unit": UNIT_MILES,
}


def format_distance(meters: float, unit: str = UNIT_MILES) -> str:
    """
    Format a distance in the user's unit.

    Short distances drop to feet or meters.
    """
    if unit == UNIT_KILOMETERS:
        kilometers = meters / 1000.0
        if kilometers < 0.1:
            return f"{meters:.0f} m"
        return f"{kilometers:.1f} km"

    miles = meters * 0.000621371
    if miles < 0.1:
        return f"{meters * 3.28084:.0f} ft"
    return f"{miles:.1f} mi"


def distance_unit_symbol(unit: str) -> str:
    return "km" if unit == UNIT_KILOMETERS else "mi"


class PreferencesService:
    """Service for reading and updating per-user settings."""

    @staticmethod
    def get_preferences(db: Session, user_id: str) -> UserPreferences:
        """Fetch the user's preferences, creating the defaults on first access."""
        prefs = db.query(UserPreferences).filter(UserPreferences.user_id == user_id).first()
        if not prefs:
            prefs = UserPreferences(user_id=user_id, **DEFAULTS)
            db.add(prefs)
            db.commit()
            db.refresh(prefs)
            logger.info("Created default preferences for %s", user_id)
        return prefs

    @staticmethod
    def update_preferences(
        db: Session,
        user_id: str,
        default_round_trip: Optional[bool] = None,
        default_traffic_enabled: Optional[bool] = None,
        auto_save_routes: Optional[bool] = None,
        distance_unit: Optional[str] = None,
    ) -> UserPreferences:
        """
        Update the given settings, leaving the others untouched.

        Raises:
            ValueError: If distance_unit is not miles or kilometers
        """
        if distance_unit is not None and distance_unit not in DISTANCE_UNITS:
            raise ValueError(f"Invalid distance unit: {distance_unit}")

        prefs = PreferencesService.get_preferences(db, user_id)
        if default_round_trip is not None:
            prefs.default_round_trip = default_round_trip
        if default_traffic_enabled is not None:
            prefs.default_traffic_enabled = default_traffic_enabled
        if auto_save_routes is not None:
            prefs.auto_save_routes = auto_save_routes
        if distance_unit is not None:
            prefs.distance_unit = distance_unit

        db.commit()
        db.refresh(prefs)
        logger.info(
            "Preferences for %s: round_trip=%s traffic=%s auto_save=%s unit=%s",
            user_id, prefs.default_round_trip, prefs.default_traffic_enabled,
            prefs.auto_save_routes, prefs.distance_unit,
        )
        return prefs

    @staticmethod
    def reset_to_defaults(db: Session, user_id: str) -> UserPreferences:
        return PreferencesService.update_preferences(db, user_id, **DEFAULTS)

    @staticmethod
    def to_dict(prefs: UserPreferences) -> dict:
        return {
            "default_round_trip": prefs.default_round_trip,
            "default_traffic_enabled": prefs.default_traffic_enabled,
            "auto_save_routes": prefs.auto_save_routes,
            "distance_unit": prefs.distance_unit,
            "distance_unit_symbol": distance_unit_symbol(prefs.distance_unit),
        }
