"""Database models for DriveLess."""
from app.models.saved_address import SavedAddress
from app.models.saved_route import SavedRoute
from app.models.usage_record import UsageRecord
from app.models.user_preferences import UserPreferences

__all__ = ["SavedAddress", "SavedRoute", "UsageRecord", "UserPreferences"]
