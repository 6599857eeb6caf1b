"""UserPreferences model for per-user app settings."""
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Boolean

from app.database import Base


class UserPreferences(Base):
    """Defaults applied to new route requests and result formatting."""
    __tablename__ = "user_preferences"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, unique=True, nullable=False, index=True)

    default_round_trip = Column(Boolean, nullable=False, default=False)
    default_traffic_enabled = Column(Boolean, nullable=False, default=True)
    auto_save_routes = Column(Boolean, nullable=False, default=True)
    distance_unit = Column(String, nullable=False, default="miles")  # miles or kilometers

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<UserPreferences(user_id={self.user_id}, unit={self.distance_unit})>"
