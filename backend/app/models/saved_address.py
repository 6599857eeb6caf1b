"""SavedAddress model for a user's Home, Work and custom addresses."""
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Boolean

from app.database import Base


class SavedAddress(Base):
    """
    A named address the user can pick as a start, stop or destination.

    Each user has at most one "home" and one "work" address and any number
    of "custom" ones.
    """
    __tablename__ = "saved_addresses"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)

    label = Column(String, nullable=False)  # "Home", "Mom's House", ...
    full_address = Column(String, nullable=False)  # Formatted address from Google Places
    display_name = Column(String, nullable=False, default="")  # Business/place name if known
    address_type = Column(String, nullable=False, index=True)  # home, work, custom
    is_default = Column(Boolean, nullable=False, default=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<SavedAddress(id={self.id}, type={self.address_type}, label='{self.label}')>"
