"""UsageRecord model for daily route calculation counts."""
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Date, UniqueConstraint

from app.database import Base


class UsageRecord(Base):
    """Number of route calculations a user made on one calendar day."""
    __tablename__ = "usage_records"
    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_usage_user_date"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    route_calculations = Column(Integer, nullable=False, default=0)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<UsageRecord(user_id={self.user_id}, date={self.date}, count={self.route_calculations})>"
