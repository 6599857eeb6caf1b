"""Daily route calculation limits."""
import logging
from datetime import date
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.models import UsageRecord

logger = logging.getLogger(__name__)

# Reported as "remaining" for admins, who have no limit.
ADMIN_REMAINING = 999


class UsageService:
    """Counts route calculations per user per day and enforces the daily limit."""

    @staticmethod
    def is_admin(user_id: str) -> bool:
        return user_id in settings.admin_user_ids

    @staticmethod
    def today_usage(db: Session, user_id: str, day: Optional[date] = None) -> int:
        record = db.query(UsageRecord).filter(
            UsageRecord.user_id == user_id,
            UsageRecord.date == (day or date.today()),
        ).first()
        return record.route_calculations if record else 0

    @staticmethod
    def can_calculate(db: Session, user_id: str, day: Optional[date] = None) -> bool:
        """Check whether the user may run another route calculation today."""
        if UsageService.is_admin(user_id):
            logger.debug("Admin user %s bypasses usage limits", user_id)
            return True

        used = UsageService.today_usage(db, user_id, day)
        allowed = used < settings.DAILY_ROUTE_LIMIT
        logger.debug("Usage check for %s: %d/%d allowed=%s", user_id, used, settings.DAILY_ROUTE_LIMIT, allowed)
        return allowed

    @staticmethod
    def increment(db: Session, user_id: str, day: Optional[date] = None) -> int:
        """
        Count one route calculation for today. Admin usage is not counted.

        Returns:
            Today's count after incrementing
        """
        if UsageService.is_admin(user_id):
            return 0

        day = day or date.today()
        record = db.query(UsageRecord).filter(
            UsageRecord.user_id == user_id,
            UsageRecord.date == day,
        ).first()

        if not record:
            record = UsageRecord(user_id=user_id, date=day, route_calculations=0)
            db.add(record)
            logger.info("Created usage record for %s on %s", user_id, day)

        record.route_calculations += 1
        db.commit()

        logger.info("Usage for %s: %d/%d", user_id, record.route_calculations, settings.DAILY_ROUTE_LIMIT)
        return record.route_calculations

    @staticmethod
    def reserve(db: Session, user_id: str, day: Optional[date] = None) -> bool:
        """
        Claim one of today's route calculations, if any are left.

        The count and the limit check happen in one conditional UPDATE, so
        concurrent requests can never push a user past the limit. Admins
        always get a slot and are not counted.

        Returns:
            True if the calculation may go ahead
        """
        if UsageService.is_admin(user_id):
            logger.debug("Admin user %s bypasses usage limits", user_id)
            return True

        day = day or date.today()
        exists = db.query(UsageRecord.id).filter(
            UsageRecord.user_id == user_id,
            UsageRecord.date == day,
        ).first()
        if not exists:
            db.add(UsageRecord(user_id=user_id, date=day, route_calculations=0))
            try:
                db.commit()
                logger.info("Created usage record for %s on %s", user_id, day)
            except IntegrityError:
                # Another request created today's record first
                db.rollback()

        updated = db.query(UsageRecord).filter(
            UsageRecord.user_id == user_id,
            UsageRecord.date == day,
            UsageRecord.route_calculations < settings.DAILY_ROUTE_LIMIT,
        ).update(
            {UsageRecord.route_calculations: UsageRecord.route_calculations + 1},
            synchronize_session=False,
        )
        db.commit()

        logger.info("Usage reservation for %s: granted=%s", user_id, updated == 1)
        return updated == 1

    @staticmethod
    def release(db: Session, user_id: str, day: Optional[date] = None) -> None:
        """Give back a reserved calculation that did not produce a route."""
        if UsageService.is_admin(user_id):
            return

        db.query(UsageRecord).filter(
            UsageRecord.user_id == user_id,
            UsageRecord.date == (day or date.today()),
            UsageRecord.route_calculations > 0,
        ).update(
            {UsageRecord.route_calculations: UsageRecord.route_calculations - 1},
            synchronize_session=False,
        )
        db.commit()
        logger.info("Released usage reservation for %s", user_id)

    @staticmethod
    def remaining(db: Session, user_id: str, day: Optional[date] = None) -> int:
        if UsageService.is_admin(user_id):
            return ADMIN_REMAINING
        return max(0, settings.DAILY_ROUTE_LIMIT - UsageService.today_usage(db, user_id, day))

    @staticmethod
    def percentage(db: Session, user_id: str, day: Optional[date] = None) -> float:
        """Share of today's limit used, from 0.0 to 1.0."""
        if UsageService.is_admin(user_id):
            return 0.0
        return min(1.0, UsageService.today_usage(db, user_id, day) / settings.DAILY_ROUTE_LIMIT)

    @staticmethod
    def summary(db: Session, user_id: str) -> dict:
        used = UsageService.today_usage(db, user_id)
        return {
            "used": used,
            "limit": settings.DAILY_ROUTE_LIMIT,
            "remaining": UsageService.remaining(db, user_id),
            "percentage": UsageService.percentage(db, user_id),
            "has_exceeded_limit": not UsageService.is_admin(user_id) and used >= settings.DAILY_ROUTE_LIMIT,
            "is_admin": UsageService.is_admin(user_id),
        }
