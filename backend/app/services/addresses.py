"""Saved address service: Home, Work and custom addresses per user."""
import logging
from typing import List, Optional

from sqlalchemy import case
from sqlalchemy.orm import Session

from app.errors import AddressNotFound
from app.models import SavedAddress

logger = logging.getLogger(__name__)

ADDRESS_HOME = "home"
ADDRESS_WORK = "work"
ADDRESS_CUSTOM = "custom"
ADDRESS_TYPES = (ADDRESS_HOME, ADDRESS_WORK, ADDRESS_CUSTOM)

ADDRESS_TYPE_DISPLAY_NAMES = {
    ADDRESS_HOME: "Home",
    ADDRESS_WORK: "Work",
    ADDRESS_CUSTOM: "Custom",
}


class AddressService:
    """Service for managing a user's saved addresses."""

    @staticmethod
    def save_address(
        db: Session,
        user_id: str,
        label: str,
        full_address: str,
        address_type: str,
        display_name: str = "",
    ) -> SavedAddress:
        """
        Save a new address.

        A user has at most one Home and one Work address; saving another one
        replaces the existing address of that type. Custom addresses are
        unlimited.

        Args:
            db: Database session
            user_id: Owner
            label: User-friendly label (e.g., "Home", "Mom's House")
            full_address: Complete address from Google Places
            address_type: home, work or custom
            display_name: Business/place name if available

        Returns:
            The new SavedAddress

        Raises:
            ValueError: If address_type is not a known type
        """
        if address_type not in ADDRESS_TYPES:
            raise ValueError(f"Invalid address type: {address_type}")

        if address_type != ADDRESS_CUSTOM:
            existing = AddressService.get_by_type(db, user_id, address_type)
            if existing:
                logger.info("Replacing existing %s address %d", address_type, existing.id)
                db.delete(existing)

        address = SavedAddress(
            user_id=user_id,
            label=label,
            full_address=full_address,
            display_name=display_name or "",
            address_type=address_type,
            is_default=(address_type == ADDRESS_HOME),
        )
        db.add(address)
        db.commit()
        db.refresh(address)

        logger.info("Saved address: %s (%s)", label, ADDRESS_TYPE_DISPLAY_NAMES[address_type])
        return address

    @staticmethod
    def list_addresses(db: Session, user_id: str) -> List[SavedAddress]:
        """All saved addresses: Home, then Work, then custom; newest first within a type."""
        type_order = case(
            (SavedAddress.address_type == ADDRESS_HOME, 0),
            (SavedAddress.address_type == ADDRESS_WORK, 1),
            else_=2,
        )
        return (
            db.query(SavedAddress)
            .filter(SavedAddress.user_id == user_id)
            .order_by(type_order, SavedAddress.created_at.desc(), SavedAddress.id.desc())
            .all()
        )

    @staticmethod
    def get_address(db: Session, user_id: str, address_id: int) -> SavedAddress:
        """
        Fetch one of the user's addresses.

        Raises:
            AddressNotFound: If the address does not exist or belongs to someone else
        """
        address = db.query(SavedAddress).filter(
            SavedAddress.id == address_id,
            SavedAddress.user_id == user_id,
        ).first()
        if not address:
            raise AddressNotFound(f"Address {address_id} not found")
        return address

    @staticmethod
    def get_by_type(db: Session, user_id: str, address_type: str) -> Optional[SavedAddress]:
        return db.query(SavedAddress).filter(
            SavedAddress.user_id == user_id,
            SavedAddress.address_type == address_type,
        ).first()

    @staticmethod
    def get_home_address(db: Session, user_id: str) -> Optional[SavedAddress]:
        return AddressService.get_by_type(db, user_id, ADDRESS_HOME)

    @staticmethod
    def get_work_address(db: Session, user_id: str) -> Optional[SavedAddress]:
        return AddressService.get_by_type(db, user_id, ADDRESS_WORK)

    @staticmethod
    def get_custom_addresses(db: Session, user_id: str) -> List[SavedAddress]:
        return [
            address for address in AddressService.list_addresses(db, user_id)
            if address.address_type == ADDRESS_CUSTOM
        ]

    @staticmethod
    def update_address(
        db: Session,
        user_id: str,
        address_id: int,
        label: str,
        full_address: str,
        display_name: str = "",
    ) -> SavedAddress:
        """Update label, address and display name. The address type never changes."""
        address = AddressService.get_address(db, user_id, address_id)
        address.label = label
        address.full_address = full_address
        address.display_name = display_name or ""
        db.commit()
        db.refresh(address)

        logger.info("Updated address: %s", label)
        return address

    @staticmethod
    def delete_address(db: Session, user_id: str, address_id: int) -> None:
        address = AddressService.get_address(db, user_id, address_id)
        db.delete(address)
        db.commit()
        logger.info("Deleted address: %s", address.label)

    @staticmethod
    def format_for_display(address: SavedAddress) -> str:
        """
        Short name to show for an address.

        Prefers the display name, then the first part of the full address,
        then the label.
        """
        if address.display_name:
            return address.display_name

        if address.full_address and "," in address.full_address:
            first_part = address.full_address.split(",")[0].strip()
            if first_part:
                return first_part

        return address.label or "Unknown Address"

    @staticmethod
    def to_dict(address: SavedAddress) -> dict:
        return {
            "id": address.id,
            "label": address.label,
            "full_address": address.full_address,
            "display_name": address.display_name,
            "formatted": AddressService.format_for_display(address),
            "address_type": address.address_type,
            "is_default": address.is_default,
            "created_at": address.created_at.isoformat(),
        }
