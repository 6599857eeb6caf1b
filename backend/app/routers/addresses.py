"""Saved address endpoints."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_user_id
from app.errors import AddressNotFound
from app.schemas import AddressCreate, AddressUpdate
from app.services.addresses import AddressService

router = APIRouter(prefix="/api/addresses", tags=["addresses"])


@router.get("")
async def get_addresses(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
):
    """
    Get the user's saved addresses.

    Home and Work are also returned on their own for quick-pick buttons.
    """
    addresses = AddressService.list_addresses(db, user_id)
    home = AddressService.get_home_address(db, user_id)
    work = AddressService.get_work_address(db, user_id)

    return {
        "count": len(addresses),
        "addresses": [AddressService.to_dict(address) for address in addresses],
        "home": AddressService.to_dict(home) if home else None,
        "work": AddressService.to_dict(work) if work else None,
    }


@router.post("", status_code=201)
async def create_address(
    body: AddressCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
):
    """Save an address. A new Home or Work address replaces the previous one."""
    address = AddressService.save_address(
        db,
        user_id,
        label=body.label,
        full_address=body.full_address,
        address_type=body.address_type,
        display_name=body.display_name,
    )
    return AddressService.to_dict(address)


@router.put("/{address_id}")
async def update_address(
    address_id: int,
    body: AddressUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
):
    try:
        address = AddressService.update_address(
            db, user_id, address_id,
            label=body.label,
            full_address=body.full_address,
            display_name=body.display_name,
        )
    except AddressNotFound as e:
        raise HTTPException(status_code=404, detail=e.to_detail())
    return AddressService.to_dict(address)


@router.delete("/{address_id}")
async def delete_address(
    address_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
):
    try:
        AddressService.delete_address(db, user_id, address_id)
    except AddressNotFound as e:
        raise HTTPException(status_code=404, detail=e.to_detail())
    return {"success": True}
