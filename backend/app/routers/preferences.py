"""User settings and usage endpoints."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_user_id
from app.schemas import PreferencesUpdate
from app.services.preferences import PreferencesService
from app.services.usage import UsageService

router = APIRouter(prefix="/api", tags=["settings"])


@router.get("/settings")
async def get_settings(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
):
    prefs = PreferencesService.get_preferences(db, user_id)
    return PreferencesService.to_dict(prefs)


@router.put("/settings")
async def update_settings(
    body: PreferencesUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
):
    """Update any subset of the user's settings."""
    prefs = PreferencesService.update_preferences(
        db,
        user_id,
        default_round_trip=body.default_round_trip,
        default_traffic_enabled=body.default_traffic_enabled,
        auto_save_routes=body.auto_save_routes,
        distance_unit=body.distance_unit,
    )
    return PreferencesService.to_dict(prefs)


@router.post("/settings/reset")
async def reset_settings(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
):
    prefs = PreferencesService.reset_to_defaults(db, user_id)
    return PreferencesService.to_dict(prefs)


@router.get("/usage")
async def get_usage(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
):
    """Today's route calculations against the daily limit."""
    return UsageService.summary(db, user_id)
