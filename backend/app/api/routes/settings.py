"""
User preference and onboarding routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.core.exceptions import InvalidValueError
from app.schemas.settings import (
    OnboardingState, PreferenceUpdate, PreferencesUpdate, UserPreferences
)
from app.services import settings_service

router = APIRouter(prefix="/settings", tags=["settings"])


def invalid_value(e: InvalidValueError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={"field": e.field, "message": e.reason}
    )


@router.get("", response_model=UserPreferences)
async def get_preferences(db: Session = Depends(get_db)):
    """Get current preferences."""
    return settings_service.get_preferences(db)


@router.put("", response_model=UserPreferences)
async def update_preferences(
    update: PreferencesUpdate,
    db: Session = Depends(get_db)
):
    """Update several preferences at once."""
    try:
        return settings_service.update_preferences(db, update.changes)
    except InvalidValueError as e:
        raise invalid_value(e)


@router.get("/onboarding", response_model=OnboardingState)
async def get_onboarding_state(db: Session = Depends(get_db)):
    """Get onboarding completion and quick setup config."""
    return OnboardingState(
        completed=settings_service.is_onboarding_completed(db),
        quick_setup_config=settings_service.get_quick_setup_config(db)
    )


@router.post("/onboarding", response_model=OnboardingState)
async def complete_onboarding(
    state: OnboardingState,
    db: Session = Depends(get_db)
):
    """Record onboarding completion and the quick setup config."""
    settings_service.set_onboarding_completed(db, state.completed)
    if state.quick_setup_config is not None:
        settings_service.save_quick_setup_config(db, state.quick_setup_config)
    return OnboardingState(
        completed=settings_service.is_onboarding_completed(db),
        quick_setup_config=settings_service.get_quick_setup_config(db)
    )


@router.patch("/{key}", response_model=UserPreferences)
async def update_preference(
    key: str,
    update: PreferenceUpdate,
    db: Session = Depends(get_db)
):
    """Update a single preference."""
    try:
        return settings_service.update_preference(db, key, update.value)
    except InvalidValueError as e:
        raise invalid_value(e)
