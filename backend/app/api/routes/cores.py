"""
Emotional core library routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from app.db.session import get_db
from app.core.exceptions import InvalidValueError
from app.schemas.core import EmotionalCoreResponse, GrowthRecommendations
from app.services import core_library_service

router = APIRouter(prefix="/cores", tags=["cores"])


@router.get("", response_model=List[EmotionalCoreResponse])
async def list_cores(db: Session = Depends(get_db)):
    """Get all six emotional cores."""
    return core_library_service.get_all_cores(db)


@router.get("/recommendations", response_model=GrowthRecommendations)
async def get_recommendations(db: Session = Depends(get_db)):
    """Get growth recommendations based on current core levels."""
    return GrowthRecommendations(
        recommendations=core_library_service.get_growth_recommendations(db)
    )


@router.post("/reset", response_model=List[EmotionalCoreResponse])
async def reset_cores(db: Session = Depends(get_db)):
    """Reset all cores to their initial state."""
    return core_library_service.reset_cores(db)


@router.get("/{core_id}", response_model=EmotionalCoreResponse)
async def get_core(
    core_id: str,
    db: Session = Depends(get_db)
):
    """Get a single core by id."""
    try:
        return core_library_service.get_core(db, core_id)
    except InvalidValueError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Core not found"
        )
