"""
Journal entry routes.

StorageError is turned into a 500 response by the app-wide handler in main.py.
"""
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session
from typing import List, Optional
from app.db.session import get_db
from app.core.exceptions import (
    AnalysisError, AnalysisPendingError, DuplicateIdError, EntryNotFoundError, InvalidValueError
)
from app.schemas.analysis import AnalyzeResponse
from app.schemas.journal import JournalEntryCreate, JournalEntryResponse, JournalEntryUpdate
from app.services import journal_service
from app.services.analysis_service import JournalAnalysisService, get_analysis_service

router = APIRouter(prefix="/journal", tags=["journal"])


def invalid_query(e: InvalidValueError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={"field": e.field, "message": e.reason}
    )


@router.post("", response_model=JournalEntryResponse, status_code=status.HTTP_201_CREATED)
async def create_entry(
    entry_data: JournalEntryCreate,
    db: Session = Depends(get_db)
):
    """Create a journal entry."""
    try:
        return journal_service.add_entry(db, entry_data)
    except DuplicateIdError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get("", response_model=List[JournalEntryResponse])
async def list_entries(
    mood: Optional[str] = None,
    q: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    db: Session = Depends(get_db)
):
    """
    List entries in the order they were written.

    Optionally filtered by mood, by text, or by a date range (newest date
    first). A range needs both start_date and end_date.
    """
    if mood:
        return journal_service.get_entries_by_mood(db, mood)
    if q:
        return journal_service.search_entries(db, q)
    if start_date or end_date:
        if not (start_date and end_date):
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="start_date and end_date must be given together"
            )
        try:
            return journal_service.get_entries_by_date_range(
                db, start_date, end_date, limit=limit, offset=offset
            )
        except InvalidValueError as e:
            raise invalid_query(e)
    return journal_service.get_all_entries(db, limit=limit, offset=offset)


@router.get("/stats/moods")
async def get_mood_frequency(db: Session = Depends(get_db)):
    """Get how often each mood label is used."""
    return {
        "entry_count": journal_service.get_entry_count(db),
        "moods": journal_service.get_mood_frequency(db)
    }


@router.get("/stats/monthly")
async def get_monthly_counts(year: int, db: Session = Depends(get_db)):
    """Get entry counts per month for a year."""
    try:
        counts = journal_service.get_monthly_entry_counts(db, year)
    except InvalidValueError as e:
        raise invalid_query(e)
    return {"year": year, "months": counts}


@router.get("/export")
async def export_entries(db: Session = Depends(get_db)):
    """Export every entry as a backup document."""
    return journal_service.export_all_entries(db)


@router.get("/{entry_id}", response_model=JournalEntryResponse)
async def get_entry(
    entry_id: str,
    db: Session = Depends(get_db)
):
    """Get a journal entry by id."""
    entry = journal_service.get_entry(db, entry_id)
    if not entry:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Journal entry not found"
        )
    return entry


@router.put("/{entry_id}", response_model=JournalEntryResponse)
async def update_entry(
    entry_id: str,
    changes: JournalEntryUpdate,
    db: Session = Depends(get_db)
):
    """Edit a journal entry."""
    try:
        return journal_service.update_entry(db, entry_id, changes)
    except EntryNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_entry(
    entry_id: str,
    db: Session = Depends(get_db)
):
    """Delete a journal entry. Deleting a missing entry succeeds."""
    journal_service.delete_entry(db, entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{entry_id}/analyze", response_model=AnalyzeResponse)
async def analyze_entry(
    entry_id: str,
    db: Session = Depends(get_db),
    analysis_service: JournalAnalysisService = Depends(get_analysis_service)
):
    """Run AI analysis for an entry and update the emotional cores."""
    try:
        result = await analysis_service.analyze_entry(db, entry_id)
    except EntryNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except AnalysisPendingError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except AnalysisError as e:
        # Entry is untouched; the client shows "analysis unavailable"
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=e.user_message
        )

    if result is None:
        return AnalyzeResponse(entry_id=entry_id, discarded=True)
    return AnalyzeResponse(entry_id=entry_id, analysis=result)
