"""
Journal repository: create, read, edit and delete journal entries.

Entries are kept in insertion order. A store that has never been written to
returns no entries; sample data is never generated.
"""
import logging
import uuid
from collections import Counter
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import extract, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import (
    DuplicateIdError, EntryNotFoundError, InvalidValueError, StorageError
)
from app.db.base import utcnow
from app.models.journal import JournalEntry
from app.schemas.analysis import AnalysisResult
from app.schemas.journal import JournalEntryCreate, JournalEntryResponse, JournalEntryUpdate

logger = logging.getLogger(__name__)


def _next_sequence(db: Session) -> int:
    current = db.query(func.max(JournalEntry.sequence)).scalar()
    return (current or 0) + 1


def get_entry(db: Session, entry_id: str) -> Optional[JournalEntry]:
    """Get a single entry by id."""
    try:
        return db.query(JournalEntry).filter(JournalEntry.id == entry_id).first()
    except SQLAlchemyError as e:
        raise StorageError(str(e), operation="get_entry") from e


def entry_exists(db: Session, entry_id: str) -> bool:
    return get_entry(db, entry_id) is not None


def add_entry(db: Session, entry_data: JournalEntryCreate) -> JournalEntry:
    """
    Store a new entry.

    Raises:
        DuplicateIdError: an entry with the same id exists; it is left untouched.
        StorageError: the database write failed.
    """
    entry_id = entry_data.id or uuid.uuid4().hex

    if entry_exists(db, entry_id):
        raise DuplicateIdError(entry_id)

    now = utcnow()
    try:
        entry = JournalEntry(
            id=entry_id,
            sequence=_next_sequence(db),
            user_id=entry_data.user_id,
            date=entry_data.date or date.today(),
            content=entry_data.content,
            moods=list(entry_data.moods),
            created_at=now,
            updated_at=now
        )
        db.add(entry)
        db.commit()
        db.refresh(entry)
    except IntegrityError as e:
        db.rollback()
        # Lost a race with a concurrent insert of the same id
        if entry_exists(db, entry_id):
            raise DuplicateIdError(entry_id) from e
        raise StorageError(str(e), operation="add_entry") from e
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(str(e), operation="add_entry") from e

    logger.debug(f"Created journal entry {entry_id}")
    return entry


def get_all_entries(
    db: Session,
    limit: Optional[int] = None,
    offset: Optional[int] = None
) -> List[JournalEntry]:
    """Get all entries in insertion order."""
    try:
        query = db.query(JournalEntry).order_by(JournalEntry.sequence)
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return query.all()
    except SQLAlchemyError as e:
        raise StorageError(str(e), operation="get_all_entries") from e


def update_entry(db: Session, entry_id: str, changes: JournalEntryUpdate) -> JournalEntry:
    """Edit content, moods or date of an entry and refresh updated_at."""
    entry = get_entry(db, entry_id)
    if not entry:
        raise EntryNotFoundError(entry_id)

    if changes.content is not None:
        entry.content = changes.content
    if changes.moods is not None:
        entry.moods = list(changes.moods)
    if changes.date is not None:
        entry.date = changes.date
    entry.updated_at = max(utcnow(), entry.created_at)

    try:
        db.commit()
        db.refresh(entry)
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(str(e), operation="update_entry") from e

    return entry


def attach_analysis(
    db: Session,
    entry_id: str,
    result: AnalysisResult,
    commit: bool = True
) -> Optional[JournalEntry]:
    """
    Store a completed analysis on its entry.

    Returns None when the entry no longer exists. updated_at is not touched;
    attaching an analysis is not a user edit. With commit=False the change is
    only flushed and the caller owns the transaction.
    """
    entry = get_entry(db, entry_id)
    if not entry:
        return None

    entry.ai_analysis = result.model_dump()
    try:
        if commit:
            db.commit()
            db.refresh(entry)
        else:
            db.flush()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(str(e), operation="attach_analysis") from e

    return entry


def delete_entry(db: Session, entry_id: str) -> bool:
    """Delete an entry. Deleting a missing id is a no-op and returns False."""
    try:
        deleted = db.query(JournalEntry).filter(JournalEntry.id == entry_id).delete()
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(str(e), operation="delete_entry") from e

    if deleted:
        logger.debug(f"Deleted journal entry {entry_id}")
    return deleted > 0


def get_entries_by_mood(db: Session, mood: str) -> List[JournalEntry]:
    """Get entries tagged with a mood (case-insensitive)."""
    wanted = mood.strip().lower()
    return [
        entry for entry in get_all_entries(db)
        if any(m.lower() == wanted for m in entry.moods or [])
    ]


def search_entries(db: Session, query: str) -> List[JournalEntry]:
    """Get entries whose content contains the query text (case-insensitive, literal)."""
    try:
        return db.query(JournalEntry).filter(
            JournalEntry.content.icontains(query, autoescape=True)
        ).order_by(JournalEntry.sequence).all()
    except SQLAlchemyError as e:
        raise StorageError(str(e), operation="search_entries") from e


def get_analyzed_entries(db: Session, analyzed: bool = True) -> List[JournalEntry]:
    """Get entries with (or without) an attached analysis."""
    return [entry for entry in get_all_entries(db) if entry.is_analyzed == analyzed]


def get_entry_count(db: Session) -> int:
    try:
        return db.query(JournalEntry).count()
    except SQLAlchemyError as e:
        raise StorageError(str(e), operation="get_entry_count") from e


def get_mood_frequency(db: Session) -> Dict[str, int]:
    """Count how often each mood label is used, most frequent first."""
    counts = Counter()
    for entry in get_all_entries(db):
        counts.update(entry.moods or [])
    return dict(counts.most_common())


def clear_all_entries(db: Session) -> int:
    """Delete every entry. Returns the number removed."""
    try:
        deleted = db.query(JournalEntry).delete()
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(str(e), operation="clear_all_entries") from e

    logger.info(f"Cleared {deleted} journal entries")
    return deleted


def get_entries_by_date_range(
    db: Session,
    start_date: date,
    end_date: date,
    limit: Optional[int] = None,
    offset: Optional[int] = None
) -> List[JournalEntry]:
    """Get entries dated within [start_date, end_date], newest date first."""
    if start_date > end_date:
        raise InvalidValueError("start_date", start_date, "must not be after end_date")

    try:
        query = db.query(JournalEntry).filter(
            JournalEntry.date >= start_date,
            JournalEntry.date <= end_date
        ).order_by(JournalEntry.date.desc(), JournalEntry.sequence)
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return query.all()
    except SQLAlchemyError as e:
        raise StorageError(str(e), operation="get_entries_by_date_range") from e


def get_monthly_entry_counts(db: Session, year: int) -> Dict[str, int]:
    """Count entries per month of a year, keyed "01".."12". Empty months are omitted."""
    if year < 1900 or year > 2100:
        raise InvalidValueError("year", year, "must be between 1900 and 2100")

    month = extract("month", JournalEntry.date)
    try:
        rows = db.query(month, func.count(JournalEntry.id)).filter(
            JournalEntry.date >= date(year, 1, 1),
            JournalEntry.date <= date(year, 12, 31)
        ).group_by(month).order_by(month).all()
    except SQLAlchemyError as e:
        raise StorageError(str(e), operation="get_monthly_entry_counts") from e

    return {f"{int(month_number):02d}": count for month_number, count in rows}


def export_all_entries(db: Session) -> Dict[str, Any]:
    """Dump every entry, in insertion order, as a JSON-ready backup document."""
    entries = get_all_entries(db)
    return {
        "exported_at": utcnow().isoformat(),
        "version": "1.0",
        "total_entries": len(entries),
        "entries": [
            JournalEntryResponse.model_validate(entry).model_dump(mode="json")
            for entry in entries
        ]
    }
