"""
Pydantic schemas for JournalEntry entity.
"""
from pydantic import BaseModel, ConfigDict, field_validator
from typing import Any, Dict, List, Optional
from datetime import date, datetime

# Alias so fields named "date" can still reference the type
EntryDate = date


def _clean_moods(moods: List[str]) -> List[str]:
    """Strip labels, drop blanks and case-insensitive duplicates, keep first occurrence."""
    cleaned = []
    seen = set()
    for mood in moods:
        label = mood.strip()
        if label and label.lower() not in seen:
            seen.add(label.lower())
            cleaned.append(label)
    return cleaned


class JournalEntryBase(BaseModel):
    """Base journal entry schema."""
    content: str
    moods: List[str] = []

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("content cannot be empty")
        return v

    @field_validator("moods")
    @classmethod
    def normalize_moods(cls, v: List[str]) -> List[str]:
        return _clean_moods(v)


class JournalEntryCreate(JournalEntryBase):
    """Schema for entry creation. id is generated when omitted."""
    id: Optional[str] = None
    date: Optional[EntryDate] = None
    user_id: str = "local_user"


class JournalEntryUpdate(BaseModel):
    """Schema for entry edits."""
    content: Optional[str] = None
    moods: Optional[List[str]] = None
    date: Optional[EntryDate] = None

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("content cannot be empty")
        return v

    @field_validator("moods")
    @classmethod
    def normalize_moods(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _clean_moods(v) if v is not None else None


class JournalEntryResponse(JournalEntryBase):
    """Schema for entry response."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    date: date
    day_of_week: str
    ai_analysis: Optional[Dict[str, Any]] = None
    is_analyzed: bool
    created_at: datetime
    updated_at: datetime
