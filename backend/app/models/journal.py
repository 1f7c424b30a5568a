"""
Journal entry model.
"""
from sqlalchemy import Column, String, Date, DateTime, Text, Integer, JSON
from app.db.base import BaseModel, utcnow


class JournalEntry(BaseModel):
    """Journal entry with mood labels and an optional AI analysis."""
    __tablename__ = "journal_entries"

    id = Column(String(64), primary_key=True)
    sequence = Column(Integer, nullable=False, unique=True, index=True)  # Insertion order
    user_id = Column(String(64), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    content = Column(Text, nullable=False)
    moods = Column(JSON, nullable=False, default=list)
    ai_analysis = Column(JSON, nullable=True)  # Set only after a successful analysis

    # Refreshed explicitly on user edits only, not on analysis attachment
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    @property
    def day_of_week(self) -> str:
        return self.date.strftime("%A")

    @property
    def is_analyzed(self) -> bool:
        return self.ai_analysis is not None
