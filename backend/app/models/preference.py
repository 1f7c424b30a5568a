"""
Preference store model: one row per key, value stored as JSON text.
"""
from sqlalchemy import Column, String, Text
from app.db.base import BaseModel


class Preference(BaseModel):
    """Persisted key/value pair."""
    __tablename__ = "preferences"

    key = Column(String(100), primary_key=True)
    value = Column(Text, nullable=False)  # JSON-encoded primitive or blob
