"""
Declarative base and shared column mixins.
"""
from datetime import datetime
from sqlalchemy import Column, DateTime
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp used for all stored datetimes."""
    return datetime.utcnow()


class BaseModel(Base):
    """Abstract base model with creation/update timestamps."""
    __abstract__ = True

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
