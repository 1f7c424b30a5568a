"""Models package - Import all models for SQLAlchemy registration."""
from app.models.journal import JournalEntry
from app.models.core import EmotionalCore, CoreName, CoreTrend, CORE_DEFINITIONS
from app.models.preference import Preference

__all__ = [
    "JournalEntry",
    "EmotionalCore",
    "CoreName",
    "CoreTrend",
    "CORE_DEFINITIONS",
    "Preference",
]
