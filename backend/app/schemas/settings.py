"""
Pydantic schemas for user preferences.
"""
import enum
from pydantic import BaseModel
from typing import Any, Dict, Optional


class ThemeMode(str, enum.Enum):
    """Theme preference."""
    SYSTEM = "system"
    LIGHT = "light"
    DARK = "dark"


class UserPreferences(BaseModel):
    """Fully specified preferences; every field has a default."""
    personalized_insights_enabled: bool = True
    analytics_enabled: bool = True
    biometric_auth_enabled: bool = False
    theme_mode: ThemeMode = ThemeMode.SYSTEM
    daily_reminders_enabled: bool = False
    reminder_time: str = "20:00"


class PreferenceUpdate(BaseModel):
    """Schema for a single preference update."""
    value: Any


class PreferencesUpdate(BaseModel):
    """Schema for a batch preference update."""
    changes: Dict[str, Any]


class OnboardingState(BaseModel):
    """Schema for onboarding state."""
    completed: bool
    quick_setup_config: Optional[Dict[str, Any]] = None
