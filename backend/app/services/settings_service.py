"""
Settings service for user preferences and onboarding flags.

All preference keys are read and written here; unset keys fall back to
the defaults declared on UserPreferences.
"""
import logging
import re
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import InvalidValueError
from app.db.preference_store import PreferenceStore
from app.schemas.settings import ThemeMode, UserPreferences

logger = logging.getLogger(__name__)

ONBOARDING_COMPLETED_KEY = "onboarding_completed"
QUICK_SETUP_CONFIG_KEY = "quick_setup_config"

REMINDER_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _validate_bool(key: str, value: Any) -> bool:
    # bool is checked exactly; 0/1 and "true" are rejected
    if not isinstance(value, bool):
        raise InvalidValueError(key, value, "expected a boolean")
    return value


def _validate_theme_mode(key: str, value: Any) -> str:
    try:
        return ThemeMode(value).value
    except ValueError:
        allowed = ", ".join(mode.value for mode in ThemeMode)
        raise InvalidValueError(key, value, f"expected one of: {allowed}")


def _validate_reminder_time(key: str, value: Any) -> str:
    if not isinstance(value, str) or not REMINDER_TIME_PATTERN.match(value):
        raise InvalidValueError(key, value, "expected a 24-hour HH:MM time")
    return value


# Preference key -> validator returning the value to persist
PREFERENCE_VALIDATORS = {
    "personalized_insights_enabled": _validate_bool,
    "analytics_enabled": _validate_bool,
    "biometric_auth_enabled": _validate_bool,
    "theme_mode": _validate_theme_mode,
    "daily_reminders_enabled": _validate_bool,
    "reminder_time": _validate_reminder_time,
}


def _validate(key: str, value: Any) -> Any:
    validator = PREFERENCE_VALIDATORS.get(key)
    if validator is None:
        raise InvalidValueError(key, value, "unknown preference")
    if isinstance(value, ThemeMode):
        value = value.value
    return validator(key, value)


def get_preferences(db: Session) -> UserPreferences:
    """Get current preferences with defaults applied for unset keys."""
    store = PreferenceStore(db)
    values = {}

    for key in PREFERENCE_VALIDATORS:
        stored = store.get(key)
        if stored is None:
            continue
        try:
            values[key] = _validate(key, stored)
        except InvalidValueError:
            logger.warning(f"Ignoring invalid stored value for '{key}', using default")

    return UserPreferences(**values)


def update_preference(db: Session, key: str, value: Any) -> UserPreferences:
    """
    Validate and persist one preference.

    Raises:
        InvalidValueError: unknown key, or value of the wrong type/format.
    """
    validated = _validate(key, value)
    PreferenceStore(db).set(key, validated)
    logger.debug(f"Preference '{key}' updated")
    return get_preferences(db)


def update_preferences(db: Session, changes: Dict[str, Any]) -> UserPreferences:
    """Validate and persist several preferences; nothing is written if any is invalid."""
    validated = {key: _validate(key, value) for key, value in changes.items()}

    store = PreferenceStore(db)
    for key, value in validated.items():
        store.set(key, value, commit=False)
    store.commit()

    return get_preferences(db)


def reset_preferences(db: Session) -> UserPreferences:
    """Remove all stored preferences so defaults apply again."""
    store = PreferenceStore(db)
    for key in PREFERENCE_VALIDATORS:
        store.remove(key)
    return get_preferences(db)


def is_onboarding_completed(db: Session) -> bool:
    return PreferenceStore(db).get(ONBOARDING_COMPLETED_KEY) is True


def set_onboarding_completed(db: Session, completed: bool = True) -> None:
    PreferenceStore(db).set(ONBOARDING_COMPLETED_KEY, _validate_bool(ONBOARDING_COMPLETED_KEY, completed))


def get_quick_setup_config(db: Session) -> Optional[Dict[str, Any]]:
    return PreferenceStore(db).get(QUICK_SETUP_CONFIG_KEY)


def save_quick_setup_config(db: Session, config: Dict[str, Any]) -> None:
    """Store the opaque quick-setup blob captured during onboarding."""
    PreferenceStore(db).set(QUICK_SETUP_CONFIG_KEY, config)
