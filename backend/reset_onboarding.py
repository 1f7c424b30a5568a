"""
Reset onboarding state for testing.

Writes to the preference store directly, bypassing the settings service.
Debug/test use only.
"""
import sys
import os

# Add the backend directory to Python path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from sqlalchemy.orm import Session
from app.db.preference_store import PreferenceStore
from app.db.session import SessionLocal, init_db
from app.services.settings_service import ONBOARDING_COMPLETED_KEY, QUICK_SETUP_CONFIG_KEY


def reset_onboarding(db: Session) -> list:
    """Remove onboarding flags and any onboarding/setup keys. Returns removed keys."""
    store = PreferenceStore(db)
    removed = []

    for key in (ONBOARDING_COMPLETED_KEY, QUICK_SETUP_CONFIG_KEY):
        if store.remove(key):
            removed.append(key)

    for key in store.keys():
        if "onboarding" in key or "setup" in key:
            store.remove(key)
            removed.append(key)

    return removed


def main():
    init_db()
    db = SessionLocal()
    try:
        removed = reset_onboarding(db)
        for key in removed:
            print(f"Removed key: {key}")
        print("Onboarding state has been reset successfully!")
        print("The onboarding flow will show the next time the app starts.")
    except Exception as e:
        print(f"Error resetting onboarding: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
