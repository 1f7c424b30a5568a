"""
Tests for the state a brand new install starts in, and the onboarding
reset script used to get back to it.
"""
from reset_onboarding import reset_onboarding

from app.db.preference_store import PreferenceStore
from app.services import core_library_service, journal_service, settings_service


def test_fresh_install_state(db):
    """Test a new install has no entries, zeroed cores and default settings."""
    assert journal_service.get_all_entries(db) == []

    cores = core_library_service.get_all_cores(db)
    assert len(cores) == 6
    for core in cores:
        assert core.current_level == 0.0
        assert core.previous_level == 0.0
        assert core.recent_insights == []

    assert not settings_service.is_onboarding_completed(db)
    assert settings_service.get_quick_setup_config(db) is None
    assert settings_service.get_preferences(db).personalized_insights_enabled is True


def test_fresh_install_api(client):
    """Test the API on a new install."""
    assert client.get("/api/journal").json() == []
    assert all(core["current_level"] == 0.0 for core in client.get("/api/cores").json())
    assert client.get("/api/settings/onboarding").json()["completed"] is False


def test_reset_onboarding(db):
    """Test the reset script clears onboarding keys and keeps other preferences."""
    settings_service.set_onboarding_completed(db)
    settings_service.save_quick_setup_config(db, {"theme": "dark"})
    settings_service.update_preference(db, "theme_mode", "dark")
    PreferenceStore(db).set("setup_step", 3)

    removed = reset_onboarding(db)

    assert sorted(removed) == ["onboarding_completed", "quick_setup_config", "setup_step"]
    assert not settings_service.is_onboarding_completed(db)
    assert settings_service.get_quick_setup_config(db) is None
    assert settings_service.get_preferences(db).theme_mode.value == "dark"
