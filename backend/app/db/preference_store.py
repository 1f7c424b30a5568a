"""
Durable key/value preference store backed by the ``preferences`` table.

Values are JSON-encoded so booleans, numbers, strings and small blobs
round-trip with their type. Product code reaches the store only through
the settings service; maintenance scripts may use it directly.
"""
import json
import logging
from typing import Any, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import StorageError
from app.models.preference import Preference

logger = logging.getLogger(__name__)

_MISSING = object()


class PreferenceStore:
    """Key -> primitive mapping persisted across restarts."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value for key, or default when unset."""
        try:
            row = self.db.query(Preference).filter(Preference.key == key).first()
        except SQLAlchemyError as e:
            raise StorageError(str(e), operation="get_preference") from e

        if row is None:
            return default
        try:
            return json.loads(row.value)
        except ValueError:
            logger.warning(f"Preference '{key}' holds undecodable value, using default")
            return default

    def contains(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def set(self, key: str, value: Any, commit: bool = True) -> None:
        """Store value under key, replacing any previous value."""
        encoded = json.dumps(value)
        try:
            row = self.db.query(Preference).filter(Preference.key == key).first()
            if row:
                row.value = encoded
            else:
                self.db.add(Preference(key=key, value=encoded))
            if commit:
                self.db.commit()
            else:
                self.db.flush()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError(str(e), operation="set_preference") from e

    def remove(self, key: str) -> bool:
        """Delete key. Returns False if it was not set."""
        try:
            deleted = self.db.query(Preference).filter(Preference.key == key).delete()
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError(str(e), operation="remove_preference") from e
        return deleted > 0

    def keys(self) -> List[str]:
        try:
            return [row.key for row in self.db.query(Preference.key).order_by(Preference.key).all()]
        except SQLAlchemyError as e:
            raise StorageError(str(e), operation="list_preferences") from e

    def commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError(str(e), operation="commit_preferences") from e

    def rollback(self) -> None:
        self.db.rollback()

