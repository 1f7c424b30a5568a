"""
Journal analysis service: sends an entry to the analysis provider and folds
the result back into the entry and the core library.

At most one analysis per entry id is in flight. An entry deleted while its
analysis is pending is not resurrected; the late result is discarded.
"""
import logging
from typing import Optional, Set

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import (
    AnalysisError, AnalysisPendingError, EntryNotFoundError, StorageError
)
from app.schemas.analysis import AnalysisResult
from app.services import core_library_service, journal_service, settings_service
from app.services.providers import AnalysisProvider, get_analysis_provider

logger = logging.getLogger(__name__)


class JournalAnalysisService:
    """Coordinates provider calls with the pending flag per entry."""

    def __init__(self, provider: AnalysisProvider):
        self.provider = provider
        self._pending: Set[str] = set()

    def is_pending(self, entry_id: str) -> bool:
        return entry_id in self._pending

    async def analyze_entry(self, db: Session, entry_id: str) -> Optional[AnalysisResult]:
        """
        Analyze an entry and apply the result.

        Returns:
            The analysis, or None when the entry was deleted before the
            provider answered.

        Raises:
            EntryNotFoundError: the entry does not exist.
            AnalysisPendingError: an analysis for this entry is already running.
            AnalysisError: the provider failed; the entry is unchanged.
            StorageError: saving the result failed; neither the entry nor
                the cores are changed.
        """
        entry = journal_service.get_entry(db, entry_id)
        if entry is None:
            raise EntryNotFoundError(entry_id)

        # Check and mark without awaiting in between
        if entry_id in self._pending:
            raise AnalysisPendingError(entry_id)
        self._pending.add(entry_id)

        try:
            try:
                result = await self.provider.analyze(entry)
            except AnalysisError as e:
                logger.warning(
                    f"Analysis of entry {entry_id} failed via {self.provider.name}: {e}"
                )
                raise

            if not journal_service.entry_exists(db, entry_id):
                logger.info(f"Entry {entry_id} was deleted during analysis, discarding result")
                return None

            self._apply_result(db, entry_id, result)
            return result
        finally:
            self._pending.discard(entry_id)


    @staticmethod
    def _apply_result(db: Session, entry_id: str, result: AnalysisResult) -> None:
        """Attach the analysis and move the cores in one transaction."""
        # Seeding and preference reads happen before any pending write
        core_library_service.seed_cores(db)
        preferences = settings_service.get_preferences(db)

        try:
            journal_service.attach_analysis(db, entry_id, result, commit=False)
            core_library_service.apply_analysis(
                db,
                entry_id,
                result,
                personalized=preferences.personalized_insights_enabled,
                commit=False
            )
            db.commit()
        except StorageError:
            db.rollback()
            logger.error(f"Storing analysis of entry {entry_id} failed, nothing was saved")
            raise
        except SQLAlchemyError as e:
            db.rollback()
            raise StorageError(str(e), operation="analyze_entry") from e


_analysis_service: Optional[JournalAnalysisService] = None


def get_analysis_service() -> JournalAnalysisService:
    """Dependency returning the process-wide analysis service."""
    global _analysis_service
    if _analysis_service is None:
        _analysis_service = JournalAnalysisService(get_analysis_provider())
    return _analysis_service
