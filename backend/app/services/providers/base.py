"""
Analysis provider interface and response parsing shared by providers.
"""
import json
import re
from abc import ABC, abstractmethod

from pydantic import ValidationError

from app.core.exceptions import MalformedResponseError
from app.models.journal import JournalEntry
from app.schemas.analysis import AnalysisResult

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\s*```$")


def _reject_constant(name: str):
    raise ValueError(f"non-finite number {name}")


class AnalysisProvider(ABC):
    """Produces a structured emotional analysis for a journal entry."""

    name = "base"

    @abstractmethod
    async def analyze(self, entry: JournalEntry) -> AnalysisResult:
        """
        Analyze one entry.

        Raises:
            AnalysisError: one of AuthError, RateLimitError, NetworkError,
                MalformedResponseError, or the base class for other failures.
        """


def parse_analysis_response(text: str) -> AnalysisResult:
    """
    Parse a model reply into an AnalysisResult.

    Models sometimes wrap JSON in markdown code fences; those are stripped.
    Missing optional fields are fine, missing required ones are not.
    """
    cleaned = text.strip()
    cleaned = _FENCE_OPEN.sub("", cleaned)
    cleaned = _FENCE_CLOSE.sub("", cleaned)

    try:
        data = json.loads(cleaned, parse_constant=_reject_constant)
    except ValueError as e:
        raise MalformedResponseError(f"Response is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise MalformedResponseError("Response JSON is not an object")

    try:
        return AnalysisResult.model_validate(data)
    except ValidationError as e:
        raise MalformedResponseError(f"Response does not match analysis schema: {e}") from e
