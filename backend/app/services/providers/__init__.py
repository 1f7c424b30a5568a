"""Analysis providers and provider selection."""
import logging

from app.core.config import settings
from app.services.providers.base import AnalysisProvider, parse_analysis_response
from app.services.providers.claude_provider import ClaudeAnalysisProvider
from app.services.providers.fallback_provider import FallbackAnalysisProvider

logger = logging.getLogger(__name__)


def get_analysis_provider() -> AnalysisProvider:
    """Claude when an API key is configured, otherwise the local fallback."""
    if settings.ANTHROPIC_API_KEY:
        return ClaudeAnalysisProvider(api_key=settings.ANTHROPIC_API_KEY)

    logger.warning("Anthropic API key not configured. Using local fallback analysis.")
    return FallbackAnalysisProvider()


__all__ = [
    "AnalysisProvider",
    "ClaudeAnalysisProvider",
    "FallbackAnalysisProvider",
    "get_analysis_provider",
    "parse_analysis_response",
]
