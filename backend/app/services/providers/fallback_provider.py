"""
Local analysis used when no AI provider is configured.

The result is derived from the entry's own mood labels, so it never fails
and never leaves the device.
"""
from app.models.journal import JournalEntry
from app.schemas.analysis import AnalysisResult, MindReflection
from app.services.providers.base import AnalysisProvider


class FallbackAnalysisProvider(AnalysisProvider):
    """Mood-based analysis without a language model."""

    name = "fallback"

    async def analyze(self, entry: JournalEntry) -> AnalysisResult:
        moods = list(entry.moods or [])
        emotions = moods[:2] or ["neutral"]
        return AnalysisResult(
            primary_emotions=emotions,
            emotional_intensity=0.6 if moods else 0.5,
            growth_indicators=["self_reflection", "emotional_awareness", "mindful_writing"],
            mind_reflection=MindReflection(
                title="Daily Reflection",
                summary="Taking time to write down your thoughts builds self-awareness.",
                insights=[f"You noted feeling {', '.join(emotions)} today."]
            ),
            entry_insight="Thank you for taking time to reflect and journal."
        )
