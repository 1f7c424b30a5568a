"""
Core library service for the six emotional growth cores.

Cores are seeded lazily at zero state and move only in response to
completed journal analyses. Each analysis maps detected emotions, growth
indicators and explicit core adjustments onto per-core deltas; levels are
clamped to [0.0, 1.0].
"""
import logging
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import InvalidValueError, StorageError
from app.db.base import utcnow
from app.models.core import (
    CORE_DEFINITIONS, MILESTONE_DEFINITIONS, CoreName, CoreTrend, EmotionalCore
)
from app.schemas.analysis import AnalysisResult

logger = logging.getLogger(__name__)

# Changes at or below this size count as stable
TREND_THRESHOLD = 0.005

EMOTION_IMPACT = 0.004
EMOTION_IMPACT_CAP = 0.015
THEME_IMPACT = 0.003
THEME_IMPACT_CAP = 0.02

# Emotions that feed each core
CORE_EMOTIONS = {
    CoreName.OPTIMISM: ["happy", "joyful", "excited", "hopeful", "grateful"],
    CoreName.RESILIENCE: ["determined", "strong", "confident", "brave", "persistent"],
    CoreName.SELF_AWARENESS: ["reflective", "thoughtful", "aware", "mindful", "introspective"],
    CoreName.CREATIVITY: ["inspired", "imaginative", "innovative", "artistic", "original"],
    CoreName.SOCIAL_CONNECTION: ["loving", "connected", "empathetic", "caring", "social"],
    CoreName.GROWTH_MINDSET: ["curious", "motivated", "ambitious", "learning", "developing"],
}

# Growth indicator themes that feed each core (substring match)
CORE_THEMES = {
    CoreName.OPTIMISM: ["gratitude", "hope", "positive", "joy", "happiness"],
    CoreName.RESILIENCE: ["challenge", "overcome", "strength", "perseverance", "recovery"],
    CoreName.SELF_AWARENESS: ["reflection", "understanding", "awareness", "mindfulness", "insight"],
    CoreName.CREATIVITY: ["creative", "innovation", "imagination", "artistic", "original"],
    CoreName.SOCIAL_CONNECTION: ["relationship", "friendship", "community", "empathy", "connection"],
    CoreName.GROWTH_MINDSET: ["learning", "development", "improvement", "progress", "growth"],
}

CORE_RECOMMENDATIONS = {
    CoreName.OPTIMISM: "Practice daily gratitude by writing down three things you're thankful for.",
    CoreName.RESILIENCE: "Reframe challenges as opportunities for growth and learning.",
    CoreName.SELF_AWARENESS: "Spend time reflecting on your emotions and their triggers.",
    CoreName.CREATIVITY: "Explore new creative outlets or approach familiar tasks differently.",
    CoreName.SOCIAL_CONNECTION: "Reach out to friends or family you haven't connected with recently.",
    CoreName.GROWTH_MINDSET: "Embrace learning opportunities and view mistakes as stepping stones.",
}

DECLINE_RECOMMENDATIONS = {
    CoreName.OPTIMISM: "When feeling down, try to identify one small positive aspect of your day.",
    CoreName.RESILIENCE: "Remember past challenges you've overcome and draw strength from those experiences.",
    CoreName.SELF_AWARENESS: "Take a few minutes each day for mindful self-reflection without judgment.",
    CoreName.CREATIVITY: "Try a new creative activity or approach a familiar task in a different way.",
    CoreName.SOCIAL_CONNECTION: "Consider reaching out to someone who makes you feel understood.",
    CoreName.GROWTH_MINDSET: "Remind yourself that abilities develop through dedication and practice.",
}


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return min(max(value, low), high)


def _initial_milestones(core_name: CoreName) -> List[dict]:
    return [
        {
            "id": f"{core_name.value}_{milestone['key']}",
            "title": milestone["title"],
            "description": milestone["description"],
            "threshold": milestone["threshold"],
            "is_achieved": False,
            "achieved_at": None,
        }
        for milestone in MILESTONE_DEFINITIONS
    ]


def _update_milestones(milestones: List[dict], level: float, achieved_at) -> List[dict]:
    """Mark newly reached thresholds achieved. Achieved milestones are never revoked."""
    updated = []
    for milestone in milestones:
        if not milestone["is_achieved"] and level >= milestone["threshold"]:
            milestone = dict(milestone, is_achieved=True, achieved_at=achieved_at.isoformat())
            logger.info(f"Milestone {milestone['id']} achieved")
        updated.append(milestone)
    return updated


def _zero_core(core_name: CoreName) -> EmotionalCore:
    definition = CORE_DEFINITIONS[core_name]
    return EmotionalCore(
        id=core_name.value,
        name=definition["name"],
        description=definition["description"],
        color=definition["color"],
        current_level=0.0,
        previous_level=0.0,
        trend=CoreTrend.STABLE.value,
        recent_insights=[],
        last_entry_id=None,
        last_updated=utcnow(),
        milestones=_initial_milestones(core_name)
    )


def seed_cores(db: Session) -> None:
    """Insert any missing cores at zero state. Safe to call repeatedly."""
    try:
        existing = {row.id for row in db.query(EmotionalCore.id).all()}
        missing = [name for name in CoreName if name.value not in existing]
        if not missing:
            return
        for core_name in missing:
            db.add(_zero_core(core_name))
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(str(e), operation="seed_cores") from e

    logger.info(f"Seeded {len(missing)} emotional cores")


def get_all_cores(db: Session) -> List[EmotionalCore]:
    """Get all six cores in their fixed order."""
    seed_cores(db)
    try:
        rows = {core.id: core for core in db.query(EmotionalCore).all()}
    except SQLAlchemyError as e:
        raise StorageError(str(e), operation="get_all_cores") from e
    return [rows[name.value] for name in CoreName]


def get_core(db: Session, core_id: str) -> EmotionalCore:
    """Get one core by id."""
    try:
        core_name = CoreName(core_id)
    except ValueError:
        raise InvalidValueError("core_id", core_id, "unknown core")

    cores = get_all_cores(db)
    return cores[list(CoreName).index(core_name)]


def _resolve_core(key: str) -> Optional[CoreName]:
    """Match an adjustment key against core ids or display names."""
    normalized = key.strip().lower().replace("-", "_").replace(" ", "_")
    for core_name in CoreName:
        display = CORE_DEFINITIONS[core_name]["name"].lower().replace("-", "_").replace(" ", "_")
        if normalized in (core_name.value, display):
            return core_name
    return None


def _emotion_impact(core_name: CoreName, emotions: List[str]) -> float:
    relevant = CORE_EMOTIONS[core_name]
    impact = sum(EMOTION_IMPACT for emotion in emotions if emotion.strip().lower() in relevant)
    return min(impact, EMOTION_IMPACT_CAP)


def _theme_impact(core_name: CoreName, indicators: List[str]) -> float:
    relevant = CORE_THEMES[core_name]
    impact = 0.0
    for indicator in indicators:
        lowered = indicator.lower()
        if any(theme in lowered for theme in relevant):
            impact += THEME_IMPACT
    return min(impact, THEME_IMPACT_CAP)


def calculate_core_deltas(result: AnalysisResult) -> Dict[CoreName, float]:
    """
    Map an analysis onto per-core level changes.

    Only cores with a non-zero change are returned. Adjustment keys that
    do not name a core are ignored.
    """
    deltas = {core_name: 0.0 for core_name in CoreName}

    for key, value in result.core_adjustments.items():
        core_name = _resolve_core(key)
        if core_name is None:
            logger.debug(f"Ignoring adjustment for unknown core '{key}'")
            continue
        deltas[core_name] += value

    for core_name in CoreName:
        deltas[core_name] += _emotion_impact(core_name, result.primary_emotions)
        deltas[core_name] += _theme_impact(core_name, result.growth_indicators)

    return {core_name: delta for core_name, delta in deltas.items() if delta != 0.0}


def _calculate_trend(old_level: float, new_level: float) -> str:
    change = new_level - old_level
    if change > TREND_THRESHOLD:
        return CoreTrend.RISING.value
    if change < -TREND_THRESHOLD:
        return CoreTrend.DECLINING.value
    return CoreTrend.STABLE.value


def _build_insight(core: EmotionalCore, trend: str, summary: Optional[str]) -> str:
    if summary:
        return summary
    if trend == CoreTrend.RISING.value:
        return f"Your {core.name} is showing positive growth through your recent reflections."
    if trend == CoreTrend.DECLINING.value:
        return f"Your {core.name} could benefit from some focused attention and self-care."
    return f"Your {core.name} continues to develop."


def apply_analysis(
    db: Session,
    entry_id: str,
    result: AnalysisResult,
    personalized: bool = True,
    commit: bool = True
) -> List[EmotionalCore]:
    """
    Update cores from a completed analysis.

    For every core the analysis touches: previous_level takes the old
    current_level, current_level moves by the delta (clamped to [0, 1]),
    one insight is prepended to recent_insights and newly reached milestones
    are marked achieved. All cores are committed together or not at all.

    Args:
        entry_id: Entry the analysis belongs to
        result: Provider output
        personalized: Use the analysis summary as insight text when available
        commit: With False the changes are only flushed and the caller
            commits them together with its own writes

    Returns:
        The cores that changed
    """
    deltas = calculate_core_deltas(result)
    if not deltas:
        return []

    cores = {core.id: core for core in get_all_cores(db)}
    summary = result.summary if personalized else None
    limit = settings.CORE_INSIGHT_LIMIT
    now = utcnow()
    changed = []

    try:
        for core_name, delta in deltas.items():
            core = cores[core_name.value]
            old_level = core.current_level
            new_level = _clamp(old_level + delta)
            trend = _calculate_trend(old_level, new_level)
            insight = _build_insight(core, trend, summary)

            core.previous_level = old_level
            core.current_level = new_level
            core.trend = trend
            core.recent_insights = ([insight] + list(core.recent_insights or []))[:limit]
            core.milestones = _update_milestones(list(core.milestones or []), new_level, now)
            core.last_entry_id = entry_id
            core.last_updated = now
            changed.append(core)

        if not commit:
            db.flush()
            return changed
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(str(e), operation="apply_analysis") from e

    for core in changed:
        db.refresh(core)
    logger.info(f"Applied analysis of entry {entry_id} to {len(changed)} cores")
    return changed


def reset_cores(db: Session) -> List[EmotionalCore]:
    """Return all cores to the fresh-install state."""
    try:
        db.query(EmotionalCore).delete()
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(str(e), operation="reset_cores") from e
    return get_all_cores(db)


def get_growth_recommendations(db: Session) -> List[str]:
    """Suggest up to three practices: weakest cores first, then a declining one."""
    cores = get_all_cores(db)
    recommendations = []

    weak = [core for core in cores if core.current_level < 0.5]
    for core in weak[:2]:
        recommendations.append(CORE_RECOMMENDATIONS[CoreName(core.id)])

    declining = [core for core in cores if core.trend == CoreTrend.DECLINING.value]
    for core in declining[:1]:
        recommendations.append(DECLINE_RECOMMENDATIONS[CoreName(core.id)])

    return recommendations[:3]
