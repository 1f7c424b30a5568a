"""
Emotional core model and the fixed set of six cores.
"""
import enum
from sqlalchemy import Column, String, Float, DateTime, JSON
from app.db.base import BaseModel, utcnow


class CoreName(str, enum.Enum):
    """The six emotional growth cores. The set is closed."""
    OPTIMISM = "optimism"
    RESILIENCE = "resilience"
    SELF_AWARENESS = "self_awareness"
    CREATIVITY = "creativity"
    SOCIAL_CONNECTION = "social_connection"
    GROWTH_MINDSET = "growth_mindset"


class CoreTrend(str, enum.Enum):
    """Direction of the last level change."""
    RISING = "rising"
    STABLE = "stable"
    DECLINING = "declining"


# Static per-core metadata
CORE_DEFINITIONS = {
    CoreName.OPTIMISM: {
        "name": "Optimism",
        "description": "Your ability to maintain hope and positive outlook",
        "color": "#FF6B35",
    },
    CoreName.RESILIENCE: {
        "name": "Resilience",
        "description": "Your capacity to bounce back from challenges",
        "color": "#4ECDC4",
    },
    CoreName.SELF_AWARENESS: {
        "name": "Self-Awareness",
        "description": "Your understanding of your emotions and thoughts",
        "color": "#45B7D1",
    },
    CoreName.CREATIVITY: {
        "name": "Creativity",
        "description": "Your innovative thinking and creative expression",
        "color": "#96CEB4",
    },
    CoreName.SOCIAL_CONNECTION: {
        "name": "Social Connection",
        "description": "Your relationships and empathy with others",
        "color": "#FFEAA7",
    },
    CoreName.GROWTH_MINDSET: {
        "name": "Growth Mindset",
        "description": "Your openness to learning and embracing challenges",
        "color": "#DDA0DD",
    },
}

# Level thresholds marked achieved, once, as a core rises past them
MILESTONE_DEFINITIONS = [
    {"key": "foundation", "title": "Foundation",
     "description": "Building the foundation of your core", "threshold": 0.25},
    {"key": "development", "title": "Development",
     "description": "Developing strong core skills", "threshold": 0.5},
    {"key": "proficiency", "title": "Proficiency",
     "description": "Achieving proficiency in your core", "threshold": 0.75},
    {"key": "mastery", "title": "Mastery",
     "description": "Mastering your core strength", "threshold": 0.9},
]


class EmotionalCore(BaseModel):
    """Progress record for one of the six cores."""
    __tablename__ = "emotional_cores"

    id = Column(String(32), primary_key=True)  # CoreName value
    name = Column(String(50), nullable=False)
    description = Column(String(255), nullable=False)
    color = Column(String(7), nullable=False)
    current_level = Column(Float, nullable=False, default=0.0)
    previous_level = Column(Float, nullable=False, default=0.0)
    trend = Column(String(16), nullable=False, default=CoreTrend.STABLE.value)
    recent_insights = Column(JSON, nullable=False, default=list)  # Most recent first
    last_entry_id = Column(String(64), nullable=True)
    last_updated = Column(DateTime, nullable=False, default=utcnow)
    milestones = Column(JSON, nullable=False, default=list)  # See MILESTONE_DEFINITIONS
