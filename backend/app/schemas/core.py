"""
Pydantic schemas for EmotionalCore entity.
"""
from pydantic import BaseModel, ConfigDict
from typing import List, Optional
from datetime import datetime


class CoreMilestone(BaseModel):
    """Level threshold on a core's progress."""
    id: str
    title: str
    description: str
    threshold: float
    is_achieved: bool = False
    achieved_at: Optional[datetime] = None


class EmotionalCoreResponse(BaseModel):
    """Schema for core response."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str
    color: str
    current_level: float
    previous_level: float
    trend: str
    recent_insights: List[str] = []
    milestones: List[CoreMilestone] = []
    last_entry_id: Optional[str] = None
    last_updated: datetime


class GrowthRecommendations(BaseModel):
    """Schema for growth recommendations."""
    recommendations: List[str]
