"""
Pydantic schemas for AI analysis results.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Dict, List, Optional


class MindReflection(BaseModel):
    """Short reflective summary produced alongside an analysis."""
    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    summary: Optional[str] = None
    insights: List[str] = []


class AnalysisResult(BaseModel):
    """Structured analysis of one journal entry."""
    # NaN/inf would break the [0, 1] core level range
    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    primary_emotions: List[str]
    emotional_intensity: float
    growth_indicators: List[str]
    core_adjustments: Dict[str, float] = Field(default_factory=dict)
    mind_reflection: Optional[MindReflection] = None
    entry_insight: Optional[str] = None

    @field_validator("emotional_intensity")
    @classmethod
    def normalize_intensity(cls, v: float) -> float:
        """Accept 0-10 scale values and clamp to 0.0-1.0."""
        if v > 1.0:
            v = v / 10.0
        return min(max(v, 0.0), 1.0)

    @property
    def summary(self) -> Optional[str]:
        if self.mind_reflection and self.mind_reflection.summary:
            return self.mind_reflection.summary
        return None


class AnalyzeResponse(BaseModel):
    """Schema for the analyze endpoint response."""
    entry_id: str
    discarded: bool = False
    analysis: Optional[AnalysisResult] = None
