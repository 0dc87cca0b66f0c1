# schemas.py
from enum import Enum
from typing import List, Optional, Union
from datetime import datetime
from pydantic import BaseModel

from daybook.journals.schemas import JournalEntryBase


class BaseSchema(BaseModel):
    class Config:
        from_attributes = True


class MoodTrend(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    CHALLENGING = "challenging"
    MIXED = "mixed"

    @property
    def description(self) -> str:
        return _TREND_DESCRIPTIONS[self]


_TREND_DESCRIPTIONS = {
    MoodTrend.POSITIVE: "Improving",
    MoodTrend.NEUTRAL: "Stable",
    MoodTrend.CHALLENGING: "Declining",
    MoodTrend.MIXED: "Variable",
}


class RecommendationCategory(str, Enum):
    SELF_CARE = "selfCare"
    LIFESTYLE = "lifestyle"
    SOCIAL = "social"
    GROWTH = "growth"
    MINDFULNESS = "mindfulness"
    PRODUCTIVITY = "productivity"

    @property
    def label(self) -> str:
        return _CATEGORY_LABELS[self]

    @classmethod
    def from_label(cls, raw: str) -> "RecommendationCategory":
        """Title-cases the raw value and matches it against the display labels."""
        wanted = raw.strip().title()
        for category, label in _CATEGORY_LABELS.items():
            if label == wanted:
                return category
        return cls.GROWTH


_CATEGORY_LABELS = {
    RecommendationCategory.SELF_CARE: "Self-Care",
    RecommendationCategory.LIFESTYLE: "Lifestyle",
    RecommendationCategory.SOCIAL: "Social",
    RecommendationCategory.GROWTH: "Growth",
    RecommendationCategory.MINDFULNESS: "Mindfulness",
    RecommendationCategory.PRODUCTIVITY: "Productivity",
}


class RecommendationPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def from_raw(cls, raw: str) -> "RecommendationPriority":
        value = raw.strip().lower()
        if value == "high":
            return cls.HIGH
        if value == "low":
            return cls.LOW
        return cls.MEDIUM


class AIRecommendation(BaseSchema):
    icon: str
    title: str
    description: str
    action_text: str
    category: RecommendationCategory
    priority: RecommendationPriority


class TopicCluster(BaseSchema):
    title: str
    entry_count: int
    entries: List[JournalEntryBase]
    tagline: str


class StreakStats(BaseSchema):
    current_streak: int
    longest_streak: int
    journaling_days_this_month: int


class MoodStats(BaseSchema):
    average_mood: float
    mood_emoji: str
    previous_week_average: float
    variability: float
    trend: MoodTrend
    trend_description: str


class EmotionStats(BaseSchema):
    most_common: List[str]
    recent: List[str]


class InsightsOverview(BaseSchema):
    mood: MoodStats
    streaks: StreakStats
    common_emotions: List[str]
    total_entries: int
    entries_this_week: int
    motivational_message: str


class InsightStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class InsightSnapshot(BaseSchema):
    """
    Point-in-time view of one AI insight surface.

    While loading, `content` still holds the previous result (if any). In the
    error state it holds the deterministic fallback and `message` explains
    that the AI result is unavailable.
    """

    surface: str
    status: InsightStatus
    content: Optional[Union[str, List[AIRecommendation]]] = None
    message: Optional[str] = None
    error: Optional[str] = None
    error_category: Optional[str] = None
    updated_at: Optional[datetime] = None
