import math
from typing import Optional, List
from uuid import UUID
from datetime import datetime
from pydantic import BaseModel, Field, field_validator


class BaseSchema(BaseModel):
    class Config:
        from_attributes = True


class QuestionAnswer(BaseSchema):
    question: str
    answer: str
    timestamp: datetime


class JournalEntryBase(BaseSchema):
    """
    Read-side snapshot of an entry. Analytics always operate on these,
    never on live ORM rows.
    """

    id: UUID
    date: datetime
    mood_value: float = 0.0
    mood_emoji: Optional[str] = None
    emotion_tags: List[str] = []
    why_text: Optional[str] = None
    why_tags: List[str] = []
    questions: List[QuestionAnswer] = []
    ai_topics: Optional[List[str]] = None
    journal_text: Optional[str] = None
    reflection_prompt: Optional[str] = None
    reflection_response: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("mood_value", mode="before")
    @classmethod
    def _normalize_mood(cls, value):
        if value is None:
            return 0.0
        value = float(value)
        if not math.isfinite(value):
            return 2.0
        return value

    @field_validator("emotion_tags", "why_tags", "questions", mode="before")
    @classmethod
    def _default_list(cls, value):
        return value or []


class MoodUpdate(BaseSchema):
    mood_value: float = Field(..., ge=0.0, le=4.0)
    mood_emoji: str = ""
    emotion_tags: List[str] = []
    why_text: str = ""
    why_tags: List[str] = []


class QuestionAnswerCreate(BaseSchema):
    question: str
    answer: str
    mood_value: float = Field(0.0, ge=0.0, le=4.0)
    mood_emoji: str = ""
    emotion_tags: List[str] = []
    why_text: str = ""
    why_tags: List[str] = []


class JournalEntryCreate(BaseSchema):
    journal_text: str
    mood_value: float = Field(0.0, ge=0.0, le=4.0)
    mood_emoji: str = ""
    emotion_tags: List[str] = []
    why_text: str = ""
    why_tags: List[str] = []
    reflection_prompt: Optional[str] = None
    reflection_response: Optional[str] = None


class ReflectionCreate(BaseSchema):
    prompt: str
    response: str
