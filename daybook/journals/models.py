import uuid
from datetime import datetime
from sqlalchemy import Column, String, Float, DateTime, JSON, Uuid
from daybook.core.database import Base


class JournalEntry(Base):
    __tablename__ = "journal_entries"

    id = Column(Uuid(as_uuid=True), primary_key=True, index=True, default=uuid.uuid4)
    date = Column(DateTime, nullable=False, index=True)

    mood_value = Column(Float, nullable=True, default=0.0)  # 0 means no mood recorded
    mood_emoji = Column(String, nullable=True)
    emotion_tags = Column(JSON, nullable=True)  # list[str], user-picked or classified
    why_text = Column(String, nullable=True)
    why_tags = Column(JSON, nullable=True)  # list[str]

    questions = Column(JSON, nullable=True)  # list[{question, answer, timestamp}]
    ai_topics = Column(JSON, nullable=True)  # NULL until classified

    # Legacy free-text fields
    journal_text = Column(String, nullable=True)
    reflection_prompt = Column(String, nullable=True)
    reflection_response = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)
