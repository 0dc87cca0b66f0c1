import datetime
import logging
from uuid import UUID
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session
from daybook.journals.models import JournalEntry
from daybook.journals.schemas import JournalEntryCreate, MoodUpdate, QuestionAnswerCreate

logger = logging.getLogger(__name__)


# Helpers
def day_bounds(day: datetime.date) -> tuple:
    """
    Returns the [start, end) datetimes of a calendar day.

    Args:
        day (date): Local calendar day.

    Returns:
        tuple: (start of day, start of next day).
    """
    start = datetime.datetime.combine(day, datetime.time.min)
    return start, start + datetime.timedelta(days=1)


# Reads
def get_journal(db: Session, entry_id: UUID) -> Optional[JournalEntry]:
    """
    Retrieves a journal entry by its ID.

    Args:
        db (Session): SQLAlchemy session.
        entry_id (UUID): ID of the entry.

    Returns:
        Optional[JournalEntry]: The entry if found, else None.
    """
    return db.query(JournalEntry).filter(JournalEntry.id == entry_id).first()


def get_journal_by_date(db: Session, day: datetime.date) -> Optional[JournalEntry]:
    """
    Retrieves the canonical entry of a calendar day.

    Duplicates for the same day should not exist; if they do, the earliest
    entry of the day is treated as canonical.

    Args:
        db (Session): SQLAlchemy session.
        day (date): Calendar day to look up.

    Returns:
        Optional[JournalEntry]: The day's entry or None.
    """
    start, end = day_bounds(day)
    return (
        db.query(JournalEntry)
        .filter(JournalEntry.date >= start, JournalEntry.date < end)
        .order_by(JournalEntry.date.asc())
        .first()
    )


def get_today_entry(db: Session, now: Optional[datetime.datetime] = None) -> Optional[JournalEntry]:
    now = now or datetime.datetime.now()
    return get_journal_by_date(db, now.date())


def get_journals_in_range(
    db: Session, start: datetime.datetime, end: datetime.datetime
) -> List[JournalEntry]:
    """
    Retrieves entries dated within [start, end], newest first.

    Args:
        db (Session): SQLAlchemy session.
        start (datetime): Inclusive lower bound.
        end (datetime): Inclusive upper bound.

    Returns:
        List[JournalEntry]: Entries sorted by date descending.
    """
    return (
        db.query(JournalEntry)
        .filter(JournalEntry.date >= start, JournalEntry.date <= end)
        .order_by(JournalEntry.date.desc())
        .all()
    )


def get_all_journals(db: Session) -> List[JournalEntry]:
    return db.query(JournalEntry).order_by(JournalEntry.date.desc()).all()


def search_journals(db: Session, text: str) -> List[JournalEntry]:
    """
    Case-insensitive substring search over journal text and reflection responses.
    `%` and `_` in the text match literally.

    Args:
        db (Session): SQLAlchemy session.
        text (str): Text to look for.

    Returns:
        List[JournalEntry]: Matching entries sorted by date descending.
    """
    return (
        db.query(JournalEntry)
        .filter(
            or_(
                JournalEntry.journal_text.icontains(text, autoescape=True),
                JournalEntry.reflection_response.icontains(text, autoescape=True),
            )
        )
        .order_by(JournalEntry.date.desc())
        .all()
    )


# Upserts
def upsert_today_entry(
    db: Session, fields: Dict[str, Any], now: Optional[datetime.datetime] = None
) -> JournalEntry:
    """
    Applies field updates to today's entry, creating it first if needed.

    Every mutating store operation goes through here so that a calendar day
    never holds more than one entry.

    Args:
        db (Session): SQLAlchemy session.
        fields (Dict[str, Any]): Column values to set.
        now (datetime, optional): Current local time. Defaults to now.

    Returns:
        JournalEntry: The created or updated entry.
    """
    now = now or datetime.datetime.now()
    entry = get_journal_by_date(db, now.date())
    if entry is None:
        entry = JournalEntry(date=now, created_at=now, mood_value=0.0)
        db.add(entry)
        logger.info(f"Creating journal entry for {now.date()}")

    for field, value in fields.items():
        setattr(entry, field, value)
    entry.updated_at = now

    db.commit()
    db.refresh(entry)
    return entry


def save_question_answer(
    db: Session, data: QuestionAnswerCreate, now: Optional[datetime.datetime] = None
) -> JournalEntry:
    """
    Appends a question/answer pair to today's entry.

    Mood fields are only overwritten when a mood was supplied (mood_value > 0).

    Args:
        db (Session): SQLAlchemy session.
        data (QuestionAnswerCreate): Question, answer and optional mood data.
        now (datetime, optional): Current local time.

    Returns:
        JournalEntry: The updated entry.
    """
    now = now or datetime.datetime.now()
    existing = get_journal_by_date(db, now.date())
    questions = list(existing.questions or []) if existing else []
    # JSON columns only track reassignment
    questions.append(
        {"question": data.question, "answer": data.answer, "timestamp": now.isoformat()}
    )

    fields: Dict[str, Any] = {"questions": questions}
    if data.mood_value > 0:
        fields.update(
            mood_value=data.mood_value,
            mood_emoji=data.mood_emoji,
            emotion_tags=list(data.emotion_tags),
            why_text=data.why_text,
            why_tags=list(data.why_tags),
        )
    return upsert_today_entry(db, fields, now)


def update_mood_data(
    db: Session, data: MoodUpdate, now: Optional[datetime.datetime] = None
) -> JournalEntry:
    update_data = data.model_dump()
    return upsert_today_entry(db, update_data, now)


def save_journal_entry(
    db: Session, data: JournalEntryCreate, now: Optional[datetime.datetime] = None
) -> JournalEntry:
    """
    Legacy full save: overwrites today's text, mood and reflection fields.

    Args:
        db (Session): SQLAlchemy session.
        data (JournalEntryCreate): Full entry payload.
        now (datetime, optional): Current local time.

    Returns:
        JournalEntry: The updated entry.
    """
    return upsert_today_entry(db, data.model_dump(), now)


def save_reflection(
    db: Session, prompt: str, response: str, now: Optional[datetime.datetime] = None
) -> JournalEntry:
    return upsert_today_entry(
        db, {"reflection_prompt": prompt, "reflection_response": response}, now
    )


def update_entry_classification(
    db: Session,
    entry_id: UUID,
    topics: Optional[List[str]] = None,
    emotions: Optional[List[str]] = None,
) -> Optional[JournalEntry]:
    """
    Writes AI classification results back to an entry.

    Re-running with the same labels leaves the entry unchanged, so the
    classification job is safe to retry.

    Args:
        db (Session): SQLAlchemy session.
        entry_id (UUID): ID of the classified entry.
        topics (List[str], optional): Topic labels; None leaves ai_topics untouched.
        emotions (List[str], optional): Emotion labels; None leaves emotion_tags untouched.

    Returns:
        Optional[JournalEntry]: The updated entry, or None if it no longer exists.
    """
    entry = get_journal(db, entry_id)
    if entry is None:
        return None
    if topics is not None:
        entry.ai_topics = list(topics)
    if emotions is not None:
        entry.emotion_tags = list(emotions)
    db.commit()
    db.refresh(entry)
    return entry


# Deletes
def delete_journal(db: Session, entry_id: UUID) -> Optional[JournalEntry]:
    """
    Deletes a journal entry by ID.

    Args:
        db (Session): SQLAlchemy session.
        entry_id (UUID): ID of the entry to delete.

    Returns:
        Optional[JournalEntry]: The deleted entry or None.
    """
    entry = get_journal(db, entry_id)
    if entry:
        db.delete(entry)
        db.commit()
        logger.info(f"Deleted journal entry {entry_id}")
        return entry
    return None


def delete_all_journals(db: Session) -> int:
    """
    Deletes every journal entry.

    ⚠️ This operation is irreversible.

    Args:
        db (Session): SQLAlchemy session.

    Returns:
        int: Number of deleted entries.
    """
    count = db.query(JournalEntry).delete(synchronize_session=False)
    db.commit()
    logger.info(f"Deleted all journal entries ({count})")
    return count
