import datetime
import logging
from typing import Callable, List, Optional
from uuid import UUID

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from daybook.journals.db import get_journal, get_journals_in_range, update_entry_classification
from daybook.journals.schemas import JournalEntryBase
from daybook.analysis.ai_providers.base import AIService, AIServiceError
from daybook.analysis.prompts.openai_prompts_templates import EMOTION_LABELS
from daybook.analysis.topics import TOPIC_LABELS

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], Session]


def make_entry_loader(session_factory: SessionFactory):
    """
    Builds the range loader the insight orchestrator reads its window with.

    Each call opens its own session and returns detached snapshots, so the
    result stays valid after the session is closed.
    """

    def load(start: datetime.datetime, end: datetime.datetime) -> List[JournalEntryBase]:
        db = session_factory()
        try:
            return [JournalEntryBase.model_validate(e) for e in get_journals_in_range(db, start, end)]
        finally:
            db.close()

    return load


def topic_content(entry: JournalEntryBase) -> str:
    parts = [entry.journal_text or "", entry.reflection_response or "", entry.why_text or ""]
    parts.extend(f"{qa.question} {qa.answer}" for qa in entry.questions)
    return " ".join(parts).strip()


def emotion_content(entry: JournalEntryBase) -> str:
    return " ".join(qa.answer for qa in entry.questions).strip()


def _load_snapshot(session_factory: SessionFactory, entry_id: UUID) -> Optional[JournalEntryBase]:
    db = session_factory()
    try:
        row = get_journal(db, entry_id)
        return JournalEntryBase.model_validate(row) if row is not None else None
    finally:
        db.close()


def _write_classification(
    session_factory: SessionFactory,
    entry_id: UUID,
    topics: Optional[List[str]],
    emotions: Optional[List[str]],
) -> None:
    db = session_factory()
    try:
        update_entry_classification(db, entry_id, topics=topics, emotions=emotions)
    finally:
        db.close()


async def classify_entry_job(
    entry_id: UUID,
    ai_service: AIService,
    session_factory: SessionFactory,
    topics: bool = True,
    emotions: bool = True,
) -> None:
    """
    Background job run after a save: tags the entry with AI topics and emotions.

    Failures are logged and leave the entry as it was. The job overwrites
    previous results, so running it again for the same entry is harmless.
    Store access runs in the threadpool.

    Args:
        entry_id (UUID): Entry to classify.
        ai_service (AIService): Provider used for classification.
        session_factory (SessionFactory): Opens the job's own DB sessions.
        topics (bool): Whether to classify topics.
        emotions (bool): Whether to classify emotions.
    """
    entry = await run_in_threadpool(_load_snapshot, session_factory, entry_id)
    if entry is None:
        logger.info(f"Entry {entry_id} vanished before classification")
        return

    found_topics = None
    if topics:
        content = topic_content(entry)
        if content:
            try:
                found_topics = await ai_service.classify_topics(content, TOPIC_LABELS)
            except AIServiceError as e:
                logger.warning(f"Topic classification failed for entry {entry_id}: {e}")

    found_emotions = None
    if emotions:
        content = emotion_content(entry)
        if content:
            try:
                found_emotions = await ai_service.classify_emotions(content, EMOTION_LABELS)
            except AIServiceError as e:
                logger.warning(f"Emotion classification failed for entry {entry_id}: {e}")

    if found_topics is None and found_emotions is None:
        return
    await run_in_threadpool(_write_classification, session_factory, entry_id, found_topics, found_emotions)
    logger.info(f"Classified entry {entry_id}: topics={found_topics} emotions={found_emotions}")
