import datetime
from uuid import UUID
from typing import List, Dict
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from daybook.core.database import get_db
from daybook.core.dependency import get_ai_service, get_orchestrator, get_session_factory
from daybook.analysis.ai_providers.base import AIService
from daybook.analysis.service import InsightOrchestrator
from daybook.journals.schemas import (
    JournalEntryBase,
    JournalEntryCreate,
    MoodUpdate,
    QuestionAnswerCreate,
    ReflectionCreate,
)
from daybook.journals.db import (
    delete_all_journals,
    delete_journal,
    get_all_journals,
    get_journal,
    get_journal_by_date,
    get_today_entry,
    save_journal_entry,
    save_question_answer,
    save_reflection,
    search_journals,
    update_mood_data,
)
from daybook.journals.service import classify_entry_job

router = APIRouter(prefix="/journals", tags=["Journals"])
logger = logging.getLogger(__name__)


def _queue_after_save(
    background_tasks: BackgroundTasks,
    orchestrator: InsightOrchestrator,
    ai_service: AIService,
    session_factory,
    entry_id: UUID,
    topics: bool,
    emotions: bool,
) -> None:
    if topics or emotions:
        background_tasks.add_task(
            classify_entry_job, entry_id, ai_service, session_factory, topics, emotions
        )
    background_tasks.add_task(orchestrator.on_data_changed)


@router.get(
    "/all",
    response_model=List[JournalEntryBase],
    summary="Get all journal entries",
    description="Retrieve every journal entry, newest first.",
    responses={
        200: {"description": "Journal entries retrieved successfully."},
        500: {"description": "Failed to retrieve journal entries."},
    },
)
def get_journals_route(db: Session = Depends(get_db)) -> List[JournalEntryBase]:
    try:
        return get_all_journals(db)
    except Exception as e:
        logger.error(f"Error fetching journals: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch journal entries")


@router.get(
    "/today",
    response_model=JournalEntryBase,
    summary="Get today's entry",
    description="Retrieve the entry of the current calendar day.",
    responses={
        200: {"description": "Entry retrieved successfully."},
        404: {"description": "Nothing has been written today."},
        500: {"description": "Failed to retrieve entry."},
    },
)
def get_today_route(db: Session = Depends(get_db)) -> JournalEntryBase:
    try:
        entry = get_today_entry(db)
    except Exception as e:
        logger.error(f"Error fetching today's entry: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve entry")
    if entry is None:
        raise HTTPException(status_code=404, detail="No entry for today")
    return entry


@router.get(
    "/search",
    response_model=List[JournalEntryBase],
    summary="Search journal entries",
    description="Case-insensitive search over journal text and reflection responses.",
    responses={
        200: {"description": "Matching entries returned."},
        500: {"description": "Search failed."},
    },
)
def search_journals_route(
    q: str = Query(..., min_length=1, description="Text to search for."),
    db: Session = Depends(get_db),
) -> List[JournalEntryBase]:
    try:
        return search_journals(db, q)
    except Exception as e:
        logger.error(f"Error searching journals for '{q}': {e}")
        raise HTTPException(status_code=500, detail="Failed to search journal entries")


@router.get(
    "/date/{day}",
    response_model=JournalEntryBase,
    summary="Get the entry of a day",
    description="Retrieve the entry of a given calendar day (YYYY-MM-DD).",
    responses={
        200: {"description": "Entry retrieved successfully."},
        404: {"description": "No entry on that day."},
        500: {"description": "Failed to retrieve entry."},
    },
)
def get_journal_by_date_route(day: datetime.date, db: Session = Depends(get_db)) -> JournalEntryBase:
    try:
        entry = get_journal_by_date(db, day)
    except Exception as e:
        logger.error(f"Error fetching entry for {day}: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve entry")
    if entry is None:
        raise HTTPException(status_code=404, detail="Journal not found")
    return entry


@router.get(
    "/{entry_id}",
    response_model=JournalEntryBase,
    summary="Get a journal by ID",
    description="Retrieve a specific journal entry by its unique identifier.",
    responses={
        200: {"description": "Journal retrieved successfully."},
        404: {"description": "Journal not found."},
        500: {"description": "Failed to retrieve journal."},
    },
)
def read_journal_route(entry_id: UUID, db: Session = Depends(get_db)) -> JournalEntryBase:
    try:
        entry = get_journal(db, entry_id)
    except Exception as e:
        logger.error(f"Error retrieving journal {entry_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve journal")
    if entry is None:
        raise HTTPException(status_code=404, detail="Journal not found")
    return entry


@router.post(
    "/mood",
    response_model=JournalEntryBase,
    summary="Record today's mood",
    description="""
                Set today's mood, emoji, emotions and reason. Creates today's entry if needed.
                Topic classification runs in the background afterwards.
                """,
    responses={
        200: {"description": "Mood saved."},
        422: {"description": "Mood value outside 0-4."},
        500: {"description": "Failed to save mood."},
    },
)
def update_mood_route(
    mood: MoodUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service),
    session_factory=Depends(get_session_factory),
    orchestrator: InsightOrchestrator = Depends(get_orchestrator),
) -> JournalEntryBase:
    try:
        entry = update_mood_data(db, mood)
    except Exception as e:
        logger.error(f"Error saving mood: {e}")
        raise HTTPException(status_code=500, detail="Failed to save mood")
    _queue_after_save(
        background_tasks, orchestrator, ai_service, session_factory, entry.id,
        topics=True, emotions=False,
    )
    return entry


@router.post(
    "/questions",
    response_model=JournalEntryBase,
    summary="Answer a journaling question",
    description="""
                Append a question/answer pair to today's entry. Mood fields are only updated
                when a mood value above 0 is supplied. Topics and emotions are classified
                in the background afterwards.
                """,
    responses={
        200: {"description": "Answer saved."},
        500: {"description": "Failed to save answer."},
    },
)
def save_question_route(
    qa: QuestionAnswerCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service),
    session_factory=Depends(get_session_factory),
    orchestrator: InsightOrchestrator = Depends(get_orchestrator),
) -> JournalEntryBase:
    try:
        entry = save_question_answer(db, qa)
    except Exception as e:
        logger.error(f"Error saving answer: {e}")
        raise HTTPException(status_code=500, detail="Failed to save answer")
    _queue_after_save(
        background_tasks, orchestrator, ai_service, session_factory, entry.id,
        topics=True, emotions=True,
    )
    return entry


@router.post(
    "",
    response_model=JournalEntryBase,
    summary="Save today's journal",
    description="Overwrite today's journal text, mood and reflection in one call.",
    responses={
        200: {"description": "Journal saved."},
        500: {"description": "Failed to save journal."},
    },
)
def save_journal_route(
    journal: JournalEntryCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service),
    session_factory=Depends(get_session_factory),
    orchestrator: InsightOrchestrator = Depends(get_orchestrator),
) -> JournalEntryBase:
    try:
        entry = save_journal_entry(db, journal)
    except Exception as e:
        logger.error(f"Error saving journal: {e}")
        raise HTTPException(status_code=500, detail="Failed to save journal")
    _queue_after_save(
        background_tasks, orchestrator, ai_service, session_factory, entry.id,
        topics=True, emotions=True,
    )
    return entry


@router.post(
    "/reflection",
    response_model=JournalEntryBase,
    summary="Save today's reflection",
    description="Store a reflection prompt and the user's response on today's entry.",
    responses={
        200: {"description": "Reflection saved."},
        500: {"description": "Failed to save reflection."},
    },
)
def save_reflection_route(
    reflection: ReflectionCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    orchestrator: InsightOrchestrator = Depends(get_orchestrator),
) -> JournalEntryBase:
    try:
        entry = save_reflection(db, reflection.prompt, reflection.response)
    except Exception as e:
        logger.error(f"Error saving reflection: {e}")
        raise HTTPException(status_code=500, detail="Failed to save reflection")
    background_tasks.add_task(orchestrator.on_data_changed)
    return entry


@router.delete(
    "/all",
    response_model=Dict[str, int],
    summary="Delete all journals",
    description="Delete every journal entry. ⚠️ This action is irreversible.",
    responses={
        200: {"description": "All journals deleted."},
        500: {"description": "Failed to delete journals."},
    },
)
def delete_all_journals_route(
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    orchestrator: InsightOrchestrator = Depends(get_orchestrator),
) -> Dict[str, int]:
    try:
        count = delete_all_journals(db)
    except Exception as e:
        logger.error(f"Error deleting all journals: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete journals")
    background_tasks.add_task(orchestrator.on_data_changed)
    return {"deleted": count}


@router.delete(
    "/{entry_id}",
    response_model=Dict[str, str],
    summary="Delete a journal by ID",
    description="Delete a specific journal entry.",
    responses={
        200: {"description": "Journal deleted successfully."},
        404: {"description": "Journal not found."},
        500: {"description": "Failed to delete journal."},
    },
)
def delete_journal_route(
    entry_id: UUID,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    orchestrator: InsightOrchestrator = Depends(get_orchestrator),
) -> Dict[str, str]:
    try:
        deleted = delete_journal(db, entry_id)
    except Exception as e:
        logger.error(f"Error deleting journal {entry_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete journal")
    if deleted is None:
        raise HTTPException(status_code=404, detail="Journal not found")
    background_tasks.add_task(orchestrator.on_data_changed)
    return {"detail": "Journal deleted successfully"}
