import datetime
import logging
from typing import List, Optional, Sequence, Tuple
from uuid import UUID

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from daybook.core.config import INSIGHT_WINDOW_DAYS
from daybook.chat.db import get_chat_messages, save_chat_message
from daybook.chat.schemas import ChatMessageBase, ChatMessageCreate, ChatReply
from daybook.journals.db import get_journals_in_range
from daybook.journals.schemas import JournalEntryBase
from daybook.analysis.ai_providers.base import AIService, AIServiceError
from daybook.analysis.ai_providers.openai import format_entries_for_prompt
import daybook.analysis.prompts.openai_prompts_templates as prompts

logger = logging.getLogger(__name__)


def build_chat_context(entries: Sequence[JournalEntryBase]) -> str:
    if not entries:
        return prompts.CHAT_NO_ENTRIES_CONTEXT
    return prompts.CHAT_CONTEXT_INTRO + format_entries_for_prompt(entries)


def _load_conversation(
    db: Session, now: datetime.datetime, exclude_id: UUID
) -> Tuple[List[JournalEntryBase], List[ChatMessageBase]]:
    start = now - datetime.timedelta(days=INSIGHT_WINDOW_DAYS)
    entries = [JournalEntryBase.model_validate(e) for e in get_journals_in_range(db, start, now)]
    history = [
        ChatMessageBase.model_validate(m) for m in get_chat_messages(db) if m.id != exclude_id
    ]
    return entries, history[-prompts.CHAT_HISTORY_LIMIT:]


async def reply_to_message(
    db: Session,
    ai_service: AIService,
    data: ChatMessageCreate,
    now: Optional[datetime.datetime] = None,
) -> ChatReply:
    """
    Stores the user's message and the companion's answer to it.

    The AI sees the past week of journal entries and the last ten messages of
    the conversation. When the AI call fails, a fixed fallback reply is stored
    instead and the error is reported alongside it.

    Args:
        db (Session): SQLAlchemy session.
        ai_service (AIService): Provider used for the reply.
        data (ChatMessageCreate): The user's message.
        now (datetime, optional): Current local time.

    Returns:
        ChatReply: Both stored messages, plus the AI error if one occurred.
    """
    now = now or datetime.datetime.now()
    user_row = await run_in_threadpool(save_chat_message, db, data.text, True, now, data.id)
    user_message = ChatMessageBase.model_validate(user_row)

    entries, history = await run_in_threadpool(_load_conversation, db, now, user_message.id)

    error: Optional[AIServiceError] = None
    try:
        text = await ai_service.generate_chat_response(
            user_message.text, build_chat_context(entries), history
        )
    except AIServiceError as e:
        logger.warning(f"Chat reply failed ({e.category.value}): {e}. Using fallback reply.")
        error = e
        text = prompts.CHAT_MISSING_KEY_REPLY if e.is_credential_error else prompts.CHAT_FALLBACK_REPLY

    # Replies sort after the message they answer
    reply_time = max(datetime.datetime.now(), now + datetime.timedelta(microseconds=1))
    reply_row = await run_in_threadpool(
        save_chat_message, db, text, False, reply_time
    )
    return ChatReply(
        user_message=user_message,
        reply=ChatMessageBase.model_validate(reply_row),
        error=str(error) if error else None,
        error_category=error.category.value if error else None,
    )


def conversation(db: Session) -> List[ChatMessageBase]:
    return [ChatMessageBase.model_validate(m) for m in get_chat_messages(db)]
