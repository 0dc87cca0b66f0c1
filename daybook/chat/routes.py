from typing import Dict, List
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from daybook.core.database import get_db
from daybook.core.dependency import get_ai_service
from daybook.analysis.ai_providers.base import AIService
from daybook.chat.db import clear_chat_history
from daybook.chat.schemas import ChatMessageBase, ChatMessageCreate, ChatReply
from daybook.chat.service import conversation, reply_to_message

router = APIRouter(prefix="/chat", tags=["Chat"])
logger = logging.getLogger(__name__)


@router.post(
    "",
    response_model=ChatReply,
    summary="Talk to the journal companion",
    description="""
                Store a user message and the companion's reply. The reply draws on the
                past week of journal entries and the last ten messages. If the AI is
                unavailable a fallback reply is stored and the error is reported.
                """,
    responses={
        200: {"description": "Message and reply stored."},
        422: {"description": "Empty message."},
        500: {"description": "Failed to store the conversation."},
    },
)
async def send_message_route(
    message: ChatMessageCreate,
    db: Session = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service),
) -> ChatReply:
    try:
        return await reply_to_message(db, ai_service, message)
    except Exception as e:
        logger.error(f"Error handling chat message: {e}")
        raise HTTPException(status_code=500, detail="Failed to process chat message")


@router.get(
    "",
    response_model=List[ChatMessageBase],
    summary="Get chat history",
    description="Retrieve the whole conversation, oldest message first.",
    responses={
        200: {"description": "Chat history retrieved."},
        500: {"description": "Failed to retrieve chat history."},
    },
)
def get_chat_history_route(db: Session = Depends(get_db)) -> List[ChatMessageBase]:
    try:
        return conversation(db)
    except Exception as e:
        logger.error(f"Error fetching chat history: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch chat history")


@router.delete(
    "",
    response_model=Dict[str, int],
    summary="Clear chat history",
    description="Delete every chat message. Journal entries are kept. ⚠️ This action is irreversible.",
    responses={
        200: {"description": "Chat history cleared."},
        500: {"description": "Failed to clear chat history."},
    },
)
def clear_chat_history_route(db: Session = Depends(get_db)) -> Dict[str, int]:
    try:
        count = clear_chat_history(db)
    except Exception as e:
        logger.error(f"Error clearing chat history: {e}")
        raise HTTPException(status_code=500, detail="Failed to clear chat history")
    return {"deleted": count}
