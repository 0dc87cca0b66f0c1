import datetime
import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from daybook.chat.models import ChatMessage

logger = logging.getLogger(__name__)


def get_chat_message(db: Session, message_id: UUID) -> Optional[ChatMessage]:
    return db.query(ChatMessage).filter(ChatMessage.id == message_id).first()


def save_chat_message(
    db: Session,
    text: str,
    is_from_user: bool,
    timestamp: Optional[datetime.datetime] = None,
    message_id: Optional[UUID] = None,
) -> ChatMessage:
    """
    Stores one chat message.

    When `message_id` is already stored the existing message is returned
    and nothing is written.

    Args:
        db (Session): SQLAlchemy session.
        text (str): Message text.
        is_from_user (bool): True for user messages, False for companion replies.
        timestamp (datetime, optional): Send time. Defaults to now.
        message_id (UUID, optional): Client-supplied id.

    Returns:
        ChatMessage: The stored message.
    """
    if message_id is not None:
        existing = get_chat_message(db, message_id)
        if existing is not None:
            logger.info(f"Chat message {message_id} already stored")
            return existing

    message = ChatMessage(
        text=text,
        is_from_user=is_from_user,
        timestamp=timestamp or datetime.datetime.now(),
    )
    if message_id is not None:
        message.id = message_id
    db.add(message)
    db.commit()
    db.refresh(message)
    return message


def get_chat_messages(db: Session) -> List[ChatMessage]:
    """
    Retrieves the whole conversation, oldest first.

    Args:
        db (Session): SQLAlchemy session.

    Returns:
        List[ChatMessage]: Messages sorted by timestamp ascending.
    """
    return db.query(ChatMessage).order_by(ChatMessage.timestamp.asc()).all()


def clear_chat_history(db: Session) -> int:
    """
    Deletes every chat message. Journal entries are not touched.

    Args:
        db (Session): SQLAlchemy session.

    Returns:
        int: Number of deleted messages.
    """
    count = db.query(ChatMessage).delete(synchronize_session=False)
    db.commit()
    logger.info(f"Cleared chat history ({count} messages)")
    return count
