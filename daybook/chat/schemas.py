from typing import Optional
from uuid import UUID
from datetime import datetime
from pydantic import BaseModel, Field


class BaseSchema(BaseModel):
    class Config:
        from_attributes = True


class ChatMessageBase(BaseSchema):
    id: UUID
    text: str
    is_from_user: bool
    timestamp: datetime


class ChatMessageCreate(BaseSchema):
    """
    A message typed by the user. Clients may send their own id; posting the
    same id twice does not store the message twice.
    """

    text: str = Field(..., min_length=1)
    id: Optional[UUID] = None


class ChatReply(BaseSchema):
    user_message: ChatMessageBase
    reply: ChatMessageBase
    error: Optional[str] = None
    error_category: Optional[str] = None
