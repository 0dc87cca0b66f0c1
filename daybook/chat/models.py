import uuid
from datetime import datetime
from sqlalchemy import Boolean, Column, DateTime, String, Uuid
from daybook.core.database import Base


class ChatMessage(Base):
    __tablename__ = "chat_messages"

    id = Column(Uuid(as_uuid=True), primary_key=True, index=True, default=uuid.uuid4)
    text = Column(String, nullable=False)
    is_from_user = Column(Boolean, nullable=False, default=True)
    timestamp = Column(DateTime, nullable=False, index=True, default=datetime.now)
