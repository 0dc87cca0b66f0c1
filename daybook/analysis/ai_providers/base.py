from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from daybook.chat.schemas import ChatMessageBase
from daybook.journals.schemas import JournalEntryBase


class AIErrorCategory(str, Enum):
    MISSING_CREDENTIAL = "missing_credential"
    MALFORMED_CREDENTIAL = "malformed_credential"
    UNAUTHORIZED = "unauthorized"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    MALFORMED_RESPONSE = "malformed_response"
    TRANSPORT_ERROR = "transport_error"


class AIServiceError(Exception):
    """Raised by AI providers; `category` tells callers what went wrong."""

    def __init__(
        self,
        category: AIErrorCategory,
        message: str,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.category = category
        self.status_code = status_code

    @property
    def is_credential_error(self) -> bool:
        return self.category in (
            AIErrorCategory.MISSING_CREDENTIAL,
            AIErrorCategory.MALFORMED_CREDENTIAL,
        )


class AIService(ABC):
    """
    Remote language-model client used for insights and classification.

    Every method either returns a result or raises AIServiceError; providers
    never retry on their own.
    """

    model_tag: str

    @abstractmethod
    async def generate_summary(self, entries: Sequence[JournalEntryBase]) -> str:
        """Short supportive summary of the given week of entries."""

    @abstractmethod
    async def generate_recommendations(
        self, entries: Sequence[JournalEntryBase]
    ) -> List[Dict[str, Any]]:
        """Raw recommendation objects as returned by the model (unvalidated)."""

    @abstractmethod
    async def classify_topics(self, content: str, candidate_labels: Sequence[str]) -> List[str]:
        """Subset of `candidate_labels` the content is about."""

    @abstractmethod
    async def classify_emotions(self, content: str, candidate_labels: Sequence[str]) -> List[str]:
        """Subset of `candidate_labels` expressed by the content."""

    @abstractmethod
    async def generate_chat_response(
        self,
        user_message: str,
        context: str,
        previous_messages: Sequence[ChatMessageBase],
    ) -> str:
        """Companion reply to `user_message`, given journal context and earlier turns."""
