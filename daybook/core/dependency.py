from functools import lru_cache
from daybook.core.database import SessionLocal
from daybook.analysis.ai_providers.base import AIService
from daybook.analysis.ai_providers.openai import OpenAIAIService
from daybook.analysis.service import InsightOrchestrator
from daybook.journals.service import make_entry_loader
import logging

logger = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def _chatgpt() -> AIService:
    return OpenAIAIService()


@lru_cache(maxsize=None)
def _orchestrator() -> InsightOrchestrator:
    logger.info("Creating insight orchestrator")
    return InsightOrchestrator(_chatgpt(), make_entry_loader(SessionLocal))


def get_ai_service() -> AIService:
    """
    FastAPI dependency returning the shared AI provider.
    """
    return _chatgpt()


def get_session_factory():
    """
    FastAPI dependency returning the session factory used by background jobs,
    which outlive the request-scoped session.
    """
    return SessionLocal


def get_orchestrator() -> InsightOrchestrator:
    """
    FastAPI dependency returning the process-wide insight orchestrator.
    """
    return _orchestrator()
