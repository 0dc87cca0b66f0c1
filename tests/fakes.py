"""Scriptable stand-in for the OpenAI provider."""

import asyncio
from typing import Any, Dict, List, Optional, Sequence

from daybook.analysis.ai_providers.base import AIService, AIServiceError


class FakeAIService(AIService):
    model_tag = "fake"

    def __init__(self):
        self.summary = "You had a steady week."
        self.recommendations: List[Dict[str, Any]] = [
            {
                "icon": "pencil.and.outline",
                "title": "Journal: Wins",
                "description": "Notice what went well.",
                "actionText": "Write: 'Today I am proud of...'",
                "category": "growth",
                "priority": "high",
            }
        ]
        self.topics: List[str] = []
        self.emotions: List[str] = []
        self.error: Optional[AIServiceError] = None
        self.gates: List[Optional[asyncio.Event]] = []
        self.calls: List[str] = []
        self.chat_reply = "Thanks for sharing."
        self.chat_requests: List[Dict[str, Any]] = []

    async def _maybe_wait(self):
        if self.gates:
            gate = self.gates.pop(0)
            if gate is not None:
                await gate.wait()

    async def generate_summary(self, entries: Sequence) -> str:
        self.calls.append("summary")
        await self._maybe_wait()
        if self.error:
            raise self.error
        return f"{self.summary} ({len(entries)} entries)"

    async def generate_recommendations(self, entries: Sequence) -> List[Dict[str, Any]]:
        self.calls.append("recommendations")
        await self._maybe_wait()
        if self.error:
            raise self.error
        return list(self.recommendations)

    async def classify_topics(self, content: str, candidate_labels: Sequence[str]) -> List[str]:
        self.calls.append("topics")
        if self.error:
            raise self.error
        return [t for t in self.topics if t in candidate_labels]

    async def classify_emotions(self, content: str, candidate_labels: Sequence[str]) -> List[str]:
        self.calls.append("emotions")
        if self.error:
            raise self.error
        return [e for e in self.emotions if e in candidate_labels]

    async def generate_chat_response(self, user_message: str, context: str, previous_messages: Sequence) -> str:
        self.calls.append("chat")
        self.chat_requests.append(
            {"message": user_message, "context": context, "history": [m.text for m in previous_messages]}
        )
        if self.error:
            raise self.error
        return f"{self.chat_reply} You said: {user_message}"
