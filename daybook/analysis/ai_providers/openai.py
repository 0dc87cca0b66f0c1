from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

import openai
from openai import AsyncOpenAI

from daybook.core.config import (
    OPENAI_API_KEY,
    OPENAI_CHAT_MODEL,
    OPENAI_MAX_TOKENS,
    OPENAI_RECOMMENDATION_MAX_TOKENS,
    OPENAI_TEMPERATURE,
    OPENAI_TIMEOUT_SECONDS,
)
from daybook.chat.schemas import ChatMessageBase
from daybook.journals.schemas import JournalEntryBase
from daybook.analysis.ai_providers.base import AIErrorCategory, AIService, AIServiceError
import daybook.analysis.prompts.openai_prompts_templates as prompts

logger = logging.getLogger(__name__)

API_KEY_PLACEHOLDER = "YOUR_OPENAI_API_KEY"


def strip_code_fences(raw: str) -> str:
    """Removes ```json / ``` markdown fences around a model reply."""
    return raw.replace("```json", "").replace("```", "").strip()


def format_entries_for_prompt(entries: Sequence[JournalEntryBase]) -> str:
    """
    Renders entries as the plain-text block sent to the model.

    Args:
        entries (Sequence[JournalEntryBase]): Entries of the insight window.

    Returns:
        str: One "--- Entry N ---" section per entry.
    """
    lines: List[str] = []
    for index, entry in enumerate(entries, start=1):
        lines.append(f"--- Entry {index} ---")
        lines.append(f"Date: {entry.date.strftime('%b %d, %Y')}")
        if entry.mood_value > 0:
            lines.append(f"Mood: {entry.mood_emoji or '🙂'} ({entry.mood_value:.1f}/4.0)")
        if entry.emotion_tags:
            lines.append(f"Emotions: {', '.join(entry.emotion_tags)}")
        if entry.why_text:
            lines.append(f"Why they felt this way: {entry.why_text}")
        if entry.why_tags:
            lines.append(f"Context tags: {', '.join(entry.why_tags)}")
        if entry.questions:
            lines.append("Questions & Answers:")
            for qa in entry.questions:
                lines.append(f"Q: {qa.question}")
                lines.append(f"A: {qa.answer}")
        if entry.journal_text:
            lines.append(f"Journal entry: {entry.journal_text}")
        if entry.reflection_response:
            lines.append(f"Reflection: {entry.reflection_response}")
        lines.append("")
    return "\n".join(lines)


def parse_label_list(raw: str, candidate_labels: Sequence[str]) -> List[str]:
    """
    Parses a comma-separated label reply, keeping only known labels.

    Args:
        raw (str): Model reply, e.g. "Work & Career, Stress & Anxiety".
        candidate_labels (Sequence[str]): Labels the model was allowed to pick.

    Returns:
        List[str]: Known labels in reply order, without duplicates.
    """
    allowed = set(candidate_labels)
    labels: List[str] = []
    for part in raw.split(","):
        label = part.strip()
        if not label or label.lower() == "none":
            continue
        if label in allowed and label not in labels:
            labels.append(label)
    return labels


class OpenAIAIService(AIService):
    model_tag = "chatgpt"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: int = OPENAI_MAX_TOKENS,
        temperature: float = OPENAI_TEMPERATURE,
        timeout: float = OPENAI_TIMEOUT_SECONDS,
    ):
        self.api_key = OPENAI_API_KEY if api_key is None else api_key
        self.model = model or OPENAI_CHAT_MODEL
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout
        self._client: Optional[AsyncOpenAI] = None

    def _check_credentials(self) -> str:
        key = (self.api_key or "").strip()
        if not key or key == API_KEY_PLACEHOLDER:
            raise AIServiceError(
                AIErrorCategory.MISSING_CREDENTIAL, "OpenAI API key is not configured"
            )
        if not key.startswith("sk-") or len(key) <= 20:
            raise AIServiceError(
                AIErrorCategory.MALFORMED_CREDENTIAL, "OpenAI API key format is invalid"
            )
        return key

    def _get_client(self, key: str) -> AsyncOpenAI:
        if self._client is None:
            # Retries are left to the caller
            self._client = AsyncOpenAI(api_key=key, timeout=self.timeout, max_retries=0)
        return self._client

    async def _chat(
        self,
        messages: List[Dict[str, str]],
        *,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> str:
        """
        Runs a chat completion and returns the stripped text of the first choice.

        Raises:
            AIServiceError: For credential, HTTP, transport or empty-reply failures.
        """
        key = self._check_credentials()
        try:
            resp = await self._get_client(key).chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=max_tokens or self.max_tokens,
                temperature=self.temperature if temperature is None else temperature,
            )
        except openai.AuthenticationError as e:
            logger.warning(f"OpenAI rejected the API key: {e}")
            raise AIServiceError(AIErrorCategory.UNAUTHORIZED, "Invalid API key", 401) from e
        except openai.RateLimitError as e:
            logger.warning(f"OpenAI rate limit hit: {e}")
            raise AIServiceError(AIErrorCategory.RATE_LIMITED, "Rate limit exceeded", 429) from e
        except openai.APIStatusError as e:
            logger.warning(f"OpenAI returned status {e.status_code}: {e}")
            raise AIServiceError(
                AIErrorCategory.SERVER_ERROR,
                f"API error with status code: {e.status_code}",
                e.status_code,
            ) from e
        except openai.APIConnectionError as e:
            logger.warning(f"OpenAI request failed: {e}")
            raise AIServiceError(AIErrorCategory.TRANSPORT_ERROR, f"Network error: {e}") from e

        try:
            content = resp.choices[0].message.content
        except (AttributeError, IndexError) as e:
            raise AIServiceError(
                AIErrorCategory.MALFORMED_RESPONSE, "Invalid response from OpenAI API"
            ) from e
        if not content or not content.strip():
            raise AIServiceError(
                AIErrorCategory.MALFORMED_RESPONSE, "Empty response from OpenAI API"
            )
        return content.strip()

    async def generate_summary(self, entries: Sequence[JournalEntryBase]) -> str:
        if entries:
            user_prompt = (
                prompts.SUMMARY_INTRO + format_entries_for_prompt(entries) + prompts.SUMMARY_INSTRUCTIONS
            )
        else:
            user_prompt = prompts.SUMMARY_EMPTY_WEEK_PROMPT

        return await self._chat(
            [
                {"role": "system", "content": prompts.SUMMARY_SYSTEM_PROMPT},
                {"role": "user", "content": user_prompt},
            ]
        )

    async def generate_recommendations(
        self, entries: Sequence[JournalEntryBase]
    ) -> List[Dict[str, Any]]:
        if entries:
            user_prompt = (
                prompts.RECOMMENDATIONS_INTRO
                + format_entries_for_prompt(entries)
                + prompts.RECOMMENDATIONS_INSTRUCTIONS
            )
        else:
            user_prompt = prompts.RECOMMENDATIONS_EMPTY_WEEK_PROMPT

        raw = await self._chat(
            [
                {"role": "system", "content": prompts.RECOMMENDATIONS_SYSTEM_PROMPT},
                {"role": "user", "content": user_prompt},
            ],
            max_tokens=OPENAI_RECOMMENDATION_MAX_TOKENS,
        )

        try:
            data = json.loads(strip_code_fences(raw))
        except json.JSONDecodeError as e:
            logger.warning(f"Recommendations reply is not valid JSON: {e}")
            raise AIServiceError(
                AIErrorCategory.MALFORMED_RESPONSE, "Failed to parse recommendations JSON"
            ) from e

        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            raise AIServiceError(
                AIErrorCategory.MALFORMED_RESPONSE, "Recommendations reply is not a JSON array of objects"
            )
        return data

    async def classify_topics(self, content: str, candidate_labels: Sequence[str]) -> List[str]:
        raw = await self._chat(
            [
                {
                    "role": "user",
                    "content": prompts.TOPIC_CLASSIFICATION_TEMPLATE.format(
                        labels=", ".join(candidate_labels), content=content
                    ),
                }
            ],
            max_tokens=prompts.TOPIC_CLASSIFICATION_MAX_TOKENS,
            temperature=prompts.TOPIC_CLASSIFICATION_TEMPERATURE,
        )
        return parse_label_list(raw, candidate_labels)

    async def classify_emotions(self, content: str, candidate_labels: Sequence[str]) -> List[str]:
        raw = await self._chat(
            [
                {
                    "role": "user",
                    "content": prompts.EMOTION_CLASSIFICATION_TEMPLATE.format(
                        labels=", ".join(candidate_labels), content=content
                    ),
                }
            ],
            max_tokens=prompts.EMOTION_CLASSIFICATION_MAX_TOKENS,
            temperature=prompts.EMOTION_CLASSIFICATION_TEMPERATURE,
        )
        return parse_label_list(raw, candidate_labels)

    async def generate_chat_response(
        self,
        user_message: str,
        context: str,
        previous_messages: Sequence[ChatMessageBase],
    ) -> str:
        messages = [{"role": "system", "content": prompts.CHAT_SYSTEM_PROMPT.format(context=context)}]
        for message in list(previous_messages)[-prompts.CHAT_HISTORY_LIMIT:]:
            messages.append(
                {"role": "user" if message.is_from_user else "assistant", "content": message.text}
            )
        messages.append({"role": "user", "content": user_message})

        return await self._chat(
            messages,
            max_tokens=prompts.CHAT_MAX_TOKENS,
            temperature=prompts.CHAT_TEMPERATURE,
        )
