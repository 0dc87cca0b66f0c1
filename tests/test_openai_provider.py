"""OpenAI provider: credential checks, error mapping and reply parsing."""

import asyncio
from datetime import datetime
from types import SimpleNamespace
from uuid import uuid4

import httpx
import openai
import pytest

from daybook.chat.schemas import ChatMessageBase
from daybook.analysis.ai_providers.base import AIErrorCategory, AIServiceError
from daybook.analysis.ai_providers.openai import (
    OpenAIAIService,
    format_entries_for_prompt,
    parse_label_list,
    strip_code_fences,
)
from daybook.analysis.topics import TOPIC_LABELS

VALID_KEY = "sk-" + "a" * 40
REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


def fake_client(reply=None, exc=None, calls=None):
    async def create(**kwargs):
        if calls is not None:
            calls.append(kwargs)
        if exc is not None:
            raise exc
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=reply))])

    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


def service_with(reply=None, exc=None, calls=None):
    service = OpenAIAIService(api_key=VALID_KEY)
    service._client = fake_client(reply, exc, calls)
    return service


def error_category(coro):
    with pytest.raises(AIServiceError) as exc:
        asyncio.run(coro)
    return exc.value.category


@pytest.mark.parametrize(
    "key, category",
    [
        ("", AIErrorCategory.MISSING_CREDENTIAL),
        ("YOUR_OPENAI_API_KEY", AIErrorCategory.MISSING_CREDENTIAL),
        ("pk-" + "a" * 40, AIErrorCategory.MALFORMED_CREDENTIAL),
        ("sk-short", AIErrorCategory.MALFORMED_CREDENTIAL),
    ],
)
def test_credentials_checked_before_any_request(key, category):
    """Bad keys fail locally without touching the network."""
    calls = []
    service = OpenAIAIService(api_key=key)
    service._client = fake_client("unused", calls=calls)
    assert error_category(service.generate_summary([])) is category
    assert calls == []


@pytest.mark.parametrize(
    "exc, category, status",
    [
        (
            openai.AuthenticationError("bad key", response=httpx.Response(401, request=REQUEST), body=None),
            AIErrorCategory.UNAUTHORIZED,
            401,
        ),
        (
            openai.RateLimitError("slow down", response=httpx.Response(429, request=REQUEST), body=None),
            AIErrorCategory.RATE_LIMITED,
            429,
        ),
        (
            openai.InternalServerError("boom", response=httpx.Response(503, request=REQUEST), body=None),
            AIErrorCategory.SERVER_ERROR,
            503,
        ),
        (openai.APIConnectionError(request=REQUEST), AIErrorCategory.TRANSPORT_ERROR, None),
    ],
)
def test_sdk_errors_are_categorized(exc, category, status):
    """SDK exceptions map onto the provider error categories."""
    service = service_with(exc=exc)
    with pytest.raises(AIServiceError) as err:
        asyncio.run(service.generate_summary([]))
    assert err.value.category is category
    assert err.value.status_code == status


def test_summary_uses_configured_limits():
    """Summary requests carry the model, token limit and temperature."""
    calls = []
    service = service_with(reply="  A warm summary.  ", calls=calls)
    assert asyncio.run(service.generate_summary([])) == "A warm summary."
    assert calls[0]["model"] == service.model
    assert calls[0]["max_tokens"] == service.max_tokens
    assert calls[0]["temperature"] == service.temperature


def test_empty_reply_is_malformed():
    """A blank completion is a malformed response."""
    service = service_with(reply="   ")
    assert error_category(service.generate_summary([])) is AIErrorCategory.MALFORMED_RESPONSE


def test_recommendations_strip_code_fences():
    """Fenced JSON arrays are decoded."""
    reply = '```json\n[{"title": "Breathe", "category": "mindfulness"}]\n```'
    service = service_with(reply=reply)
    assert asyncio.run(service.generate_recommendations([])) == [
        {"title": "Breathe", "category": "mindfulness"}
    ]


@pytest.mark.parametrize("reply", ['{"title": "not a list"}', "no json here", '["a", "b"]'])
def test_recommendations_reject_non_arrays(reply):
    """Only an array of objects is accepted."""
    service = service_with(reply=reply)
    assert error_category(service.generate_recommendations([])) is AIErrorCategory.MALFORMED_RESPONSE


def test_topic_classification_filters_labels():
    """Unknown labels and 'None' are dropped, duplicates collapse."""
    calls = []
    service = service_with(reply="Work & Career, Astrology, Work & Career, None", calls=calls)
    topics = asyncio.run(service.classify_topics("deadline at work", TOPIC_LABELS))
    assert topics == ["Work & Career"]
    assert calls[0]["max_tokens"] == 50
    assert calls[0]["temperature"] == 0.3


def test_parse_label_list_none_reply():
    """'None' means no labels."""
    assert parse_label_list("None", ["Tired"]) == []
    assert parse_label_list(" Tired ,Grateful", ["Tired", "Grateful"]) == ["Tired", "Grateful"]


def test_strip_code_fences_plain_text():
    """Unfenced replies pass through trimmed."""
    assert strip_code_fences("  [1]  ") == "[1]"


def test_prompt_lists_entry_content(make_entry):
    """Mood, emotions and answers are rendered for the model."""
    entry = make_entry(
        datetime(2025, 6, 14, 20, 0),
        3.0,
        mood_emoji="😄",
        emotion_tags=["Grateful"],
        questions=[{"question": "Best moment?", "answer": "Dinner", "timestamp": datetime(2025, 6, 14, 20, 0)}],
    )
    text = format_entries_for_prompt([entry])
    assert "--- Entry 1 ---" in text
    assert "Date: Jun 14, 2025" in text
    assert "Mood: 😄 (3.0/4.0)" in text
    assert "Emotions: Grateful" in text
    assert "Q: Best moment?\nA: Dinner" in text


def test_chat_sends_context_and_recent_history():
    """The companion sees the journal context, the last ten turns and the new message."""
    calls = []
    service = service_with("That sounds hard. What helped?", calls=calls)
    history = [
        ChatMessageBase(id=uuid4(), text=f"message {i}", is_from_user=i % 2 == 0, timestamp=datetime(2025, 6, 1, 9, i))
        for i in range(12)
    ]

    reply = asyncio.run(service.generate_chat_response("I felt tired today", "Mood was low", history))

    assert reply == "That sounds hard. What helped?"
    messages = calls[0]["messages"]
    assert messages[0]["role"] == "system"
    assert "Mood was low" in messages[0]["content"]
    assert [m["content"] for m in messages[1:-1]] == [f"message {i}" for i in range(2, 12)]
    assert messages[1]["role"] == "user"
    assert messages[2]["role"] == "assistant"
    assert messages[-1] == {"role": "user", "content": "I felt tired today"}
    assert calls[0]["max_tokens"] == 300
    assert calls[0]["temperature"] == 0.8


def test_chat_without_key_fails_fast():
    """A missing key is reported before any request is made."""
    service = OpenAIAIService(api_key="")
    assert error_category(service.generate_chat_response("hi", "", [])) is AIErrorCategory.MISSING_CREDENTIAL
