from typing import Any, Dict, List, Sequence

from daybook.journals.schemas import JournalEntryBase
from daybook.analysis.mood import average_mood
from daybook.analysis.schemas import (
    AIRecommendation,
    RecommendationCategory,
    RecommendationPriority,
)
import daybook.analysis.prompts.openai_prompts_templates as prompts

RECOMMENDATION_COUNT = 3
LOW_MOOD_THRESHOLD = 2.0


def entry_fingerprint(entry: JournalEntryBase) -> str:
    parts = [
        entry.date.isoformat(),
        repr(entry.mood_value),
        entry.mood_emoji or "",
        ",".join(entry.emotion_tags),
        entry.why_text or "",
        ",".join(entry.why_tags),
        entry.journal_text or "",
        entry.reflection_response or "",
    ]
    for qa in entry.questions:
        parts.append(qa.question)
        parts.append(qa.answer)
    return "|".join(parts)


def compute_fingerprint(entries: Sequence[JournalEntryBase]) -> str:
    """
    Deterministic content key of an insight window.

    Any change to a field that feeds the AI prompt changes the key, so an
    unchanged key means a new AI call would see exactly the same input.

    Args:
        entries (Sequence[JournalEntryBase]): Entries of the window, in store order.

    Returns:
        str: The fingerprint ("" for an empty window).
    """
    return "||".join(entry_fingerprint(e) for e in entries)


def _string_field(item: Dict[str, Any], key: str, default: str) -> str:
    value = item.get(key)
    return value if isinstance(value, str) else default


def parse_recommendations(raw: Sequence[Dict[str, Any]]) -> List[AIRecommendation]:
    """
    Turns raw model objects into exactly three recommendations.

    Missing or non-string fields fall back to defaults, unknown categories
    become "growth", unknown priorities "medium". Extra items are dropped and
    short replies are padded with a generic journaling reflection.

    Args:
        raw (Sequence[Dict[str, Any]]): Objects decoded from the model reply.

    Returns:
        List[AIRecommendation]: Three recommendations.
    """
    defaults = prompts.DEFAULT_RECOMMENDATION_FIELDS
    recommendations: List[AIRecommendation] = []

    for index, item in enumerate(raw[:RECOMMENDATION_COUNT]):
        recommendations.append(
            AIRecommendation(
                icon=_string_field(item, "icon", defaults["icon"]),
                title=_string_field(item, "title", defaults["title"].format(number=index + 1)),
                description=_string_field(item, "description", defaults["description"]),
                action_text=_string_field(item, "actionText", defaults["actionText"]),
                category=RecommendationCategory.from_label(
                    _string_field(item, "category", defaults["category"])
                ),
                priority=RecommendationPriority.from_raw(
                    _string_field(item, "priority", defaults["priority"])
                ),
            )
        )

    while len(recommendations) < RECOMMENDATION_COUNT:
        recommendations.append(AIRecommendation(**prompts.PADDING_RECOMMENDATION))

    return recommendations


def fallback_summary(entries: Sequence[JournalEntryBase]) -> str:
    """
    Deterministic weekly summary used whenever the AI summary is unavailable.

    Args:
        entries (Sequence[JournalEntryBase]): Entries of the window.

    Returns:
        str: Human-readable summary.
    """
    if not entries:
        return prompts.FALLBACK_SUMMARY_EMPTY

    mood = average_mood(entries)
    if len(entries) == 1:
        return prompts.FALLBACK_SUMMARY_SINGLE.format(mood=mood)

    if mood >= 3.0:
        band = "positive"
    elif mood >= 2.0:
        band = "balanced"
    else:
        band = "challenging"
    return prompts.FALLBACK_SUMMARY_MULTIPLE.format(count=len(entries), mood=mood, band=band)


def fallback_recommendations(entries: Sequence[JournalEntryBase]) -> List[AIRecommendation]:
    if average_mood(entries) < LOW_MOOD_THRESHOLD:
        chosen = prompts.LOW_MOOD_RECOMMENDATIONS
    else:
        chosen = prompts.STABLE_MOOD_RECOMMENDATIONS
    return [AIRecommendation(**item) for item in chosen]


def motivational_message(total_entries: int) -> str:
    if total_entries <= 0:
        return prompts.MOTIVATION_NO_ENTRIES
    if total_entries <= 3:
        return prompts.MOTIVATION_GETTING_STARTED
    if total_entries <= 10:
        return prompts.MOTIVATION_BUILDING
    if total_entries <= 30:
        return prompts.MOTIVATION_ESTABLISHED
    return prompts.MOTIVATION_SEASONED
