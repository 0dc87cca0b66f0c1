from typing import Dict, List, Sequence
from uuid import UUID

from daybook.journals.schemas import JournalEntryBase
from daybook.analysis.schemas import TopicCluster

MIN_ENTRIES = 3
MIN_KEYWORD_MATCHES = 2
MIN_CLUSTER_SIZE = 2

# Order matters: clusters with equal counts are reported in this order.
TOPIC_KEYWORDS: Dict[str, List[str]] = {
    "Self-worth": [
        "confidence", "self", "worth", "value", "doubt", "insecure", "proud",
        "accomplished", "failure", "success", "achievement", "validation",
        "approval", "criticism", "judgment",
    ],
    "Relationships": [
        "friend", "family", "love", "relationship", "partner", "boyfriend",
        "girlfriend", "husband", "wife", "parent", "mother", "father", "sibling",
        "conflict", "argument", "support", "connection", "lonely", "social",
        "together",
    ],
    "Work & Career": [
        "work", "job", "career", "boss", "colleague", "meeting", "project",
        "deadline", "promotion", "salary", "office", "business", "professional",
        "interview", "performance", "stress", "burnout", "productivity",
    ],
    "Health & Wellness": [
        "health", "exercise", "workout", "gym", "diet", "nutrition", "sleep",
        "tired", "energy", "sick", "doctor", "medicine", "therapy", "mental",
        "physical", "wellness", "self-care", "meditation", "yoga",
    ],
    "Personal Growth": [
        "learn", "growth", "develop", "improve", "change", "goal", "habit",
        "progress", "challenge", "overcome", "resilience", "mindset",
        "perspective", "wisdom", "insight", "reflection", "journey",
        "transformation",
    ],
    "Stress & Anxiety": [
        "stress", "anxiety", "worry", "nervous", "panic", "overwhelmed",
        "pressure", "tension", "fear", "anxious", "concerned", "troubled",
        "restless", "uneasy", "burden", "struggle",
    ],
    "Gratitude & Joy": [
        "grateful", "thankful", "appreciate", "blessing", "joy", "happy",
        "celebration", "positive", "wonderful", "amazing", "beautiful", "love",
        "smile", "laugh", "content", "peaceful", "blessed",
    ],
    "Future & Goals": [
        "future", "plan", "goal", "dream", "aspiration", "hope", "vision",
        "ambition", "tomorrow", "next", "upcoming", "potential", "possibility",
        "opportunity", "direction", "path", "purpose",
    ],
}

TOPIC_LABELS: List[str] = list(TOPIC_KEYWORDS)


def entry_text(entry: JournalEntryBase) -> str:
    return " ".join(
        [entry.journal_text or "", entry.reflection_response or "", entry.why_text or ""]
    ).lower()


def matching_topics(entry: JournalEntryBase) -> List[str]:
    """Topics whose keywords appear at least twice (as substrings) in the entry's text."""
    text = entry_text(entry)
    return [
        topic
        for topic, keywords in TOPIC_KEYWORDS.items()
        if sum(1 for keyword in keywords if keyword in text) >= MIN_KEYWORD_MATCHES
    ]


def tagline(count: int) -> str:
    return f"You wrote about this {count} {'time' if count == 1 else 'times'}."


def get_topic_clusters(entries: Sequence[JournalEntryBase]) -> List[TopicCluster]:
    """
    Groups entries into recurring themes by keyword matching.

    An entry may land in several topics. A topic is only reported once two
    distinct entries mention it, and nothing is reported for fewer than three
    entries overall.

    Args:
        entries (Sequence[JournalEntryBase]): Entries to cluster.

    Returns:
        List[TopicCluster]: Clusters sorted by entry count, largest first.
    """
    if len(entries) < MIN_ENTRIES:
        return []

    grouped: Dict[str, Dict[UUID, JournalEntryBase]] = {topic: {} for topic in TOPIC_KEYWORDS}
    for entry in entries:
        for topic in matching_topics(entry):
            grouped[topic][entry.id] = entry

    clusters = []
    for topic, members in grouped.items():
        if len(members) < MIN_CLUSTER_SIZE:
            continue
        ordered = sorted(members.values(), key=lambda e: e.date, reverse=True)
        clusters.append(
            TopicCluster(
                title=topic,
                entry_count=len(ordered),
                entries=ordered,
                tagline=tagline(len(ordered)),
            )
        )

    # sorted() is stable, so equal counts keep the topic order
    return sorted(clusters, key=lambda c: c.entry_count, reverse=True)
