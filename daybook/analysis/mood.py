import math
import datetime
from collections import Counter
from typing import List, Sequence

from daybook.journals.schemas import JournalEntryBase
from daybook.analysis.schemas import MoodTrend

NEUTRAL_MOOD = 2.0
MOOD_EMOJIS = ["😔", "😐", "🙂", "😄", "🤩"]

VARIABILITY_THRESHOLD = 1.5
TREND_DELTA = 0.5


def _valid_moods(entries: Sequence[JournalEntryBase]) -> List[float]:
    return [e.mood_value for e in entries if math.isfinite(e.mood_value) and e.mood_value > 0]


def _in_window(
    entries: Sequence[JournalEntryBase],
    start: datetime.datetime,
    end: datetime.datetime,
    include_end: bool = True,
) -> List[JournalEntryBase]:
    if include_end:
        return [e for e in entries if start <= e.date <= end]
    return [e for e in entries if start <= e.date < end]


def average_mood(entries: Sequence[JournalEntryBase]) -> float:
    """
    Mean mood over entries with a recorded, finite mood.

    Args:
        entries (Sequence[JournalEntryBase]): Entries to average.

    Returns:
        float: Mean mood, or 2.0 (neutral) when nothing usable remains.
    """
    moods = _valid_moods(entries)
    if not moods:
        return NEUTRAL_MOOD
    total = sum(moods)
    if not math.isfinite(total):
        return NEUTRAL_MOOD
    average = total / len(moods)
    return average if math.isfinite(average) else NEUTRAL_MOOD


def average_mood_for_period(
    entries: Sequence[JournalEntryBase], days: int, now: datetime.datetime
) -> float:
    start = now - datetime.timedelta(days=days)
    return average_mood(_in_window(entries, start, now))


def mood_variability(
    entries: Sequence[JournalEntryBase], days: int, now: datetime.datetime
) -> float:
    """
    Population standard deviation of moods dated within [now - days, now].

    Args:
        entries (Sequence[JournalEntryBase]): Candidate entries.
        days (int): Window length in days.
        now (datetime): End of the window.

    Returns:
        float: Standard deviation, or 0.0 with fewer than two moods or on
        any non-finite intermediate.
    """
    start = now - datetime.timedelta(days=days)
    moods = _valid_moods(_in_window(entries, start, now))
    if len(moods) < 2:
        return 0.0

    mean = sum(moods) / len(moods)
    if not math.isfinite(mean):
        return 0.0
    variance = sum((m - mean) ** 2 for m in moods) / len(moods)
    if not math.isfinite(variance):
        return 0.0
    deviation = math.sqrt(variance)
    return deviation if math.isfinite(deviation) else 0.0


def classify_trend(entries: Sequence[JournalEntryBase], now: datetime.datetime) -> MoodTrend:
    """
    Compares the last 7 days against the 7 days before them.

    Volatility wins over direction: a week swinging by more than 1.5 points
    is "mixed" whatever its average did.

    Args:
        entries (Sequence[JournalEntryBase]): Entries covering at least the last 14 days.
        now (datetime): Reference instant.

    Returns:
        MoodTrend: positive, neutral, challenging or mixed.
    """
    diff = average_mood_for_period(entries, 7, now) - previous_week_average(entries, now)
    variability = mood_variability(entries, 7, now)

    if variability > VARIABILITY_THRESHOLD:
        return MoodTrend.MIXED
    if diff >= TREND_DELTA:
        return MoodTrend.POSITIVE
    if diff <= -TREND_DELTA:
        return MoodTrend.CHALLENGING
    return MoodTrend.NEUTRAL


def previous_week_average(entries: Sequence[JournalEntryBase], now: datetime.datetime) -> float:
    week_ago = now - datetime.timedelta(days=7)
    two_weeks_ago = now - datetime.timedelta(days=14)
    return average_mood(_in_window(entries, two_weeks_ago, week_ago, include_end=False))


def most_common_emotions(entries: Sequence[JournalEntryBase], limit: int = 5) -> List[str]:
    """Emotion tags ranked by how many times they were recorded."""
    counts = Counter(tag for e in entries for tag in e.emotion_tags)
    return [tag for tag, _ in counts.most_common(limit)]


def recent_common_emotions(
    entries: Sequence[JournalEntryBase],
    now: datetime.datetime,
    days: int = 30,
    limit: int = 5,
) -> List[str]:
    start = now - datetime.timedelta(days=days)
    return most_common_emotions([e for e in entries if e.date >= start], limit)


def mood_emoji_for(value: float) -> str:
    if not math.isfinite(value):
        value = NEUTRAL_MOOD
    index = int(min(max(value, 0.0), 4.0))
    return MOOD_EMOJIS[index]
