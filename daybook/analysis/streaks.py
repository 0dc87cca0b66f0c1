import datetime
from typing import Sequence, Set

from daybook.journals.schemas import JournalEntryBase
from daybook.analysis.schemas import StreakStats


def is_entry_completed(entry: JournalEntryBase) -> bool:
    """
    An entry counts towards streaks once the user actually wrote something,
    answered a question, or logged a mood together with emotions.
    """
    if (entry.journal_text or "").strip():
        return True
    if (entry.reflection_response or "").strip():
        return True
    if entry.questions:
        return True
    return entry.mood_value > 0 and bool(entry.emotion_tags)


def completed_days(entries: Sequence[JournalEntryBase]) -> Set[datetime.date]:
    return {e.date.date() for e in entries if is_entry_completed(e)}


def current_streak(entries: Sequence[JournalEntryBase], today: datetime.date) -> int:
    """
    Counts consecutive completed days ending today or yesterday.

    An incomplete today is skipped once without counting, so the streak
    survives until the day is over. Any other gap ends the walk.

    Args:
        entries (Sequence[JournalEntryBase]): All entries.
        today (date): Current local calendar day.

    Returns:
        int: Length of the running streak.
    """
    days = completed_days(entries)
    streak = 0
    day = today
    checked_today = False

    while True:
        if day in days:
            streak += 1
        elif day == today and not checked_today:
            pass
        else:
            break
        checked_today = True
        day -= datetime.timedelta(days=1)

    return streak


def longest_streak(entries: Sequence[JournalEntryBase]) -> int:
    """
    Longest run of consecutive completed days in the whole history.

    Args:
        entries (Sequence[JournalEntryBase]): All entries.

    Returns:
        int: Longest run length, 0 without completed days.
    """
    days = sorted(completed_days(entries))
    if not days:
        return 0

    longest = 1
    run = 1
    for previous, current in zip(days, days[1:]):
        if current - previous == datetime.timedelta(days=1):
            run += 1
        else:
            longest = max(longest, run)
            run = 1
    return max(longest, run)


def journaling_days_this_month(entries: Sequence[JournalEntryBase], today: datetime.date) -> int:
    return len(
        [d for d in completed_days(entries) if d.year == today.year and d.month == today.month]
    )


def streak_stats(entries: Sequence[JournalEntryBase], today: datetime.date) -> StreakStats:
    return StreakStats(
        current_streak=current_streak(entries, today),
        longest_streak=longest_streak(entries),
        journaling_days_this_month=journaling_days_this_month(entries, today),
    )
