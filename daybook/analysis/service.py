import asyncio
import datetime
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from fastapi.concurrency import run_in_threadpool

from daybook.core.config import INSIGHT_WINDOW_DAYS
from daybook.journals.schemas import JournalEntryBase
from daybook.analysis.ai_providers.base import AIService, AIServiceError
from daybook.analysis.insights import (
    compute_fingerprint,
    fallback_recommendations,
    fallback_summary,
    motivational_message,
    parse_recommendations,
)
from daybook.analysis.mood import (
    average_mood_for_period,
    classify_trend,
    mood_emoji_for,
    mood_variability,
    most_common_emotions,
    previous_week_average,
)
from daybook.analysis.schemas import (
    InsightsOverview,
    InsightSnapshot,
    InsightStatus,
    MoodStats,
)
from daybook.analysis.streaks import streak_stats
import daybook.analysis.prompts.openai_prompts_templates as prompts

logger = logging.getLogger(__name__)

SUMMARY = "summary"
RECOMMENDATIONS = "recommendations"
SURFACES = (SUMMARY, RECOMMENDATIONS)

EntryLoader = Callable[[datetime.datetime, datetime.datetime], List[JournalEntryBase]]


class InsightSurface:
    """Cached state of one AI-backed insight."""

    def __init__(self, name: str):
        self.name = name
        self.status = InsightStatus.IDLE
        self.content: Any = None
        self.fingerprint: Optional[str] = None
        self.message: Optional[str] = None
        self.error: Optional[str] = None
        self.error_category: Optional[str] = None
        self.updated_at: Optional[datetime.datetime] = None
        self.generation = 0
        self.task: Optional[asyncio.Task] = None

    def snapshot(self) -> InsightSnapshot:
        return InsightSnapshot(
            surface=self.name,
            status=self.status,
            content=self.content,
            message=self.message,
            error=self.error,
            error_category=self.error_category,
            updated_at=self.updated_at,
        )


class InsightOrchestrator:
    """
    Decides when AI insights are (re)generated and what users see meanwhile.

    Each surface moves idle -> loading -> ready | error. A surface is generated
    once on first view; afterwards only a refresh whose window fingerprint
    differs from the cached one triggers a new AI call. Failures are never
    retried: the surface switches to its deterministic fallback. When several
    generations overlap, only the latest one may write its result.
    """

    def __init__(
        self,
        ai_service: AIService,
        entry_loader: EntryLoader,
        window_days: int = INSIGHT_WINDOW_DAYS,
        clock: Callable[[], datetime.datetime] = datetime.datetime.now,
    ):
        self.ai_service = ai_service
        self.entry_loader = entry_loader
        self.window_days = window_days
        self.clock = clock
        self.surfaces: Dict[str, InsightSurface] = {name: InsightSurface(name) for name in SURFACES}
        self._dispatch_lock = asyncio.Lock()

    def _surface(self, name: str) -> InsightSurface:
        try:
            return self.surfaces[name]
        except KeyError:
            raise ValueError(f"Unknown insight surface '{name}'") from None

    async def load_window(self) -> List[JournalEntryBase]:
        """Loads the insight window in the threadpool, off the event loop."""
        now = self.clock()
        return await run_in_threadpool(
            self.entry_loader, now - datetime.timedelta(days=self.window_days), now
        )

    def snapshot(self, name: str) -> InsightSnapshot:
        return self._surface(name).snapshot()

    async def open_surface(self, name: str) -> InsightSnapshot:
        """
        Returns the surface state, generating it if this is the first view.

        Args:
            name (str): "summary" or "recommendations".

        Returns:
            InsightSnapshot: Current state (loading right after a dispatch).
        """
        surface = self._surface(name)
        async with self._dispatch_lock:
            if surface.status is InsightStatus.IDLE:
                entries = await self.load_window()
                self._dispatch(surface, entries, compute_fingerprint(entries))
        return surface.snapshot()

    async def refresh(self, name: str) -> Optional[asyncio.Task]:
        """
        Regenerates a surface if its window content changed.

        Args:
            name (str): "summary" or "recommendations".

        Returns:
            Optional[asyncio.Task]: The dispatched generation, or None on a cache hit.
        """
        surface = self._surface(name)
        # Dispatch order must match load order
        async with self._dispatch_lock:
            entries = await self.load_window()
            fingerprint = compute_fingerprint(entries)

            if surface.status is not InsightStatus.IDLE and fingerprint == surface.fingerprint:
                logger.info(f"Insight '{name}' is up to date; skipping AI call")
                return None
            return self._dispatch(surface, entries, fingerprint)

    async def refresh_summary(self) -> Optional[asyncio.Task]:
        return await self.refresh(SUMMARY)

    async def refresh_recommendations(self) -> Optional[asyncio.Task]:
        return await self.refresh(RECOMMENDATIONS)

    async def on_data_changed(self) -> None:
        """Refreshes every surface that has already been viewed."""
        for name, surface in self.surfaces.items():
            if surface.status is not InsightStatus.IDLE:
                await self.refresh(name)

    async def wait(self, name: str) -> InsightSnapshot:
        """Waits until no generation of the surface is in flight, including ones dispatched meanwhile."""
        surface = self._surface(name)
        while surface.task is not None and not surface.task.done():
            await asyncio.shield(surface.task)
        return surface.snapshot()

    async def aclose(self) -> None:
        pending = [s.task for s in self.surfaces.values() if s.task and not s.task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    def _dispatch(
        self, surface: InsightSurface, entries: Sequence[JournalEntryBase], fingerprint: str
    ) -> asyncio.Task:
        surface.generation += 1
        surface.fingerprint = fingerprint
        surface.status = InsightStatus.LOADING
        logger.info(
            f"Generating insight '{surface.name}' from {len(entries)} entries "
            f"(generation {surface.generation})"
        )
        surface.task = asyncio.create_task(
            self._generate(surface, surface.generation, list(entries))
        )
        return surface.task

    async def _call_ai(self, name: str, entries: List[JournalEntryBase]) -> Any:
        if name == SUMMARY:
            return await self.ai_service.generate_summary(entries)
        raw = await self.ai_service.generate_recommendations(entries)
        return parse_recommendations(raw)

    def _fallback(self, name: str, entries: List[JournalEntryBase]) -> Any:
        if name == SUMMARY:
            return fallback_summary(entries)
        return fallback_recommendations(entries)

    async def _generate(
        self, surface: InsightSurface, generation: int, entries: List[JournalEntryBase]
    ) -> None:
        try:
            content = await self._call_ai(surface.name, entries)
        except AIServiceError as e:
            if generation != surface.generation:
                logger.info(f"Discarding stale failure for insight '{surface.name}'")
                return
            logger.warning(
                f"AI {surface.name} failed ({e.category.value}): {e}. Falling back to local insight."
            )
            self._set_error(surface, entries, str(e), e.category.value, e.is_credential_error)
            return
        except Exception as e:
            if generation != surface.generation:
                return
            logger.exception(f"Unexpected error generating insight '{surface.name}': {e}")
            self._set_error(surface, entries, str(e), None, False)
            return

        if generation != surface.generation:
            logger.info(f"Discarding stale result for insight '{surface.name}'")
            return
        surface.status = InsightStatus.READY
        surface.content = content
        surface.message = None
        surface.error = None
        surface.error_category = None
        surface.updated_at = self.clock()

    def _set_error(
        self,
        surface: InsightSurface,
        entries: List[JournalEntryBase],
        error: str,
        category: Optional[str],
        credential_error: bool,
    ) -> None:
        surface.status = InsightStatus.ERROR
        surface.content = self._fallback(surface.name, entries)
        surface.message = (
            prompts.MISSING_KEY_MESSAGE if credential_error else prompts.SUMMARY_UNAVAILABLE_MESSAGE
        )
        surface.error = error
        surface.error_category = category
        surface.updated_at = self.clock()


def build_overview(
    entries: Sequence[JournalEntryBase], now: datetime.datetime
) -> InsightsOverview:
    """
    Collects the non-AI insight numbers shown on the insights screen.

    Args:
        entries (Sequence[JournalEntryBase]): All entries, newest first.
        now (datetime): Reference instant.

    Returns:
        InsightsOverview: Mood, streaks, emotions and counts.
    """
    week_average = average_mood_for_period(entries, 7, now)
    trend = classify_trend(entries, now)
    week_ago = now - datetime.timedelta(days=7)

    return InsightsOverview(
        mood=MoodStats(
            average_mood=week_average,
            mood_emoji=mood_emoji_for(week_average),
            previous_week_average=previous_week_average(entries, now),
            variability=mood_variability(entries, 7, now),
            trend=trend,
            trend_description=trend.description,
        ),
        streaks=streak_stats(entries, now.date()),
        common_emotions=most_common_emotions(entries),
        total_entries=len(entries),
        entries_this_week=len([e for e in entries if week_ago <= e.date <= now]),
        motivational_message=motivational_message(len(entries)),
    )
