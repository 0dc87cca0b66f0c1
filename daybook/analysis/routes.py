import datetime
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from daybook.core.database import get_db
from daybook.core.dependency import get_orchestrator
from daybook.journals.db import get_all_journals
from daybook.journals.schemas import JournalEntryBase
from daybook.analysis.mood import (
    average_mood_for_period,
    classify_trend,
    mood_emoji_for,
    mood_variability,
    most_common_emotions,
    previous_week_average,
    recent_common_emotions,
)
from daybook.analysis.schemas import (
    EmotionStats,
    InsightsOverview,
    InsightSnapshot,
    MoodStats,
    StreakStats,
    TopicCluster,
)
from daybook.analysis.service import RECOMMENDATIONS, SUMMARY, InsightOrchestrator, build_overview
from daybook.analysis.streaks import streak_stats
from daybook.analysis.topics import get_topic_clusters

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analysis", tags=["Analysis"])


def _load_entries(db: Session) -> List[JournalEntryBase]:
    return [JournalEntryBase.model_validate(e) for e in get_all_journals(db)]


@router.get(
    "/mood",
    response_model=MoodStats,
    summary="Mood trend",
    description="""
                Average mood of the last 7 days compared with the 7 days before,
                the week's variability and the resulting trend.
                """,
    responses={
        200: {"description": "Mood statistics computed."},
        500: {"description": "Failed to compute mood statistics."},
    },
)
def mood_route(db: Session = Depends(get_db)) -> MoodStats:
    try:
        entries = _load_entries(db)
        now = datetime.datetime.now()
        average = average_mood_for_period(entries, 7, now)
        trend = classify_trend(entries, now)
        return MoodStats(
            average_mood=average,
            mood_emoji=mood_emoji_for(average),
            previous_week_average=previous_week_average(entries, now),
            variability=mood_variability(entries, 7, now),
            trend=trend,
            trend_description=trend.description,
        )
    except Exception as e:
        logger.error(f"Failed to compute mood statistics: {e}")
        raise HTTPException(status_code=500, detail="Failed to compute mood statistics")


@router.get(
    "/streaks",
    response_model=StreakStats,
    summary="Journaling streaks",
    description="Current streak, longest streak and journaling days this month.",
    responses={
        200: {"description": "Streaks computed."},
        500: {"description": "Failed to compute streaks."},
    },
)
def streaks_route(db: Session = Depends(get_db)) -> StreakStats:
    try:
        return streak_stats(_load_entries(db), datetime.date.today())
    except Exception as e:
        logger.error(f"Failed to compute streaks: {e}")
        raise HTTPException(status_code=500, detail="Failed to compute streaks")


@router.get(
    "/topics",
    response_model=List[TopicCluster],
    summary="Recurring topics",
    description="Keyword-based topic clusters over all entries, largest first.",
    responses={
        200: {"description": "Topic clusters computed."},
        500: {"description": "Failed to compute topic clusters."},
    },
)
def topics_route(db: Session = Depends(get_db)) -> List[TopicCluster]:
    try:
        return get_topic_clusters(_load_entries(db))
    except Exception as e:
        logger.error(f"Failed to compute topic clusters: {e}")
        raise HTTPException(status_code=500, detail="Failed to compute topic clusters")


@router.get(
    "/emotions",
    response_model=EmotionStats,
    summary="Common emotions",
    description="Most frequent emotion tags overall and over the last 30 days.",
    responses={
        200: {"description": "Emotion statistics computed."},
        500: {"description": "Failed to compute emotion statistics."},
    },
)
def emotions_route(
    limit: int = Query(5, ge=1, le=10, description="Number of emotions to return."),
    db: Session = Depends(get_db),
) -> EmotionStats:
    try:
        entries = _load_entries(db)
        return EmotionStats(
            most_common=most_common_emotions(entries, limit),
            recent=recent_common_emotions(entries, datetime.datetime.now(), limit=limit),
        )
    except Exception as e:
        logger.error(f"Failed to compute emotion statistics: {e}")
        raise HTTPException(status_code=500, detail="Failed to compute emotion statistics")


@router.get(
    "/overview",
    response_model=InsightsOverview,
    summary="Insights overview",
    description="Mood, streaks, emotions, entry counts and a motivational message in one call.",
    responses={
        200: {"description": "Overview computed."},
        500: {"description": "Failed to compute overview."},
    },
)
def overview_route(db: Session = Depends(get_db)) -> InsightsOverview:
    try:
        return build_overview(_load_entries(db), datetime.datetime.now())
    except Exception as e:
        logger.error(f"Failed to compute insights overview: {e}")
        raise HTTPException(status_code=500, detail="Failed to compute overview")


async def _view(orchestrator: InsightOrchestrator, name: str, wait: bool) -> InsightSnapshot:
    snapshot = await orchestrator.open_surface(name)
    if wait:
        snapshot = await orchestrator.wait(name)
    return snapshot


async def _refresh(orchestrator: InsightOrchestrator, name: str, wait: bool) -> InsightSnapshot:
    await orchestrator.refresh(name)
    if wait:
        return await orchestrator.wait(name)
    return orchestrator.snapshot(name)


@router.get(
    "/summary",
    response_model=InsightSnapshot,
    summary="Weekly AI summary",
    description="""
                AI summary of the last 7 days. The first request starts generation;
                later requests return the cached result until journal data changes.
                On AI failure the snapshot carries a locally computed fallback summary.
                """,
    responses={
        200: {"description": "Current summary state."},
    },
)
async def summary_route(
    wait: bool = Query(False, description="Wait for an in-flight generation to finish."),
    orchestrator: InsightOrchestrator = Depends(get_orchestrator),
) -> InsightSnapshot:
    return await _view(orchestrator, SUMMARY, wait)


@router.post(
    "/summary/refresh",
    response_model=InsightSnapshot,
    summary="Refresh the weekly AI summary",
    description="Regenerate the summary if the last 7 days changed since it was generated.",
    responses={
        200: {"description": "Current summary state."},
    },
)
async def refresh_summary_route(
    wait: bool = Query(False, description="Wait for the generation to finish."),
    orchestrator: InsightOrchestrator = Depends(get_orchestrator),
) -> InsightSnapshot:
    return await _refresh(orchestrator, SUMMARY, wait)


@router.get(
    "/recommendations",
    response_model=InsightSnapshot,
    summary="Personalized recommendations",
    description="""
                Three AI recommendations based on the last 7 days, cached like the summary.
                On AI failure the snapshot carries mood-based fallback recommendations.
                """,
    responses={
        200: {"description": "Current recommendations state."},
    },
)
async def recommendations_route(
    wait: bool = Query(False, description="Wait for an in-flight generation to finish."),
    orchestrator: InsightOrchestrator = Depends(get_orchestrator),
) -> InsightSnapshot:
    return await _view(orchestrator, RECOMMENDATIONS, wait)


@router.post(
    "/recommendations/refresh",
    response_model=InsightSnapshot,
    summary="Refresh recommendations",
    description="Regenerate recommendations if the last 7 days changed since they were generated.",
    responses={
        200: {"description": "Current recommendations state."},
    },
)
async def refresh_recommendations_route(
    wait: bool = Query(False, description="Wait for the generation to finish."),
    orchestrator: InsightOrchestrator = Depends(get_orchestrator),
) -> InsightSnapshot:
    return await _refresh(orchestrator, RECOMMENDATIONS, wait)
