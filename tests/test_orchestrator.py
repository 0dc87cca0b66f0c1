"""Insight orchestration: caching by fingerprint, fallbacks and stale results."""

import asyncio
import threading
from datetime import datetime, timedelta

import pytest

from daybook.analysis.ai_providers.base import AIErrorCategory, AIServiceError
from daybook.analysis.insights import fallback_recommendations, fallback_summary
from daybook.analysis.schemas import InsightStatus
from daybook.analysis.service import RECOMMENDATIONS, SUMMARY, InsightOrchestrator
import daybook.analysis.prompts.openai_prompts_templates as prompts

NOW = datetime(2025, 6, 15, 12, 0)


@pytest.fixture
def window(make_entry):
    return [make_entry(NOW - timedelta(days=1), 3.0, journal_text="A good day")]


@pytest.fixture
def orch(fake_ai, window):
    return InsightOrchestrator(fake_ai, lambda start, end: list(window), clock=lambda: NOW)


def test_first_view_generates_once(orch, fake_ai):
    """Opening a surface dispatches a single AI call and ends ready."""

    async def scenario():
        loading = await orch.open_surface(SUMMARY)
        ready = await orch.wait(SUMMARY)
        again = await orch.open_surface(SUMMARY)
        return loading, ready, again

    loading, ready, again = asyncio.run(scenario())
    assert loading.status is InsightStatus.LOADING
    assert ready.status is InsightStatus.READY
    assert ready.content == "You had a steady week. (1 entries)"
    assert again.status is InsightStatus.READY
    assert fake_ai.calls.count("summary") == 1


def test_unchanged_data_is_a_cache_hit(orch, fake_ai):
    """Refreshing with an identical window does not call the AI again."""

    async def scenario():
        await orch.open_surface(SUMMARY)
        await orch.wait(SUMMARY)
        return await orch.refresh_summary()

    assert asyncio.run(scenario()) is None
    assert fake_ai.calls.count("summary") == 1
    assert orch.snapshot(SUMMARY).content == "You had a steady week. (1 entries)"


def test_changed_data_regenerates(orch, fake_ai, window, make_entry):
    """A data change with a new fingerprint triggers one more call."""

    async def scenario():
        await orch.open_surface(SUMMARY)
        await orch.wait(SUMMARY)
        window.append(make_entry(NOW - timedelta(hours=2), 4.0, journal_text="Even better"))
        await orch.on_data_changed()
        await orch.wait(SUMMARY)
        await orch.on_data_changed()

    asyncio.run(scenario())
    assert fake_ai.calls.count("summary") == 2
    assert orch.snapshot(SUMMARY).content == "You had a steady week. (2 entries)"


def test_data_change_leaves_unviewed_surfaces_idle(orch, fake_ai):
    """Surfaces nobody opened are not generated by notifications."""
    asyncio.run(orch.on_data_changed())
    assert fake_ai.calls == []
    assert orch.snapshot(RECOMMENDATIONS).status is InsightStatus.IDLE


def test_failure_switches_to_fallback_without_retry(orch, fake_ai, window):
    """An AI error shows the fallback summary and is not retried."""
    fake_ai.error = AIServiceError(AIErrorCategory.RATE_LIMITED, "Rate limit exceeded", 429)

    async def scenario():
        await orch.open_surface(SUMMARY)
        return await orch.wait(SUMMARY)

    snapshot = asyncio.run(scenario())
    assert snapshot.status is InsightStatus.ERROR
    assert snapshot.content == fallback_summary(window)
    assert snapshot.message == prompts.SUMMARY_UNAVAILABLE_MESSAGE
    assert snapshot.error_category == "rate_limited"
    assert fake_ai.calls.count("summary") == 1


def test_missing_key_message(orch, fake_ai, window):
    """Credential problems tell the user to configure a key."""
    fake_ai.error = AIServiceError(AIErrorCategory.MISSING_CREDENTIAL, "OpenAI API key is not configured")

    async def scenario():
        await orch.open_surface(RECOMMENDATIONS)
        return await orch.wait(RECOMMENDATIONS)

    snapshot = asyncio.run(scenario())
    assert snapshot.status is InsightStatus.ERROR
    assert snapshot.message == prompts.MISSING_KEY_MESSAGE
    assert snapshot.content == fallback_recommendations(window)


def test_error_state_retained_until_data_changes(orch, fake_ai):
    """A failed surface is not retried on an unchanged window."""
    fake_ai.error = AIServiceError(AIErrorCategory.TRANSPORT_ERROR, "Network error")

    async def scenario():
        await orch.open_surface(SUMMARY)
        await orch.wait(SUMMARY)
        fake_ai.error = None
        return await orch.refresh_summary()

    assert asyncio.run(scenario()) is None
    assert orch.snapshot(SUMMARY).status is InsightStatus.ERROR


def test_recommendations_are_parsed_to_three(orch, fake_ai):
    """Raw provider objects are validated and padded."""

    async def scenario():
        await orch.open_surface(RECOMMENDATIONS)
        return await orch.wait(RECOMMENDATIONS)

    snapshot = asyncio.run(scenario())
    assert snapshot.status is InsightStatus.READY
    assert [r.title for r in snapshot.content] == [
        "Journal: Wins",
        "Journal Reflection",
        "Journal Reflection",
    ]


def test_stale_response_is_discarded(orch, fake_ai, window, make_entry):
    """A slow older generation cannot overwrite a newer result."""

    async def scenario():
        gate = asyncio.Event()
        fake_ai.gates = [gate, None]
        await orch.open_surface(SUMMARY)
        first = orch.surfaces[SUMMARY].task

        window.append(make_entry(NOW - timedelta(hours=1), 2.0, journal_text="Later"))
        second = await orch.refresh_summary()
        await second
        gate.set()
        await first

    asyncio.run(scenario())
    snapshot = orch.snapshot(SUMMARY)
    assert fake_ai.calls.count("summary") == 2
    assert snapshot.status is InsightStatus.READY
    assert snapshot.content == "You had a steady week. (2 entries)"


def test_unknown_surface_rejected(orch):
    """Only summary and recommendations exist."""
    with pytest.raises(ValueError):
        orch.snapshot("horoscope")


def test_aclose_cancels_in_flight_generation(orch, fake_ai):
    """Shutdown cancels pending AI calls."""

    async def scenario():
        fake_ai.gates = [asyncio.Event()]
        await orch.open_surface(SUMMARY)
        task = orch.surfaces[SUMMARY].task
        await orch.aclose()
        return task

    task = asyncio.run(scenario())
    assert task.cancelled()


def test_wait_follows_newer_generation(orch, fake_ai, window, make_entry):
    """A waiter is not released by a generation superseded during its wait."""

    async def scenario():
        first_gate, second_gate = asyncio.Event(), asyncio.Event()
        fake_ai.gates = [first_gate, second_gate]
        await orch.open_surface(SUMMARY)
        waiter = asyncio.create_task(orch.wait(SUMMARY))
        await asyncio.sleep(0)

        window.append(make_entry(NOW - timedelta(hours=1), 2.0, journal_text="Later"))
        await orch.refresh_summary()
        first_gate.set()
        done, _ = await asyncio.wait([waiter], timeout=0.05)
        released_early = bool(done)

        second_gate.set()
        return released_early, await waiter

    released_early, snapshot = asyncio.run(scenario())
    assert not released_early
    assert snapshot.status is InsightStatus.READY
    assert snapshot.content == "You had a steady week. (2 entries)"


def test_window_loads_off_the_event_loop(fake_ai, window):
    """The entry loader runs in a worker thread, not on the loop thread."""
    loader_threads = []

    def loader(start, end):
        loader_threads.append(threading.get_ident())
        return list(window)

    orch = InsightOrchestrator(fake_ai, loader, clock=lambda: NOW)

    async def scenario():
        await orch.open_surface(SUMMARY)
        await orch.wait(SUMMARY)
        return threading.get_ident()

    loop_thread = asyncio.run(scenario())
    assert loader_threads
    assert loop_thread not in loader_threads
    assert orch.snapshot(SUMMARY).status is InsightStatus.READY
