"""Analysis routes: statistics and AI insight surfaces."""

from daybook.analysis.ai_providers.base import AIErrorCategory, AIServiceError
from daybook.analysis.prompts.openai_prompts_templates import MISSING_KEY_MESSAGE


def test_streaks_after_first_save(client):
    """A completed entry today starts a one-day streak."""
    client.post("/journals/mood", json={"mood_value": 3.0, "emotion_tags": ["Calm"]})

    response = client.get("/analysis/streaks")
    assert response.status_code == 200
    assert response.json() == {
        "current_streak": 1,
        "longest_streak": 1,
        "journaling_days_this_month": 1,
    }


def test_topics_need_three_entries(client):
    """Fewer than three entries produce no clusters."""
    client.post("/journals", json={"journal_text": "work meeting with my boss about the project"})
    assert client.get("/analysis/topics").json() == []


def test_mood_without_entries(client):
    """An empty journal reports the neutral default."""
    body = client.get("/analysis/mood").json()
    assert body["average_mood"] == 2.0
    assert body["trend"] == "neutral"
    assert body["trend_description"] == "Stable"


def test_overview_counts(client):
    """The overview counts today's entry and picks the early message."""
    client.post("/journals/mood", json={"mood_value": 4.0, "emotion_tags": ["Excited"]})

    body = client.get("/analysis/overview").json()
    assert body["total_entries"] == 1
    assert body["entries_this_week"] == 1
    assert body["mood"]["average_mood"] == 4.0
    assert body["common_emotions"] == ["Excited"]
    assert body["motivational_message"]


def test_emotions_limit(client):
    """The limit caps the number of returned emotions."""
    client.post("/journals/mood", json={"mood_value": 2.0, "emotion_tags": ["Calm", "Tired", "Happy"]})

    body = client.get("/analysis/emotions", params={"limit": 2}).json()
    assert len(body["most_common"]) == 2
    assert len(body["recent"]) == 2


def test_summary_generates_on_first_view(client, fake_ai):
    """Waiting on the first view returns the AI summary."""
    client.post("/journals/reflection", json={"prompt": "P", "response": "R"})

    body = client.get("/analysis/summary", params={"wait": True}).json()
    assert body["status"] == "ready"
    assert body["content"] == "You had a steady week. (1 entries)"
    assert fake_ai.calls.count("summary") == 1


def test_summary_without_key_shows_fallback(client, fake_ai):
    """Credential errors surface the fallback with a hint to add a key."""
    fake_ai.error = AIServiceError(AIErrorCategory.MISSING_CREDENTIAL, "No API key configured")

    body = client.get("/analysis/summary", params={"wait": True}).json()
    assert body["status"] == "error"
    assert body["message"] == MISSING_KEY_MESSAGE
    assert body["error_category"] == "missing_credential"
    assert body["content"]


def test_summary_regenerates_only_after_changes(client, fake_ai):
    """Unchanged data is served from cache; a save triggers one new call."""
    client.post("/journals/reflection", json={"prompt": "P", "response": "First"})
    client.get("/analysis/summary", params={"wait": True})

    client.post("/analysis/summary/refresh", params={"wait": True})
    assert fake_ai.calls.count("summary") == 1

    client.post("/journals/reflection", json={"prompt": "P", "response": "Second"})
    body = client.get("/analysis/summary", params={"wait": True}).json()
    assert body["status"] == "ready"
    assert fake_ai.calls.count("summary") == 2


def test_unviewed_surface_is_not_generated_on_save(client, fake_ai):
    """Saves do not wake surfaces nobody opened."""
    client.post("/journals/reflection", json={"prompt": "P", "response": "R"})
    assert "summary" not in fake_ai.calls
    assert "recommendations" not in fake_ai.calls


def test_recommendations_are_padded_to_three(client):
    """One AI suggestion is kept and padded with generic ones."""
    client.post("/journals/reflection", json={"prompt": "P", "response": "R"})

    body = client.get("/analysis/recommendations", params={"wait": True}).json()
    assert body["status"] == "ready"
    assert len(body["content"]) == 3

    first = body["content"][0]
    assert first["title"] == "Journal: Wins"
    assert first["action_text"] == "Write: 'Today I am proud of...'"
    assert first["category"] == "growth"
    assert first["priority"] == "high"


def test_recommendations_refresh(client, fake_ai):
    """Refreshing after a change calls the provider again."""
    client.get("/analysis/recommendations", params={"wait": True})
    client.post("/journals/reflection", json={"prompt": "P", "response": "R"})

    body = client.post("/analysis/recommendations/refresh", params={"wait": True}).json()
    assert body["status"] == "ready"
    assert fake_ai.calls.count("recommendations") == 2
