"""
Tests for AI analysis: response parsing, the Claude provider, and the
analysis workflow that updates entries and cores.
"""
import asyncio
import json
from datetime import date

import httpx
import pytest
from pydantic import ValidationError

from app.core.exceptions import (
    AnalysisError, AnalysisPendingError, AuthError, EntryNotFoundError,
    MalformedResponseError, NetworkError, RateLimitError, StorageError
)
from app.models.journal import JournalEntry
from app.schemas.analysis import AnalysisResult
from app.schemas.journal import JournalEntryCreate
from app.services import core_library_service, journal_service, settings_service
from app.services.providers import (
    ClaudeAnalysisProvider, FallbackAnalysisProvider, parse_analysis_response
)
from app.services.providers.claude_provider import build_analysis_prompt

ANALYSIS_JSON = {
    "primary_emotions": ["hopeful", "curious"],
    "emotional_intensity": 7,
    "growth_indicators": ["learning new skills"],
    "core_adjustments": {"Optimism": 0.1, "Growth Mindset": 0.2},
    "mind_reflection": {
        "title": "New Beginnings",
        "summary": "You are open to change.",
        "insights": ["Curiosity is driving you."]
    },
    "entry_insight": "Keep exploring."
}


def sample_entry(content="Started a pottery class today.", moods=None):
    return JournalEntry(
        id="e1",
        content=content,
        moods=moods if moods is not None else ["excited"],
        date=date(2024, 3, 4)
    )


def claude_provider(handler):
    return ClaudeAnalysisProvider(api_key="test-key", transport=httpx.MockTransport(handler))


def claude_reply(text):
    return httpx.Response(200, json={"content": [{"type": "text", "text": text}]})


def add_entry(db, entry_id="e1", moods=None):
    return journal_service.add_entry(
        db, JournalEntryCreate(id=entry_id, content="Grateful for a sunny morning.", moods=moods or ["happy"])
    )


# Response parsing

def test_parse_plain_json():
    """Test parsing a plain JSON reply and normalising intensity."""
    result = parse_analysis_response(json.dumps(ANALYSIS_JSON))

    assert result.primary_emotions == ["hopeful", "curious"]
    assert result.emotional_intensity == pytest.approx(0.7)
    assert result.summary == "You are open to change."


def test_parse_fenced_json():
    """Test that markdown code fences are stripped."""
    text = "```json\n" + json.dumps(ANALYSIS_JSON) + "\n```"
    assert parse_analysis_response(text).entry_insight == "Keep exploring."


def test_parse_missing_optional_fields():
    """Test that optional fields may be absent."""
    result = parse_analysis_response(json.dumps({
        "primary_emotions": ["calm"],
        "emotional_intensity": 0.3,
        "growth_indicators": []
    }))
    assert result.core_adjustments == {}
    assert result.mind_reflection is None
    assert result.summary is None


@pytest.mark.parametrize("text", [
    "not json at all",
    "[1, 2, 3]",
    json.dumps({"primary_emotions": ["calm"]}),
])
def test_parse_malformed(text):
    """Test that invalid replies raise MalformedResponseError."""
    with pytest.raises(MalformedResponseError):
        parse_analysis_response(text)


@pytest.mark.parametrize("text", [
    '{"primary_emotions": [], "emotional_intensity": 0.5, "growth_indicators": [], '
    '"core_adjustments": {"optimism": NaN}}',
    '{"primary_emotions": [], "emotional_intensity": Infinity, "growth_indicators": []}',
    '{"primary_emotions": [], "emotional_intensity": 0.5, "growth_indicators": [], '
    '"core_adjustments": {"optimism": -Infinity}}',
])
def test_parse_rejects_non_finite_numbers(text):
    """Test that NaN and Infinity in a reply are treated as malformed."""
    with pytest.raises(MalformedResponseError):
        parse_analysis_response(text)


def test_analysis_result_rejects_nan():
    """Test that a NaN adjustment cannot be built directly either."""
    with pytest.raises(ValidationError):
        AnalysisResult(
            primary_emotions=[],
            emotional_intensity=0.5,
            growth_indicators=[],
            core_adjustments={"optimism": float("nan")}
        )


# Claude provider

def test_prompt_truncates_content():
    """Test that long entries are truncated in the prompt."""
    prompt = build_analysis_prompt(sample_entry(content="a" * 50, moods=[]), max_chars=10)

    assert f'"{"a" * 10}..."' in prompt
    assert "Selected Moods: none" in prompt
    assert "2024-03-04 (Monday)" in prompt


def test_claude_success():
    """Test a successful Claude request."""
    seen = {}

    def handler(request):
        seen["headers"] = request.headers
        seen["body"] = json.loads(request.content)
        return claude_reply(json.dumps(ANALYSIS_JSON))

    result = asyncio.run(claude_provider(handler).analyze(sample_entry()))

    assert result.core_adjustments == {"Optimism": 0.1, "Growth Mindset": 0.2}
    assert seen["headers"]["x-api-key"] == "test-key"
    assert seen["headers"]["anthropic-version"] == "2023-06-01"
    assert "pottery" in seen["body"]["messages"][0]["content"]


@pytest.mark.parametrize("status_code,error", [
    (401, AuthError),
    (403, AuthError),
    (429, RateLimitError),
    (500, NetworkError),
    (503, NetworkError),
])
def test_claude_http_errors(status_code, error):
    """Test HTTP failures are classified."""
    provider = claude_provider(lambda request: httpx.Response(status_code, json={"error": "x"}))

    with pytest.raises(error) as exc:
        asyncio.run(provider.analyze(sample_entry()))
    assert exc.value.status_code == status_code


def test_claude_other_client_error():
    """Test unclassified 4xx responses raise the base error."""
    provider = claude_provider(lambda request: httpx.Response(400, json={"error": "bad"}))

    with pytest.raises(AnalysisError) as exc:
        asyncio.run(provider.analyze(sample_entry()))
    assert type(exc.value) is AnalysisError
    assert not exc.value.retryable


def test_claude_network_failure():
    """Test connection failures and timeouts raise NetworkError."""
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    def timeout(request):
        raise httpx.ReadTimeout("timed out", request=request)

    for handler in (refuse, timeout):
        with pytest.raises(NetworkError) as exc:
            asyncio.run(claude_provider(handler).analyze(sample_entry()))
        assert exc.value.retryable


@pytest.mark.parametrize("response", [
    httpx.Response(200, text="<html>oops</html>"),
    httpx.Response(200, json={"unexpected": True}),
    claude_reply("I'm sorry, I can't help with that."),
])
def test_claude_malformed_response(response):
    """Test unusable 200 responses raise MalformedResponseError."""
    provider = claude_provider(lambda request: response)

    with pytest.raises(MalformedResponseError):
        asyncio.run(provider.analyze(sample_entry()))


def test_claude_requires_api_key():
    """Test that an empty key is rejected."""
    with pytest.raises(ValueError):
        ClaudeAnalysisProvider(api_key="")


def test_fallback_provider():
    """Test the local fallback derives emotions from moods."""
    provider = FallbackAnalysisProvider()

    result = asyncio.run(provider.analyze(sample_entry(moods=["happy", "tired", "calm"])))
    assert result.primary_emotions == ["happy", "tired"]
    assert result.emotional_intensity == 0.6

    result = asyncio.run(provider.analyze(sample_entry(moods=[])))
    assert result.primary_emotions == ["neutral"]
    assert result.emotional_intensity == 0.5


# Analysis workflow

def test_analyze_entry_updates_entry_and_cores(db, analysis_service):
    """Test a successful analysis is stored and moves the cores."""
    created = add_entry(db)
    updated_at = created.updated_at

    result = asyncio.run(analysis_service.analyze_entry(db, "e1"))

    assert result.primary_emotions == ["grateful"]
    entry = journal_service.get_entry(db, "e1")
    assert entry.is_analyzed
    assert entry.ai_analysis["primary_emotions"] == ["grateful"]
    assert entry.updated_at == updated_at

    optimism = core_library_service.get_core(db, "optimism")
    assert optimism.current_level == pytest.approx(0.107)
    assert optimism.recent_insights == ["You are noticing the good in your day."]
    assert optimism.last_entry_id == "e1"
    assert not analysis_service.is_pending("e1")


def test_analyze_missing_entry(db, analysis_service, provider):
    """Test analyzing an unknown entry raises without calling the provider."""
    with pytest.raises(EntryNotFoundError):
        asyncio.run(analysis_service.analyze_entry(db, "missing"))
    assert provider.calls == []


def test_provider_failure_leaves_entry_unchanged(db, analysis_service, provider):
    """Test that a failed analysis changes nothing."""
    add_entry(db)
    provider.error = RateLimitError("Rate limit exceeded", status_code=429)

    with pytest.raises(RateLimitError):
        asyncio.run(analysis_service.analyze_entry(db, "e1"))

    assert journal_service.get_entry(db, "e1").ai_analysis is None
    assert all(core.current_level == 0.0 for core in core_library_service.get_all_cores(db))
    assert not analysis_service.is_pending("e1")


def test_second_analysis_while_pending_rejected(db, analysis_service, provider):
    """Test at most one analysis per entry is in flight."""
    add_entry(db)

    async def scenario():
        provider.started = asyncio.Event()
        provider.gate = asyncio.Event()
        first = asyncio.create_task(analysis_service.analyze_entry(db, "e1"))
        await provider.started.wait()

        assert analysis_service.is_pending("e1")
        with pytest.raises(AnalysisPendingError):
            await analysis_service.analyze_entry(db, "e1")

        provider.gate.set()
        return await first

    result = asyncio.run(scenario())
    assert result is not None
    assert provider.calls == ["e1"]


def test_entry_deleted_during_analysis(db, analysis_service, provider):
    """Test a late result for a deleted entry is discarded."""
    add_entry(db)

    async def scenario():
        provider.started = asyncio.Event()
        provider.gate = asyncio.Event()
        task = asyncio.create_task(analysis_service.analyze_entry(db, "e1"))
        await provider.started.wait()

        journal_service.delete_entry(db, "e1")
        provider.gate.set()
        return await task

    assert asyncio.run(scenario()) is None
    assert journal_service.get_all_entries(db) == []
    assert all(core.current_level == 0.0 for core in core_library_service.get_all_cores(db))
    assert not analysis_service.is_pending("e1")


def test_analysis_without_personalized_insights(db, analysis_service):
    """Test template insights when personalized insights are off."""
    add_entry(db)
    settings_service.update_preference(db, "personalized_insights_enabled", False)

    asyncio.run(analysis_service.analyze_entry(db, "e1"))

    assert core_library_service.get_core(db, "optimism").recent_insights == [
        "Your Optimism is showing positive growth through your recent reflections."
    ]


def test_analyze_api(client):
    """Test the analyze endpoint."""
    client.post("/api/journal", json={"id": "e1", "content": "Good day", "moods": ["happy"]})

    response = client.post("/api/journal/e1/analyze")
    assert response.status_code == 200
    data = response.json()
    assert data["discarded"] is False
    assert data["analysis"]["primary_emotions"] == ["grateful"]

    assert client.get("/api/journal/e1").json()["is_analyzed"] is True
    assert client.post("/api/journal/missing/analyze").status_code == 404


def test_analyze_api_provider_failure(client, provider):
    """Test provider failures return 503 with a user-facing message."""
    client.post("/api/journal", json={"id": "e1", "content": "Good day"})
    provider.error = AuthError("Invalid API key", status_code=401)

    response = client.post("/api/journal/e1/analyze")
    assert response.status_code == 503
    assert response.json()["detail"] == AuthError.user_message
    assert client.get("/api/journal/e1").json()["is_analyzed"] is False


def test_entry_deleted_by_another_request_during_analysis(db, session_factory, analysis_service, provider):
    """Test a delete from a separate session while the provider is waiting."""
    add_entry(db)

    async def scenario():
        provider.started = asyncio.Event()
        provider.gate = asyncio.Event()
        task = asyncio.create_task(analysis_service.analyze_entry(db, "e1"))
        await provider.started.wait()

        other = session_factory()
        try:
            assert journal_service.delete_entry(other, "e1") is True
        finally:
            other.close()

        provider.gate.set()
        return await task

    assert asyncio.run(scenario()) is None

    check = session_factory()
    try:
        assert journal_service.get_all_entries(check) == []
        assert all(core.current_level == 0.0 for core in core_library_service.get_all_cores(check))
    finally:
        check.close()
    assert not analysis_service.is_pending("e1")


def test_storage_failure_saves_nothing(db, analysis_service, monkeypatch):
    """Test that a failed core update also drops the attached analysis."""
    add_entry(db)

    def failing_apply(*args, **kwargs):
        raise StorageError("disk I/O error", operation="apply_analysis")

    monkeypatch.setattr(core_library_service, "apply_analysis", failing_apply)

    with pytest.raises(StorageError):
        asyncio.run(analysis_service.analyze_entry(db, "e1"))

    assert journal_service.get_entry(db, "e1").ai_analysis is None
    assert not analysis_service.is_pending("e1")


def test_unstorable_level_saves_nothing(db, analysis_service, provider):
    """Test a result that fails at the database leaves entry and cores unchanged."""
    add_entry(db)
    provider.result = AnalysisResult.model_construct(
        primary_emotions=[],
        emotional_intensity=0.5,
        growth_indicators=[],
        core_adjustments={"optimism": float("nan")},
        mind_reflection=None,
        entry_insight=None
    )

    with pytest.raises(StorageError):
        asyncio.run(analysis_service.analyze_entry(db, "e1"))

    entry = journal_service.get_entry(db, "e1")
    assert entry.ai_analysis is None
    assert not entry.is_analyzed
    assert core_library_service.get_core(db, "optimism").current_level == 0.0


def test_analysis_marks_milestones(db, analysis_service, provider):
    """Test an analysis that lifts a core past a threshold achieves its milestone."""
    add_entry(db)
    provider.result = AnalysisResult(
        primary_emotions=[],
        emotional_intensity=0.5,
        growth_indicators=[],
        core_adjustments={"resilience": 0.3}
    )

    asyncio.run(analysis_service.analyze_entry(db, "e1"))

    milestones = core_library_service.get_core(db, "resilience").milestones
    assert [m["is_achieved"] for m in milestones] == [True, False, False, False]
