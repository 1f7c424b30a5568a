"""
Journal entry analysis through the Anthropic Messages API.

The provider sends entry text and mood labels, expects a JSON analysis back,
and classifies every failure into the AnalysisError hierarchy. It does not
retry; callers decide what to do with a failed analysis.
"""
import logging
from typing import Optional

import httpx

from app.core.config import settings
from app.core.exceptions import (
    AnalysisError, AuthError, MalformedResponseError, NetworkError, RateLimitError
)
from app.models.journal import JournalEntry
from app.schemas.analysis import AnalysisResult
from app.services.providers.base import AnalysisProvider, parse_analysis_response

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are an AI emotional analyst for a journaling app. Analyze journal entries and provide concise emotional insights.

IMPORTANT: Respond ONLY with valid JSON. No extra text or markdown blocks.

## Six Personality Cores:
1. Optimism - Hope, positive outlook
2. Resilience - Bouncing back, adaptability
3. Self-Awareness - Emotional understanding, reflection
4. Creativity - Innovation, problem-solving
5. Social Connection - Relationships, empathy
6. Growth Mindset - Learning, embracing challenges

## Required JSON Format:
{
  "primary_emotions": ["emotion1", "emotion2"],
  "emotional_intensity": 0.65,
  "growth_indicators": ["indicator1", "indicator2"],
  "core_adjustments": {
    "Optimism": 0.1,
    "Resilience": 0.0,
    "Self-Awareness": 0.2,
    "Creativity": 0.0,
    "Social Connection": 0.0,
    "Growth Mindset": 0.1
  },
  "mind_reflection": {
    "title": "Brief Emotional Theme",
    "summary": "1-2 encouraging sentences about growth",
    "insights": ["Insight 1", "Insight 2"]
  },
  "entry_insight": "Brief encouraging insight"
}

## Guidelines:
- Core adjustments: -0.5 to +0.5 (small, evidence-based changes)
- Emotional intensity: 0.0-1.0 scale (0.5 = typical daily reflection)
- Keep all text brief and impactful
- Always encouraging and growth-focused
- Return valid JSON only"""


def build_analysis_prompt(entry: JournalEntry, max_chars: Optional[int] = None) -> str:
    """Build the user message for one entry; content is truncated to max_chars."""
    max_chars = max_chars or settings.AI_MAX_CONTENT_CHARS
    content = entry.content
    if len(content) > max_chars:
        content = f"{content[:max_chars]}..."

    moods = ", ".join(entry.moods or []) or "none"
    return (
        "JOURNAL ENTRY:\n"
        f"Date: {entry.date.isoformat()} ({entry.day_of_week})\n"
        f"Selected Moods: {moods}\n"
        f"Content: \"{content}\"\n"
    )


class ClaudeAnalysisProvider(AnalysisProvider):
    """Analysis provider backed by a hosted Claude model."""

    name = "claude"

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        if not api_key:
            raise ValueError("API key cannot be empty")
        self.api_key = api_key
        self.model = model or settings.ANTHROPIC_MODEL
        self.api_url = api_url or settings.ANTHROPIC_API_URL
        self.timeout = timeout or settings.AI_REQUEST_TIMEOUT
        self._transport = transport

    def _headers(self) -> dict:
        return {
            "x-api-key": self.api_key,
            "anthropic-version": settings.ANTHROPIC_VERSION,
            "Content-Type": "application/json"
        }

    def _request_body(self, entry: JournalEntry) -> dict:
        return {
            "model": self.model,
            "max_tokens": settings.AI_MAX_TOKENS,
            "temperature": 0.3,
            "system": SYSTEM_PROMPT,
            "messages": [
                {"role": "user", "content": build_analysis_prompt(entry)}
            ]
        }

    async def analyze(self, entry: JournalEntry) -> AnalysisResult:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    self.api_url,
                    headers=self._headers(),
                    json=self._request_body(entry)
                )
        except httpx.TimeoutException as e:
            logger.error(f"Analysis request for entry {entry.id} timed out")
            raise NetworkError("Request timed out") from e
        except httpx.TransportError as e:
            logger.error(f"Analysis request for entry {entry.id} failed: {e}")
            raise NetworkError(f"Network connection failed: {e}") from e

        request_id = response.headers.get("request-id")
        if request_id:
            logger.debug(f"Claude API request id {request_id} (model {self.model})")

        self._raise_for_status(response)
        return parse_analysis_response(self._extract_text(response))

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        status_code = response.status_code
        if status_code == 200:
            return

        logger.error(f"Claude API error {status_code}: {response.text}")
        if status_code in (401, 403):
            raise AuthError("Invalid API key or authentication failed", status_code=status_code)
        if status_code == 429:
            raise RateLimitError("Rate limit exceeded", status_code=status_code)
        if status_code >= 500:
            raise NetworkError(f"Claude API server error {status_code}", status_code=status_code)
        raise AnalysisError(f"Claude API client error {status_code}", status_code=status_code)

    @staticmethod
    def _extract_text(response: httpx.Response) -> str:
        try:
            data = response.json()
            blocks = data["content"]
            return "".join(block["text"] for block in blocks if block.get("type") == "text")
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise MalformedResponseError("Invalid response structure from Claude API") from e
