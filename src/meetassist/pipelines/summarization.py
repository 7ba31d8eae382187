"""Meeting summarization adapter.

Sends the transcript to the DeepSeek chat completions API with a strict JSON prompt
and coerces whatever comes back into a :class:`SummaryResult`. If the call fails or
the reply is not a JSON object the heuristic extractor produces the summary instead,
so ``summarize`` never raises.
"""
from __future__ import annotations

import json
import logging
import re
import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

import httpx

from meetassist.core.errors import ProviderError
from meetassist.core.settings import Settings
from meetassist.pipelines.interfaces import FALLBACK_PROVIDER, SummaryResult

logger = logging.getLogger(__name__)

PROVIDER = "deepseek"
NO_SUMMARY = "No summary available"

SYSTEM_PROMPT = (
    "You are an expert meeting analyst. Generate concise, actionable meeting summaries in the "
    "exact JSON format requested. Be precise and professional."
)

PROMPT_TEMPLATE = """
Analyze this meeting transcript and generate a comprehensive summary in JSON format.

MEETING DETAILS:
- Title: {title}
- Participants: {participants}

TRANSCRIPT:
{transcript}

Generate a JSON response with this exact structure:
{{
  "summary": "A concise 2-3 sentence summary of the meeting",
  "keyPoints": ["Point 1", "Point 2", "Point 3"],
  "actionItems": ["Action 1", "Action 2"],
  "decisions": ["Decision 1", "Decision 2"],
  "nextSteps": ["Step 1", "Step 2"],
  "participants": ["Name 1", "Name 2"]
}}

REQUIREMENTS:
- Summary: 2-3 sentences maximum, capture the main purpose and outcomes
- Key Points: 3-5 most important discussion points
- Action Items: Specific tasks assigned with who/what/when if mentioned
- Decisions: Clear decisions made during the meeting
- Next Steps: Follow-up actions or future meetings planned
- Participants: Extract participant names from the transcript

Return ONLY the JSON object, no additional text."""

_CODE_FENCE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class SummarizerConfig:
    api_key: str | None = None
    base_url: str = "https://api.deepseek.com/chat/completions"
    model: str = "deepseek-chat"
    temperature: float = 0.1
    max_tokens: int = 2000
    timeout: float = 60.0

    @classmethod
    def from_settings(cls, settings: Settings) -> SummarizerConfig:
        return cls(
            api_key=settings.deepseek_api_key,
            base_url=settings.deepseek_base_url,
            model=settings.deepseek_model,
            temperature=settings.summarization_temperature,
            max_tokens=settings.summarization_max_tokens,
            timeout=settings.summarization_timeout,
        )


class HeuristicMeetingExtractor:
    """Keyword based extraction used when the language model is unavailable."""

    key_point_keywords = (
        "discussed", "review", "update", "progress", "issue", "problem", "solution",
        "decision", "agreed", "plan", "schedule", "deadline", "budget", "resource",
    )
    action_item_keywords = (
        "will", "should", "need to", "action", "task", "assign", "follow up",
        "next week", "by friday", "deadline", "complete", "deliver",
    )
    decision_keywords = (
        "decided", "agreed", "approved", "rejected", "chosen", "selected",
        "final", "conclude", "resolve",
    )

    max_key_points = 5
    max_action_items = 4
    max_decisions = 3
    max_next_steps = 3

    placeholder_key_points = (
        "Main discussion topics covered",
        "Key decisions made during meeting",
        "Important updates shared",
        "Next steps identified",
    )
    placeholder_action_items = (
        "Follow up on discussed items",
        "Share meeting notes with team",
        "Complete assigned tasks",
    )
    placeholder_decisions = ("No explicit decisions recorded",)
    placeholder_next_steps = ("Schedule next meeting", "Review action items")

    @staticmethod
    def sentences(text: str) -> list[str]:
        return [s.strip() for s in re.split(r"[.!?]+", text) if len(s.strip()) > 10]

    def phrases(self, text: str, keywords: Iterable[str]) -> list[str]:
        keywords = tuple(keywords)
        found: list[str] = []
        for sentence in self.sentences(text):
            lowered = sentence.lower()
            if any(keyword in lowered for keyword in keywords) and sentence not in found:
                found.append(sentence)
        return found

    def summarize(self, transcript: str, meeting_title: str, participants: Sequence[str]) -> SummaryResult:
        sentences = self.sentences(transcript)
        if sentences:
            summary = (
                f'Meeting "{meeting_title}" covered key topics and discussions. {sentences[0]}. '
                "Various action items and next steps were identified."
            )
        else:
            summary = (
                f'Meeting "{meeting_title}" was held with {len(participants)} participants. '
                "Key discussions and decisions were made."
            )
        key_points = self.phrases(transcript, self.key_point_keywords)[: self.max_key_points]
        actions = self.phrases(transcript, self.action_item_keywords)
        decisions = self.phrases(transcript, self.decision_keywords)[: self.max_decisions]
        return SummaryResult(
            summary=summary,
            key_points=key_points or list(self.placeholder_key_points),
            action_items=actions[: self.max_action_items] or list(self.placeholder_action_items),
            decisions=decisions or list(self.placeholder_decisions),
            next_steps=actions[: self.max_next_steps] or list(self.placeholder_next_steps),
            participants=list(participants),
            provider=FALLBACK_PROVIDER,
        )


def build_prompt(transcript: str, meeting_title: str, participant_names: Sequence[str]) -> str:
    return PROMPT_TEMPLATE.format(
        title=meeting_title,
        participants=", ".join(participant_names) or "Not specified",
        transcript=transcript,
    )


def _as_string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if item is not None and str(item).strip()]


def parse_model_reply(content: str, participant_names: Sequence[str] = ()) -> SummaryResult:
    """Parse the model's JSON reply; raises :class:`ProviderError` if it is not an object."""
    cleaned = _CODE_FENCE.sub("", content).strip()
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise ProviderError(f"Invalid AI response format: {exc.msg}") from exc
    if not isinstance(parsed, dict):
        raise ProviderError("Invalid AI response format: expected a JSON object")

    summary = parsed.get("summary")
    if not isinstance(summary, str) or not summary.strip():
        summary = NO_SUMMARY
    participants = _as_string_list(parsed.get("participants")) or list(participant_names)
    return SummaryResult(
        summary=summary.strip(),
        key_points=_as_string_list(parsed.get("keyPoints")),
        action_items=_as_string_list(parsed.get("actionItems")),
        decisions=_as_string_list(parsed.get("decisions")),
        next_steps=_as_string_list(parsed.get("nextSteps")),
        participants=participants,
        provider=PROVIDER,
    )


async def _request_summary(client: httpx.AsyncClient, prompt: str, config: SummarizerConfig) -> str:
    if not config.api_key:
        raise ProviderError("DeepSeek API key is not configured")
    try:
        response = await client.post(
            config.base_url,
            headers={
                "Authorization": f"Bearer {config.api_key}",
                "Content-Type": "application/json",
            },
            json={
                "model": config.model,
                "messages": [
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                "temperature": config.temperature,
                "max_tokens": config.max_tokens,
                "stream": False,
            },
            timeout=config.timeout,
        )
    except httpx.HTTPError as exc:
        raise ProviderError(f"Failed to reach DeepSeek: {exc}") from exc
    if response.status_code != 200:
        raise ProviderError(f"DeepSeek error: {response.status_code}")
    try:
        data = response.json()
        content = data["choices"][0]["message"]["content"]
    except (ValueError, KeyError, IndexError, TypeError) as exc:
        raise ProviderError("DeepSeek response missing content") from exc
    if not isinstance(content, str) or not content.strip():
        raise ProviderError("No content received from DeepSeek")
    return content


async def summarize(
    transcript: str,
    meeting_title: str,
    participant_names: Sequence[str] = (),
    *,
    config: SummarizerConfig,
    client: httpx.AsyncClient | None = None,
    extractor: HeuristicMeetingExtractor | None = None,
) -> SummaryResult:
    started = time.perf_counter()
    names = list(participant_names)
    prompt = build_prompt(transcript, meeting_title, names)
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=config.timeout) as own_client:
                content = await _request_summary(own_client, prompt, config)
        else:
            content = await _request_summary(client, prompt, config)
        result = parse_model_reply(content, names)
    except Exception as exc:  # fallback to heuristic
        logger.warning(f"Using heuristic summary for {meeting_title!r}: {exc}")
        result = (extractor or HeuristicMeetingExtractor()).summarize(transcript, meeting_title, names)
    result.processing_time_ms = int((time.perf_counter() - started) * 1000)
    logger.info(f"Summary for {meeting_title!r} produced by {result.provider} in {result.processing_time_ms}ms")
    return result
