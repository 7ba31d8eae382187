"""Summarization adapter: model reply parsing and the heuristic fallback."""
from __future__ import annotations

import json

import httpx
import pytest

from meetassist.core.errors import ProviderError
from meetassist.pipelines.summarization import (
    NO_SUMMARY,
    HeuristicMeetingExtractor,
    SummarizerConfig,
    build_prompt,
    parse_model_reply,
    summarize,
)

from conftest import SPRINT_TRANSCRIPT

CONFIG = SummarizerConfig(api_key="test-key", base_url="https://llm.test/chat/completions")


def _completion(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def test_parse_reply_strips_code_fences():
    reply = """```json
{"summary": "Planned the sprint.", "keyPoints": ["Scope agreed"], "actionItems": ["Sam ships API"],
 "decisions": ["Postpone refactor"], "nextSteps": ["Review plan"], "participants": ["Sam"]}
```"""
    result = parse_model_reply(reply)
    assert result.summary == "Planned the sprint."
    assert result.key_points == ["Scope agreed"]
    assert result.action_items == ["Sam ships API"]
    assert result.participants == ["Sam"]
    assert result.provider == "deepseek"


def test_parse_reply_coerces_missing_and_wrong_types():
    result = parse_model_reply(json.dumps({"keyPoints": "not a list", "decisions": ["a", None, " "]}), ["Ana"])
    assert result.summary == NO_SUMMARY
    assert result.key_points == []
    assert result.decisions == ["a"]
    assert result.participants == ["Ana"]


@pytest.mark.parametrize("reply", ["Sure! Here is the summary.", "[1, 2, 3]"])
def test_parse_reply_rejects_non_objects(reply):
    with pytest.raises(ProviderError):
        parse_model_reply(reply)


def test_prompt_lists_participants():
    prompt = build_prompt("hello", "Sync", ["Sam", "Ana"])
    assert "Title: Sync" in prompt
    assert "Participants: Sam, Ana" in prompt
    assert build_prompt("hello", "Sync", []).count("Not specified") == 1


def test_heuristic_extractor_caps_and_dedupes():
    transcript = ". ".join(f"We discussed the budget item number {i}" for i in range(10)) + "."
    result = HeuristicMeetingExtractor().summarize(transcript + " " + transcript, "Budget", ["Ana"])
    assert len(result.key_points) == 5
    assert len(set(result.key_points)) == 5
    assert result.provider == "fallback"


def test_heuristic_extractor_fills_placeholders():
    result = HeuristicMeetingExtractor().summarize("ok.", "Standup", ["Ana", "Ben"])
    assert result.summary.startswith('Meeting "Standup" was held with 2 participants')
    assert result.key_points
    assert result.action_items
    assert result.decisions
    assert result.next_steps


@pytest.mark.asyncio
async def test_summarize_uses_model_reply():
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers["authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json=_completion(json.dumps({"summary": "Short.", "keyPoints": ["k1", "k2"]})),
        )

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        result = await summarize(SPRINT_TRANSCRIPT, "Sprint Planning", ["Sam"], config=CONFIG, client=client)

    assert seen["auth"] == "Bearer test-key"
    assert seen["body"]["model"] == "deepseek-chat"
    assert seen["body"]["temperature"] == 0.1
    assert seen["body"]["stream"] is False
    assert result.provider == "deepseek"
    assert result.key_points == ["k1", "k2"]
    assert result.participants == ["Sam"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, json=_completion("definitely not json")),
        httpx.Response(429, json={"error": "rate limited"}),
        httpx.Response(200, json={"choices": []}),
    ],
    ids=["invalid-json", "rate-limited", "empty-choices"],
)
async def test_summarize_falls_back_to_heuristic(response):
    async with httpx.AsyncClient(transport=httpx.MockTransport(lambda request: response)) as client:
        result = await summarize(SPRINT_TRANSCRIPT, "Sprint Planning", ["Sam"], config=CONFIG, client=client)

    assert result.provider == "fallback"
    assert result.summary.startswith('Meeting "Sprint Planning" covered key topics')
    assert result.key_points
    assert result.action_items
    assert any("agreed" in d.lower() for d in result.decisions)


@pytest.mark.asyncio
async def test_summarize_without_api_key_never_raises():
    result = await summarize("", "Empty", config=SummarizerConfig())
    assert result.provider == "fallback"
    assert result.key_points
