"""Interfaces (Protocols) and DTOs shared by the adapters and the orchestrator."""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

FALLBACK_PROVIDER = "fallback"


class LanguageHint(str, Enum):
    """Language mode requested for transcription."""

    EN = "en"
    HINGLISH = "hinglish"  # Hindi/English code-mixed speech


@dataclass(slots=True)
class TranscriptResult:
    text: str
    confidence: float
    processing_time_ms: int
    provider: str
    language: LanguageHint
    message: str = ""

    @property
    def is_fallback(self) -> bool:
        return self.provider == FALLBACK_PROVIDER


@dataclass(slots=True)
class SummaryResult:
    summary: str
    key_points: list[str] = field(default_factory=list)
    action_items: list[str] = field(default_factory=list)
    decisions: list[str] = field(default_factory=list)
    next_steps: list[str] = field(default_factory=list)
    participants: list[str] = field(default_factory=list)
    provider: str = FALLBACK_PROVIDER
    processing_time_ms: int = 0


@dataclass(slots=True)
class NotificationReport:
    sent: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"sent": self.sent, "failed": self.failed, "errors": list(self.errors)}


class Transcriber(Protocol):
    async def __call__(self, audio_payload: str, language: LanguageHint) -> TranscriptResult: ...


class Summarizer(Protocol):
    async def __call__(
        self, transcript: str, meeting_title: str, participant_names: Sequence[str]
    ) -> SummaryResult: ...


class EmailSender(Protocol):
    async def __call__(self, recipient: str, subject: str, content: str) -> None: ...
