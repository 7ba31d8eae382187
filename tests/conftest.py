"""Shared fixtures: a throwaway SQLite database and fake provider adapters."""
from __future__ import annotations

import base64
from collections.abc import AsyncIterator

import httpx
import pytest
import pytest_asyncio

from meetassist import create_app
from meetassist.core.settings import Settings
from meetassist.db.base import Database
from meetassist.pipelines.interfaces import LanguageHint, TranscriptResult
from meetassist.pipelines.summarization import SummarizerConfig, summarize
from meetassist.pipelines.transcription import decode_audio_payload
from meetassist.services.gateway import PersistenceGateway
from meetassist.services.pipelines import Providers

SPRINT_TRANSCRIPT = (
    "Good morning team, we discussed the sprint progress and the login issue. "
    "Sam will deliver the API changes by Friday. "
    "We agreed to postpone the dashboard refactor. "
    "Next week we need to review the release plan."
)

# 44-byte RIFF header followed by a few silent samples.
WAV_BYTES = (
    b"RIFF$\x00\x00\x00WAVEfmt \x10\x00\x00\x00\x01\x00\x01\x00"
    b"@\x1f\x00\x00\x80>\x00\x00\x02\x00\x10\x00data\x00\x00\x00\x00" + b"\x00" * 32
)
WAV_BASE64 = base64.b64encode(WAV_BYTES).decode("ascii")


class FakeTranscriber:
    def __init__(self, text: str = SPRINT_TRANSCRIPT) -> None:
        self.text = text
        self.calls: list[LanguageHint] = []

    async def __call__(self, audio_payload: str, language: LanguageHint) -> TranscriptResult:
        decode_audio_payload(audio_payload)
        self.calls.append(language)
        return TranscriptResult(
            text=self.text,
            confidence=0.93,
            processing_time_ms=12,
            provider="elevenlabs",
            language=language,
            message="Transcription completed successfully",
        )


class RecordingEmailSender:
    """Collects sent messages; addresses in ``failing`` raise instead."""

    def __init__(self, failing: set[str] | None = None) -> None:
        self.failing = failing or set()
        self.sent: list[tuple[str, str, str]] = []

    async def __call__(self, recipient: str, subject: str, content: str) -> None:
        if recipient in self.failing:
            raise RuntimeError("mailbox unavailable")
        self.sent.append((recipient, subject, content))


async def heuristic_summarizer(transcript, meeting_title, participant_names=()):
    # No API key configured, so this always takes the heuristic path.
    return await summarize(transcript, meeting_title, participant_names, config=SummarizerConfig())


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        environment="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'meetassist.db'}",
        elevenlabs_api_key=None,
        deepseek_api_key=None,
        resend_api_key=None,
        public_base_url=None,
    )


@pytest_asyncio.fixture
async def database(settings: Settings) -> AsyncIterator[Database]:
    db = Database(settings.database_url)
    await db.create_all(drop=True)
    try:
        yield db
    finally:
        await db.dispose()


@pytest.fixture
def gateway(database: Database) -> PersistenceGateway:
    return PersistenceGateway(database)


@pytest.fixture
def transcriber() -> FakeTranscriber:
    return FakeTranscriber()


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def providers(transcriber: FakeTranscriber, email_sender: RecordingEmailSender) -> Providers:
    return Providers(transcriber=transcriber, summarizer=heuristic_summarizer, email_sender=email_sender)


@pytest_asyncio.fixture
async def client(settings: Settings, database: Database, providers: Providers) -> AsyncIterator[httpx.AsyncClient]:
    app = create_app(settings=settings, database=database, providers=providers)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
