"""API tests for /process-recording and /transcribe."""
from __future__ import annotations

import httpx
import pytest

from meetassist import create_app
from meetassist.pipelines.interfaces import LanguageHint
from meetassist.pipelines.transcription import FALLBACK_TRANSCRIPTS, TranscriptionConfig, transcribe
from meetassist.services.gateway import PersistenceGateway
from meetassist.services.pipelines import Providers

from conftest import WAV_BASE64, heuristic_summarizer

PAYLOAD = {
    "meetingData": {
        "title": "Sprint Planning",
        "participants": [{"name": "Sam", "email": "sam@x.com"}],
        "meetingUrl": "https://meet.google.com/abc-defg-hij",
        "startTime": "2024-05-06T09:30:00Z",
    },
    "audioData": WAV_BASE64,
    "duration": 1800,
    "startTime": "2024-05-06T09:30:00Z",
    "endTime": "2024-05-06T10:00:00Z",
}


@pytest.mark.asyncio
async def test_process_recording(client, gateway, email_sender):
    resp = await client.post("/api/process-recording", json=PAYLOAD)

    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["success"] is True
    assert data["stage"] == "complete"
    meeting_id = data["meetingId"]
    assert meeting_id
    assert data["transcript"]["content"]
    assert len(data["summary"]["keyPoints"]) >= 1
    assert data["summary"]["title"] == "Sprint Planning"
    assert data["urls"]["dashboard"] == f"http://test/meeting/{meeting_id}"
    assert data["notifications"] == {"sent": 1, "failed": 0, "errors": []}
    assert isinstance(data["processingTime"], int)

    rows = await gateway.list_notifications(meeting_id)
    assert [row.recipient_email for row in rows] == ["sam@x.com"]

    dashboard = (await client.get(f"/api/meeting/{meeting_id}")).json()["meeting"]
    assert dashboard["transcriptionMetadata"]["source"] == "elevenlabs"
    assert dashboard["participantDetails"][0]["email"] == "sam@x.com"
    assert dashboard["keyPoints"] == data["summary"]["keyPoints"]

    log = (await client.get(f"/api/meeting/{meeting_id}/notifications")).json()
    assert log["count"] == 1
    assert log["notifications"][0]["status"] == "sent"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {**PAYLOAD, "audioData": ""},
        {key: value for key, value in PAYLOAD.items() if key != "audioData"},
        {**PAYLOAD, "meetingData": {"participants": []}},
        {**PAYLOAD, "audioData": "***not-base64***"},
    ],
    ids=["empty-audio", "missing-audio", "missing-title", "undecodable-audio"],
)
async def test_process_recording_rejects_bad_input(client, gateway, payload):
    resp = await client.post("/api/process-recording", json=payload)
    assert resp.status_code == 400
    assert resp.json()["message"]
    assert await gateway.list_meetings() == []


@pytest.mark.asyncio
async def test_process_recording_persistence_failure_is_500(settings, database, providers, monkeypatch):
    async def broken(self, **fields):
        raise RuntimeError("database is locked")

    monkeypatch.setattr(PersistenceGateway, "create_summary", broken)
    app = create_app(settings=settings, database=database, providers=providers)
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
        resp = await client.post("/api/process-recording", json=PAYLOAD)

    assert resp.status_code == 500
    data = resp.json()
    assert data["success"] is False
    assert data["error"] == "processing_failed"
    assert data["message"] == "Failed to process meeting recording"
    assert data["details"] == "database is locked"
    assert data["stage"] == "summary_saved"
    assert "processingTime" in data


@pytest.mark.asyncio
async def test_transcribe_with_fake_provider(client, transcriber):
    resp = await client.post("/api/transcribe", json={"audioData": WAV_BASE64, "language": "en"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["source"] == "elevenlabs"
    assert data["language"] == "en"
    assert transcriber.calls == [LanguageHint.EN]


@pytest.mark.asyncio
async def test_transcribe_falls_back_when_provider_is_down(settings, database, email_sender):
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    stt_client = httpx.AsyncClient(transport=httpx.MockTransport(refuse))
    config = TranscriptionConfig(api_key="test-key")

    async def transcriber(audio_payload, language):
        return await transcribe(audio_payload, language, config=config, client=stt_client)

    providers = Providers(transcriber=transcriber, summarizer=heuristic_summarizer, email_sender=email_sender)
    app = create_app(settings=settings, database=database, providers=providers)
    try:
        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
            resp = await client.post("/api/transcribe", json={"audioData": WAV_BASE64})
    finally:
        await stt_client.aclose()

    assert resp.status_code == 200
    data = resp.json()
    assert data["source"] == "fallback"
    assert data["confidence"] == 0.8
    assert data["language"] == "hinglish"
    assert data["text"] in FALLBACK_TRANSCRIPTS[LanguageHint.HINGLISH]


@pytest.mark.asyncio
async def test_transcribe_requires_audio(client):
    resp = await client.post("/api/transcribe", json={"audioData": ""})
    assert resp.status_code == 400
