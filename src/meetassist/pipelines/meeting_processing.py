"""Meeting processing pipeline: audio in, persisted transcript and summary out.

Stages run strictly in order::

    RECEIVED -> MEETING_CREATED -> PARTICIPANTS_ADDED -> RECORDING_LOGGED -> TRANSCRIBED
    -> TRANSCRIPT_SAVED -> SUMMARIZED -> SUMMARY_SAVED -> NOTIFIED -> COMPLETE

An exception in any stage from MEETING_CREATED through SUMMARY_SAVED aborts the run
with a failure result. Rows written before the failure are kept. NOTIFIED is the only
non-fatal stage: its errors are logged and the run still completes.
"""
from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, TypeVar

from meetassist.db.models import Meeting, Summary, Transcript
from meetassist.pipelines.interfaces import (
    EmailSender,
    LanguageHint,
    NotificationReport,
    Summarizer,
    Transcriber,
)
from meetassist.pipelines.notifications import notify
from meetassist.pipelines.transcription import decode_audio_payload
from meetassist.schemas import ProcessRecordingRequest
from meetassist.services.gateway import PersistenceGateway

logger = logging.getLogger(__name__)

T = TypeVar("T")

RECORDING_FORMAT = "webm"
RECORDING_QUALITY = 0.8
FAILURE_CODE = "processing_failed"
FAILURE_MESSAGE = "Failed to process meeting recording"


class PipelineStage(str, Enum):
    RECEIVED = "received"
    MEETING_CREATED = "meeting_created"
    PARTICIPANTS_ADDED = "participants_added"
    RECORDING_LOGGED = "recording_logged"
    TRANSCRIBED = "transcribed"
    TRANSCRIPT_SAVED = "transcript_saved"
    SUMMARIZED = "summarized"
    SUMMARY_SAVED = "summary_saved"
    NOTIFIED = "notified"
    COMPLETE = "complete"


class StageFailed(Exception):
    def __init__(self, stage: PipelineStage, cause: Exception) -> None:
        super().__init__(str(cause) or type(cause).__name__)
        self.stage = stage
        self.cause = cause


@dataclass(slots=True)
class PipelineResult:
    success: bool
    stage: PipelineStage
    processing_time_ms: int
    meeting_id: str | None = None
    summary: dict[str, Any] | None = None
    transcript: dict[str, Any] | None = None
    participants: list[dict[str, Any]] = field(default_factory=list)
    urls: dict[str, str] = field(default_factory=dict)
    notifications: NotificationReport | None = None
    notification_error: str | None = None
    error: str | None = None
    details: str | None = None

    def to_dict(self) -> dict[str, Any]:
        if not self.success:
            return {
                "success": False,
                "error": FAILURE_CODE,
                "message": self.error,
                "details": self.details,
                "stage": self.stage.value,
                "meetingId": self.meeting_id,
                "processingTime": self.processing_time_ms,
            }
        return {
            "success": True,
            "meetingId": self.meeting_id,
            "processingTime": self.processing_time_ms,
            "stage": self.stage.value,
            "summary": self.summary,
            "transcript": self.transcript,
            "participants": self.participants,
            "urls": self.urls,
            "notifications": self.notifications.to_dict() if self.notifications else None,
            "notificationError": self.notification_error,
        }


def navigation_urls(base_url: str, meeting_id: str) -> dict[str, str]:
    base = base_url.rstrip("/")
    return {
        "dashboard": f"{base}/meeting/{meeting_id}",
        "transcript": f"{base}/transcript/{meeting_id}",
    }


class MeetingProcessingPipeline:
    def __init__(
        self,
        gateway: PersistenceGateway,
        transcriber: Transcriber,
        summarizer: Summarizer,
        email_sender: EmailSender,
        *,
        default_language: LanguageHint = LanguageHint.HINGLISH,
        default_platform: str = "google_meet",
    ) -> None:
        self.gateway = gateway
        self.transcriber = transcriber
        self.summarizer = summarizer
        self.email_sender = email_sender
        self.default_language = default_language
        self.default_platform = default_platform

    async def run(self, request: ProcessRecordingRequest, base_url: str) -> PipelineResult:
        """Run every stage for one recording.

        Raises :class:`InvalidAudioError` before anything is written when the audio
        payload is unusable; every other failure is reported in the result.
        """
        started = time.perf_counter()
        decode_audio_payload(request.audio_data)
        meeting_data = request.meeting_data
        participants = [p.model_dump() for p in meeting_data.participants]
        state = {"stage": PipelineStage.RECEIVED, "meeting_id": None}
        logger.info(f"Processing recording for {meeting_data.title!r} ({len(participants)} participants)")

        async def stage(name: PipelineStage, step: Callable[[], Awaitable[T]]) -> T:
            try:
                value = await step()
            except Exception as exc:
                raise StageFailed(name, exc) from exc
            state["stage"] = name
            logger.info(f"Pipeline stage reached: {name.value}")
            return value

        try:
            meeting = await stage(PipelineStage.MEETING_CREATED, lambda: self._create_meeting(request))
            state["meeting_id"] = meeting.id
            await stage(
                PipelineStage.PARTICIPANTS_ADDED,
                lambda: self._add_participants(meeting, participants),
            )
            recording = await stage(
                PipelineStage.RECORDING_LOGGED,
                lambda: self.gateway.create_recording(
                    meeting_id=meeting.id,
                    file_path=f"recordings/{meeting.id}.{RECORDING_FORMAT}",
                    file_size_bytes=round(len(request.audio_data) * 0.75),
                    duration_seconds=request.duration,
                    format=RECORDING_FORMAT,
                    quality_score=RECORDING_QUALITY,
                ),
            )
            language = request.language or self.default_language
            transcription = await stage(
                PipelineStage.TRANSCRIBED, lambda: self.transcriber(request.audio_data, language)
            )
            transcript: Transcript = await stage(
                PipelineStage.TRANSCRIPT_SAVED,
                lambda: self.gateway.create_transcript(
                    meeting_id=meeting.id,
                    recording_id=recording.id,
                    content=transcription.text,
                    language=transcription.language.value,
                    confidence_score=transcription.confidence,
                    processing_time_ms=transcription.processing_time_ms,
                    api_provider=transcription.provider,
                ),
            )
            names = [p["name"] for p in participants]
            generated = await stage(
                PipelineStage.SUMMARIZED,
                lambda: self.summarizer(transcript.content, meeting.title, names),
            )
            summary: Summary = await stage(
                PipelineStage.SUMMARY_SAVED,
                lambda: self.gateway.create_summary(
                    meeting_id=meeting.id,
                    transcript_id=transcript.id,
                    summary_text=generated.summary,
                    key_points=generated.key_points,
                    action_items=generated.action_items,
                    decisions=generated.decisions,
                    next_steps=generated.next_steps,
                    ai_provider=generated.provider,
                    processing_time_ms=generated.processing_time_ms,
                ),
            )
        except StageFailed as failure:
            elapsed = _elapsed_ms(started)
            logger.exception(
                f"Meeting processing aborted during {failure.stage.value} after {elapsed}ms: {failure}"
            )
            return PipelineResult(
                success=False,
                stage=failure.stage,
                processing_time_ms=elapsed,
                meeting_id=state["meeting_id"],
                error=FAILURE_MESSAGE,
                details=str(failure),
            )

        result = PipelineResult(
            success=True,
            stage=PipelineStage.COMPLETE,
            processing_time_ms=0,
            meeting_id=meeting.id,
            summary={
                "title": meeting.title,
                "summary": summary.summary_text,
                "keyPoints": summary.key_points,
                "actionItems": summary.action_items,
                "decisions": summary.decisions,
                "nextSteps": summary.next_steps,
            },
            transcript={
                "content": transcript.content,
                "confidence": transcript.confidence_score,
                "language": transcript.language,
                "source": transcript.api_provider,
            },
            participants=participants,
            urls=navigation_urls(base_url, meeting.id),
        )

        try:
            result.notifications = await stage(
                PipelineStage.NOTIFIED,
                lambda: notify(meeting, summary, participants, gateway=self.gateway, sender=self.email_sender),
            )
        except StageFailed as failure:
            # NOTIFIED is best-effort; the run still completes.
            logger.warning(f"Email notification failed for meeting {meeting.id}: {failure}")
            result.notification_error = str(failure)

        result.processing_time_ms = _elapsed_ms(started)
        logger.info(
            f"Meeting {meeting.id} processed in {result.processing_time_ms}ms "
            f"(transcript {len(transcript.content)} chars, provider {transcript.api_provider})"
        )
        return result

    async def _create_meeting(self, request: ProcessRecordingRequest) -> Meeting:
        data = request.meeting_data
        start = request.start_time or data.start_time or datetime.now(UTC)
        return await self.gateway.create_meeting(
            title=data.title,
            description="Meeting processed from browser extension",
            start_time=start,
            end_time=request.end_time,
            duration_seconds=request.duration,
            meeting_url=data.meeting_url,
            meeting_platform=data.platform or self.default_platform,
            status="active",
        )

    async def _add_participants(self, meeting: Meeting, participants: list[dict[str, Any]]) -> list[Any]:
        if not participants:
            return []
        return await self.gateway.add_participants(
            meeting.id,
            [
                dict(
                    p,
                    join_time=meeting.start_time,
                    leave_time=meeting.end_time,
                    duration_seconds=meeting.duration_seconds,
                )
                for p in participants
            ],
        )


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
