"""Request and response schemas for the HTTP boundary.

Bodies use camelCase on the wire (``meetingData``, ``audioData``); snake_case field
names are accepted too.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from meetassist.pipelines.interfaces import LanguageHint
from meetassist.services.gateway import MeetingAggregate

Role = Literal["organizer", "presenter", "attendee"]
MeetingStatus = Literal["active", "archived", "deleted"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ParticipantIn(CamelModel):
    name: str = Field(min_length=1)
    email: str | None = None
    role: Role = "attendee"

    @field_validator("email")
    @classmethod
    def _blank_email_is_none(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value.strip()


class MeetingDataIn(CamelModel):
    title: str = Field(min_length=1)
    participants: list[ParticipantIn] = Field(default_factory=list)
    meeting_url: str | None = None
    start_time: datetime | None = None
    platform: str | None = None


class ProcessRecordingRequest(CamelModel):
    meeting_data: MeetingDataIn
    audio_data: str = Field(min_length=1)
    duration: int = Field(default=0, ge=0)
    start_time: datetime | None = None
    end_time: datetime | None = None
    language: LanguageHint | None = None


class TranscribeRequest(CamelModel):
    audio_data: str = Field(min_length=1)
    language: LanguageHint = LanguageHint.HINGLISH


class MeetingCreate(CamelModel):
    title: str = Field(min_length=1)
    description: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    duration: int = Field(default=0, ge=0)
    meeting_url: str | None = None
    platform: str = "web"
    user_id: str | None = None
    participants: list[ParticipantIn] = Field(default_factory=list)


class MeetingUpdate(CamelModel):
    """Partial update: only fields present in the body are written."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    duration_seconds: int | None = Field(default=None, ge=0)
    meeting_url: str | None = None
    meeting_platform: str | None = None
    status: MeetingStatus | None = None
    user_id: str | None = None

    def changes(self) -> dict[str, Any]:
        changes = self.model_dump(exclude_unset=True)
        for required in ("title", "start_time", "meeting_platform", "status"):
            if required in changes and changes[required] is None:
                changes.pop(required)
        return changes


class MeetingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str | None = None
    title: str
    description: str | None = None
    start_time: datetime
    end_time: datetime | None = None
    duration_seconds: int | None = None
    meeting_url: str | None = None
    meeting_platform: str
    status: str
    created_at: datetime
    updated_at: datetime


class MeetingListItem(MeetingOut):
    participant_count: int = 0
    summary_text: str | None = None


def format_meeting_aggregate(aggregate: MeetingAggregate) -> dict[str, Any]:
    """Dashboard view of one meeting with its transcript, summary and participants."""
    meeting, transcript, summary = aggregate.meeting, aggregate.transcript, aggregate.summary
    participants = aggregate.participants
    return {
        "id": meeting.id,
        "title": meeting.title,
        "date": meeting.start_time.isoformat(),
        "duration": meeting.duration_seconds or 0,
        "transcript": transcript.content if transcript else "",
        "summary": summary.summary_text if summary else "No summary available",
        "keyPoints": summary.key_points if summary else [],
        "actionItems": summary.action_items if summary else [],
        "decisions": summary.decisions if summary else [],
        "nextSteps": summary.next_steps if summary else [],
        "participants": [p.name for p in participants],
        "meetingUrl": meeting.meeting_url,
        "platform": meeting.meeting_platform,
        "status": meeting.status,
        "transcriptionMetadata": {
            "source": transcript.api_provider,
            "confidence": transcript.confidence_score or 0,
            "processingTime": transcript.processing_time_ms or 0,
            "language": transcript.language,
        }
        if transcript
        else None,
        "summaryMetadata": {
            "aiProvider": summary.ai_provider,
            "processingTime": summary.processing_time_ms or 0,
        }
        if summary
        else None,
        "participantDetails": [
            {
                "name": p.name,
                "email": p.email,
                "role": p.role,
                "joinTime": p.join_time.isoformat() if p.join_time else None,
                "leaveTime": p.leave_time.isoformat() if p.leave_time else None,
                "duration": p.duration_seconds,
            }
            for p in participants
        ],
    }
