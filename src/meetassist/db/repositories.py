"""Repository implementations using SQLAlchemy async sessions."""
from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Meeting, Notification, Participant, Recording, Summary, Transcript

# Columns a caller may patch through update-meeting.
MEETING_UPDATABLE_FIELDS = frozenset(
    {
        "user_id",
        "title",
        "description",
        "start_time",
        "end_time",
        "duration_seconds",
        "meeting_url",
        "meeting_platform",
        "status",
    }
)


class MeetingRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, meeting_id: str) -> Meeting | None:
        result = await self.session.execute(select(Meeting).where(Meeting.id == meeting_id))
        return result.scalar_one_or_none()

    async def add(self, **fields: Any) -> Meeting:
        meeting = Meeting(**fields)
        self.session.add(meeting)
        await self.session.flush()  # assign id
        return meeting

    async def update(self, meeting_id: str, fields: dict[str, Any]) -> Meeting | None:
        unknown = set(fields) - MEETING_UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown meeting fields: {', '.join(sorted(unknown))}")
        values = dict(fields, updated_at=datetime.now(UTC))
        result = await self.session.execute(
            update(Meeting).where(Meeting.id == meeting_id).values(**values)
        )
        if result.rowcount == 0:
            return None
        await self.session.flush()
        refreshed = await self.session.execute(
            select(Meeting)
            .where(Meeting.id == meeting_id)
            .execution_options(populate_existing=True)
        )
        return refreshed.scalar_one_or_none()

    async def list_active(
        self, user_id: str | None = None, limit: int = 50
    ) -> list[tuple[Meeting, int, str | None]]:
        """Active meetings, newest first, with participant count and summary text."""
        participant_count = (
            select(func.count(Participant.id))
            .where(Participant.meeting_id == Meeting.id)
            .scalar_subquery()
        )
        summary_text = (
            select(func.max(Summary.summary_text))
            .where(Summary.meeting_id == Meeting.id)
            .scalar_subquery()
        )
        stmt = (
            select(Meeting, participant_count, summary_text)
            .where(Meeting.status == "active")
            .order_by(Meeting.start_time.desc())
            .limit(limit)
        )
        if user_id is not None:
            stmt = stmt.where(Meeting.user_id == user_id)
        result = await self.session.execute(stmt)
        return [(row[0], int(row[1] or 0), row[2]) for row in result.all()]

    async def archive_all(self) -> int:
        result = await self.session.execute(
            update(Meeting)
            .where(Meeting.status == "active")
            .values(status="archived", updated_at=datetime.now(UTC))
        )
        return result.rowcount or 0

    async def delete(self, meeting_id: str) -> bool:
        result = await self.session.execute(delete(Meeting).where(Meeting.id == meeting_id))
        return bool(result.rowcount)


class ParticipantRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add_many(self, meeting_id: str, rows: Sequence[dict[str, Any]]) -> list[Participant]:
        participants = [
            Participant(meeting_id=meeting_id, position=index, **row) for index, row in enumerate(rows)
        ]
        self.session.add_all(participants)
        await self.session.flush()
        return participants

    async def list_by_meeting(self, meeting_id: str) -> list[Participant]:
        result = await self.session.execute(
            select(Participant)
            .where(Participant.meeting_id == meeting_id)
            .order_by(Participant.position, Participant.created_at)
        )
        return list(result.scalars())


class RecordingRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, **fields: Any) -> Recording:
        recording = Recording(**fields)
        self.session.add(recording)
        await self.session.flush()
        return recording


class TranscriptRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, **fields: Any) -> Transcript:
        transcript = Transcript(**fields)
        self.session.add(transcript)
        await self.session.flush()
        return transcript

    async def latest_for_meeting(self, meeting_id: str) -> Transcript | None:
        result = await self.session.execute(
            select(Transcript)
            .where(Transcript.meeting_id == meeting_id)
            .order_by(Transcript.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()


class SummaryRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, **fields: Any) -> Summary:
        summary = Summary(**fields)
        self.session.add(summary)
        await self.session.flush()
        return summary

    async def latest_for_meeting(self, meeting_id: str) -> Summary | None:
        result = await self.session.execute(
            select(Summary)
            .where(Summary.meeting_id == meeting_id)
            .order_by(Summary.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()


class NotificationRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def append(self, **fields: Any) -> Notification:
        notification = Notification(**fields)
        self.session.add(notification)
        await self.session.flush()
        return notification

    async def list_by_meeting(self, meeting_id: str) -> list[Notification]:
        result = await self.session.execute(
            select(Notification)
            .where(Notification.meeting_id == meeting_id)
            .order_by(Notification.id)
        )
        return list(result.scalars())
