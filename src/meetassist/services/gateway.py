"""Persistence gateway: one committed unit of work per entity lifecycle event.

Every operation opens its own session from the injected :class:`Database` and
commits before returning, so a pipeline that aborts half way keeps whatever it
already wrote. Lookups by id return ``None`` rather than raising.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from meetassist.core.errors import StatusTransitionError
from meetassist.db.base import Database
from meetassist.db.models import Meeting, Notification, Participant, Recording, Summary, Transcript
from meetassist.db.repositories import (
    MeetingRepository,
    NotificationRepository,
    ParticipantRepository,
    RecordingRepository,
    SummaryRepository,
    TranscriptRepository,
)

logger = logging.getLogger(__name__)

_STATUS_SUCCESSORS: dict[str, frozenset[str]] = {
    "active": frozenset({"archived", "deleted"}),
    "archived": frozenset({"deleted"}),
    "deleted": frozenset(),
}


def check_status_transition(current: str, requested: str) -> None:
    if requested == current:
        return
    if requested not in _STATUS_SUCCESSORS.get(current, frozenset()):
        raise StatusTransitionError(current, requested)


def dedupe_participants(participants: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Drop rows without a name and repeated names (case-insensitive), keeping the first."""
    seen: set[str] = set()
    unique: list[dict[str, Any]] = []
    for row in participants:
        name = str(row.get("name") or "").strip()
        if not name:
            continue
        key = name.casefold()
        if key in seen:
            continue
        seen.add(key)
        unique.append(dict(row, name=name))
    return unique


@dataclass(slots=True)
class MeetingAggregate:
    meeting: Meeting
    participants: list[Participant]
    transcript: Transcript | None
    summary: Summary | None


@dataclass(slots=True)
class MeetingListing:
    meeting: Meeting
    participant_count: int
    summary_text: str | None


class PersistenceGateway:
    def __init__(self, database: Database) -> None:
        self.database = database

    # Meetings

    async def create_meeting(self, **fields: Any) -> Meeting:
        fields.setdefault("status", "active")
        async with self.database.session() as session:
            meeting = await MeetingRepository(session).add(**fields)
            await session.commit()
        logger.debug(f"Created meeting {meeting.id}")
        return meeting

    async def get_meeting(self, meeting_id: str) -> Meeting | None:
        async with self.database.session() as session:
            return await MeetingRepository(session).get(meeting_id)

    async def update_meeting(self, meeting_id: str, fields: Mapping[str, Any]) -> Meeting | None:
        """Patch only the supplied columns; absent fields are left untouched."""
        async with self.database.session() as session:
            repo = MeetingRepository(session)
            current = await repo.get(meeting_id)
            if current is None:
                return None
            if "status" in fields and fields["status"] is not None:
                check_status_transition(current.status, fields["status"])
            if not fields:
                return current
            meeting = await repo.update(meeting_id, dict(fields))
            await session.commit()
            return meeting

    async def archive_meeting(self, meeting_id: str) -> Meeting | None:
        return await self.update_meeting(meeting_id, {"status": "archived"})

    async def delete_meeting(self, meeting_id: str) -> bool:
        async with self.database.session() as session:
            deleted = await MeetingRepository(session).delete(meeting_id)
            await session.commit()
        if deleted:
            logger.info(f"Deleted meeting {meeting_id}")
        return deleted

    async def archive_all_meetings(self) -> int:
        async with self.database.session() as session:
            count = await MeetingRepository(session).archive_all()
            await session.commit()
        logger.info(f"Archived {count} meetings")
        return count

    async def list_meetings(self, user_id: str | None = None, limit: int = 50) -> list[MeetingListing]:
        async with self.database.session() as session:
            rows = await MeetingRepository(session).list_active(user_id=user_id, limit=limit)
        return [MeetingListing(meeting, count, text) for meeting, count, text in rows]

    # Meeting artifacts

    async def add_participants(
        self, meeting_id: str, participants: Sequence[Mapping[str, Any]]
    ) -> list[Participant]:
        rows = dedupe_participants(participants)
        if not rows:
            return []
        async with self.database.session() as session:
            created = await ParticipantRepository(session).add_many(meeting_id, rows)
            await session.commit()
        return created

    async def create_recording(self, **fields: Any) -> Recording:
        async with self.database.session() as session:
            recording = await RecordingRepository(session).add(**fields)
            await session.commit()
        return recording

    async def create_transcript(self, **fields: Any) -> Transcript:
        async with self.database.session() as session:
            transcript = await TranscriptRepository(session).add(**fields)
            await session.commit()
        return transcript

    async def create_summary(self, **fields: Any) -> Summary:
        async with self.database.session() as session:
            summary = await SummaryRepository(session).add(**fields)
            await session.commit()
        return summary

    async def get_complete_meeting_data(self, meeting_id: str) -> MeetingAggregate | None:
        meeting = await self.get_meeting(meeting_id)
        if meeting is None:
            return None
        participants, transcript, summary = await asyncio.gather(
            self._participants(meeting_id),
            self._latest_transcript(meeting_id),
            self._latest_summary(meeting_id),
        )
        return MeetingAggregate(meeting, participants, transcript, summary)

    async def _participants(self, meeting_id: str) -> list[Participant]:
        async with self.database.session() as session:
            return await ParticipantRepository(session).list_by_meeting(meeting_id)

    async def _latest_transcript(self, meeting_id: str) -> Transcript | None:
        async with self.database.session() as session:
            return await TranscriptRepository(session).latest_for_meeting(meeting_id)

    async def _latest_summary(self, meeting_id: str) -> Summary | None:
        async with self.database.session() as session:
            return await SummaryRepository(session).latest_for_meeting(meeting_id)

    # Notification log

    async def append_notification_log(
        self,
        *,
        meeting_id: str,
        recipient_email: str,
        subject: str,
        content: str,
        status: str,
        error_message: str | None = None,
    ) -> Notification:
        async with self.database.session() as session:
            row = await NotificationRepository(session).append(
                meeting_id=meeting_id,
                recipient_email=recipient_email,
                subject=subject,
                content=content,
                status=status,
                error_message=error_message,
            )
            await session.commit()
        return row

    async def list_notifications(self, meeting_id: str) -> list[Notification]:
        async with self.database.session() as session:
            return await NotificationRepository(session).list_by_meeting(meeting_id)
