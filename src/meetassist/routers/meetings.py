"""Meeting collection endpoints: create, list, patch, archive and delete."""
from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any, Literal

from fastapi import APIRouter, Depends, Query

from meetassist.core.errors import ErrorResponse, ForbiddenError, NotFoundError
from meetassist.core.settings import Settings
from meetassist.db.dependencies import get_app_settings, get_gateway
from meetassist.schemas import MeetingCreate, MeetingListItem, MeetingOut, MeetingUpdate
from meetassist.services.gateway import PersistenceGateway

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/meetings",
    tags=["meetings"],
    responses={code: {"model": ErrorResponse} for code in (403, 404, 409)},
)


@router.post("")
async def create_meeting(
    body: MeetingCreate,
    gateway: PersistenceGateway = Depends(get_gateway),  # noqa: B008
) -> dict[str, Any]:
    start = body.start_time or datetime.now(UTC)
    meeting = await gateway.create_meeting(
        user_id=body.user_id,
        title=body.title,
        description=body.description,
        start_time=start,
        end_time=body.end_time,
        duration_seconds=body.duration,
        meeting_url=body.meeting_url,
        meeting_platform=body.platform,
        status="active",
    )
    participants = await gateway.add_participants(
        meeting.id,
        [
            dict(p.model_dump(), join_time=start, duration_seconds=body.duration)
            for p in body.participants
        ],
    )
    logger.info(f"Meeting created: {meeting.id} {meeting.title!r} ({len(participants)} participants)")
    return {
        "meeting": MeetingOut.model_validate(meeting).model_dump(mode="json"),
        "participants": [{"name": p.name, "email": p.email, "role": p.role} for p in participants],
        "message": "Meeting created successfully",
    }


@router.get("")
async def list_meetings(
    user_id: str | None = Query(default=None, alias="userId"),
    limit: int = Query(default=50, ge=1, le=500),
    gateway: PersistenceGateway = Depends(get_gateway),  # noqa: B008
) -> dict[str, Any]:
    listings = await gateway.list_meetings(user_id=user_id, limit=limit)
    meetings = [
        MeetingListItem.model_validate(
            {
                **MeetingOut.model_validate(item.meeting).model_dump(),
                "participant_count": item.participant_count,
                "summary_text": item.summary_text,
            }
        ).model_dump(mode="json")
        for item in listings
    ]
    return {"meetings": meetings, "count": len(meetings), "message": "Meetings retrieved successfully"}


async def apply_update(gateway: PersistenceGateway, meeting_id: str, body: MeetingUpdate) -> dict[str, Any]:
    meeting = await gateway.update_meeting(meeting_id, body.changes())
    if meeting is None:
        raise NotFoundError()
    return {
        "meeting": MeetingOut.model_validate(meeting).model_dump(mode="json"),
        "message": "Meeting updated successfully",
    }


@router.put("")
async def update_meeting(
    body: MeetingUpdate,
    meeting_id: str = Query(alias="id"),
    gateway: PersistenceGateway = Depends(get_gateway),  # noqa: B008
) -> dict[str, Any]:
    return await apply_update(gateway, meeting_id, body)


@router.patch("")
async def patch_meeting(
    body: MeetingUpdate,
    meeting_id: str = Query(alias="id"),
    gateway: PersistenceGateway = Depends(get_gateway),  # noqa: B008
) -> dict[str, Any]:
    return await apply_update(gateway, meeting_id, body)


@router.delete("")
async def delete_meetings(
    meeting_id: str | None = Query(default=None, alias="id"),
    action: Literal["archive", "delete"] = Query(default="archive"),
    gateway: PersistenceGateway = Depends(get_gateway),  # noqa: B008
    settings: Settings = Depends(get_app_settings),  # noqa: B008
) -> dict[str, Any]:
    if meeting_id is None:
        if settings.is_production:
            raise ForbiddenError("Bulk archive is not allowed in production")
        count = await gateway.archive_all_meetings()
        return {"message": f"All meetings archived ({settings.environment} mode)", "count": count}
    return await remove_meeting(gateway, meeting_id, action)


async def remove_meeting(gateway: PersistenceGateway, meeting_id: str, action: str) -> dict[str, Any]:
    if action == "delete":
        if not await gateway.delete_meeting(meeting_id):
            raise NotFoundError()
    elif await gateway.archive_meeting(meeting_id) is None:
        raise NotFoundError()
    return {"id": meeting_id, "action": action, "message": f"Meeting {action}d successfully"}
