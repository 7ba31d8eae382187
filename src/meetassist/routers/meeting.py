"""Single meeting endpoints: full aggregate, Markdown export, update and removal."""
from __future__ import annotations

from typing import Any, Literal

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse

from meetassist.core.errors import ErrorResponse, NotFoundError
from meetassist.db.dependencies import get_gateway
from meetassist.routers.meetings import apply_update, remove_meeting
from meetassist.schemas import MeetingUpdate, format_meeting_aggregate
from meetassist.services.gateway import MeetingAggregate, PersistenceGateway
from meetassist.services.rendering import render_markdown

router = APIRouter(prefix="/meeting", tags=["meetings"], responses={404: {"model": ErrorResponse}})


async def _aggregate(gateway: PersistenceGateway, meeting_id: str) -> MeetingAggregate:
    aggregate = await gateway.get_complete_meeting_data(meeting_id)
    if aggregate is None:
        raise NotFoundError()
    return aggregate


@router.get("/{meeting_id}")
async def get_meeting(
    meeting_id: str, gateway: PersistenceGateway = Depends(get_gateway)  # noqa: B008
) -> dict[str, Any]:
    aggregate = await _aggregate(gateway, meeting_id)
    return {
        "meeting": format_meeting_aggregate(aggregate),
        "message": "Meeting data retrieved successfully",
    }


@router.get("/{meeting_id}/markdown", response_class=PlainTextResponse)
async def export_markdown(
    meeting_id: str,
    include_transcript: bool = Query(default=True, alias="includeTranscript"),
    gateway: PersistenceGateway = Depends(get_gateway),  # noqa: B008
) -> str:
    return render_markdown(await _aggregate(gateway, meeting_id), include_transcript=include_transcript)


@router.get("/{meeting_id}/notifications")
async def list_notifications(
    meeting_id: str, gateway: PersistenceGateway = Depends(get_gateway)  # noqa: B008
) -> dict[str, Any]:
    if await gateway.get_meeting(meeting_id) is None:
        raise NotFoundError()
    rows = await gateway.list_notifications(meeting_id)
    return {
        "notifications": [
            {
                "recipientEmail": row.recipient_email,
                "subject": row.subject,
                "status": row.status,
                "errorMessage": row.error_message,
                "createdAt": row.created_at.isoformat(),
            }
            for row in rows
        ],
        "count": len(rows),
    }


@router.put("/{meeting_id}")
async def update_meeting(
    meeting_id: str,
    body: MeetingUpdate,
    gateway: PersistenceGateway = Depends(get_gateway),  # noqa: B008
) -> dict[str, Any]:
    return await apply_update(gateway, meeting_id, body)


@router.delete("/{meeting_id}")
async def delete_meeting(
    meeting_id: str,
    action: Literal["archive", "delete"] = Query(default="archive"),
    gateway: PersistenceGateway = Depends(get_gateway),  # noqa: B008
) -> dict[str, Any]:
    return await remove_meeting(gateway, meeting_id, action)
