"""Notification fan-out against a real SQLite notification log."""
from __future__ import annotations

from datetime import UTC, datetime

import pytest

from meetassist.pipelines.notifications import notify, recipients_with_email
from meetassist.services.gateway import PersistenceGateway

from conftest import RecordingEmailSender


async def _meeting_with_summary(gateway):
    meeting = await gateway.create_meeting(
        title="Sprint Planning",
        start_time=datetime(2024, 5, 6, 9, 30, tzinfo=UTC),
        duration_seconds=1800,
        meeting_platform="google_meet",
    )
    summary = await gateway.create_summary(
        meeting_id=meeting.id,
        summary_text="Planned the sprint.",
        key_points=["Scope agreed"],
        action_items=["Sam ships API"],
        decisions=[],
        next_steps=["Review plan"],
        ai_provider="fallback",
    )
    return meeting, summary


def test_recipients_skip_missing_and_blank_emails():
    participants = [
        {"name": "Sam", "email": "sam@x.com"},
        {"name": "Ana", "email": None},
        {"name": "Ben", "email": "  "},
        {"name": "Cy"},
    ]
    assert recipients_with_email(participants) == [("Sam", "sam@x.com")]


@pytest.mark.asyncio
async def test_one_failing_recipient_does_not_block_others(gateway):
    meeting, summary = await _meeting_with_summary(gateway)
    sender = RecordingEmailSender(failing={"bad@x.com"})
    participants = [
        {"name": "Sam", "email": "sam@x.com"},
        {"name": "Bad", "email": "bad@x.com"},
        {"name": "Ana", "email": "ana@x.com"},
    ]

    report = await notify(meeting, summary, participants, gateway=gateway, sender=sender)

    assert report.sent == 2
    assert report.failed == 1
    assert report.errors == ["bad@x.com: mailbox unavailable"]
    assert sorted(r for r, _, _ in sender.sent) == ["ana@x.com", "sam@x.com"]

    rows = await gateway.list_notifications(meeting.id)
    assert len(rows) == 3
    failed = [row for row in rows if row.status == "failed"]
    assert len(failed) == 1
    assert failed[0].recipient_email == "bad@x.com"
    assert failed[0].error_message == "mailbox unavailable"
    assert all(row.subject == "Meeting Summary: Sprint Planning" for row in rows)


@pytest.mark.asyncio
async def test_email_body_layout(gateway):
    meeting, summary = await _meeting_with_summary(gateway)
    sender = RecordingEmailSender()

    await notify(meeting, summary, [{"name": "Sam", "email": "sam@x.com"}], gateway=gateway, sender=sender)

    (_, subject, content), = sender.sent
    assert subject == "Meeting Summary: Sprint Planning"
    assert "Summary:\nPlanned the sprint." in content
    assert "Key Points:\n1. Scope agreed" in content
    assert "Action Items:\n1. Sam ships API" in content
    assert "Decisions Made" not in content
    assert "Next Steps:\n1. Review plan" in content
    assert "Meeting Date: 2024-05-06" in content
    assert "Duration: 30 minutes" in content


@pytest.mark.asyncio
async def test_no_recipients_is_a_no_op(gateway):
    meeting, summary = await _meeting_with_summary(gateway)
    sender = RecordingEmailSender()

    report = await notify(meeting, summary, [{"name": "Ana", "email": None}], gateway=gateway, sender=sender)

    assert (report.sent, report.failed) == (0, 0)
    assert sender.sent == []
    assert await gateway.list_notifications(meeting.id) == []


@pytest.mark.asyncio
async def test_rejected_log_row_does_not_drop_other_recipients(gateway):
    class RejectingGateway(PersistenceGateway):
        async def append_notification_log(self, **fields):
            if fields["recipient_email"] == "a@x.com":
                raise RuntimeError("row rejected")
            return await super().append_notification_log(**fields)

    meeting, summary = await _meeting_with_summary(gateway)
    sender = RecordingEmailSender()
    participants = [{"name": n, "email": f"{n.lower()}@x.com"} for n in ("A", "B", "C")]

    report = await notify(
        meeting, summary, participants, gateway=RejectingGateway(gateway.database), sender=sender
    )

    assert report.sent == 2
    assert report.failed == 1
    assert report.errors == ["a@x.com: row rejected"]
    rows = await gateway.list_notifications(meeting.id)
    assert sorted((row.recipient_email, row.status) for row in rows) == [
        ("b@x.com", "sent"),
        ("c@x.com", "sent"),
    ]


@pytest.mark.asyncio
async def test_failed_sent_log_falls_back_to_failed_row(gateway):
    class FlakyLogGateway(PersistenceGateway):
        async def append_notification_log(self, **fields):
            if fields["status"] == "sent":
                raise RuntimeError("constraint violated")
            return await super().append_notification_log(**fields)

    meeting, summary = await _meeting_with_summary(gateway)
    report = await notify(
        meeting,
        summary,
        [{"name": "Sam", "email": "sam@x.com"}],
        gateway=FlakyLogGateway(gateway.database),
        sender=RecordingEmailSender(),
    )

    assert (report.sent, report.failed) == (0, 1)
    (row,) = await gateway.list_notifications(meeting.id)
    assert row.status == "failed"
    assert row.error_message == "constraint violated"
