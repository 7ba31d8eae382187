"""Notification dispatcher: emails a meeting summary to every participant with an address."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from meetassist.db.models import Meeting, Summary
from meetassist.pipelines.interfaces import EmailSender, NotificationReport
from meetassist.services.gateway import PersistenceGateway
from meetassist.services.rendering import email_subject, render_summary_email

logger = logging.getLogger(__name__)


def recipients_with_email(participants: Sequence[Mapping[str, Any]]) -> list[tuple[str, str]]:
    recipients: list[tuple[str, str]] = []
    for participant in participants:
        email = str(participant.get("email") or "").strip()
        if email:
            recipients.append((str(participant.get("name") or ""), email))
    return recipients


async def notify(
    meeting: Meeting,
    summary: Summary,
    participants: Sequence[Mapping[str, Any]],
    *,
    gateway: PersistenceGateway,
    sender: EmailSender,
) -> NotificationReport:
    """Send the summary to all recipients concurrently and log each attempt.

    One recipient's failure never cancels another's send; every attempt ends up in
    the notification log with ``status`` ``sent`` or ``failed``.
    """
    recipients = recipients_with_email(participants)
    report = NotificationReport()
    if not recipients:
        logger.info(f"No participants with email for meeting {meeting.id}")
        return report

    subject = email_subject(meeting)
    content = render_summary_email(meeting, summary)

    async def log(email: str, status: str, error: str | None = None) -> None:
        await gateway.append_notification_log(
            meeting_id=meeting.id,
            recipient_email=email,
            subject=subject,
            content=content,
            status=status,
            error_message=error,
        )

    async def deliver(email: str) -> None:
        """Send to one recipient and log the attempt; raises if the attempt failed."""
        try:
            await sender(email, subject, content)
            await log(email, "sent")
        except Exception as exc:
            error = str(exc) or type(exc).__name__
            logger.warning(f"Failed to send summary to {email}: {error}")
            await log(email, "failed", error)
            raise

    outcomes = await asyncio.gather(*(deliver(email) for _, email in recipients), return_exceptions=True)

    for (_, email), outcome in zip(recipients, outcomes, strict=True):
        if isinstance(outcome, BaseException):
            report.failed += 1
            report.errors.append(f"{email}: {str(outcome) or type(outcome).__name__}")
        else:
            report.sent += 1
    logger.info(f"Notifications for meeting {meeting.id}: {report.sent} sent, {report.failed} failed")
    return report
