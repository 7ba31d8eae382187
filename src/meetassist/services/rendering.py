"""Plain-text email bodies and Markdown minutes for processed meetings."""
from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from meetassist.db.models import Meeting, Summary
from meetassist.services.gateway import MeetingAggregate

FOOTER = "This summary was automatically generated by Meeting Assistant."


def email_subject(meeting: Meeting) -> str:
    return f"Meeting Summary: {meeting.title}"


def _numbered(items: Sequence[str]) -> str:
    return "\n".join(f"{index}. {item}" for index, item in enumerate(items, start=1))


def _date(value: datetime | None) -> str:
    return value.strftime("%Y-%m-%d") if value else "unknown"


def _minutes(seconds: int | None) -> int:
    return round((seconds or 0) / 60)


def render_summary_email(meeting: Meeting, summary: Summary) -> str:
    sections = [
        f"Meeting Summary: {meeting.title}",
        f"Summary:\n{summary.summary_text}",
        f"Key Points:\n{_numbered(summary.key_points)}",
        f"Action Items:\n{_numbered(summary.action_items)}",
    ]
    if summary.decisions:
        sections.append(f"Decisions Made:\n{_numbered(summary.decisions)}")
    if summary.next_steps:
        sections.append(f"Next Steps:\n{_numbered(summary.next_steps)}")
    sections.append(
        f"Meeting Date: {_date(meeting.start_time)}\n"
        f"Duration: {_minutes(meeting.duration_seconds)} minutes"
    )
    sections.append(f"---\n{FOOTER}")
    return "\n\n".join(sections)


def render_markdown(aggregate: MeetingAggregate, include_transcript: bool = True) -> str:
    meeting, summary, transcript = aggregate.meeting, aggregate.summary, aggregate.transcript
    md = [
        f"# {meeting.title}",
        "",
        f"- **Date:** {_date(meeting.start_time)}",
        f"- **Duration:** {_minutes(meeting.duration_seconds)} minutes",
        f"- **Platform:** {meeting.meeting_platform}",
        f"- **Status:** {meeting.status}",
    ]
    if aggregate.participants:
        names = ", ".join(p.name for p in aggregate.participants)
        md.append(f"- **Participants:** {names}")
    md += ["", "## Summary", summary.summary_text if summary else "No summary available"]
    if summary is not None:
        for heading, items in (
            ("Key Points", summary.key_points),
            ("Action Items", summary.action_items),
            ("Decisions", summary.decisions),
            ("Next Steps", summary.next_steps),
        ):
            md += ["", f"## {heading}"]
            md += [f"- {item}" for item in items] if items else ["- None"]
    if include_transcript and transcript is not None:
        md += ["", "## Transcript", "", transcript.content]
    return "\n".join(md) + "\n"
