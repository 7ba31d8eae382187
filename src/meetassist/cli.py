"""Typer CLI entrypoint for the meeting assistant."""
from __future__ import annotations

import asyncio
import base64
import re
from pathlib import Path

import typer
import uvicorn
from rich.console import Console
from rich.table import Table

from meetassist import __version__
from meetassist.core.errors import AppError
from meetassist.core.logging import setup_logging
from meetassist.core.settings import Settings, get_settings
from meetassist.db.base import Database
from meetassist.pipelines.interfaces import LanguageHint
from meetassist.schemas import MeetingDataIn, ParticipantIn, ProcessRecordingRequest
from meetassist.services.gateway import PersistenceGateway
from meetassist.services.pipelines import PipelineService, default_providers
from meetassist.services.rendering import render_markdown

app_cli = typer.Typer(help="Meeting assistant command line interface")
console = Console()

_PARTICIPANT = re.compile(r"^\s*(?P<name>[^<]+?)\s*(?:<(?P<email>[^>]*)>)?\s*$")


def parse_participant(value: str) -> ParticipantIn:
    """Parse ``"Name <email>"`` or a bare ``"Name"``."""
    match = _PARTICIPANT.match(value)
    if match is None:
        raise typer.BadParameter(f"Expected 'Name <email>', got {value!r}")
    return ParticipantIn(name=match["name"], email=match["email"])


def _database(settings: Settings) -> Database:
    return Database(settings.database_url, echo=settings.sql_echo)


@app_cli.command("health")
def health() -> None:
    """Show basic health / config info."""
    settings = get_settings()
    table = Table(title="Meeting Assistant Health")
    table.add_column("Key")
    table.add_column("Value")
    table.add_row("version", __version__)
    table.add_row("environment", settings.environment)
    table.add_row("debug", str(settings.debug))
    table.add_row("api_prefix", settings.api_prefix)
    table.add_row("database", settings.database_url.split("://", 1)[0])
    table.add_row("transcription", "elevenlabs" if settings.elevenlabs_api_key else "fallback")
    table.add_row("summarization", "deepseek" if settings.deepseek_api_key else "fallback")
    table.add_row("email", "resend" if settings.resend_api_key else "disabled")
    console.print(table)


@app_cli.command("run-server")
def run_server(host: str = "0.0.0.0", port: int = 8000, reload: bool = True) -> None:  # pragma: no cover
    """Run the FastAPI development server."""
    uvicorn.run("meetassist.main:app", host=host, port=port, reload=reload)


@app_cli.command("init-db")
def init_db(drop: bool = typer.Option(False, help="Drop existing tables first")) -> None:
    """Create the database tables."""
    settings = get_settings()

    async def _run() -> None:
        database = _database(settings)
        try:
            await database.create_all(drop=drop)
        finally:
            await database.dispose()

    asyncio.run(_run())
    console.print("[green]Database tables ready[/green]")


@app_cli.command("process")
def process(
    audio_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Recorded audio file"),
    title: str = typer.Option(..., "--title", "-t", help="Meeting title"),
    participant: list[str] | None = typer.Option(  # noqa: B008
        None, "--participant", "-p", help="Participant as 'Name <email>' (repeatable)"
    ),
    language: LanguageHint | None = typer.Option(None, help="Transcription language hint"),
    duration: int = typer.Option(0, min=0, help="Recording duration in seconds"),
    meeting_url: str | None = typer.Option(None, help="Meeting URL"),
) -> None:
    """Run the full processing pipeline on a local recording."""
    settings = get_settings()
    setup_logging(settings.log_level)
    request = ProcessRecordingRequest(
        meeting_data=MeetingDataIn(
            title=title,
            participants=[parse_participant(p) for p in participant or []],
            meeting_url=meeting_url,
        ),
        audio_data=base64.b64encode(audio_file.read_bytes()).decode("ascii"),
        duration=duration,
        language=language,
    )

    async def _run():
        database = _database(settings)
        try:
            if settings.auto_create_tables:
                await database.create_all()
            service = PipelineService(PersistenceGateway(database), default_providers(settings), settings)
            return await service.process_recording(request, settings.public_base_url or "http://localhost:8000")
        finally:
            await database.dispose()

    try:
        result = asyncio.run(_run())
    except AppError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(code=1) from e

    if not result.success:
        console.print(f"[red]{result.error} during {result.stage.value}: {result.details}[/red]")
        raise typer.Exit(code=1)

    summary = result.summary or {}
    console.print(f"[bold green]Meeting processed:[/bold green] {result.meeting_id} ({result.processing_time_ms}ms)")
    console.print(f"[cyan]Summary:[/cyan] {summary.get('summary', '')}")
    table = Table(title="Summary")
    table.add_column("Section")
    table.add_column("Items")
    for label, key in (
        ("Key points", "keyPoints"),
        ("Action items", "actionItems"),
        ("Decisions", "decisions"),
        ("Next steps", "nextSteps"),
    ):
        table.add_row(label, "\n".join(summary.get(key, [])))
    console.print(table)
    if result.notifications is not None:
        report = result.notifications
        console.print(f"Emails sent: {report.sent}, failed: {report.failed}")
    console.print(f"Dashboard: {result.urls.get('dashboard', '')}")


@app_cli.command("export")
def export(
    meeting_id: str,
    output: Path | None = typer.Option(None, "-o", "--output", help="Output Markdown file path"),
    include_transcript: bool = typer.Option(True, help="Append the full transcript"),
) -> None:
    """Export a processed meeting as Markdown."""
    settings = get_settings()

    async def _run():
        database = _database(settings)
        try:
            return await PersistenceGateway(database).get_complete_meeting_data(meeting_id)
        finally:
            await database.dispose()

    aggregate = asyncio.run(_run())
    if aggregate is None:
        console.print(f"[red]Meeting {meeting_id} not found[/red]")
        raise typer.Exit(code=1)

    markdown = render_markdown(aggregate, include_transcript=include_transcript)
    if output is None:
        typer.echo(markdown)
        return
    output.write_text(markdown, encoding="utf-8")
    console.print(f"[green]Wrote {output}[/green]")


if __name__ == "__main__":  # pragma: no cover
    app_cli()
