"""Service layer wiring provider adapters and the gateway into the pipeline."""
from __future__ import annotations

from dataclasses import dataclass
from functools import partial

from meetassist.core.settings import Settings
from meetassist.pipelines.interfaces import (
    EmailSender,
    LanguageHint,
    Summarizer,
    Transcriber,
    TranscriptResult,
)
from meetassist.pipelines.meeting_processing import MeetingProcessingPipeline, PipelineResult
from meetassist.pipelines.summarization import SummarizerConfig, summarize
from meetassist.pipelines.transcription import TranscriptionConfig, transcribe
from meetassist.schemas import ProcessRecordingRequest
from meetassist.services.email import EmailConfig, send_email
from meetassist.services.gateway import PersistenceGateway


@dataclass(frozen=True, slots=True)
class Providers:
    transcriber: Transcriber
    summarizer: Summarizer
    email_sender: EmailSender


def default_providers(settings: Settings) -> Providers:
    """Adapters bound to their configuration; each call opens its own HTTP client."""
    return Providers(
        transcriber=partial(transcribe, config=TranscriptionConfig.from_settings(settings)),
        summarizer=partial(summarize, config=SummarizerConfig.from_settings(settings)),
        email_sender=partial(send_email, config=EmailConfig.from_settings(settings)),
    )


class PipelineService:
    def __init__(self, gateway: PersistenceGateway, providers: Providers, settings: Settings) -> None:
        self._gateway = gateway
        self._providers = providers
        self._settings = settings

    @property
    def default_language(self) -> LanguageHint:
        return self._settings.default_language

    def pipeline(self) -> MeetingProcessingPipeline:
        return MeetingProcessingPipeline(
            self._gateway,
            self._providers.transcriber,
            self._providers.summarizer,
            self._providers.email_sender,
            default_language=self.default_language,
            default_platform=self._settings.default_platform,
        )

    async def process_recording(self, request: ProcessRecordingRequest, base_url: str) -> PipelineResult:
        return await self.pipeline().run(request, self._settings.public_base_url or base_url)

    async def transcribe(self, audio_payload: str, language: LanguageHint | None = None) -> TranscriptResult:
        return await self._providers.transcriber(audio_payload, language or self.default_language)
