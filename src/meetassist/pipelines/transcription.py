"""Transcription adapter wrapping the ElevenLabs speech-to-text API.

``transcribe`` always returns a :class:`TranscriptResult`. Transport errors, non-2xx
responses and malformed payloads are replaced by a canned fallback transcript tagged
``provider="fallback"``. The only exception it lets through is
:class:`InvalidAudioError`, raised when the caller passes no usable audio.
"""
from __future__ import annotations

import base64
import binascii
import logging
import random
import time
from dataclasses import dataclass, field
from typing import Any

import httpx

from meetassist.core.errors import InvalidAudioError, ProviderError
from meetassist.core.settings import Settings
from meetassist.pipelines.interfaces import FALLBACK_PROVIDER, LanguageHint, TranscriptResult
from meetassist.pipelines.transliteration import transliterate

logger = logging.getLogger(__name__)

PROVIDER = "elevenlabs"
DEFAULT_PROVIDER_CONFIDENCE = 0.9

# The provider has no code-mixed model; Hinglish goes to the Hindi model and is
# romanised afterwards.
PROVIDER_LANGUAGE_CODES: dict[LanguageHint, str] = {
    LanguageHint.EN: "en",
    LanguageHint.HINGLISH: "hi",
}

FALLBACK_TRANSCRIPTS: dict[LanguageHint, tuple[str, ...]] = {
    LanguageHint.EN: (
        "Good morning everyone, thanks for joining today's meeting. Let's start by reviewing our "
        "progress from last week. Sarah, could you give us an update on the user authentication feature?",
        "Welcome to our weekly planning session. Today we need to discuss our Q4 roadmap and "
        "prioritize the upcoming features.",
        "Hi team, this is our client check-in call. The client has expressed satisfaction with our "
        "current progress and they're particularly happy with the new dashboard features.",
        "Thanks everyone for joining this brainstorming session. We need to come up with creative "
        "solutions for improving user engagement on our platform.",
    ),
    LanguageHint.HINGLISH: (
        "Aaj ka meeting start karte hain. Sabko dhanyawad for joining. Pehle hum last week ka progress "
        "review karenge. Sarah, kya aap authentication feature ke baare mein update de sakti hain?",
        "Namaskar everyone, weekly planning session mein aapka swagat hai. Aaj hum Q4 roadmap discuss "
        "karenge aur upcoming features ko prioritize karenge. Mobile app development hamare liye sabse "
        "important hai.",
        "Hello team, yeh hamare client ke saath check-in call hai. Client bahut khush hai current "
        "progress se aur dashboard features se particularly impressed hain. Unke paas next phase ke "
        "liye kuch additional requirements hain.",
        "Thanks sabko joining ke liye. Humein user engagement improve karne ke liye creative solutions "
        "chahiye. Current metrics dekh kar lagta hai ki improvement ki scope hai. Innovative approaches "
        "explore karte hain.",
    ),
}


@dataclass(frozen=True, slots=True)
class TranscriptionConfig:
    api_key: str | None = None
    base_url: str = "https://api.elevenlabs.io/v1"
    model_id: str = "scribe_v1"
    timeout: float = 120.0
    fallback_confidence: float = 0.8
    fallback_transcripts: dict[LanguageHint, tuple[str, ...]] = field(
        default_factory=lambda: dict(FALLBACK_TRANSCRIPTS)
    )

    @classmethod
    def from_settings(cls, settings: Settings) -> TranscriptionConfig:
        return cls(
            api_key=settings.elevenlabs_api_key,
            base_url=settings.elevenlabs_base_url,
            model_id=settings.elevenlabs_model_id,
            timeout=settings.transcription_timeout,
            fallback_confidence=settings.fallback_confidence,
        )


def decode_audio_payload(audio_payload: str | None) -> bytes:
    """Decode a base64 payload (data-URL prefix allowed) into non-empty bytes."""
    if not audio_payload or not audio_payload.strip():
        raise InvalidAudioError("Audio data is required")
    data = audio_payload.strip()
    if data.startswith("data:") and "," in data:
        data = data.split(",", 1)[1]
    try:
        audio = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidAudioError("Audio data is not valid base64") from exc
    if not audio:
        raise InvalidAudioError("Audio data decodes to an empty payload")
    return audio


def fallback_transcript(
    language: LanguageHint,
    config: TranscriptionConfig,
    *,
    elapsed_ms: int = 0,
    reason: str = "",
    rng: random.Random | None = None,
) -> TranscriptResult:
    corpus = config.fallback_transcripts.get(language) or FALLBACK_TRANSCRIPTS[language]
    text = (rng or random).choice(corpus)
    return TranscriptResult(
        text=text,
        confidence=config.fallback_confidence,
        processing_time_ms=elapsed_ms,
        provider=FALLBACK_PROVIDER,
        language=language,
        message=f"Transcription provider unavailable, using fallback transcript ({reason})"
        if reason
        else "Transcription provider unavailable, using fallback transcript",
    )


async def _request_transcription(
    client: httpx.AsyncClient, audio: bytes, language: LanguageHint, config: TranscriptionConfig
) -> dict[str, Any]:
    if not config.api_key:
        raise ProviderError("ElevenLabs API key is not configured")
    try:
        response = await client.post(
            f"{config.base_url.rstrip('/')}/speech-to-text",
            headers={"xi-api-key": config.api_key},
            files={"file": ("recording.wav", audio, "audio/wav")},
            data={
                "model_id": config.model_id,
                "language_code": PROVIDER_LANGUAGE_CODES[language],
            },
            timeout=config.timeout,
        )
    except httpx.HTTPError as exc:
        raise ProviderError(f"Failed to reach ElevenLabs: {exc}") from exc
    if response.status_code != 200:
        raise ProviderError(f"ElevenLabs error: {response.status_code}")
    try:
        payload = response.json()
    except ValueError as exc:
        raise ProviderError("ElevenLabs returned a non-JSON body") from exc
    if not isinstance(payload, dict) or not isinstance(payload.get("text"), str):
        raise ProviderError("ElevenLabs response missing text")
    return payload


async def transcribe(
    audio_payload: str,
    language: LanguageHint = LanguageHint.HINGLISH,
    *,
    config: TranscriptionConfig,
    client: httpx.AsyncClient | None = None,
) -> TranscriptResult:
    audio = decode_audio_payload(audio_payload)
    language = LanguageHint(language)
    started = time.perf_counter()
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=config.timeout) as own_client:
                payload = await _request_transcription(own_client, audio, language, config)
        else:
            payload = await _request_transcription(client, audio, language, config)
    except Exception as exc:  # any provider failure degrades to the fallback
        logger.warning(f"Transcription fell back to canned transcript: {exc}")
        return fallback_transcript(
            language, config, elapsed_ms=_elapsed_ms(started), reason=str(exc)
        )

    text: str = payload["text"]
    if language is LanguageHint.HINGLISH:
        text = transliterate(text)
    confidence = payload.get("confidence")
    if not isinstance(confidence, int | float) or isinstance(confidence, bool):
        confidence = DEFAULT_PROVIDER_CONFIDENCE
    elapsed = _elapsed_ms(started)
    logger.info(f"ElevenLabs transcription completed in {elapsed}ms ({len(text)} chars)")
    return TranscriptResult(
        text=text,
        confidence=float(confidence),
        processing_time_ms=elapsed,
        provider=PROVIDER,
        language=language,
        message="Transcription completed successfully",
    )


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
