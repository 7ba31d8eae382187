"""Recording processing endpoints: the full pipeline and standalone transcription."""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from meetassist.db.dependencies import get_pipeline_service
from meetassist.schemas import ProcessRecordingRequest, TranscribeRequest
from meetassist.services.pipelines import PipelineService

router = APIRouter(tags=["processing"])


@router.post("/process-recording")
async def process_recording(
    body: ProcessRecordingRequest,
    request: Request,
    service: PipelineService = Depends(get_pipeline_service),  # noqa: B008
) -> JSONResponse:
    result = await service.process_recording(body, str(request.base_url))
    return JSONResponse(
        status_code=status.HTTP_200_OK if result.success else status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=jsonable_encoder(result.to_dict()),
    )


@router.post("/transcribe")
async def transcribe(
    body: TranscribeRequest,
    service: PipelineService = Depends(get_pipeline_service),  # noqa: B008
) -> dict[str, Any]:
    """Transcribe audio; provider outages return a fallback transcript, never an error."""
    result = await service.transcribe(body.audio_data, body.language)
    return {
        "text": result.text,
        "confidence": result.confidence,
        "processing_time": result.processing_time_ms,
        "source": result.provider,
        "language": result.language.value,
        "message": result.message,
    }
