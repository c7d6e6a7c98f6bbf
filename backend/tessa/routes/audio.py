"""
Tessa Backend — Audio Routes
==============================

What:  Upload-and-analyze endpoint plus owner-scoped access to stored
       audio summaries.
Who:   Frontend recorder/upload views.

Request Flow (POST /api/audio/analyze):
    1. Client sends multipart/form-data with an `audio` field
    2. Payload is read (bounded by MAX_AUDIO_SIZE) and validated
    3. AudioAnalysisAgent transcribes and analyzes it
    4. The complete analysis is stored for the current user
    5. 201 Created with the stored summary

Error responses (global handlers):
    400: empty or oversized upload (ValidationError)
    401: missing or invalid token
    502: the pipeline failed (AnalysisFailedError)
"""

import logging
import uuid

from fastapi import APIRouter, Depends, File, Response, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from tessa.config import settings
from tessa.database import get_db_session
from tessa.dependencies import get_current_user
from tessa.models.user import User
from tessa.schemas.audio import (
    AudioAnalyzeResponse,
    AudioSummaryEnvelope,
    AudioSummaryListResponse,
    AudioSummaryResponse,
)
from tessa.schemas.common import ErrorResponse
from tessa.services.audio_agent import AudioAnalysisAgent, get_audio_agent
from tessa.services.audio_summary_service import audio_summary_service
from tessa.services.file_service import audio_file_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/audio",
    tags=["Audio"],
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
)


@router.get(
    "",
    response_model=AudioSummaryListResponse,
    summary="List my audio summaries, newest first",
)
async def list_summaries(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> AudioSummaryListResponse:
    summaries = await audio_summary_service.list_by_owner(db, user.id)
    return AudioSummaryListResponse(
        summaries=[AudioSummaryResponse.model_validate(s) for s in summaries]
    )


@router.post(
    "/analyze",
    status_code=201,
    response_model=AudioAnalyzeResponse,
    responses={
        400: {"description": "Empty or oversized upload", "model": ErrorResponse},
        502: {"description": "Transcription or analysis failed", "model": ErrorResponse},
    },
    summary="Transcribe, analyze and store an audio recording",
)
async def analyze_audio(
    audio: UploadFile = File(..., description="Audio recording (m4a, mp3, wav, ...)"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    agent: AudioAnalysisAgent = Depends(get_audio_agent),
) -> AudioAnalyzeResponse:
    try:
        # One byte past the limit is enough to detect an oversized upload
        content = await audio.read(settings.max_audio_size + 1)
    finally:
        await audio.close()

    filename = audio.filename or f"recording{settings.default_audio_extension}"
    logger.info("Received audio analysis request: filename=%s, size=%d bytes", filename, len(content))
    audio_file_service.validate_upload(content)

    analysis = await agent.analyze_audio(content, filename, user.id)
    summary = await audio_summary_service.create(db, user.id, analysis)
    return AudioAnalyzeResponse(audio_summary=AudioSummaryResponse.model_validate(summary))


@router.get(
    "/{summary_id}",
    response_model=AudioSummaryEnvelope,
    responses={404: {"description": "Audio summary not found", "model": ErrorResponse}},
    summary="Get one of my audio summaries",
)
async def get_summary(
    summary_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> AudioSummaryEnvelope:
    summary = await audio_summary_service.get_by_id(db, summary_id, user.id)
    return AudioSummaryEnvelope(summary=AudioSummaryResponse.model_validate(summary))


@router.delete(
    "/{summary_id}",
    status_code=204,
    response_class=Response,
    summary="Delete one of my audio summaries",
)
async def delete_summary(
    summary_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await audio_summary_service.delete_by_id(db, summary_id, user.id)
    return Response(status_code=204)
