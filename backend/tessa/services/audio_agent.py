"""
Tessa Backend — Audio Analysis Orchestrator
=============================================

What:  Runs the two-stage audio pipeline (transcribe → analyze) for one
       upload and hands back a complete AudioAnalysisResult.
How:   Strictly sequential per call; independent calls run concurrently on
       the event loop and share nothing. No retries at this layer (the Gemini
       client already retries), and nothing is persisted here.
Who:   POST /api/audio/analyze, through the get_audio_agent() dependency.

Failure Contract:
    AnalysisFailedError is the only exception that leaves analyze_audio().
        transcription fails        → AnalysisFailed, analysis never attempted
        transcript is empty        → AnalysisFailed, analysis never attempted
        analysis fails             → AnalysisFailed
        any field empty at the end → AnalysisFailed("incomplete analysis: ...")
"""

import logging
import time
import uuid
from dataclasses import dataclass, field

from tessa.exceptions import AnalysisFailedError, TessaError
from tessa.schemas.audio import AudioAnalysisResult
from tessa.services.analysis_service import GeminiAnalysisService
from tessa.services.gemini_service import gemini_client
from tessa.services.llm_base import AnalysisGenerator, TranscriptionService
from tessa.services.transcription_service import GeminiTranscriptionService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisContext:
    """One upload in flight. Never persisted."""

    audio: bytes = field(repr=False)
    filename: str
    owner_id: str
    request_id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])


class AudioAnalysisAgent:
    def __init__(self, transcriber: TranscriptionService, generator: AnalysisGenerator):
        self.transcriber = transcriber
        self.generator = generator

    async def analyze_audio(self, audio: bytes, filename: str, owner_id) -> AudioAnalysisResult:
        """
        Transcribe and analyze one audio upload.

        Args:
            audio:    Raw audio bytes as uploaded
            filename: Client filename; its extension is the format hint
            owner_id: Requesting user, used for log correlation only

        Raises:
            AnalysisFailedError for every failure, cause message preserved
        """
        ctx = AnalysisContext(audio=audio, filename=filename, owner_id=str(owner_id))
        start_time = time.time()
        logger.info(
            "[%s] Starting audio analysis for user %s, file: %s (%d bytes)",
            ctx.request_id,
            ctx.owner_id,
            ctx.filename,
            len(ctx.audio),
        )

        transcript = await self._transcribe(ctx)
        if not transcript.strip():
            logger.warning("[%s] Transcription produced no speech", ctx.request_id)
            raise AnalysisFailedError(cause="transcription produced an empty transcript")

        analysis = await self._analyze(ctx, transcript)

        # The transcription stage is the only source of the transcript
        result = analysis.model_copy(update={"transcript": transcript})
        missing = result.missing_fields()
        if missing:
            logger.warning("[%s] Incomplete analysis, missing: %s", ctx.request_id, missing)
            raise AnalysisFailedError(cause=f"incomplete analysis: missing {', '.join(missing)}")

        logger.info(
            "[%s] Audio analysis completed in %.0fms",
            ctx.request_id,
            (time.time() - start_time) * 1000,
        )
        return result

    async def _transcribe(self, ctx: AnalysisContext) -> str:
        try:
            return await self.transcriber.transcribe(ctx.audio, ctx.filename)
        except TessaError as e:
            logger.error("[%s] Transcription stage failed: %s", ctx.request_id, e.message)
            raise AnalysisFailedError(cause=e.message) from e
        except Exception as e:
            logger.error("[%s] Transcription stage crashed: %s", ctx.request_id, str(e), exc_info=True)
            raise AnalysisFailedError(cause=str(e)) from e

    async def _analyze(self, ctx: AnalysisContext, transcript: str) -> AudioAnalysisResult:
        try:
            return await self.generator.analyze(transcript, ctx.filename)
        except TessaError as e:
            logger.error("[%s] Analysis stage failed: %s", ctx.request_id, e.message)
            raise AnalysisFailedError(cause=e.message) from e
        except Exception as e:
            logger.error("[%s] Analysis stage crashed: %s", ctx.request_id, str(e), exc_info=True)
            raise AnalysisFailedError(cause=str(e)) from e


# ── Singleton Instances ───────────────────────────────────────────────────
audio_agent = AudioAnalysisAgent(
    transcriber=GeminiTranscriptionService(gemini_client),
    generator=GeminiAnalysisService(gemini_client),
)


def get_audio_agent() -> AudioAnalysisAgent:
    """FastAPI dependency; overridden in tests with fake stages."""
    return audio_agent
