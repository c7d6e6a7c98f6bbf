"""
Tessa Backend — Gemini Transcription Service
==============================================

What:  Speech-to-text stage of the audio pipeline.
How:   Stage bytes on disk → upload to the Gemini File API → ask the
       transcription model for a plain-text transcript in the configured
       language → delete the remote upload → trim.
Who:   AudioAnalysisAgent (first stage).

Error Handling:
    Everything that can fail here (staging, upload, generation) is reported
    as TranscriptionFailedError(cause). The local temp file is removed by the
    staging context manager on every path.
"""

import logging
from typing import Optional

from tessa.config import settings
from tessa.exceptions import TessaError, TranscriptionFailedError
from tessa.services.file_service import AudioFileService, audio_file_service
from tessa.services.gemini_service import GeminiClient
from tessa.services.llm_base import TranscriptionService

logger = logging.getLogger(__name__)

LANGUAGE_NAMES = {
    "de": "German",
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "it": "Italian",
    "pt": "Portuguese",
}


def transcription_prompt(language: str) -> str:
    name = LANGUAGE_NAMES.get(language, language)
    return (
        f"Transcribe this audio recording verbatim. The spoken language is {name} "
        f"({language}). Return ONLY the transcript as plain text, with no "
        f"commentary, headings, timestamps or speaker labels. If there is no "
        f"speech, return an empty response."
    )


class GeminiTranscriptionService(TranscriptionService):
    def __init__(
        self,
        client: GeminiClient,
        file_service: Optional[AudioFileService] = None,
        model_name: Optional[str] = None,
        language: Optional[str] = None,
    ):
        self.client = client
        self.file_service = file_service or audio_file_service
        self.model_name = model_name or settings.gemini_transcription_model
        self.language = language or settings.transcription_language

    async def transcribe(self, audio: bytes, filename: str) -> str:
        if not audio:
            raise TranscriptionFailedError(cause="audio payload is empty")

        try:
            async with self.file_service.staged_audio(audio, filename) as staged:
                handle = await self.client.upload_file(str(staged.path), staged.mime_type)
                try:
                    text = await self.client.generate(
                        self.model_name,
                        [transcription_prompt(self.language), handle],
                        generation_config={"response_mime_type": "text/plain"},
                    )
                finally:
                    await self.client.delete_file(handle)
        except TessaError as e:
            raise TranscriptionFailedError(cause=e.message) from e
        except Exception as e:
            logger.error("Unexpected transcription error for %s: %s", filename, str(e), exc_info=True)
            raise TranscriptionFailedError(cause=str(e)) from e

        transcript = text.strip()
        logger.info("Transcribed %s: %d chars", filename, len(transcript))
        return transcript
