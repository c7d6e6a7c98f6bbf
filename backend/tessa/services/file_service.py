"""
Tessa Backend — Audio Staging Service
=======================================

What:  Validates uploaded audio and stages it as a short-lived temp file so
       the model provider's file upload API can read it from disk.
How:   `staged_audio()` is an async context manager: the file exists exactly
       for the duration of the `async with` block and is removed on every
       exit path (success, error, cancellation).
Who:   GeminiTranscriptionService, once per transcription.

Staging Rules:
    1. Directory: settings.audio_temp_path, created with mode 0700
    2. Filename: "audio-<uuid4 hex><ext>", no user input in the path, so
       concurrent requests can never collide or traverse directories
    3. Extension: taken from the client filename, ".m4a" when absent
    4. Write: exclusive create ("xb"), fails instead of overwriting
    5. Cleanup: best effort; a failed removal is logged and never masks the
       outcome of the block
"""

import logging
import os
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Optional

import aiofiles

from tessa.config import settings
from tessa.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

# MIME types the Gemini File API accepts for audio, keyed by extension
AUDIO_MIME_TYPES = {
    ".aac": "audio/aac",
    ".aiff": "audio/aiff",
    ".flac": "audio/flac",
    ".m4a": "audio/mp4",
    ".mp3": "audio/mpeg",
    ".mp4": "audio/mp4",
    ".mpeg": "audio/mpeg",
    ".oga": "audio/ogg",
    ".ogg": "audio/ogg",
    ".wav": "audio/wav",
    ".webm": "audio/webm",
}
FALLBACK_MIME_TYPE = "audio/mp4"


@dataclass(frozen=True)
class StagedAudio:
    path: Path
    extension: str
    mime_type: str


def audio_extension(filename: Optional[str]) -> str:
    """Lowercase extension of `filename`, or the configured default."""
    ext = Path(filename or "").suffix.lower()
    return ext or settings.default_audio_extension


def audio_mime_type(extension: str) -> str:
    return AUDIO_MIME_TYPES.get(extension.lower(), FALLBACK_MIME_TYPE)


class AudioFileService:
    """Upload validation plus the temp-file lifecycle for audio payloads."""

    def __init__(self, temp_dir: Optional[str] = None):
        """
        Args:
            temp_dir: Override the staging directory (used in tests).
                      If None, uses settings.audio_temp_path.
        """
        self.temp_dir = Path(temp_dir) if temp_dir else settings.audio_temp_path

    def validate_upload(self, content: bytes) -> None:
        """
        Rejects empty or oversized payloads before any staging work.

        Raises:
            ValidationError with a human-readable size message
        """
        if not content:
            raise ValidationError(message="No audio file provided", field="audio")

        if len(content) > settings.max_audio_size:
            max_mb = settings.max_audio_size / (1024 * 1024)
            raise ValidationError(
                message=(
                    f"Audio size ({len(content) / (1024 * 1024):.1f}MB) "
                    f"exceeds maximum of {max_mb:.0f}MB."
                ),
                field="audio",
                context={"max_size_mb": max_mb, "actual_size": len(content)},
            )

    async def write_temp_file(self, content: bytes, extension: str) -> Path:
        """
        Writes `content` to a fresh uniquely named file in the staging directory.

        Raises:
            FileStorageError if the directory or the file cannot be created.
        """
        path = self.temp_dir / f"audio-{uuid.uuid4().hex}{extension}"
        try:
            self.temp_dir.mkdir(mode=0o700, parents=True, exist_ok=True)
            async with aiofiles.open(path, "xb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to stage audio at %s: %s", path, str(e))
            # A partial write may have created the file; an existing one is not ours
            if not isinstance(e, FileExistsError):
                await self.cleanup_file(path)
            raise FileStorageError(
                message="Failed to stage uploaded audio. Please try again.",
                context={"path": str(path), "os_error": str(e)},
            )

        logger.debug("Staged audio %s (%d bytes)", path.name, len(content))
        return path

    async def cleanup_file(self, path: Path) -> None:
        """
        Removes a staged file if it still exists.

        Idempotent: a missing file is not an error, and OS failures are only
        logged so they never replace the caller's result or exception.
        """
        try:
            os.remove(path)
            logger.debug("Cleaned up staged audio: %s", path.name)
        except FileNotFoundError:
            logger.debug("Cleanup: staged audio already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up staged audio %s: %s", path, str(e))

    @asynccontextmanager
    async def staged_audio(self, content: bytes, filename: Optional[str]) -> AsyncIterator[StagedAudio]:
        """
        Stages `content` for the duration of the block.

        Usage:
            async with file_service.staged_audio(data, "memo.m4a") as staged:
                handle = await client.upload_file(str(staged.path), staged.mime_type)
        """
        extension = audio_extension(filename)
        path = await self.write_temp_file(content, extension)
        try:
            yield StagedAudio(path=path, extension=extension, mime_type=audio_mime_type(extension))
        finally:
            await self.cleanup_file(path)


# ── Singleton Instance ────────────────────────────────────────────────────
audio_file_service = AudioFileService()
