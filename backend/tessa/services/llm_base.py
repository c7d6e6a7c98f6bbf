"""
Tessa Backend — Audio Pipeline Capabilities
=============================================

What:  Abstract interfaces for the two model-backed stages of the audio
       pipeline: speech-to-text and structured analysis.
Why:   The orchestrator depends only on these contracts, so providers can be
       swapped and tests can inject hand-written fakes.
Who:   Implemented by GeminiTranscriptionService / GeminiAnalysisService;
       consumed by AudioAnalysisAgent.
"""

from abc import ABC, abstractmethod

from tessa.schemas.audio import AudioAnalysisResult


class TranscriptionService(ABC):
    """
    Speech-to-text over raw audio bytes.

    Contract:
        - Returns the transcript text; may be "" for silent audio
        - Every failure (staging, upload, model call) raises
          TranscriptionFailedError
        - Any temporary artifact created for the call is gone when the call
          returns or raises
    """

    @abstractmethod
    async def transcribe(self, audio: bytes, filename: str) -> str:
        ...


class AnalysisGenerator(ABC):
    """
    Transcript → title, keywords, summary.

    Contract:
        - Returned `transcript` equals the input transcript verbatim
        - Empty or non-JSON model output raises NoModelOutputError
        - Output missing title, keywords or summary raises
          IncompleteAnalysisError
        - Transport failures raise LLMServiceError / CircuitBreakerOpenError
    """

    @abstractmethod
    async def analyze(self, transcript: str, filename: str) -> AudioAnalysisResult:
        ...
