"""
Tessa Backend — Google Gemini Client
======================================

What:  Thin resilient wrapper around the google-generativeai SDK shared by the
       transcription and analysis stages.
How:   Every SDK call goes through one circuit breaker and a tenacity retry
       loop with exponential backoff + jitter. Callers only ever see
       LLMServiceError or CircuitBreakerOpenError.
Who:   GeminiTranscriptionService (file upload + speech-to-text prompt) and
       GeminiAnalysisService (JSON-mode structured analysis).

Resilience Strategy:
    1. Circuit breaker checked before any network I/O
    2. tenacity retries for transient failures (configurable attempts)
    3. Per-request timeout passed to the SDK
    4. Per-call short request id in every log line

Error Handling Chain:
    SDK call fails → tenacity retries (N attempts with backoff)
    → All retries fail → record circuit breaker failure → LLMServiceError
    → Threshold reached → future calls rejected instantly (OPEN)
    → Recovery timeout elapsed → one test call allowed (HALF_OPEN)
    → Test succeeds → CLOSED
"""

import asyncio
import logging
import time
import uuid
from typing import Any, Dict, Optional, Sequence

import google.generativeai as genai
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from tessa.config import settings
from tessa.exceptions import CircuitBreakerOpenError, LLMServiceError

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Circuit Breaker Implementation
# ══════════════════════════════════════════════════════════════════════════

class CircuitBreaker:
    """
    Circuit breaker guarding the Gemini API.

    State Machine:
        CLOSED (normal operation)
            → On failure: increment failure_count
            → When failure_count >= threshold: transition to OPEN
        OPEN (rejecting all requests)
            → All calls raise CircuitBreakerOpenError immediately
            → After recovery_timeout seconds: transition to HALF_OPEN
        HALF_OPEN (testing recovery)
            → On success: transition to CLOSED (reset failure_count)
            → On failure: transition back to OPEN (reset timer)

    Not thread-safe; uvicorn async workers share one event loop per process.
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

    def __init__(self, failure_threshold: int = 5, recovery_timeout: int = 60):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.failure_count = 0
        self.state = self.CLOSED
        self.last_failure_time: Optional[float] = None

    def can_execute(self) -> bool:
        """
        Returns True when a call may proceed.

        Raises:
            CircuitBreakerOpenError while OPEN and the recovery timeout has
            not elapsed yet.
        """
        if self.state == self.CLOSED:
            return True

        if self.state == self.OPEN:
            elapsed = time.time() - (self.last_failure_time or 0)
            if elapsed >= self.recovery_timeout:
                logger.info(
                    "Circuit breaker transitioning to HALF_OPEN after %.1fs",
                    elapsed,
                )
                self.state = self.HALF_OPEN
                return True
            remaining = int(self.recovery_timeout - elapsed)
            raise CircuitBreakerOpenError(recovery_time=remaining)

        return True

    def record_success(self) -> None:
        if self.state == self.HALF_OPEN:
            logger.info("Circuit breaker transitioning to CLOSED (service recovered)")
        self.failure_count = 0
        self.state = self.CLOSED
        self.last_failure_time = None

    def record_failure(self) -> None:
        self.failure_count += 1
        self.last_failure_time = time.time()

        if self.state == self.HALF_OPEN:
            logger.warning("Circuit breaker returning to OPEN (test request failed)")
            self.state = self.OPEN
        elif self.failure_count >= self.failure_threshold:
            logger.warning(
                "Circuit breaker OPENING after %d consecutive failures",
                self.failure_count,
            )
            self.state = self.OPEN


# ══════════════════════════════════════════════════════════════════════════
# Gemini Client
# ══════════════════════════════════════════════════════════════════════════

def _response_text(response: Any) -> str:
    """
    Text of a generate_content response, or "" when the model produced none.

    The SDK raises ValueError from `.text` when the candidate was blocked or
    carries no parts; that is an empty answer, not a transport failure.
    """
    try:
        text = response.text
    except ValueError:
        return ""
    return text or ""


class GeminiClient:
    """
    Shared Gemini SDK access with retry and circuit breaking.

    One instance per process: the breaker state must be shared by every
    request, so the module-level `gemini_client` singleton is what the
    services receive by default.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        max_attempts: Optional[int] = None,
        circuit_breaker: Optional[CircuitBreaker] = None,
    ):
        key = api_key if api_key is not None else settings.gemini_api_key
        # The SDK keeps auth in module-level state
        if key and key != "your_gemini_api_key_here":
            genai.configure(api_key=key)

        self.max_attempts = max_attempts or settings.retry_max_attempts
        self.circuit_breaker = circuit_breaker or CircuitBreaker(
            failure_threshold=settings.cb_failure_threshold,
            recovery_timeout=settings.cb_recovery_timeout,
        )

        logger.info(
            "GeminiClient initialized with retry(attempts=%d), "
            "circuit_breaker(threshold=%d, recovery=%ds)",
            self.max_attempts,
            self.circuit_breaker.failure_threshold,
            self.circuit_breaker.recovery_timeout,
        )

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            retry=retry_if_exception_type(Exception),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential_jitter(
                initial=settings.retry_min_wait,
                max=settings.retry_max_wait,
                jitter=1,
            ),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    async def _call(self, operation: str, func, *args, **kwargs) -> Any:
        """
        Runs `func` under the breaker and the retry loop.

        Flow:
            1. Check circuit breaker → may raise CircuitBreakerOpenError
            2. Await `func` with retries
            3. Record success/failure in the breaker
            4. Wrap any SDK failure in LLMServiceError
        """
        request_id = str(uuid.uuid4())[:8]
        self.circuit_breaker.can_execute()

        start_time = time.time()
        try:
            result = None
            async for attempt in self._retrying():
                with attempt:
                    result = await func(*args, **kwargs)
        except Exception as e:
            # reraise=True: tenacity hands back the last attempt's exception
            self.circuit_breaker.record_failure()
            logger.error(
                "[%s] Gemini %s failed after %d attempt(s), %.0fms: %s",
                request_id,
                operation,
                self.max_attempts,
                (time.time() - start_time) * 1000,
                str(e),
            )
            raise LLMServiceError(
                message=f"Gemini {operation} failed: {e}",
                retry_after=self.circuit_breaker.recovery_timeout,
                context={
                    "request_id": request_id,
                    "attempts": self.max_attempts,
                    "error_type": type(e).__name__,
                },
            )

        self.circuit_breaker.record_success()
        logger.info(
            "[%s] Gemini %s completed in %.0fms",
            request_id,
            operation,
            (time.time() - start_time) * 1000,
        )
        return result

    async def upload_file(self, path: str, mime_type: str) -> Any:
        """Uploads a local file to the Gemini File API and returns its handle."""

        async def _upload():
            # upload_file is blocking I/O in the SDK
            return await asyncio.to_thread(genai.upload_file, path=path, mime_type=mime_type)

        return await self._call("upload", _upload)

    async def delete_file(self, handle: Any) -> None:
        """
        Best-effort removal of an uploaded file.

        Uploaded files expire on their own after 48 hours; a failed delete is
        logged and never fails the caller.
        """
        name = getattr(handle, "name", None)
        if not name:
            return
        try:
            await asyncio.to_thread(genai.delete_file, name)
        except Exception as e:
            logger.warning("Failed to delete uploaded Gemini file %s: %s", name, str(e))

    async def generate(
        self,
        model_name: str,
        contents: Sequence[Any],
        *,
        system_instruction: Optional[str] = None,
        generation_config: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Single-turn generation; returns the response text ("" when empty).

        Raises:
            CircuitBreakerOpenError: the breaker is OPEN
            LLMServiceError: the call failed after all retry attempts
        """
        model = genai.GenerativeModel(
            model_name,
            system_instruction=system_instruction,
            generation_config=generation_config,
        )

        async def _generate() -> str:
            response = await model.generate_content_async(
                list(contents),
                request_options={"timeout": settings.llm_request_timeout},
            )
            return _response_text(response)

        return await self._call("generate", _generate)

    def health_status(self) -> str:
        """available | circuit_open | unavailable, without any network call."""
        if self.circuit_breaker.state == CircuitBreaker.OPEN:
            return "circuit_open"
        if not settings.gemini_api_key:
            return "unavailable"
        return "available"


# ── Singleton Instance ────────────────────────────────────────────────────
gemini_client = GeminiClient()
