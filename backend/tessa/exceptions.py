"""
Tessa Backend — Custom Exception Hierarchy
============================================

What:  Application-specific exceptions, one per failure scenario.
How:   Each exception carries a user-safe message and a context dict that is
       logged but never returned. Global handlers in main.py translate them
       into JSON responses with the matching HTTP status.

Exception Hierarchy:
    TessaError (base)
    ├── ValidationError            → 400 Bad Request
    ├── AuthenticationError        → 401 Unauthorized
    ├── QuotaExceededError         → 403 Forbidden
    ├── NotFoundError              → 404 Not Found
    ├── ConflictError              → 409 Conflict
    ├── RateLimitExceededError     → 429 Too Many Requests
    ├── AnalysisFailedError        → 502 Bad Gateway (audio pipeline umbrella)
    ├── LLMServiceError            → 503 Service Unavailable
    ├── CircuitBreakerOpenError    → 503 Service Unavailable
    ├── FileStorageError           → 500 Internal Server Error
    ├── DatabaseError              → 500 Internal Server Error
    └── Audio pipeline stage errors (wrapped by AnalysisFailedError, never
        reach the HTTP layer):
        ├── TranscriptionFailedError
        ├── NoModelOutputError
        └── IncompleteAnalysisError
"""

from typing import Any, Dict, List, Optional


class TessaError(Exception):
    """
    Base exception for all Tessa application errors.

    Attributes:
        message:  User-facing error description
        context:  Additional debug info (logged, NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(TessaError):
    """
    Raised when client input breaks a business rule.

    Schema-level problems are rejected by FastAPI with 422 before reaching
    the services; this covers what Pydantic cannot express (empty uploads,
    subscribing to the FREE plan, ...).
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthenticationError(TessaError):
    """Missing, malformed or expired bearer token, or wrong credentials."""

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class QuotaExceededError(TessaError):
    """
    Raised when a user reached the project quota of their plan.

    HTTP: 403 Forbidden. The response carries the plan and its limit so the
    frontend can offer an upgrade.
    """

    def __init__(
        self,
        plan: str,
        limit: int,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"{plan} plan allows a maximum of {limit} projects. "
            f"Please upgrade your plan."
        )
        ctx = context or {}
        ctx.update({"plan": plan, "limit": limit})
        super().__init__(message=message, context=ctx)
        self.plan = plan
        self.limit = limit


class NotFoundError(TessaError):
    """
    Raised when a requested resource does not exist.

    Owner-scoped lookups raise this for resources that belong to someone
    else as well, so the two cases produce the same response.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(TessaError):
    """The request conflicts with current state (duplicate email, already PRO)."""

    def __init__(
        self,
        message: str = "The request conflicts with the current state",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(TessaError):
    """
    Raised when file system operations fail.

    Disk full, permission denied, unwritable temp directory. The client gets
    a generic message; the OS error goes to the log.
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class LLMServiceError(TessaError):
    """
    Raised when a Gemini call fails after all retries.

    HTTP: 503 Service Unavailable. `retry_after` hints when the circuit
    breaker will let calls through again.
    """

    def __init__(
        self,
        message: str = "AI service is temporarily unavailable",
        retry_after: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if retry_after:
            ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class CircuitBreakerOpenError(TessaError):
    """
    Raised when the circuit breaker is OPEN.

    State machine:
        CLOSED → N consecutive failures → OPEN (reject for recovery_time)
        OPEN → recovery_time elapsed → HALF_OPEN (one test call)
        HALF_OPEN → success → CLOSED | failure → OPEN
    """

    def __init__(
        self,
        recovery_time: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"AI service is temporarily unavailable due to repeated failures. "
            f"The service will automatically retry in approximately {recovery_time} seconds."
        )
        ctx = context or {}
        ctx["recovery_time"] = recovery_time
        super().__init__(message=message, context=ctx)
        self.recovery_time = recovery_time


class DatabaseError(TessaError):
    """
    Raised when database operations fail unexpectedly.

    The client message is always generic; SQL details stay in the log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(TessaError):
    """Raised when a client exceeds the per-IP request rate limit."""

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


# ══════════════════════════════════════════════════════════════════════════
# Audio Pipeline Errors
# ══════════════════════════════════════════════════════════════════════════


class TranscriptionFailedError(TessaError):
    """
    Speech-to-text failed: staging the audio, uploading it, or the model call.

    `cause` keeps the underlying message for diagnostics.
    """

    def __init__(
        self,
        cause: str = "Unknown error",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=f"Failed to transcribe audio: {cause}", context=context)
        self.cause = cause


class NoModelOutputError(TessaError):
    """The analysis model returned an empty or unparsable response."""

    def __init__(
        self,
        message: str = "No usable response from the analysis model",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class IncompleteAnalysisError(TessaError):
    """The analysis model returned JSON without one or more required fields."""

    def __init__(
        self,
        missing_fields: List[str],
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["missing_fields"] = list(missing_fields)
        super().__init__(
            message=f"Analysis is missing required fields: {', '.join(missing_fields)}",
            context=ctx,
        )
        self.missing_fields = list(missing_fields)


class AnalysisFailedError(TessaError):
    """
    The single failure kind leaving the audio analysis orchestrator.

    Every stage error (transcription, model output, validation, transport)
    is re-raised as this one with the original message kept in `cause`.
    HTTP: 502 Bad Gateway with a generic message; the cause is logged.
    """

    def __init__(
        self,
        cause: str = "Unknown error",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["cause"] = cause
        super().__init__(message=f"Failed to analyze audio: {cause}", context=ctx)
        self.cause = cause
