"""
Tessa Backend — FastAPI Application Factory
=============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers and routers;
       the lifespan configures logging and disposes the engine on shutdown.
Who:   uvicorn (`uvicorn tessa.main:app`) and the API tests.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware:  Security Headers → Rate Limit → Request ID │
    │               → Logging → GZip → CORS                    │
    │                                                          │
    │  Routes:      /  /health  /api/auth  /api/projects       │
    │               /api/plans  /api/subscriptions  /api/audio │
    │                                                          │
    │  Exception Handlers:                                     │
    │    Validation→400  Auth→401  Quota→403  NotFound→404     │
    │    Conflict→409  RateLimit→429  AnalysisFailed→502       │
    │    LLM/CircuitOpen→503  Storage/DB/unexpected→500        │
    └──────────────────────────────────────────────────────────┘
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from tessa import __version__
from tessa.config import settings
from tessa.database import dispose_engine
from tessa.exceptions import (
    AnalysisFailedError,
    AuthenticationError,
    CircuitBreakerOpenError,
    ConflictError,
    DatabaseError,
    FileStorageError,
    LLMServiceError,
    NotFoundError,
    QuotaExceededError,
    RateLimitExceededError,
    TessaError,
    ValidationError,
)
from tessa.middleware.logging import RequestLoggingMiddleware
from tessa.middleware.rate_limit import RateLimitMiddleware
from tessa.middleware.request_id import RequestIDMiddleware, request_id_var
from tessa.middleware.security_headers import SecurityHeadersMiddleware
from tessa.routes import audio, auth, health, projects, root, subscriptions

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure stdout logging for the whole process.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once from the lifespan, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries that log every operation
    for noisy in ("uvicorn.access", "sqlalchemy.engine", "httpcore", "httpx", "google", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("Tessa Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: /health and the non-AI routes still work
        logger.error("Configuration error: %s", str(e))

    logger.info("Audio staging directory: %s", settings.audio_temp_path)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Tessa Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_response(
    status_code: int,
    error: str,
    message: str,
    details: Optional[dict] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    content = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Maps TessaError subclasses to HTTP responses.

    Server-side failures (5xx) never echo internal context to the client;
    it is logged with the request id instead.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return error_response(400, "validation_error", exc.message, exc.context)

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return error_response(
            401,
            "unauthorized",
            exc.message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(QuotaExceededError)
    async def handle_quota_exceeded(request: Request, exc: QuotaExceededError):
        return error_response(403, "quota_exceeded", exc.message, {"plan": exc.plan, "limit": exc.limit})

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return error_response(404, "not_found", exc.message)

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        return error_response(409, "conflict", exc.message)

    @app.exception_handler(RateLimitExceededError)
    async def handle_rate_limit(request: Request, exc: RateLimitExceededError):
        return error_response(
            429,
            "rate_limit_exceeded",
            exc.message,
            exc.context,
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(AnalysisFailedError)
    async def handle_analysis_failed(request: Request, exc: AnalysisFailedError):
        logger.error("[%s] Audio analysis failed: %s", request_id_var.get(""), exc.cause)
        return error_response(
            502,
            "analysis_failed",
            "Failed to analyze audio. Please try again with a different recording.",
        )

    @app.exception_handler(CircuitBreakerOpenError)
    async def handle_circuit_breaker(request: Request, exc: CircuitBreakerOpenError):
        logger.warning("[%s] Circuit breaker open: %s", request_id_var.get(""), exc.message)
        return error_response(
            503,
            "service_unavailable",
            exc.message,
            {"recovery_time": exc.recovery_time},
            headers={"Retry-After": str(exc.recovery_time)},
        )

    @app.exception_handler(LLMServiceError)
    async def handle_llm_error(request: Request, exc: LLMServiceError):
        logger.error("[%s] LLM service error: %s", request_id_var.get(""), exc.message)
        headers = {"Retry-After": str(exc.retry_after)} if exc.retry_after else None
        return error_response(
            503,
            "llm_service_error",
            "AI service is temporarily unavailable. Please try again later.",
            headers=headers,
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("[%s] Database error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return error_response(500, "server_error", "An internal error occurred. Please try again later.")

    @app.exception_handler(FileStorageError)
    async def handle_file_storage_error(request: Request, exc: FileStorageError):
        logger.error("[%s] File storage error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return error_response(500, "server_error", exc.message)

    @app.exception_handler(TessaError)
    async def handle_tessa_error(request: Request, exc: TessaError):
        logger.error("[%s] Unhandled application error %s: %s", request_id_var.get(""), type(exc).__name__, exc.message)
        return error_response(500, "server_error", "An internal error occurred. Please try again later.")

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Tessa API",
        description=(
            "Multi-tenant backend: accounts, projects with plan quotas, mocked "
            "subscriptions, and audio transcription + analysis with Google Gemini."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Last added runs first: SecurityHeaders → RateLimit → RequestID → Logging
    # → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    register_exception_handlers(app)

    app.include_router(root.router)
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(projects.router)
    app.include_router(subscriptions.router)
    app.include_router(audio.router)

    return app


app = create_app()
