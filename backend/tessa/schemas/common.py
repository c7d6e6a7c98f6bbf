"""
Tessa Backend — Shared Response Schemas
=========================================

What:  Envelope models used by every router: the error body produced by the
       global exception handlers and the health/welcome payloads.
Who:   tessa.main (exception handlers, root route) and routes/health.py.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standardized error body for every non-2xx response.

    Example:
        {
            "error": "quota_exceeded",
            "message": "FREE plan allows a maximum of 3 projects. Please upgrade your plan.",
            "details": {"plan": "FREE", "limit": 3},
            "request_id": "550e8400-e29b-41d4-a716-446655440000"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class WelcomeResponse(BaseModel):
    message: str = Field(default="Welcome to Tessa API")
    version: str
    status: str = Field(default="running")


class HealthResponse(BaseModel):
    """Service and dependency status for monitoring and load balancers."""
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    gemini: str = Field(description="Model provider status: available, unavailable, circuit_open")
    uptime_seconds: float = Field(description="Seconds since service started")
