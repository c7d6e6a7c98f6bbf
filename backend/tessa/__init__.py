"""
Tessa Backend — Application Package
=====================================

What: Multi-tenant API for accounts, projects, subscription plans and
      audio analysis (Gemini transcription + structured summary).
Who:  Imported by uvicorn (`tessa.main:app`), Alembic and pytest.

Layering:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, auth dependency
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← auth, projects, plans, audio agent
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
