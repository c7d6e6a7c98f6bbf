"""
Tessa Backend — ORM Models
============================

Importing this package registers every table with `Base.metadata`, which
Alembic autogenerate and the test database setup rely on.
"""

from tessa.models.audio_summary import AudioSummary
from tessa.models.invoice import Invoice
from tessa.models.project import Project
from tessa.models.user import PlanType, User

__all__ = ["AudioSummary", "Invoice", "PlanType", "Project", "User"]
