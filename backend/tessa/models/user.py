"""
Tessa Backend — User SQLAlchemy Model
=======================================

What:  ORM model for the `users` table.
Who:   AuthService (register/login), the auth dependency, SubscriptionService
       (plan upgrades) and ProjectService (quota lookups).

Table Design:
    - UUID primary key: not enumerable, safe to expose in tokens and URLs
    - email: unique, the login identifier
    - password_hash: salted PBKDF2 digest, never returned by the API
    - plan: current subscription tier, drives the project quota
    - Child rows (projects, invoices, audio summaries) are removed by the
      database when the user is deleted (ON DELETE CASCADE)
"""

import enum
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, List

from sqlalchemy import DateTime, Enum, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tessa.database import Base

if TYPE_CHECKING:
    from tessa.models.audio_summary import AudioSummary
    from tessa.models.invoice import Invoice
    from tessa.models.project import Project


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PlanType(str, enum.Enum):
    """Subscription tiers; the value is what the API and the database store."""

    FREE = "FREE"
    PRO = "PRO"


class User(Base):
    """A registered account. Owns projects, invoices and audio summaries."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(String(256), nullable=False)
    plan: Mapped[PlanType] = mapped_column(
        Enum(PlanType, name="plan_type"),
        nullable=False,
        default=PlanType.FREE,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
    )

    # passive_deletes: the database cascades; the ORM never loads children
    # just to delete them
    projects: Mapped[List["Project"]] = relationship(
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    invoices: Mapped[List["Invoice"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    audio_summaries: Mapped[List["AudioSummary"]] = relationship(
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', plan='{self.plan.value}')>"
