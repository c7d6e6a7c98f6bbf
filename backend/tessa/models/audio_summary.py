"""
Tessa Backend — AudioSummary SQLAlchemy Model
===============================================

What:  ORM model for the `audio_summaries` table, the persisted output of a
       successful audio analysis.
Who:   AudioSummaryService (create / list / get / delete, always scoped by
       owner_id).

Lifecycle:
    1. Inserted once, after the orchestrator returned a complete analysis
    2. Never updated
    3. Deleted explicitly by its owner, or by the database when the owning
       user row is deleted (ON DELETE CASCADE)

Query Patterns:
    - List: WHERE owner_id = :owner ORDER BY created_at DESC
      → idx_audio_summaries_owner_created_at
    - Get / delete: WHERE id = :id AND owner_id = :owner
      → primary key lookup, owner predicate folded into the same query
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, List

from sqlalchemy import JSON, DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tessa.database import Base
from tessa.models.user import utc_now

if TYPE_CHECKING:
    from tessa.models.user import User


class AudioSummary(Base):
    __tablename__ = "audio_summaries"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    # At most 100 characters, enforced by the analysis step
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    # Ordered list of short strings
    keywords: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    transcript: Mapped[str] = mapped_column(Text, nullable=False)
    summary: Mapped[str] = mapped_column(Text, nullable=False)
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

    owner: Mapped["User"] = relationship(back_populates="audio_summaries")

    __table_args__ = (
        Index("idx_audio_summaries_owner_created_at", "owner_id", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<AudioSummary(id={self.id}, title='{self.title}', created_at='{self.created_at}')>"
