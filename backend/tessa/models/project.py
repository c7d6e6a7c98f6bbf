"""ORM model for the `projects` table."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tessa.database import Base
from tessa.models.user import utc_now

if TYPE_CHECKING:
    from tessa.models.user import User


class Project(Base):
    """
    A named project owned by one user.

    The number of rows per user is capped by the owner's plan
    (see tessa.plans.PLAN_QUOTAS).
    """

    __tablename__ = "projects"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
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

    owner: Mapped["User"] = relationship(back_populates="projects")

    __table_args__ = (
        Index("idx_projects_user_created_at", "user_id", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, name='{self.name}')>"
