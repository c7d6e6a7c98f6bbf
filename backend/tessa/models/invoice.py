"""ORM model for the `invoices` table: one row per successful plan purchase."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tessa.database import Base
from tessa.models.user import PlanType, utc_now

if TYPE_CHECKING:
    from tessa.models.user import User


class Invoice(Base):
    __tablename__ = "invoices"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    plan: Mapped[PlanType] = mapped_column(Enum(PlanType, name="plan_type"), nullable=False)
    # Correlation id returned by the payment adapter
    payment_intent: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="paid")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    user: Mapped["User"] = relationship(back_populates="invoices")

    def __repr__(self) -> str:
        return f"<Invoice(id={self.id}, plan='{self.plan.value}', status='{self.status}')>"
