"""
Tessa Backend — Subscription Service
======================================

What:  Plan catalogue lookups, plan purchases and the current subscription.
Who:   routes/subscriptions.py

Purchase Flow (create_subscription):
    1. Reject the FREE plan (nothing to pay for)        → ValidationError
    2. Reject users already on the requested paid plan  → ConflictError
    3. Charge through the PaymentAdapter                → payment intent id
    4. Insert a "paid" Invoice and switch user.plan
    Steps 3-4 run inside the request transaction; a failure rolls back both
    the invoice and the plan change.
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tessa.exceptions import ConflictError, ValidationError
from tessa.models.invoice import Invoice
from tessa.models.user import PlanType, User
from tessa.plans import get_plans
from tessa.schemas.subscription import PlanInfo, SubscriptionResponse
from tessa.services.ownership import locked_owner
from tessa.services.payment_adapter import PaymentAdapter

logger = logging.getLogger(__name__)

INVOICE_STATUS_PAID = "paid"


def _to_response(invoice: Invoice) -> SubscriptionResponse:
    return SubscriptionResponse(
        user_id=invoice.user_id,
        plan=invoice.plan,
        payment_intent_id=invoice.payment_intent,
        status=invoice.status,
        created_at=invoice.created_at,
    )


class SubscriptionService:
    def list_plans(self, locale: str = "en") -> List[PlanInfo]:
        return get_plans(locale)

    async def create_subscription(
        self,
        db: AsyncSession,
        user: User,
        plan: PlanType,
        payments: PaymentAdapter,
    ) -> SubscriptionResponse:
        if plan == PlanType.FREE:
            raise ValidationError(
                message="Cannot create subscription for FREE plan",
                field="plan_id",
            )
        await db.execute(locked_owner(user.id))
        if user.plan == plan:
            raise ConflictError(
                message=f"User already has an active {plan.value} subscription",
                context={"plan": plan.value},
            )

        payment_intent_id = await payments.create_subscription(user.id, plan)

        invoice = Invoice(
            user_id=user.id,
            plan=plan,
            payment_intent=payment_intent_id,
            status=INVOICE_STATUS_PAID,
        )
        db.add(invoice)
        user.plan = plan
        await db.flush()

        logger.info("User %s upgraded to %s (invoice %s)", user.id, plan.value, invoice.id)
        return _to_response(invoice)

    async def get_current_subscription(self, db: AsyncSession, user: User) -> Optional[SubscriptionResponse]:
        """Latest invoice for the user's current paid plan; None on FREE."""
        if user.plan == PlanType.FREE:
            return None

        result = await db.execute(
            select(Invoice)
            .where(Invoice.user_id == user.id, Invoice.plan == user.plan)
            .order_by(Invoice.created_at.desc())
            .limit(1)
        )
        invoice = result.scalar_one_or_none()
        return _to_response(invoice) if invoice else None


subscription_service = SubscriptionService()
