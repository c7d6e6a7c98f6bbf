"""
Payment provider boundary.

Subscriptions only need one capability from a payment provider: charge a
user for a plan and return a correlation id to store on the invoice. The
mocked adapter is the only implementation; it never talks to a network.
"""

import logging
import uuid
from abc import ABC, abstractmethod

from tessa.models.user import PlanType

logger = logging.getLogger(__name__)


class PaymentAdapter(ABC):
    @abstractmethod
    async def create_subscription(self, user_id: uuid.UUID, plan: PlanType) -> str:
        """Charges `user_id` for `plan`; returns the payment intent id."""
        ...


class MockedPaymentAdapter(PaymentAdapter):
    async def create_subscription(self, user_id: uuid.UUID, plan: PlanType) -> str:
        payment_intent_id = f"pi_mock_{uuid.uuid4()}"
        logger.info(
            "[Mocked payments] Subscription for user %s, plan %s: %s",
            user_id,
            plan.value,
            payment_intent_id,
        )
        return payment_intent_id


payment_adapter = MockedPaymentAdapter()


def get_payment_adapter() -> PaymentAdapter:
    return payment_adapter
