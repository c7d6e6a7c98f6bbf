"""
Tessa Backend — Plan & Subscription Schemas
=============================================

PlanInfo mirrors one entry of the plan catalogue (tessa.plans.PLANS);
SubscriptionResponse is built from the invoice that activated a paid plan.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from tessa.models.user import PlanType


class PlanInfo(BaseModel):
    id: PlanType
    name: str
    description: str
    price: float = Field(ge=0)
    currency: str
    projects_quota: int = Field(ge=0)
    features: List[str]


class PlanListResponse(BaseModel):
    plans: List[PlanInfo]


class SubscriptionCreate(BaseModel):
    plan_id: PlanType = Field(description="Plan to subscribe to: FREE or PRO")


class SubscriptionResponse(BaseModel):
    user_id: uuid.UUID
    plan: PlanType
    payment_intent_id: str = Field(description="Correlation id returned by the payment provider")
    status: str
    created_at: datetime


class SubscriptionEnvelope(BaseModel):
    """`subscription` is null when the user is on the FREE plan."""
    subscription: Optional[SubscriptionResponse]
