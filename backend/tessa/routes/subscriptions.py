"""
Tessa Backend — Plans & Subscription Routes
=============================================

    GET  /api/plans?locale=es      → plan catalogue (public)
    POST /api/subscriptions        → buy a paid plan (201)
    GET  /api/subscriptions/current → latest invoice of the current plan, or null
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tessa.database import get_db_session
from tessa.dependencies import get_current_user
from tessa.models.user import User
from tessa.schemas.common import ErrorResponse
from tessa.schemas.subscription import (
    PlanListResponse,
    SubscriptionCreate,
    SubscriptionEnvelope,
)
from tessa.services.payment_adapter import PaymentAdapter, get_payment_adapter
from tessa.services.subscription_service import subscription_service

router = APIRouter(prefix="/api", tags=["Subscriptions"])


@router.get("/plans", response_model=PlanListResponse, summary="Available plans")
async def list_plans(
    locale: str = Query(default="en", max_length=10, description="'es' for Spanish copy"),
) -> PlanListResponse:
    return PlanListResponse(plans=subscription_service.list_plans(locale))


@router.post(
    "/subscriptions",
    status_code=201,
    response_model=SubscriptionEnvelope,
    responses={
        400: {"description": "FREE plan cannot be purchased", "model": ErrorResponse},
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        409: {"description": "Plan already active", "model": ErrorResponse},
    },
    summary="Subscribe to a paid plan",
)
async def create_subscription(
    body: SubscriptionCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    payments: PaymentAdapter = Depends(get_payment_adapter),
) -> SubscriptionEnvelope:
    subscription = await subscription_service.create_subscription(db, user, body.plan_id, payments)
    return SubscriptionEnvelope(subscription=subscription)


@router.get(
    "/subscriptions/current",
    response_model=SubscriptionEnvelope,
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="Current paid subscription",
)
async def current_subscription(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> SubscriptionEnvelope:
    return SubscriptionEnvelope(
        subscription=await subscription_service.get_current_subscription(db, user)
    )
