"""
Tessa Backend — Authentication Routes
=======================================

    POST /api/auth/register → 201 {message, user, token}
    POST /api/auth/login    → 200 {message, user, token}
    GET  /api/auth/me       → 200 {message, user}   (bearer token required)
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tessa.database import get_db_session
from tessa.dependencies import get_current_user
from tessa.models.user import User
from tessa.schemas.auth import (
    AuthResponse,
    LoginRequest,
    MeResponse,
    RegisterRequest,
    UserResponse,
)
from tessa.schemas.common import ErrorResponse
from tessa.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    status_code=201,
    response_model=AuthResponse,
    responses={409: {"description": "Email already registered", "model": ErrorResponse}},
    summary="Create an account",
)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    user, token = await auth_service.register(db, body.email, body.password)
    return AuthResponse(
        message="User registered successfully",
        user=UserResponse.model_validate(user),
        token=token,
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={401: {"description": "Invalid email or password", "model": ErrorResponse}},
    summary="Exchange credentials for a bearer token",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    user, token = await auth_service.login(db, body.email, body.password)
    return AuthResponse(
        message="Login successful",
        user=UserResponse.model_validate(user),
        token=token,
    )


@router.get(
    "/me",
    response_model=MeResponse,
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="Current user",
)
async def me(user: User = Depends(get_current_user)) -> MeResponse:
    return MeResponse(user=UserResponse.model_validate(user))
