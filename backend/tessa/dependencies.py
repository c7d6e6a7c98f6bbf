"""
Tessa Backend — Shared Route Dependencies
===========================================

get_current_user resolves the `Authorization: Bearer <jwt>` header to a User.
Every failure (missing header, wrong scheme, bad or expired token, deleted
user) raises AuthenticationError, which the global handler turns into 401.
"""

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from tessa.database import get_db_session
from tessa.exceptions import AuthenticationError
from tessa.models.user import User
from tessa.security import decode_access_token
from tessa.services.auth_service import auth_service

logger = logging.getLogger(__name__)

# auto_error=False: missing credentials go through our own 401 format
bearer_scheme = HTTPBearer(auto_error=False, description="JWT from /api/auth/login")


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> User:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationError(message="No token provided")

    payload = decode_access_token(credentials.credentials)

    user = await auth_service.get_user(db, payload.sub)
    if user is None:
        logger.info("Token for unknown user %s", payload.sub)
        raise AuthenticationError(message="User not found")
    return user
