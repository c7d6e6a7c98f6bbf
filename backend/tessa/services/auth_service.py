"""
Tessa Backend — Authentication Service
========================================

What:  Registration, login and user lookup.
Who:   routes/auth.py and the get_current_user dependency.

Login never reveals which half of the credentials was wrong: an unknown
email and a bad password produce the same AuthenticationError.
"""

import logging
import uuid
from typing import Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tessa.exceptions import AuthenticationError, ConflictError
from tessa.models.user import PlanType, User
from tessa.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthService:
    async def get_user(self, db: AsyncSession, user_id: uuid.UUID) -> Optional[User]:
        return await db.get(User, user_id)

    async def get_user_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == normalize_email(email)))
        return result.scalar_one_or_none()

    async def register(self, db: AsyncSession, email: str, password: str) -> Tuple[User, str]:
        """
        Creates a FREE user and returns it with a fresh access token.

        Raises:
            ConflictError: the email is already registered
        """
        email = normalize_email(email)
        if await self.get_user_by_email(db, email) is not None:
            raise ConflictError(message="User with this email already exists")

        user = User(email=email, password_hash=hash_password(password), plan=PlanType.FREE)
        db.add(user)
        try:
            await db.flush()
        except IntegrityError as e:
            # Lost a race with a concurrent registration of the same email
            raise ConflictError(message="User with this email already exists") from e

        logger.info("User registered: %s", user.id)
        return user, create_access_token(user.id, user.email)

    async def login(self, db: AsyncSession, email: str, password: str) -> Tuple[User, str]:
        user = await self.get_user_by_email(db, email)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Failed login attempt")
            raise AuthenticationError(message=INVALID_CREDENTIALS)

        logger.info("User logged in: %s", user.id)
        return user, create_access_token(user.id, user.email)


auth_service = AuthService()
