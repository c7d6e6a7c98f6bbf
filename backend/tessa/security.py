"""
Tessa Backend — Password Hashing & Access Tokens
==================================================

Passwords: salted PBKDF2-HMAC-SHA256, stored as base64(salt + digest).
Tokens:    HS256 JWTs carrying `sub` (user id), `email`, `iat` and `exp`.
"""

import base64
import hashlib
import hmac
import os
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from tessa.config import settings
from tessa.exceptions import AuthenticationError

_SALT_BYTES = 16
_ITERATIONS = 120_000


def hash_password(password: str) -> str:
    salt = os.urandom(_SALT_BYTES)
    derived = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, _ITERATIONS)
    return base64.b64encode(salt + derived).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Constant-time check of `password` against a stored hash."""
    try:
        decoded = base64.b64decode(hashed.encode("utf-8"), validate=True)
    except (ValueError, TypeError):
        return False
    if len(decoded) <= _SALT_BYTES:
        return False

    salt, stored = decoded[:_SALT_BYTES], decoded[_SALT_BYTES:]
    candidate = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, _ITERATIONS)
    return hmac.compare_digest(candidate, stored)


class TokenPayload(BaseModel):
    sub: uuid.UUID
    email: str
    exp: datetime
    iat: Optional[datetime] = None


def create_access_token(
    user_id: uuid.UUID,
    email: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    now = datetime.now(timezone.utc)
    expire_at = now + (expires_delta or timedelta(minutes=settings.jwt_expires_minutes))
    claims = {"sub": str(user_id), "email": email, "iat": now, "exp": expire_at}
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> TokenPayload:
    """
    Verifies signature and expiry.

    Raises:
        AuthenticationError for any malformed, tampered or expired token
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        return TokenPayload.model_validate(payload)
    except (JWTError, PydanticValidationError) as e:
        raise AuthenticationError(
            message="Invalid or expired token",
            context={"error": type(e).__name__},
        ) from e
