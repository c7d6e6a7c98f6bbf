"""
Tessa Backend — Authentication Schemas
========================================

What:  Request bodies for registration/login and the user/token responses.
How:   Registration enforces the password policy in a field validator so a
       weak password is rejected before any hashing or database work.
       Login only requires a non-empty password; the policy may have changed
       since the account was created.
"""

import re
import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from tessa.models.user import PlanType

PASSWORD_RULES = (
    (re.compile(r"[A-Z]"), "Password must contain at least one uppercase letter"),
    (re.compile(r"[a-z]"), "Password must contain at least one lowercase letter"),
    (re.compile(r"[0-9]"), "Password must contain at least one number"),
)


class RegisterRequest(BaseModel):
    email: EmailStr = Field(description="Login email, unique per account")
    password: str = Field(min_length=8, max_length=128, description="At least 8 characters")

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        for pattern, message in PASSWORD_RULES:
            if not pattern.search(v):
                raise ValueError(message)
        return v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, description="Account password")


class UserResponse(BaseModel):
    """Public view of a user. The password hash is never part of it."""
    id: uuid.UUID
    email: str
    plan: PlanType
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AuthResponse(BaseModel):
    message: str
    user: UserResponse
    token: str = Field(description="Bearer token for the Authorization header")


class MeResponse(BaseModel):
    message: str = "User retrieved successfully"
    user: UserResponse
