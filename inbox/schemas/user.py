# inbox/schemas/user.py
"""
Pydantic schemas for users and authentication.
"""
from datetime import datetime
from typing import Optional, Literal

from pydantic import Field, field_validator

from inbox.schemas.common import CamelModel

UserRole = Literal["admin", "agent"]
UserStatus = Literal["available", "busy", "away"]


def _clean_email(v: str) -> str:
    v = (v or "").strip().lower()
    if "@" not in v or v.startswith("@") or v.endswith("@"):
        raise ValueError("Invalid email address")
    return v


# ────────────────────────────────────────────
# Request Schemas (Input)
# ────────────────────────────────────────────

class RegisterRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., max_length=255)
    password: str = Field(..., min_length=1)
    role: Optional[UserRole] = None

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        return _clean_email(v)


class LoginRequest(CamelModel):
    email: str
    password: str

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return (v or "").strip().lower()


class UserUpdate(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    avatar: Optional[str] = None
    status: Optional[UserStatus] = None
    role: Optional[UserRole] = None

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        return _clean_email(v) if v else v


class UserStatusUpdate(CamelModel):
    # Checked by hand in the route so an unknown value answers 400
    status: Optional[str] = None


# ────────────────────────────────────────────
# Response Schemas (Output)
# ────────────────────────────────────────────

class UserSummary(CamelModel):
    """Populated user reference (chat assignee, message author)"""
    id: str
    name: str
    avatar: str = ""
    status: Optional[str] = None


class UserResponse(CamelModel):
    id: str
    name: str
    email: str
    avatar: str = ""
    role: str
    status: str
    created_at: datetime


class UserEnvelope(CamelModel):
    user: UserResponse


class AuthResponse(CamelModel):
    token: str
    user: UserResponse
