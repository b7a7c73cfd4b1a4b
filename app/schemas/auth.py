"""
Pydantic schemas for authentication requests and responses.
Auth endpoints answer with a uniform success/error envelope.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Optional
from app.models.user import UserRole, UserStatus
from app.schemas.common import CamelModel
from app.schemas.user import UserResponse
import uuid


class LoginRequest(CamelModel):
    """Login request schema."""

    email: EmailStr = Field(
        ...,
        description="User's email address",
        examples=["buyer@example.com"]
    )
    password: str = Field(
        ...,
        min_length=1,
        max_length=128,
        description="User's password",
        examples=["securepassword123"]
    )

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip()


class AuthUserData(CamelModel):
    """Envelope payload carrying the authenticated user."""

    user: UserResponse


class AuthResponse(CamelModel):
    """
    Uniform auth envelope.
    On success `data` is set; on failure `error` carries the reason.
    """

    success: bool = Field(..., description="Whether the operation succeeded")
    data: Optional[AuthUserData] = Field(None, description="Operation result")
    error: Optional[str] = Field(None, description="Failure reason")
    message: Optional[str] = Field(None, description="Human-readable summary")


class AuthIdentity(BaseModel):
    """
    Request-scoped identity of a validated session.
    Produced by the authentication dependency and passed to guards.
    """

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    email: str
    role: UserRole
    status: UserStatus

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
