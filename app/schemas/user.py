"""
Pydantic schemas for user requests and responses.
Handles registration, profile updates and the public user representation.
"""

from pydantic import EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime
from app.models.user import UserRole, UserStatus
from app.schemas.common import CamelModel


class UserCreate(CamelModel):
    """Schema for registering a new user."""

    email: EmailStr = Field(
        ...,
        description="User's email address",
        examples=["buyer@example.com"]
    )

    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="User's password (8 to 128 characters)",
        examples=["securepassword123"]
    )

    first_name: Optional[str] = Field(None, max_length=100, examples=["Aziz"])
    last_name: Optional[str] = Field(None, max_length=100, examples=["Karimov"])
    phone: Optional[str] = Field(None, max_length=32, examples=["+998901234567"])

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip()


class ProfileUpdate(CamelModel):
    """
    Schema for partial profile updates.
    Only fields present in the request body are changed.
    """

    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=32)


class UserResponse(CamelModel):
    """Public user representation; never carries the password hash."""

    id: str = Field(..., description="Unique user identifier")
    email: str = Field(..., description="User's email address")
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    role: UserRole = Field(..., description="User's role")
    status: UserStatus = Field(..., description="Account status")
    email_verified: bool = False
    created_at: datetime
    updated_at: datetime


class OwnerSummary(CamelModel):
    """Owner contact summary embedded in listing responses."""

    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    role: UserRole
