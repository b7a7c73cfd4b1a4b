"""
Pydantic schemas for request/response validation.
These types are shared by the API server and the HTTP client.
"""

from .common import CamelModel

# Authentication schemas
from .auth import (
    LoginRequest,
    AuthUserData,
    AuthResponse,
    AuthIdentity
)

# User schemas
from .user import (
    UserCreate,
    ProfileUpdate,
    UserResponse,
    OwnerSummary
)

# Listing schemas
from .listing import (
    LocalizedText,
    ListingCreate,
    ListingUpdate,
    ListingStatusUpdate,
    ListingResponse,
    ListingListResponse,
    PaginationMeta
)

# Image schemas
from .image import (
    ListingImageCreate,
    ListingImageResponse
)

__all__ = [
    "CamelModel",

    # Authentication
    "LoginRequest",
    "AuthUserData",
    "AuthResponse",
    "AuthIdentity",

    # User
    "UserCreate",
    "ProfileUpdate",
    "UserResponse",
    "OwnerSummary",

    # Listing
    "LocalizedText",
    "ListingCreate",
    "ListingUpdate",
    "ListingStatusUpdate",
    "ListingResponse",
    "ListingListResponse",
    "PaginationMeta",

    # Image
    "ListingImageCreate",
    "ListingImageResponse"
]
