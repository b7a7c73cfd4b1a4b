"""
Utility modules for the Real Estate Listings API.
"""

from .auth import (
    create_access_token,
    verify_token,
    hash_password,
    verify_password,
    TokenPayload,
    TokenExpired,
)

from .exceptions import (
    APIException,
    ValidationError,
    NotFoundError,
    UnauthorizedError,
    ForbiddenError,
    ConflictError,
    BadRequestError,
    PayloadTooLargeError,
    InvalidCredentialsError,
    TokenExpiredError,
    InvalidTokenError,
    InactiveUserError,
    InsufficientPermissionsError,
    ListingNotFoundError,
    ImageNotFoundError,
    ListingOwnershipError,
    ListingStatusError,
)

from .i18n import SUPPORTED_LOCALES, DEFAULT_LOCALE, localize

# Dependencies and guards are imported directly where needed to avoid circular imports

__all__ = [
    # Auth utilities
    "create_access_token",
    "verify_token",
    "hash_password",
    "verify_password",
    "TokenPayload",
    "TokenExpired",

    # Exceptions
    "APIException",
    "ValidationError",
    "NotFoundError",
    "UnauthorizedError",
    "ForbiddenError",
    "ConflictError",
    "BadRequestError",
    "PayloadTooLargeError",
    "InvalidCredentialsError",
    "TokenExpiredError",
    "InvalidTokenError",
    "InactiveUserError",
    "InsufficientPermissionsError",
    "ListingNotFoundError",
    "ImageNotFoundError",
    "ListingOwnershipError",
    "ListingStatusError",

    # Localization
    "SUPPORTED_LOCALES",
    "DEFAULT_LOCALE",
    "localize",
]
