"""
Authorization guards.
Plain check functions over a request-scoped AuthIdentity; the FastAPI
dependency wrappers live in app.utils.dependencies.
"""

from typing import Iterable, Optional
from app.models.user import UserRole
from app.repositories.listing import ListingRepository
from app.schemas.auth import AuthIdentity
from app.utils.exceptions import (
    ForbiddenError,
    InsufficientPermissionsError,
    ListingNotFoundError,
    ListingOwnershipError
)
import uuid
import logging

logger = logging.getLogger(__name__)


def ensure_roles(identity: Optional[AuthIdentity], roles: Iterable[UserRole]) -> AuthIdentity:
    """
    Role guard.

    Raises:
        ForbiddenError: If there is no identity on the request
        InsufficientPermissionsError: If the identity's role is not in roles
    """
    allowed = list(roles)

    if identity is None:
        raise ForbiddenError("User not authenticated")

    if identity.role not in allowed:
        required = ", ".join(role.value for role in allowed)
        logger.warning(f"Role check failed for {identity.email}: has {identity.role.value}, needs {required}")
        raise InsufficientPermissionsError(f"User does not have required role. Required: {required}")

    return identity


async def ensure_listing_ownership(
    identity: AuthIdentity,
    listing_id: uuid.UUID,
    listing_repo: ListingRepository
) -> AuthIdentity:
    """
    Ownership guard. Admins pass without a lookup.

    Raises:
        ListingNotFoundError: If the listing does not exist
        ListingOwnershipError: If the identity does not own the listing
    """
    if identity.is_admin:
        return identity

    owner_id = await listing_repo.get_owner_id(listing_id)
    if owner_id is None:
        raise ListingNotFoundError()

    if owner_id != identity.id:
        logger.warning(f"Ownership check failed for {identity.email} on listing {listing_id}")
        raise ListingOwnershipError("modify this listing")

    return identity
