"""
FastAPI dependency injection utilities for authentication and database sessions.
Provides reusable dependencies for route protection and identity extraction.
"""

from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from app.config import settings
from app.database import get_db
from app.models.user import UserRole
from app.repositories.listing import ListingRepository
from app.schemas.auth import AuthIdentity
from app.services.auth import AuthService
from app.services.listing import ListingService
from app.utils.exceptions import UnauthorizedError
from app.utils.guards import ensure_roles, ensure_listing_ownership
import uuid


# HTTP Bearer token security scheme, used when no session cookie is present
security = HTTPBearer(auto_error=False)


async def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    """Get authentication service instance."""
    return AuthService(db)


async def get_listing_service(db: AsyncSession = Depends(get_db)) -> ListingService:
    """Get listing service instance."""
    return ListingService(db)


def get_session_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[str]:
    """
    Extract the session token: cookie first, then Authorization: Bearer.
    """
    token = request.cookies.get(settings.cookie_name)
    if token:
        return token
    if credentials:
        return credentials.credentials
    return None


async def get_current_identity(
    request: Request,
    token: Optional[str] = Depends(get_session_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> AuthIdentity:
    """
    Authenticate the request and return its identity.

    Raises:
        UnauthorizedError: If no token is present, or the user is missing or not ACTIVE
        TokenExpiredError: If the token is expired
        InvalidTokenError: If the token is malformed or tampered with
    """
    if not token:
        raise UnauthorizedError("Authentication token required")

    payload = auth_service.decode_token(token)

    try:
        user_id = uuid.UUID(payload.user_id)
    except ValueError:
        raise UnauthorizedError("Invalid token subject")

    user = await auth_service.validate_user(user_id)
    if user is None:
        raise UnauthorizedError("User not found or inactive")

    identity = AuthIdentity(id=user.id, email=user.email, role=user.role, status=user.status)
    request.state.identity = identity
    return identity


def require_roles(*roles: UserRole):
    """
    Create a dependency that requires one of the given roles.
    Authentication runs first, so anonymous callers get 401 before the role check.

    Returns:
        Dependency function resolving to the caller's identity
    """
    async def role_dependency(
        identity: AuthIdentity = Depends(get_current_identity)
    ) -> AuthIdentity:
        return ensure_roles(identity, roles)

    return role_dependency


async def require_listing_ownership(
    id: uuid.UUID,
    identity: AuthIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
) -> AuthIdentity:
    """
    Dependency requiring the caller to own the listing in the `id` path parameter.
    Admins always pass.
    """
    return await ensure_listing_ownership(identity, id, ListingRepository(db))
