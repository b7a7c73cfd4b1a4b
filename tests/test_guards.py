"""
Tests for authorization guards and authentication dependencies.
"""

import pytest
import uuid
from datetime import timedelta
from starlette.requests import Request

from app.config import settings
from app.models.user import User, UserRole, UserStatus
from app.models.listing import Listing
from app.repositories.listing import ListingRepository
from app.schemas.auth import AuthIdentity
from app.services.auth import AuthService
from app.utils.auth import create_access_token
from app.utils.dependencies import get_current_identity, get_session_token
from app.utils.exceptions import (
    ForbiddenError,
    InsufficientPermissionsError,
    ListingNotFoundError,
    ListingOwnershipError,
    TokenExpiredError,
    UnauthorizedError
)
from app.utils.guards import ensure_roles, ensure_listing_ownership
from tests.conftest import identity_for, auth_headers


def _identity(role: UserRole) -> AuthIdentity:
    return AuthIdentity(id=uuid.uuid4(), email="someone@example.com", role=role, status=UserStatus.ACTIVE)


def _request(headers=None, cookies=None) -> Request:
    raw_headers = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    if cookies:
        cookie_header = "; ".join(f"{k}={v}" for k, v in cookies.items())
        raw_headers.append((b"cookie", cookie_header.encode()))
    return Request({"type": "http", "method": "GET", "path": "/", "headers": raw_headers})


class TestRoleGuard:
    """Test ensure_roles."""

    def test_allowed_role(self):
        identity = _identity(UserRole.ADMIN)

        assert ensure_roles(identity, [UserRole.ADMIN]) is identity

    def test_any_of_several_roles(self):
        identity = _identity(UserRole.AGENT)

        assert ensure_roles(identity, (UserRole.AGENT, UserRole.ADMIN)) is identity

    def test_missing_role(self):
        with pytest.raises(InsufficientPermissionsError) as exc_info:
            ensure_roles(_identity(UserRole.USER), [UserRole.ADMIN, UserRole.AGENT])

        assert exc_info.value.status_code == 403
        assert exc_info.value.detail == "User does not have required role. Required: ADMIN, AGENT"

    def test_no_identity(self):
        with pytest.raises(ForbiddenError, match="User not authenticated"):
            ensure_roles(None, [UserRole.USER])


class TestOwnershipGuard:
    """Test ensure_listing_ownership."""

    @pytest.mark.asyncio
    async def test_owner_passes(self, listing_repository: ListingRepository, test_listing: Listing, test_user: User):
        identity = identity_for(test_user)

        assert await ensure_listing_ownership(identity, test_listing.id, listing_repository) is identity

    @pytest.mark.asyncio
    async def test_stranger_rejected(self, listing_repository: ListingRepository, test_listing: Listing, test_other_user: User):
        with pytest.raises(ListingOwnershipError, match="modify this listing"):
            await ensure_listing_ownership(identity_for(test_other_user), test_listing.id, listing_repository)

    @pytest.mark.asyncio
    async def test_admin_bypasses(self, listing_repository: ListingRepository, test_listing: Listing, test_admin: User):
        identity = identity_for(test_admin)

        assert await ensure_listing_ownership(identity, test_listing.id, listing_repository) is identity

    @pytest.mark.asyncio
    async def test_missing_listing(self, listing_repository: ListingRepository, test_user: User):
        with pytest.raises(ListingNotFoundError):
            await ensure_listing_ownership(identity_for(test_user), uuid.uuid4(), listing_repository)


class TestAuthenticationDependency:
    """Test session token extraction and identity resolution."""

    def test_cookie_wins_over_bearer(self):
        request = _request(cookies={settings.cookie_name: "cookie-token"})

        class Credentials:
            credentials = "bearer-token"

        assert get_session_token(request, Credentials()) == "cookie-token"
        assert get_session_token(_request(), Credentials()) == "bearer-token"
        assert get_session_token(_request(), None) is None

    @pytest.mark.asyncio
    async def test_identity_from_token(self, auth_service: AuthService, test_user: User):
        request = _request()
        token = auth_headers(test_user)["Authorization"].split()[1]

        identity = await get_current_identity(request, token, auth_service)

        assert identity.id == test_user.id
        assert identity.role == UserRole.USER
        assert request.state.identity == identity

    @pytest.mark.asyncio
    async def test_missing_token(self, auth_service: AuthService):
        with pytest.raises(UnauthorizedError, match="Authentication token required"):
            await get_current_identity(_request(), None, auth_service)

    @pytest.mark.asyncio
    async def test_suspended_user_rejected(self, auth_service: AuthService, test_suspended_user: User):
        token = auth_headers(test_suspended_user)["Authorization"].split()[1]

        with pytest.raises(UnauthorizedError, match="User not found or inactive"):
            await get_current_identity(_request(), token, auth_service)

    @pytest.mark.asyncio
    async def test_expired_token(self, auth_service: AuthService, test_user: User):
        token = create_access_token(test_user.id, test_user.email, test_user.role, expires_delta=timedelta(minutes=-1))

        with pytest.raises(TokenExpiredError):
            await get_current_identity(_request(), token, auth_service)
