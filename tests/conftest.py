"""
Test configuration and fixtures for the real estate listings API.
Provides database fixtures, test data factories, and common test utilities.
"""

import os
import tempfile

# Settings are read once at import time, so the test environment must be in
# place before anything under app/ is imported.
_TEST_DB_DIR = tempfile.mkdtemp(prefix="listings-tests-")
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{os.path.join(_TEST_DB_DIR, 'test.db')}"
)
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")
os.environ.setdefault("ENABLE_REQUEST_LOGGING", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
import uuid
from typing import AsyncGenerator, Dict, Optional
from decimal import Decimal

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from app.main import app
from app.database import AsyncSessionLocal, create_tables, drop_tables
from app.models.user import User, UserRole, UserStatus
from app.models.listing import Listing, ListingStatus, PropertyType, DealType, dump_json_text
from app.models.image import ListingImage
from app.repositories.user import UserRepository
from app.repositories.listing import ListingRepository
from app.repositories.image import ImageRepository
from app.schemas.auth import AuthIdentity
from app.services.auth import AuthService
from app.services.listing import ListingService
from app.utils.auth import create_access_token


TEST_PASSWORD = "testpassword123"


@pytest.fixture(autouse=True)
async def setup_test_database():
    """Create a fresh schema for every test."""
    await create_tables()
    yield
    await drop_tables()


@pytest.fixture
async def db_session(setup_test_database) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.rollback()
            await session.close()


@pytest.fixture
async def async_client(setup_test_database) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Async HTTP client talking to the app in-process."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# Repository fixtures
@pytest.fixture
def user_repository(db_session: AsyncSession) -> UserRepository:
    """Create a user repository instance."""
    return UserRepository(db_session)


@pytest.fixture
def listing_repository(db_session: AsyncSession) -> ListingRepository:
    """Create a listing repository instance."""
    return ListingRepository(db_session)


@pytest.fixture
def image_repository(db_session: AsyncSession) -> ImageRepository:
    """Create an image repository instance."""
    return ImageRepository(db_session)


# Service fixtures
@pytest.fixture
def auth_service(db_session: AsyncSession) -> AuthService:
    """Create an auth service instance."""
    return AuthService(db_session)


@pytest.fixture
def listing_service(db_session: AsyncSession) -> ListingService:
    """Create a listing service instance."""
    return ListingService(db_session)


# Test data factories
class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    def create_user_data(
        email: Optional[str] = None,
        password: str = TEST_PASSWORD,
        first_name: Optional[str] = "Test",
        last_name: Optional[str] = "User",
        phone: Optional[str] = None,
        role: UserRole = UserRole.USER,
        status: UserStatus = UserStatus.ACTIVE
    ) -> dict:
        """Create user data dictionary."""
        return {
            "email": email or f"test{uuid.uuid4().hex[:8]}@example.com",
            "password": password,
            "first_name": first_name,
            "last_name": last_name,
            "phone": phone,
            "role": role,
            "status": status
        }

    @staticmethod
    async def create_user(user_repo: UserRepository, **kwargs) -> User:
        """Create a test user in the database."""
        return await user_repo.create_user(UserFactory.create_user_data(**kwargs))


class ListingFactory:
    """Factory for creating test listings."""

    @staticmethod
    def create_listing_payload(**overrides) -> dict:
        """Create a camelCase request body for POST /listings."""
        payload = {
            "propertyType": "APARTMENT",
            "dealType": "SALE",
            "title": {"en": "Bright 2-room flat", "ru": "Светлая двухкомнатная квартира"},
            "description": {"en": "Renovated flat near the metro"},
            "city": "Tashkent",
            "district": "Yunusabad",
            "price": 85000,
            "currency": "USD",
            "area": 64.5,
            "rooms": 2,
            "features": {"parking": True, "balcony": 1}
        }
        payload.update(overrides)
        return payload

    @staticmethod
    async def create_listing(
        listing_repo: ListingRepository,
        owner_id: uuid.UUID,
        status: ListingStatus = ListingStatus.ACTIVE,
        property_type: PropertyType = PropertyType.APARTMENT,
        deal_type: DealType = DealType.SALE,
        title: Optional[Dict[str, str]] = None,
        city: str = "Tashkent",
        district: Optional[str] = "Yunusabad",
        price: Decimal = Decimal("85000.00"),
        currency: str = "UZS",
        rooms: Optional[int] = 2,
        area: Optional[float] = 64.5,
        features: Optional[dict] = None
    ) -> Listing:
        """Create a test listing in the database."""
        return await listing_repo.create_listing({
            "owner_id": owner_id,
            "status": status,
            "property_type": property_type,
            "deal_type": deal_type,
            "title": dump_json_text(title or {"en": "Test listing"}),
            "description": dump_json_text({"en": "A test listing"}),
            "city": city,
            "district": district,
            "price": price,
            "currency": currency,
            "rooms": rooms,
            "area": area,
            "features": dump_json_text(features)
        })


class ImageFactory:
    """Factory for creating test listing images."""

    @staticmethod
    async def create_image(
        image_repo: ImageRepository,
        listing_id: uuid.UUID,
        url: Optional[str] = None,
        order: int = 0
    ) -> ListingImage:
        """Create a test listing image in the database."""
        return await image_repo.add_image(listing_id, {
            "url": url or f"https://cdn.example.com/{uuid.uuid4().hex}.jpg",
            "order": order
        })


def identity_for(user: User) -> AuthIdentity:
    """Request identity as the auth dependency would build it."""
    return AuthIdentity(id=user.id, email=user.email, role=user.role, status=user.status)


def auth_headers(user: User) -> Dict[str, str]:
    """Bearer header for a user, bypassing the login endpoint."""
    token = create_access_token(user_id=user.id, email=user.email, role=user.role)
    return {"Authorization": f"Bearer {token}"}


# Common test fixtures
@pytest.fixture
async def test_user(user_repository: UserRepository) -> User:
    """Create a regular ACTIVE user."""
    return await UserFactory.create_user(
        user_repository,
        email="owner@test.com",
        first_name="Listing",
        last_name="Owner",
        phone="+998901234567"
    )


@pytest.fixture
async def test_other_user(user_repository: UserRepository) -> User:
    """Create a second regular user who owns nothing."""
    return await UserFactory.create_user(user_repository, email="other@test.com")


@pytest.fixture
async def test_admin(user_repository: UserRepository) -> User:
    """Create an admin user."""
    return await UserFactory.create_user(
        user_repository,
        email="admin@test.com",
        first_name="Test",
        last_name="Admin",
        role=UserRole.ADMIN
    )


@pytest.fixture
async def test_suspended_user(user_repository: UserRepository) -> User:
    """Create a suspended user."""
    return await UserFactory.create_user(
        user_repository,
        email="suspended@test.com",
        status=UserStatus.SUSPENDED
    )


@pytest.fixture
async def test_listing(listing_repository: ListingRepository, test_user: User) -> Listing:
    """Create an ACTIVE listing owned by test_user."""
    return await ListingFactory.create_listing(
        listing_repository,
        owner_id=test_user.id,
        title={"en": "Family house", "ru": "Семейный дом", "uz": "Oilaviy uy"},
        features={"garden": True}
    )


@pytest.fixture
async def test_draft_listing(listing_repository: ListingRepository, test_user: User) -> Listing:
    """Create a DRAFT listing owned by test_user."""
    return await ListingFactory.create_listing(
        listing_repository,
        owner_id=test_user.id,
        status=ListingStatus.DRAFT
    )


@pytest.fixture
def user_headers(test_user: User) -> Dict[str, str]:
    return auth_headers(test_user)


@pytest.fixture
def other_headers(test_other_user: User) -> Dict[str, str]:
    return auth_headers(test_other_user)


@pytest.fixture
def admin_headers(test_admin: User) -> Dict[str, str]:
    return auth_headers(test_admin)
