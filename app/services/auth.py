"""
Authentication service for registration, login, session validation and profiles.
Handles JWT token generation, validation and account status rules.
"""

from typing import Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from app.repositories.user import UserRepository
from app.models.user import User
from app.schemas.user import UserCreate, ProfileUpdate
from app.utils.auth import (
    create_access_token,
    verify_token,
    TokenExpired,
    TokenPayload
)
from app.utils.exceptions import (
    APIException,
    ConflictError,
    InvalidCredentialsError,
    InvalidTokenError,
    TokenExpiredError,
    InactiveUserError,
    NotFoundError,
    BadRequestError
)
from jose import JWTError
import uuid
import logging

logger = logging.getLogger(__name__)


class AuthService:
    """
    Authentication service for managing accounts and sessions.
    Only ACTIVE accounts can log in or hold a valid session.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.user_repo = UserRepository(db_session)

    async def register(self, user_data: UserCreate) -> User:
        """
        Register a new account with status ACTIVE and role USER.

        Raises:
            ConflictError: If the email is already registered
            BadRequestError: If the account could not be created
        """
        try:
            existing = await self.user_repo.get_by_email(user_data.email)
            if existing:
                logger.warning(f"Registration attempted for existing email: {user_data.email}")
                raise ConflictError("User with this email already exists")

            user = await self.user_repo.create_user(user_data.model_dump())
            logger.info(f"User registered: {user.email} (ID: {user.id})")
            return user

        except APIException:
            raise
        except ValueError as e:
            raise BadRequestError(str(e))
        except Exception as e:
            logger.error(f"Failed to register user {user_data.email}: {e}")
            raise BadRequestError("Registration failed")

    async def authenticate_user(self, email: str, password: str) -> User:
        """
        Check credentials and account status.

        Raises:
            InvalidCredentialsError: Unknown email or wrong password (same message)
            InactiveUserError: Any login on a non-ACTIVE account
        """
        user = await self.user_repo.get_by_email(email)

        if not user:
            logger.warning(f"Failed authentication attempt for email: {email}")
            raise InvalidCredentialsError()

        if not user.is_active:
            logger.warning(f"Login rejected for {user.status.value} account: {email}")
            raise InactiveUserError()

        if not user.verify_password(password):
            logger.warning(f"Failed authentication attempt for email: {email}")
            raise InvalidCredentialsError()

        return user

    def create_token(self, user: User) -> str:
        """Sign an access token carrying the user's id, email and role."""
        return create_access_token(
            user_id=user.id,
            email=user.email,
            role=user.role
        )

    async def login(self, email: str, password: str) -> Tuple[User, str]:
        """
        Authenticate user and create an access token.

        Returns:
            Tuple of (user, access_token)
        """
        user = await self.authenticate_user(email, password)
        access_token = self.create_token(user)

        logger.info(f"User logged in: {user.email}")
        return user, access_token

    def decode_token(self, token: str) -> TokenPayload:
        """
        Verify a session token.

        Raises:
            TokenExpiredError: If the token lifetime has passed
            InvalidTokenError: If the token is malformed or tampered with
        """
        try:
            return verify_token(token)
        except TokenExpired:
            raise TokenExpiredError()
        except JWTError as e:
            logger.debug(f"Rejected session token: {e}")
            raise InvalidTokenError()

    async def validate_user(self, user_id: uuid.UUID) -> Optional[User]:
        """
        Session gate: returns the user only when it exists and is ACTIVE.
        Suspended or unverified accounts get None even with a valid token.
        """
        user = await self.user_repo.get_by_id(user_id)
        if not user or not user.is_active:
            return None
        return user

    async def get_current_user(self, user_id: uuid.UUID) -> User:
        """
        Load the account behind a validated session.

        Raises:
            NotFoundError: If the user was deleted after the token was issued
        """
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User")
        return user

    async def update_profile(self, user_id: uuid.UUID, profile_data: ProfileUpdate) -> User:
        """
        Merge provided profile fields into the account.

        Raises:
            NotFoundError: If the user does not exist
        """
        try:
            changes = profile_data.model_dump(exclude_unset=True)
            user = await self.user_repo.update_profile(user_id, changes)

            if not user:
                raise NotFoundError("User")

            return user

        except NotFoundError:
            raise
        except Exception as e:
            logger.error(f"Failed to update profile for user {user_id}: {e}")
            raise BadRequestError("Profile update failed")
