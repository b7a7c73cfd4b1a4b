"""
User repository for authentication and account management operations.
Provides user persistence with email normalization and password hashing.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.repositories.base import BaseRepository
from app.models.user import User, UserRole, UserStatus
from app.utils.auth import hash_password
from typing import Optional, Dict, Any
import uuid
import logging

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("first_name", "last_name", "phone")


class UserRepository(BaseRepository[User]):
    """
    Repository for user accounts.
    Never returns or logs password material.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def create_user(self, user_data: Dict[str, Any]) -> User:
        """
        Create a new user with email normalization and password hashing.

        Args:
            user_data: Dictionary containing user information
                      Must include: email, password
                      Optional: first_name, last_name, phone, role, status

        Returns:
            Created user instance

        Raises:
            ValueError: If email or password validation fails
            Exception: If database operation fails
        """
        try:
            data = dict(user_data)
            email = User.normalize_email(data.pop("email"))
            password_hash = hash_password(data.pop("password"))

            create_data = {
                **data,
                "email": email,
                "password_hash": password_hash,
                "role": data.get("role") or UserRole.USER,
                "status": data.get("status") or UserStatus.ACTIVE,
            }

            created_user = await self.create(create_data)
            logger.info(f"Created user: {created_user.email} (ID: {created_user.id})")
            return created_user
        except ValueError as e:
            logger.error(f"User validation failed: {e}")
            raise
        except Exception as e:
            logger.error(f"Failed to create user: {e}")
            raise

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email address.

        Args:
            email: Email address to search for

        Returns:
            User instance if found, None otherwise
        """
        try:
            normalized_email = email.lower().strip()

            result = await self.db.execute(select(User).where(User.email == normalized_email))
            user = result.scalar_one_or_none()

            if user:
                logger.debug(f"Retrieved user by email: {normalized_email}")
            else:
                logger.debug(f"User with email {normalized_email} not found")

            return user
        except Exception as e:
            logger.error(f"Failed to get user by email {email}: {e}")
            raise

    async def update_profile(self, user_id: uuid.UUID, profile_data: Dict[str, Any]) -> Optional[User]:
        """
        Merge provided profile fields into the user record.
        Only first_name, last_name and phone are writable here.

        Returns:
            Updated user instance or None if not found
        """
        user = await self.get_by_id(user_id)
        if not user:
            return None

        changes = {k: v for k, v in profile_data.items() if k in PROFILE_FIELDS}
        if not changes:
            return user

        updated_user = await self.update(user, changes)
        logger.info(f"Profile updated for user: {updated_user.email}")
        return updated_user

    async def update_user_status(self, user_id: uuid.UUID, status: UserStatus) -> Optional[User]:
        """
        Update user's account status.

        Returns:
            Updated user instance or None if not found
        """
        user = await self.get_by_id(user_id)
        if not user:
            return None

        updated_user = await self.update(user, {"status": status})
        logger.info(f"User {updated_user.email} status set to {status.value}")
        return updated_user

    async def update_user_role(self, user_id: uuid.UUID, new_role: UserRole) -> Optional[User]:
        """
        Update user's role.

        Returns:
            Updated user instance or None if not found
        """
        user = await self.get_by_id(user_id)
        if not user:
            return None

        updated_user = await self.update(user, {"role": new_role})
        logger.info(f"User {updated_user.email} role changed to {new_role.value}")
        return updated_user
