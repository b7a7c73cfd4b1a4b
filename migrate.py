#!/usr/bin/env python3
"""
Database management script.
Creates and drops the schema, seeds an admin account and resets development databases.
"""

import asyncio
import sys
import argparse
import logging
from typing import Optional

from app.config import settings
from app.database import AsyncSessionLocal, create_tables, drop_tables, close_db_connection
from app.models.user import User, UserRole, UserStatus
from app.repositories.user import UserRepository

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

DEFAULT_ADMIN_EMAIL = "admin@example.com"
DEFAULT_ADMIN_PASSWORD = "admin123456"


class DatabaseManager:
    """Schema and seed management for the listings database."""

    def __init__(self, session_factory=AsyncSessionLocal):
        self.session_factory = session_factory

    async def create_schema(self) -> None:
        """Create all tables that do not exist yet."""
        await create_tables()

    async def drop_schema(self) -> None:
        """Drop all tables."""
        await drop_tables()

    async def seed_admin(
        self,
        email: str = DEFAULT_ADMIN_EMAIL,
        password: str = DEFAULT_ADMIN_PASSWORD,
        first_name: Optional[str] = "System",
        last_name: Optional[str] = "Administrator"
    ) -> Optional[User]:
        """
        Create an ACTIVE admin account unless the email is already taken.

        Returns:
            The created admin, or None if the account already existed
        """
        async with self.session_factory() as session:
            user_repo = UserRepository(session)
            if await user_repo.get_by_email(email):
                logger.info(f"User {email} already exists, skipping seed")
                return None

            admin = await user_repo.create_user({
                "email": email,
                "password": password,
                "first_name": first_name,
                "last_name": last_name,
                "role": UserRole.ADMIN,
                "status": UserStatus.ACTIVE,
            })

            logger.info(f"Admin user created: {admin.email}")
            if password == DEFAULT_ADMIN_PASSWORD:
                logger.warning("Default admin password in use, change it before deploying!")
            return admin

    async def set_role(self, email: str, role: UserRole) -> Optional[User]:
        """Change the role of an existing account. Returns None for unknown emails."""
        async with self.session_factory() as session:
            user_repo = UserRepository(session)
            user = await user_repo.get_by_email(email)
            if not user:
                logger.error(f"User {email} not found")
                return None
            return await user_repo.update_user_role(user.id, role)

    async def set_status(self, email: str, status: UserStatus) -> Optional[User]:
        """Suspend or reactivate an existing account. Returns None for unknown emails."""
        async with self.session_factory() as session:
            user_repo = UserRepository(session)
            user = await user_repo.get_by_email(email)
            if not user:
                logger.error(f"User {email} not found")
                return None
            return await user_repo.update_user_status(user.id, status)

    async def reset_database(self) -> None:
        """Drop and recreate all tables, then seed the default admin."""
        logger.warning("Resetting database - all data will be lost!")

        if not settings.is_development and not settings.is_testing:
            raise RuntimeError("Database reset is only allowed in development or test mode")

        await self.drop_schema()
        await self.create_schema()
        await self.seed_admin()

        logger.info("Database reset completed")


async def _run(args: argparse.Namespace) -> None:
    manager = DatabaseManager()
    try:
        if args.command == "create-tables":
            await manager.create_schema()
        elif args.command == "drop-tables":
            await manager.drop_schema()
        elif args.command == "seed":
            await manager.seed_admin(email=args.email, password=args.password)
        elif args.command == "set-role":
            await manager.set_role(args.email, UserRole(args.role))
        elif args.command == "set-status":
            await manager.set_status(args.email, UserStatus(args.status))
        elif args.command == "reset":
            await manager.reset_database()
    finally:
        await close_db_connection()


def main(argv=None) -> int:
    """CLI interface for database management."""
    parser = argparse.ArgumentParser(description="Real estate listings database management")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("create-tables", help="Create all tables")
    subparsers.add_parser("drop-tables", help="Drop all tables (development only)")

    seed_parser = subparsers.add_parser("seed", help="Create the admin account")
    seed_parser.add_argument("--email", default=DEFAULT_ADMIN_EMAIL, help="Admin email")
    seed_parser.add_argument("--password", default=DEFAULT_ADMIN_PASSWORD, help="Admin password")

    role_parser = subparsers.add_parser("set-role", help="Change the role of an account")
    role_parser.add_argument("email", help="Account email")
    role_parser.add_argument("role", choices=[role.value for role in UserRole], help="New role")

    status_parser = subparsers.add_parser("set-status", help="Suspend or reactivate an account")
    status_parser.add_argument("email", help="Account email")
    status_parser.add_argument("status", choices=[s.value for s in UserStatus], help="New status")

    reset_parser = subparsers.add_parser("reset", help="Reset database (development only)")
    reset_parser.add_argument("--confirm", action="store_true", help="Confirm database reset")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    if args.command == "reset" and not args.confirm:
        print("Database reset requires --confirm flag")
        return 1

    try:
        asyncio.run(_run(args))
    except Exception as e:
        logger.error(f"Command failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
