"""
AccountHub Backend — SQLAlchemy User Manager
==============================================

What:  UserManager backed by the request-scoped AsyncSession, plus the
       password hashing helpers it applies on every save.
How:   Passwords are stored as "<salt hex>$<PBKDF2-HMAC-SHA256 hex>".
"""

import hashlib
import hmac
import logging
import os
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from accounthub.exceptions import DatabaseError
from accounthub.managers.base import UserManager
from accounthub.models.user import User

logger = logging.getLogger(__name__)

PASSWORD_ITERATIONS = 100_000


def hash_password(password: str) -> str:
    salt = os.urandom(16)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, PASSWORD_ITERATIONS)
    return f"{salt.hex()}${dk.hex()}"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        salt_hex, hash_hex = hashed_password.split("$", 1)
        salt = bytes.fromhex(salt_hex)
    except ValueError:
        return False
    dk = hashlib.pbkdf2_hmac("sha256", plain_password.encode("utf-8"), salt, PASSWORD_ITERATIONS)
    return hmac.compare_digest(dk.hex(), hash_hex)


def canonicalize(value: Optional[str]) -> Optional[str]:
    return value.strip().lower() if value is not None else None


def update_canonical_fields(user: User) -> None:
    user.username_canonical = canonicalize(user.username)
    user.email_canonical = canonicalize(user.email)


def update_password(user: User) -> None:
    """Hash a pending plain password into `password` and forget the plain text."""
    if user.plain_password:
        user.password = hash_password(user.plain_password)
        user.plain_password = None


class SqlAlchemyUserManager(UserManager):
    """User persistence over one AsyncSession."""

    def __init__(self, session: AsyncSession):
        self.session = session

    def create_user(self) -> User:
        return User(username="", email="", enabled=False)

    async def find_user_by(self, **criteria: Any) -> Optional[User]:
        try:
            result = await self.session.execute(select(User).filter_by(**criteria).limit(1))
        except SQLAlchemyError as e:
            logger.error("Database error fetching user: %s", str(e))
            raise DatabaseError(
                message="Could not retrieve the user. Please try again.",
                context={"fields": sorted(criteria)},
            )
        return result.scalar_one_or_none()

    async def find_user_by_confirmation_token(self, token: str) -> Optional[User]:
        return await self.find_user_by(confirmation_token=token)

    async def update_user(self, user: User) -> None:
        update_canonical_fields(user)
        update_password(user)
        try:
            self.session.add(user)
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.error("Database error saving user %r: %s", user, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the user. Please try again.",
                context={"user_id": user.id, "error_type": type(e).__name__},
            )
        logger.info("Saved user %s (%s)", user.id, user.username)
