"""User service — registration, login, and profile management.

Learn: Passwords are hashed here, before anything reaches the database,
and compared here with bcrypt. Login failures are deliberately vague:
an unknown email and a wrong password raise the same InvalidCredentials,
so the endpoint can't be used to probe which emails are registered.
"""

import uuid
from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.auth.password import hash_password, verify_password
from taskhub.db.models import User
from taskhub.errors import DuplicateEmail, InvalidCredentials, NotFound, ValidationError

logger = structlog.get_logger()


class UserService:
    """Business logic for user accounts."""

    def __init__(self, db: AsyncSession, bcrypt_rounds: int = 12):
        self.db = db
        self.bcrypt_rounds = bcrypt_rounds

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalars().first()

    async def get_user(self, user_id: uuid.UUID | str) -> Optional[User]:
        return await self.db.get(User, _as_uuid(user_id))

    # ─── Register ────────────────────────────────────────

    async def register(self, name: str, email: str, password: str) -> User:
        """Create a new account. Raises ValidationError or DuplicateEmail."""
        if not name or not email or not password:
            raise ValidationError("Please enter all fields")

        if await self.get_by_email(email):
            raise DuplicateEmail("User already exists")

        user = User(
            name=name,
            email=email,
            password_hash=hash_password(password, self.bcrypt_rounds),
        )
        self.db.add(user)
        await self.db.commit()
        logger.info("users.registered", user_id=str(user.id))
        return user

    # ─── Login ───────────────────────────────────────────

    async def authenticate(self, email: str, password: str) -> User:
        """Return the user for a correct email/password pair.

        Raises InvalidCredentials for anything else.
        """
        user = await self.get_by_email(email) if email else None
        if not user or not password or not verify_password(password, user.password_hash):
            logger.info("auth.login_failed")
            raise InvalidCredentials("Invalid email or password")
        return user

    # ─── Profile ─────────────────────────────────────────

    async def get_profile(self, user_id: uuid.UUID | str) -> User:
        user = await self.get_user(user_id)
        if not user:
            raise NotFound("User not found")
        return user

    async def update_profile(
        self,
        user_id: uuid.UUID | str,
        name: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ) -> User:
        """Update name/email/password. Empty or omitted values are ignored."""
        user = await self.get_profile(user_id)

        if email and email != user.email:
            if await self.get_by_email(email):
                raise DuplicateEmail("User already exists")
            user.email = email
        user.name = name or user.name
        if password:
            user.password_hash = hash_password(password, self.bcrypt_rounds)

        await self.db.commit()
        logger.info(
            "users.profile_updated",
            user_id=str(user.id),
            password_changed=bool(password),
        )
        return user


def _as_uuid(value: uuid.UUID | str) -> uuid.UUID:
    return value if isinstance(value, uuid.UUID) else uuid.UUID(value)
