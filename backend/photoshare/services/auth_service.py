"""
PhotoShare Backend — Auth Service
===================================

What:  Registration, login, the /me lookup and seeding of demo creator accounts.

Registration always creates a `consumer`. Creator accounts come from the
startup seed (or an admin changing the role). Login answers 401 "Invalid
credentials" for both unknown emails and wrong passwords, so the endpoint
does not reveal which emails are registered.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from photoshare.exceptions import AuthenticationError, ConflictError, NotFoundError, ValidationError
from photoshare.models import User
from photoshare.schemas.auth import AuthResponse, AuthUser, MeResponse
from photoshare.security import CurrentUser, create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)

SEED_CREATORS = (
    ("creator1@photoshare.com", "creator123", "Photo Creator 1"),
    ("creator2@photoshare.com", "creator123", "Photo Creator 2"),
)


def _auth_response(user: User) -> AuthResponse:
    token = create_access_token(user.id, user.email, user.role, user.display_name)
    return AuthResponse(user=AuthUser.model_validate(user), token=token)


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    return await db.scalar(select(User).where(User.email == email))


async def register(
    db: AsyncSession,
    email: Optional[str],
    password: Optional[str],
    display_name: Optional[str],
) -> AuthResponse:
    if not email or not password or not display_name:
        raise ValidationError("Email, password, and display name are required")

    if await get_user_by_email(db, email) is not None:
        raise ConflictError("Email already registered")

    user = User(
        email=email,
        password_hash=hash_password(password),
        role="consumer",
        display_name=display_name,
    )
    db.add(user)
    await db.flush()
    logger.info("Registered user %s", user.id)
    return _auth_response(user)


async def login(db: AsyncSession, email: Optional[str], password: Optional[str]) -> AuthResponse:
    if not email or not password:
        raise ValidationError("Email and password are required")

    user = await get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        raise AuthenticationError("Invalid credentials")
    return _auth_response(user)


async def get_me(db: AsyncSession, current: CurrentUser) -> MeResponse:
    user = await db.get(User, current.id)
    if user is None:
        raise NotFoundError("User", resource_id=str(current.id))
    return MeResponse.model_validate(user)


async def seed_creators(db: AsyncSession) -> int:
    """Creates the demo creator accounts that are missing; returns how many were added."""
    created = 0
    for email, password, display_name in SEED_CREATORS:
        if await get_user_by_email(db, email) is not None:
            continue
        db.add(
            User(
                email=email,
                password_hash=hash_password(password),
                role="creator",
                display_name=display_name,
            )
        )
        created += 1
        logger.info("Seeded creator: %s", email)
    await db.flush()
    return created
