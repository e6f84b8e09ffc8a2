"""
PhotoShare Backend — Password Hashing & Bearer Token Auth
===========================================================

What:  bcrypt password hashing, JWT issuing/decoding and the FastAPI
       dependencies that turn an Authorization header into a CurrentUser.
How:   passlib's CryptContext for hashing, PyJWT (HS256) for tokens, and
       HTTPBearer(auto_error=False) so a missing header reaches our own
       error path instead of FastAPI's default 403.

Token claims: id, email, role, displayName, iat, exp (7 days by default).

Failure modes:
    no bearer token                → 401 "Authentication required"
    bad signature / expired / junk → 403 "Invalid or expired token"

The current user is taken from the token claims; the users table is not
consulted per request. Admin routes re-read is_admin from the database.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext

from photoshare.config import settings
from photoshare.exceptions import AuthenticationError, PermissionDeniedError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    """Identity carried by a valid token."""

    id: uuid.UUID
    email: str
    role: str
    display_name: str


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return pwd_context.verify(password, password_hash)
    except ValueError:
        # Malformed hash in the table; treat like a wrong password
        logger.warning("Stored password hash could not be parsed")
        return False


def create_access_token(
    user_id: uuid.UUID,
    email: str,
    role: str,
    display_name: str,
    expires_days: Optional[int] = None,
) -> str:
    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "id": str(user_id),
        "email": email,
        "role": role,
        "displayName": display_name,
        "iat": now,
        "exp": now + timedelta(days=expires_days or settings.jwt_expire_days),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> CurrentUser:
    """
    Validate signature and expiry, then build a CurrentUser from the claims.

    Raises:
        PermissionDeniedError: for any token that cannot be trusted
    """
    try:
        payload = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
        return CurrentUser(
            id=uuid.UUID(str(payload["id"])),
            email=payload["email"],
            role=payload["role"],
            display_name=payload.get("displayName", ""),
        )
    except (jwt.InvalidTokenError, KeyError, ValueError) as e:
        raise PermissionDeniedError(
            "Invalid or expired token", context={"reason": type(e).__name__}
        )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    """Dependency for routes that require a logged-in caller."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Authentication required")
    return decode_access_token(credentials.credentials)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[CurrentUser]:
    """
    Dependency for routes that personalise output when a token is present.

    A missing or unusable token yields None instead of an error, so anonymous
    browsing keeps working with a stale token in the client.
    """
    if credentials is None or not credentials.credentials:
        return None
    try:
        return decode_access_token(credentials.credentials)
    except PermissionDeniedError:
        return None
