"""Schemas for /api/auth."""

import uuid
from datetime import datetime
from typing import Optional

from photoshare.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None
    display_name: Optional[str] = None


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class AuthUser(CamelModel):
    id: uuid.UUID
    email: str
    role: str
    display_name: str


class AuthResponse(CamelModel):
    user: AuthUser
    token: str


class MeResponse(AuthUser):
    created_at: datetime
