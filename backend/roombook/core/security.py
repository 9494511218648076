from __future__ import annotations

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from jose import jwt

from roombook.core.config import get_settings


class UserRole(str, Enum):
    admin = "admin"
    scheduler = "scheduler"
    faculty = "faculty"
    student = "student"


def create_access_token(subject: str, role: UserRole | str, expires_minutes: int | None = None) -> str:
    """Mint a bearer token in the shape the identity service issues (used by scripts and tests)."""
    settings = get_settings()
    minutes = settings.access_token_expire_minutes if expires_minutes is None else expires_minutes
    expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    role_value = role.value if isinstance(role, UserRole) else str(role)
    payload = {"sub": str(subject), "role": role_value, "exp": expire}
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict[str, Any]:
    settings = get_settings()
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
