"""Authentication utilities: password hashing and JWT token management."""

import re
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext

from carebook.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

MIN_PASSWORD_LENGTH = 6


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def password_problems(password: str) -> list[str]:
    """Strength rules for new passwords. Empty list = acceptable."""
    problems = []
    if len(password) < MIN_PASSWORD_LENGTH:
        problems.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if not re.search(r"[A-Z]", password):
        problems.append("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        problems.append("Password must contain at least one lowercase letter")
    return problems


def _encode_token(user_id: int, token_type: str, lifetime: timedelta, **claims) -> str:
    payload = {"sub": str(user_id), "type": token_type, "exp": datetime.now(UTC) + lifetime, **claims}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(user_id: int, role: str = "user") -> str:
    """Short-lived bearer token. The role claim is informational; dependencies reload the user."""
    return _encode_token(user_id, "access", timedelta(minutes=settings.access_token_expire_minutes), role=role)


def create_refresh_token(user_id: int) -> str:
    return _encode_token(user_id, "refresh", timedelta(days=settings.refresh_token_expire_days))


def decode_token(token: str) -> dict:
    """Decode and validate a JWT. Raises JWTError on failure."""
    return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])


def decode_token_of_type(token: str, token_type: str) -> int:
    """Decode a token, check its type and return the user id it was issued for.

    Raises JWTError on invalid/expired tokens or wrong type.
    """
    payload = decode_token(token)
    if payload.get("type") != token_type:
        raise JWTError("Invalid token type")
    try:
        return int(payload["sub"])
    except (KeyError, ValueError):
        raise JWTError("Invalid token subject") from None
