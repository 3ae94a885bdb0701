import logging
import os
from datetime import UTC, datetime, timedelta
from typing import Any, cast
from uuid import UUID

from jose import jwt
from pydantic import ValidationError

from src.domain.entities import Profile

logger = logging.getLogger(__name__)

SECRET_KEY = os.environ.get("LUXE_SECRET_KEY", "dev-secret-unsafe")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 24  # 24 hours


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
    now_utc: datetime | None = None,
) -> str:
    """
    Create a JWT access token.

    Args:
        data: Claims to encode in the token
        expires_delta: Optional custom expiration delta
        now_utc: Current UTC time (for testing/determinism). Defaults to datetime.now(UTC).
    """
    to_encode = data.copy()
    current_time = now_utc if now_utc is not None else datetime.now(UTC)

    if expires_delta:
        expire = current_time + expires_delta
    else:
        expire = current_time + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})
    encoded_jwt: str = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt


def decode_access_token(token: str, algorithm: str = ALGORITHM) -> dict[str, Any] | None:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[algorithm])
        return cast(dict[str, Any], payload)
    except jwt.JWTError:
        return None


def profile_from_claims(claims: dict[str, Any]) -> Profile | None:
    """
    Build a Profile from identity-provider claims.

    Reads `sub`, `email`, `app_metadata.role` (default "customer") and the
    optional `user_metadata` fields. Returns None when the claims do not
    describe a usable profile.
    """
    app_metadata = claims.get("app_metadata") or {}
    user_metadata = claims.get("user_metadata") or {}

    try:
        return Profile(
            id=UUID(str(claims.get("sub"))),
            email=claims["email"],
            role=app_metadata.get("role", "customer"),
            full_name=user_metadata.get("full_name"),
            phone_number=user_metadata.get("phone_number"),
            avatar_url=user_metadata.get("avatar_url"),
            email_verified=bool(user_metadata.get("email_verified", False)),
            last_sign_in=claims.get("last_sign_in_at"),
        )
    except (KeyError, ValueError, ValidationError) as e:
        logger.debug("Rejected token claims: %s", e)
        return None
