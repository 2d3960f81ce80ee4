import os
from datetime import UTC, datetime, timedelta
from typing import Any, cast

from jose import jwt

from src.domain.entities import Caller

SECRET_KEY = os.environ.get("ROSTER_SECRET_KEY", "dev-secret-unsafe")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 24  # 24 hours
DEFAULT_TTL = timedelta(minutes=15)


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
    now_utc: datetime | None = None,
) -> str:
    """
    Sign `data` as an HS256 JWT with an `exp` claim.

    `now_utc` pins the issue time for tests.
    """
    issued = now_utc or datetime.now(UTC)
    claims = {**data, "exp": issued + (expires_delta or DEFAULT_TTL)}
    return cast(str, jwt.encode(claims, SECRET_KEY, algorithm=ALGORITHM))


def create_caller_token(uid: str, email: str, ttl_minutes: int = ACCESS_TOKEN_EXPIRE_MINUTES) -> str:
    return create_access_token({"sub": uid, "email": email}, timedelta(minutes=ttl_minutes))


def decode_access_token(token: str) -> dict[str, Any] | None:
    try:
        return cast(dict[str, Any], jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM]))
    except jwt.JWTError:
        return None


def caller_from_token(token: str) -> Caller | None:
    """Build the authenticated caller from a verified token, or None."""
    payload = decode_access_token(token)
    if not payload:
        return None

    uid = payload.get("sub")
    email = payload.get("email")
    if not isinstance(uid, str) or not isinstance(email, str) or not uid or not email:
        return None
    return Caller(uid=uid, email=email)
