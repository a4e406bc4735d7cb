"""Session credentials: signed JWTs carried in a cookie."""

from datetime import datetime, timedelta, timezone

import jwt

from chorely.config import settings


def create_session_token(user_id: str, account_kind: str) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.session_expire_minutes)
    payload = {
        "sub": user_id,
        "kind": account_kind,
        "exp": expire,
        "type": "session",
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Decode and validate a session token. Raises jwt.PyJWTError on failure."""
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
