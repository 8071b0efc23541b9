from datetime import datetime, timedelta, timezone

import jwt

from config import settings
from services.errors import ServiceNotConfiguredError

_ALGO = "HS256"


def _secret() -> str:
    if not settings.jwt_secret:
        raise ServiceNotConfiguredError("Authentication is not configured on the server.")
    return settings.jwt_secret


def create_token(user_id: str, ttl_minutes: int = 60) -> str:
    exp = datetime.now(timezone.utc) + timedelta(minutes=ttl_minutes)
    payload = {"sub": user_id, "exp": exp, "aud": settings.jwt_audience, "role": "authenticated"}
    return jwt.encode(payload, _secret(), algorithm=_ALGO)


def verify_token(token: str) -> str:
    """Return the caller's user id; raises `jwt.InvalidTokenError` on a bad token."""
    payload = jwt.decode(
        token,
        _secret(),
        algorithms=[_ALGO],
        audience=settings.jwt_audience,
        options={"require": ["exp", "sub"]},
    )
    return payload["sub"]
