"""JWT authentication helpers.

Provides token creation/verification and a FastAPI dependency that extracts
the current user from the ``Authorization: Bearer <token>`` header.

When ``AUTH_ENABLED=false`` the dependency returns a development user so the
API can be exercised without tokens.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import jwt
from fastapi import HTTPException, Request
from loguru import logger

from article_chat.config import Settings

ALGORITHM = "HS256"


@dataclass
class AuthenticatedUser:
    """The user extracted from a valid JWT."""

    user_id: str
    name: str = ""
    email: str = ""


def _dev_user() -> AuthenticatedUser:
    return AuthenticatedUser(user_id="dev-user", name="Dev User", email="dev@example.com")


# ---------------------------------------------------------------------------
# Token helpers
# ---------------------------------------------------------------------------


def create_token(settings: Settings, user_id: str, name: str = "", email: str = "") -> str:
    """Create a signed JWT containing user claims."""
    now = datetime.now(UTC)
    payload = {
        "sub": user_id,
        "name": name,
        "email": email,
        "exp": now + timedelta(hours=settings.jwt_expiry_hours),
        "iat": now,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=ALGORITHM)


def decode_token(settings: Settings, token: str) -> dict:
    """Decode and verify a JWT. Raises on invalid/expired tokens."""
    return jwt.decode(token, settings.jwt_secret, algorithms=[ALGORITHM])


# ---------------------------------------------------------------------------
# FastAPI dependency
# ---------------------------------------------------------------------------


async def get_current_user(request: Request) -> AuthenticatedUser:
    """FastAPI dependency: extract the user from the JWT, or the dev user when auth is off."""
    settings: Settings = request.app.state.settings

    if not settings.auth_enabled:
        return _dev_user()

    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing or invalid Authorization header")

    try:
        claims = decode_token(settings, auth_header[7:])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError:
        logger.warning("Invalid JWT presented")
        raise HTTPException(status_code=401, detail="Invalid token")

    return AuthenticatedUser(
        user_id=claims["sub"],
        name=claims.get("name", ""),
        email=claims.get("email", ""),
    )
