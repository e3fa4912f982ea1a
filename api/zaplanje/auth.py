"""Bearer-token authentication.

Readers are anonymous. Editors and bookmark owners send an HS256 access token
whose ``sub`` is their user id; "authenticated" means nothing more than
holding a valid token.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .policies import ANONYMOUS, Principal
from .settings import Settings

logger = logging.getLogger(__name__)

# Optional bearer: public endpoints accept requests without one
bearer_scheme = HTTPBearer(auto_error=False)

ACCESS_TOKEN_TTL_SECONDS = 60 * 60
MIN_SECRET_LENGTH = 32
TOKEN_TYPE = "access"


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def validate_jwt_secret(secret: str | None) -> str:
    """Refuse to start without a signing key of useful length."""
    if not secret:
        raise RuntimeError(
            "JWT_SECRET_KEY is not set. Generate one with: "
            "python -c 'import secrets; print(secrets.token_urlsafe(32))'"
        )
    if len(secret) < MIN_SECRET_LENGTH:
        raise RuntimeError(f"JWT_SECRET_KEY must be at least {MIN_SECRET_LENGTH} characters long.")
    return secret


def create_access_token(
    user_id: uuid.UUID,
    settings: Settings,
    expires_in_seconds: int | None = None,
) -> str:
    issued_at = datetime.now(timezone.utc)
    ttl = ACCESS_TOKEN_TTL_SECONDS if expires_in_seconds is None else expires_in_seconds
    claims = {
        "sub": str(user_id),
        "type": TOKEN_TYPE,
        "iat": issued_at,
        "exp": issued_at + timedelta(seconds=ttl),
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings) -> uuid.UUID:
    """Return the user id carried by ``token``; raise 401 when it is not valid."""
    try:
        claims = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token expired")
    except jwt.PyJWTError as e:
        logger.debug(f"Rejected access token: {e}")
        raise _unauthorized("Invalid token")

    if claims.get("type") != TOKEN_TYPE:
        raise _unauthorized("Invalid token type")

    try:
        return uuid.UUID(claims["sub"])
    except (KeyError, ValueError):
        raise _unauthorized("Invalid token subject")


def get_principal(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Principal:
    """Caller identity; anonymous when no bearer token is sent."""
    if credentials is None:
        return ANONYMOUS
    return Principal(user_id=decode_access_token(credentials.credentials, request.app.state.settings))


def require_authenticated(principal: Principal = Depends(get_principal)) -> Principal:
    if not principal.authenticated:
        raise _unauthorized("Authentication required")
    return principal
