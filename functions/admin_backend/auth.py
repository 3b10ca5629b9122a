"""
Admin authentication: short-lived HS256 JWTs issued against the configured
admin credentials.
"""

from __future__ import annotations

import hmac
import logging
import time
from typing import Any, Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from admin_backend.config import Settings, get_settings
from admin_backend.errors import AuthError

logger = logging.getLogger(__name__)

ADMIN_SUBJECT = "admin"

_bearer = HTTPBearer(auto_error=False)


def check_credentials(username: str, password: str, settings: Settings) -> bool:
    user_ok = hmac.compare_digest(username.encode(), settings.admin_user.encode())
    pass_ok = hmac.compare_digest(password.encode(), settings.admin_pass.encode())
    return user_ok and pass_ok


def issue_token(settings: Settings, *, now: Optional[int] = None) -> str:
    now = int(time.time()) if now is None else int(now)
    payload = {
        "data": ADMIN_SUBJECT,
        "iat": now,
        "exp": now + settings.jwt_expires_seconds,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str, settings: Settings) -> dict[str, Any]:
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise AuthError("jwt expired") from exc
    except jwt.PyJWTError as exc:
        logger.debug("jwt decode failed: %r", exc)
        raise AuthError("invalid token") from exc
    if payload.get("data") != ADMIN_SUBJECT:
        raise AuthError("invalid token")
    return payload


def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """FastAPI dependency guarding every /api route."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthError("No authorization token was found")
    return verify_token(credentials.credentials, settings)
