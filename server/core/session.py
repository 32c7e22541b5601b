# server/core/session.py

import logging
from dataclasses import dataclass
from typing import Optional
from fastapi import Request
from jose import JWTError

from core.errors import AuthError
from core.security import decode_session_token


logger = logging.getLogger(__name__)

COOKIE_NAME = "auth_token"


@dataclass(frozen=True)
class SessionUser:
    user_id: int
    username: str


def _extract_token(request: Request) -> str:
    """
    Cookie first, then an `Authorization: Bearer <token>` header.
    """
    token: Optional[str] = request.cookies.get(COOKIE_NAME)
    if token:
        return token

    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise AuthError("missing or invalid token")

    parts = auth_header.split(" ")
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1]:
        raise AuthError("invalid token format")
    return parts[1]


def require_session(request: Request) -> SessionUser:
    """
    Dependency guarding protected routes. On success the caller's identity is
    attached to `request.state.session` for the rest of this request only.
    """
    token = _extract_token(request)
    secret = request.app.state.settings.jwt_secret

    try:
        payload = decode_session_token(token, secret)
    except JWTError as exc:
        logger.info("Rejected session token on %s: %s", request.url.path, exc)
        raise AuthError("invalid or expired token") from exc

    session = SessionUser(user_id=int(payload["user_id"]), username=str(payload["username"]))
    request.state.session = session
    return session
