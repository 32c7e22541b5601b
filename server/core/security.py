# server/core/security.py

from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext


SESSION_TTL = timedelta(hours=24)
ALGORITHM = "HS256"
# Tokens signed with anything outside the HMAC family are refused.
ACCEPTED_ALGORITHMS = ["HS256", "HS384", "HS512"]


pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def burn_password_check() -> None:
    """
    Spend the same time as a real verification. Used when the account
    does not exist, so a failed login takes equally long either way.
    """
    pwd_context.dummy_verify()


def create_session_token(user_id: int, username: str, secret: str, now: Optional[datetime] = None) -> tuple[str, datetime]:
    """
    Returns the signed token and its absolute expiry.
    """
    issued_at = now or datetime.now(timezone.utc)
    expires_at = issued_at + SESSION_TTL
    claims = {
        "user_id": user_id,
        "username": username,
        "iat": int(issued_at.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    return jwt.encode(claims, secret, algorithm=ALGORITHM), expires_at


def decode_session_token(token: str, secret: str) -> dict:
    """
    Verifies signature, algorithm and expiry. Raises JWTError on any failure.
    """
    payload = jwt.decode(
        token,
        secret,
        algorithms=ACCEPTED_ALGORITHMS,
        options={"require_exp": True},
    )
    if payload.get("user_id") is None or not payload.get("username"):
        raise JWTError("token is missing identity claims")
    return payload
