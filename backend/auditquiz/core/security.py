"""
Audit Quiz Platform - Security Module
Passcode hashing and signed session tokens
"""
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from auditquiz.core.config import settings

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a passcode against a hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a passcode using bcrypt."""
    return pwd_context.hash(password)


def new_session_id() -> str:
    """Random server-side session identifier."""
    return secrets.token_urlsafe(24)


def create_session_token(session_id: str) -> str:
    """
    Sign a session id for the session cookie.

    The token only proves the id was issued by us; the session record
    itself (and its expiry) lives in the key/value store.

    Args:
        session_id: Server-side session identifier

    Returns:
        Encoded JWT string
    """
    now = datetime.now(timezone.utc)
    to_encode = {
        "sub": session_id,
        "iat": now,
        "exp": now + timedelta(seconds=settings.SESSION_TTL_SECONDS),
        "type": "session",
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> dict[str, Any] | None:
    """
    Decode and validate a JWT token.

    Args:
        token: The JWT token to decode

    Returns:
        Decoded token payload or None if invalid
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
        return payload
    except JWTError:
        return None


def verify_token(token: str, token_type: str = "session") -> str | None:
    """
    Verify a token and return the subject if valid.

    Args:
        token: The JWT token to verify
        token_type: Expected token type

    Returns:
        Session id (subject) if valid, None otherwise
    """
    payload = decode_token(token)
    if payload is None:
        return None

    if payload.get("type") != token_type:
        return None

    return payload.get("sub")
