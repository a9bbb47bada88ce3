"""
Password hashing and session-cookie signing.

The session cookie holds a short JWT: the server-side session id (``sid``),
the user id (``sub``) and the user's ``token_version`` (``tv``). Changing the
password bumps ``token_version`` so every outstanding cookie stops resolving.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from teamtasks.core.config import settings

# Reduce passlib noise about bcrypt backend versions
logging.getLogger("passlib").setLevel(logging.ERROR)

SECRET_KEY = settings.SECRET_KEY
ALGORITHM = settings.ALGORITHM
SESSION_MAX_AGE = timedelta(days=settings.SESSION_MAX_AGE_DAYS)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not plain_password or not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def generate_session_id() -> str:
    return secrets.token_urlsafe(32)


def create_session_token(
    user_id: int,
    session_id: str,
    token_version: int,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Sign the cookie value for a server-side session.

    Args:
        user_id: Owner of the session
        session_id: Primary key of the sessions row
        token_version: Current User.token_version
        expires_delta: Lifetime (defaults to SESSION_MAX_AGE)

    Returns:
        Encoded JWT string
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or SESSION_MAX_AGE)
    payload = {
        "sub": str(user_id),
        "sid": session_id,
        "tv": int(token_version or 1),
        "iat": int(now.timestamp()),
        "exp": int(expire.timestamp()),
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def decode_session_token(token: str) -> Optional[dict]:
    """Return the claims of a valid cookie value, or None."""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None

    if not payload.get("sub") or not payload.get("sid") or payload.get("tv") is None:
        return None
    return payload
