"""
utils/auth.py

Password hashing (bcrypt), password policy and signed session tokens (PyJWT).
"""

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt

from app.core.config import settings

log = logging.getLogger("wynngrid.auth")

# At least 6 characters with one lowercase, one uppercase, one digit and one
# of the allowed special characters; nothing outside that alphabet.
PASSWORD_PATTERN = re.compile(
    r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]{6,}$"
)
PASSWORD_POLICY_MESSAGE = (
    "Password must be at least 6 characters long and include at least one "
    "uppercase letter, one lowercase letter, one special character (@$!%*?&), "
    "and one number."
)


def is_strong_password(password: Optional[str]) -> bool:
    return bool(password) and PASSWORD_PATTERN.match(password) is not None


# ─── Hashing ──────────────────────────────────────────────────────────────────

def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=10)).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    """False for federated accounts (empty hash) and malformed hashes."""
    if not plain_password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        log.warning("Stored password hash is not a valid bcrypt hash")
        return False


# ─── Tokens ───────────────────────────────────────────────────────────────────

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    if not settings.SECRET_KEY:
        raise RuntimeError("SECRET_KEY is not configured")

    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))

    payload = data.copy()
    payload.update({"iat": now, "exp": expire})
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    """Return the token payload, or None if it is invalid or expired."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        log.info("Session token expired")
        return None
    except jwt.InvalidTokenError as e:
        log.warning("Invalid session token: %s", str(e)[:50])
        return None


def create_session_token(user_id) -> str:
    return create_access_token(data={"sub": str(user_id)})
