import hmac
import secrets
from datetime import datetime, timedelta
from typing import Optional, Tuple

from app.core.config import settings


def generate_otp() -> Tuple[str, datetime]:
    """Return a 6-digit code (100000-999999) and its expiry."""
    code = str(100000 + secrets.randbelow(900000))
    expiry = datetime.utcnow() + timedelta(minutes=settings.OTP_EXPIRE_MINUTES)
    return code, expiry


def is_otp_valid(
    stored_otp: Optional[str],
    stored_expiry: Optional[datetime],
    submitted_otp: Optional[str],
    now: Optional[datetime] = None,
) -> bool:
    """Exact match and not past expiry (the expiry instant itself is still valid)."""
    if not stored_otp or not stored_expiry or not submitted_otp:
        return False
    now = now or datetime.utcnow()
    if now > stored_expiry:
        return False
    return hmac.compare_digest(stored_otp.encode("utf-8"), str(submitted_otp).encode("utf-8"))
