from dataclasses import dataclass
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.exceptions import AuthError, PermissionDeniedError
from app.models.user import AccountType, User
from app.services import directory
from app.utils.auth import decode_token
from typing import Optional
from uuid import UUID

bearer_scheme = HTTPBearer(auto_error=False, description="Session token from /api/auth")


def get_current_user(
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> User:
    """
    Resolve the bearer token to an account.

    401 when no token is sent, 403 when it is invalid or expired.
    """
    if not credentials or not credentials.credentials:
        raise AuthError("Access token is required", status_code=401)

    payload = decode_token(credentials.credentials)
    if not payload:
        raise AuthError("Invalid token", status_code=403)

    try:
        user_id = UUID(str(payload.get("sub")))
    except ValueError:
        raise AuthError("Invalid token", status_code=403)

    user = directory.get_user(db, user_id)
    if not user:
        raise AuthError("Account no longer exists", status_code=401)
    return user


# ─── Authorization ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: str = ""


def authorize_account_type(user: User, required: AccountType) -> AccessDecision:
    if user.user_type == required:
        return AccessDecision(allowed=True)
    if required == AccountType.PRO:
        return AccessDecision(
            allowed=False,
            reason="Access denied. Pro users only. Complete onboarding to become a pro user.",
        )
    return AccessDecision(allowed=False, reason=f"Access denied. {required.value} accounts only.")


def require_account_type(required: AccountType):
    def account_type_checker(
        current_user: User = Depends(get_current_user),
    ) -> User:
        decision = authorize_account_type(current_user, required)
        if not decision.allowed:
            raise PermissionDeniedError(decision.reason)
        return current_user
    return account_type_checker
