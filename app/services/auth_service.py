"""
services/auth_service.py

Account lifecycle: signup with email OTP, verification, login, password
reset, account deletion, logout acknowledgement and Google sign-in.

Verification only moves one way: Unverified -> Verified. Login is refused
while an account is unverified.
"""

import logging
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from app.core.database import transaction
from app.core.exceptions import AuthError, ConflictError, NotFoundError, ValidationError
from app.models.user import AccountType, User
from app.services import directory
from app.utils.auth import (
    PASSWORD_POLICY_MESSAGE,
    create_session_token,
    get_password_hash,
    is_strong_password,
    verify_password,
)
from app.utils.email import EmailSender, mask_email, notify
from app.utils.google_auth import GoogleTokenVerifier
from app.utils.otp import generate_otp, is_otp_valid

log = logging.getLogger("wynngrid.auth")


def _require_strong_password(password: str):
    if not is_strong_password(password):
        raise ValidationError(PASSWORD_POLICY_MESSAGE)


def _get_user_or_404(db: Session, email: str) -> User:
    user = directory.get_user_by_email(db, email)
    if not user:
        raise NotFoundError("User not found")
    return user


def _check_otp(user: User, otp: str):
    if not is_otp_valid(user.otp, user.otp_expiry, otp):
        raise AuthError("Invalid or expired OTP")


# ─── Signup / verification ────────────────────────────────────────────────────

async def signup(
    db: Session,
    sender: EmailSender,
    first_name: str,
    last_name: str,
    email: str,
    password: str,
) -> User:
    """
    Create an unverified account and email it a verification code.

    Signing up again with an email that is still unverified overwrites the
    pending account (name, password, code) instead of creating a second one.
    """
    _require_strong_password(password)

    user = directory.get_user_by_email(db, email)
    if user and user.is_verified:
        raise ConflictError("Email already registered", status_code=400)

    otp, otp_expiry = generate_otp()
    # bcrypt is CPU bound; keep it off the event loop
    password_hash = await run_in_threadpool(get_password_hash, password)

    if user:
        user.first_name = first_name
        user.last_name = last_name
        user.password_hash = password_hash
        user.otp = otp
        user.otp_expiry = otp_expiry
        log.info("Re-issuing verification code for pending account %s", mask_email(email))
    else:
        user = User(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password_hash=password_hash,
            user_type=AccountType.STANDARD,
            is_verified=False,
            otp=otp,
            otp_expiry=otp_expiry,
        )
        db.add(user)
        log.info("Created account %s", mask_email(email))

    try:
        db.commit()
    except IntegrityError:
        # Concurrent signup for the same email won the insert
        db.rollback()
        raise ConflictError("Email already registered", status_code=400)
    db.refresh(user)

    await notify(sender, email, "Verify your email", f"Your OTP is: {otp}")
    return user


def verify_otp(db: Session, email: str, otp: str) -> str:
    """Mark the account verified, clear the code pair and return a session token."""
    user = _get_user_or_404(db, email)
    _check_otp(user, otp)

    user.is_verified = True
    user.otp = None
    user.otp_expiry = None
    db.commit()

    log.info("Verified account %s", mask_email(email))
    return create_session_token(user.id)


def login(db: Session, email: str, password: str) -> str:
    user = _get_user_or_404(db, email)

    if not user.is_verified:
        raise AuthError("Please verify your email first")

    if not verify_password(password, user.password_hash):
        raise AuthError("Invalid password")

    return create_session_token(user.id)


# ─── Password reset ───────────────────────────────────────────────────────────

async def forgot_password(db: Session, sender: EmailSender, email: str):
    user = _get_user_or_404(db, email)

    otp, otp_expiry = generate_otp()
    user.otp = otp
    user.otp_expiry = otp_expiry
    db.commit()

    await notify(sender, email, "Reset Password", f"Your password reset OTP is: {otp}")


def reset_password(db: Session, email: str, otp: str, new_password: str):
    _require_strong_password(new_password)

    user = _get_user_or_404(db, email)
    _check_otp(user, otp)

    user.password_hash = get_password_hash(new_password)
    user.otp = None
    user.otp_expiry = None
    db.commit()
    log.info("Password reset for %s", mask_email(email))


# ─── Account deletion / logout ────────────────────────────────────────────────

def delete_account(db: Session, email: str, password: str):
    """Delete the account with its profile, project averages and projects, atomically."""
    user = _get_user_or_404(db, email)

    if not verify_password(password, user.password_hash):
        raise AuthError("Invalid password")

    with transaction(db):
        directory.delete_user_cascade(db, user)
    log.info("Deleted account %s", mask_email(email))


def logout(token: Optional[str]):
    # Tokens are stateless; the client discards its copy.
    if not token:
        raise ValidationError("Token is required for logout")


# ─── Google sign-in ───────────────────────────────────────────────────────────

def _names_from_google(payload: dict, email: str) -> Tuple[str, str]:
    given = (payload.get("given_name") or "").strip()
    family = (payload.get("family_name") or "").strip()
    if given:
        return given, family

    full_name = (payload.get("name") or "").strip()
    if full_name:
        first, _, rest = full_name.partition(" ")
        return first, rest.strip()

    return email.split("@")[0], ""


async def google_auth(
    db: Session, verifier: GoogleTokenVerifier, id_token: str
) -> Tuple[User, str, bool]:
    """
    Sign in with a Google ID token.

    Returns (user, session_token, is_new_user). New accounts are created
    verified and without a password.
    """
    payload = await verifier(id_token)

    email = payload.get("email")
    if not email:
        raise AuthError("Invalid token: no email in Google payload")

    user = directory.get_user_by_email(db, email)
    if user:
        return user, create_session_token(user.id), False

    first_name, last_name = _names_from_google(payload, email)
    user = User(
        first_name=first_name,
        last_name=last_name,
        email=email,
        password_hash="",
        user_type=AccountType.STANDARD,
        is_verified=True,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        user = directory.get_user_by_email(db, email)
        if not user:
            raise
        return user, create_session_token(user.id), False
    db.refresh(user)

    log.info("Created account %s via Google sign-in", mask_email(email))
    return user, create_session_token(user.id), True
