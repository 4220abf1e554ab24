from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.schemas.common import MessageResponse
from app.schemas.user import (
    SignupRequest, VerifyOtpRequest, LoginRequest, ForgotPasswordRequest,
    ResetPasswordRequest, DeleteAccountRequest, LogoutRequest, GoogleAuthRequest,
    TokenResponse, GoogleAuthResponse, UserSummary,
)
from app.services import auth_service
from app.utils.email import EmailSender, get_email_sender
from app.utils.google_auth import GoogleTokenVerifier, get_google_verifier

router = APIRouter(prefix="/auth", tags=["Authentication"])

@router.post("/signup", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    data: SignupRequest,
    db: Session = Depends(get_db),
    sender: EmailSender = Depends(get_email_sender),
):
    await auth_service.signup(
        db,
        sender,
        first_name=data.first_name,
        last_name=data.last_name,
        email=data.email,
        password=data.password,
    )
    return MessageResponse(message="User created. Please verify your email.")

@router.post("/verify-otp", response_model=TokenResponse)
def verify_otp(data: VerifyOtpRequest, db: Session = Depends(get_db)):
    token = auth_service.verify_otp(db, data.email, data.otp)
    return TokenResponse(message="Email verified successfully", token=token)

@router.post("/login", response_model=TokenResponse, response_model_exclude_none=True)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    token = auth_service.login(db, data.email, data.password)
    return TokenResponse(token=token)

@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    data: ForgotPasswordRequest,
    db: Session = Depends(get_db),
    sender: EmailSender = Depends(get_email_sender),
):
    await auth_service.forgot_password(db, sender, data.email)
    return MessageResponse(message="Password reset OTP sent to email")

@router.post("/reset-password", response_model=MessageResponse)
def reset_password(data: ResetPasswordRequest, db: Session = Depends(get_db)):
    auth_service.reset_password(db, data.email, data.otp, data.new_password)
    return MessageResponse(message="Password reset successfully")

@router.delete("/delete-account", response_model=MessageResponse)
def delete_account(data: DeleteAccountRequest, db: Session = Depends(get_db)):
    """Password is re-entered instead of using a session token."""
    auth_service.delete_account(db, data.email, data.password)
    return MessageResponse(message="Account deleted successfully")

@router.post("/logout", response_model=MessageResponse)
def logout(data: LogoutRequest):
    auth_service.logout(data.token)
    return MessageResponse(message="Logged out successfully")

@router.post("/google-auth", response_model=GoogleAuthResponse)
async def google_auth(
    data: GoogleAuthRequest,
    response: Response,
    db: Session = Depends(get_db),
    verifier: GoogleTokenVerifier = Depends(get_google_verifier),
):
    user, token, is_new_user = await auth_service.google_auth(db, verifier, data.id_token)
    if is_new_user:
        response.status_code = status.HTTP_201_CREATED
    return GoogleAuthResponse(
        message="Account created successfully" if is_new_user else "Login successful",
        token=token,
        user=UserSummary.model_validate(user),
        is_new_user=is_new_user,
    )
