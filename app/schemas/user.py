from pydantic import EmailStr, Field
from typing import Optional
from uuid import UUID
from datetime import datetime
from app.models.user import AccountType
from app.schemas.common import CamelModel

class SignupRequest(CamelModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    # Strength policy is enforced by the auth service
    password: str

class VerifyOtpRequest(CamelModel):
    email: EmailStr
    otp: str

class LoginRequest(CamelModel):
    email: EmailStr
    password: str

class ForgotPasswordRequest(CamelModel):
    email: EmailStr

class ResetPasswordRequest(CamelModel):
    email: EmailStr
    otp: str
    new_password: str

class DeleteAccountRequest(CamelModel):
    email: EmailStr
    password: str

class LogoutRequest(CamelModel):
    token: Optional[str] = None

class GoogleAuthRequest(CamelModel):
    id_token: str

class UserSummary(CamelModel):
    id: UUID
    first_name: str
    last_name: str
    email: str
    user_type: AccountType
    is_verified: bool
    created_at: datetime

class TokenResponse(CamelModel):
    message: Optional[str] = None
    token: str

class GoogleAuthResponse(CamelModel):
    message: str
    token: str
    user: UserSummary
    is_new_user: bool
