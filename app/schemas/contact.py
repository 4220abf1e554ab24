from pydantic import EmailStr, Field
from typing import Optional, List
from uuid import UUID
from datetime import datetime
from app.models.contact import ContactPurpose
from app.schemas.common import CamelModel
from app.schemas.profile import ProfileResponse
from app.schemas.project import ProjectResponse


# ─── Contact form ─────────────────────────────────────────────────────────────

class ContactCreate(CamelModel):
    purpose: ContactPurpose
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    phone_number: str = Field(..., min_length=1)
    email: EmailStr
    message: str = Field(..., min_length=1)
    require_callback: bool = False

class ContactResponse(CamelModel):
    id: UUID
    purpose: ContactPurpose
    first_name: str
    last_name: str
    phone_number: str
    email: str
    message: str
    require_callback: bool
    created_at: datetime

class ContactEnvelope(CamelModel):
    message: str
    contact: ContactResponse


# ─── Notify-me subscription ───────────────────────────────────────────────────

class NotifyRequest(CamelModel):
    email: EmailStr

class NotifyResponse(CamelModel):
    success: bool
    message: str


# ─── Public pro-user listing ──────────────────────────────────────────────────

class ProUserResponse(CamelModel):
    id: UUID
    first_name: str
    last_name: str
    email: str
    profile: Optional[ProfileResponse] = None
    projects: List[ProjectResponse] = []
