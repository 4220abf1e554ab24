from pydantic import ConfigDict, Field, field_validator
from typing import Optional, List
from uuid import UUID
from datetime import datetime
from app.models.user import AccountType
from app.schemas.common import CamelModel


# ─── Project averages ─────────────────────────────────────────────────────────

class ProjectAverageIn(CamelModel):
    # Clients send avgArea / avgValue as numbers or strings
    model_config = ConfigDict(coerce_numbers_to_str=True)

    project_type: str = Field(..., min_length=1)
    avg_area: str = Field(..., min_length=1)
    avg_value: str = Field(..., min_length=1)
    specializations: List[str] = []

    @field_validator("project_type", "avg_area", "avg_value")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v.strip()


class ProjectAverageResponse(CamelModel):
    id: UUID
    project_type: str
    avg_area: str
    avg_value: str
    specializations: Optional[List[str]] = []


# ─── Profile input (parsed from multipart form fields) ────────────────────────

class ProfileFields(CamelModel):
    # Numbers arrive unquoted inside the JSON "data" field
    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: Optional[str] = None
    contact_number: Optional[str] = None
    city: Optional[str] = None
    business_name: Optional[str] = None
    service_provider_type: Optional[str] = None
    experience_years: Optional[str] = None
    graduation_info: Optional[str] = None
    associations: Optional[str] = None
    website_url: Optional[str] = None
    work_setup_preference: Optional[str] = None
    preferred_timeline: Optional[str] = None
    about_us: Optional[str] = None
    comments: Optional[str] = None
    portfolio_urls: Optional[List[str]] = None


class ProfileCreate(ProfileFields):
    portfolio_urls: List[str] = []
    preferred_work_locations: List[str] = Field(..., min_length=1)
    type_of_projects: List[ProjectAverageIn] = Field(..., min_length=1)


class ProfileUpdate(ProfileFields):
    """Only fields that are set are written."""
    preferred_work_locations: Optional[List[str]] = None
    type_of_projects: Optional[List[ProjectAverageIn]] = None

    @field_validator("type_of_projects")
    @classmethod
    def at_least_one_project_type(cls, v):
        if v is not None and len(v) == 0:
            raise ValueError("At least one project type with average area and value is required")
        return v


# ─── Responses ────────────────────────────────────────────────────────────────

class ProfileOwner(CamelModel):
    id: UUID
    first_name: str
    last_name: str
    email: str


class ProfileResponse(CamelModel):
    id: UUID
    user_id: UUID
    name: Optional[str] = None
    contact_number: Optional[str] = None
    city: Optional[str] = None
    business_name: Optional[str] = None
    service_provider_type: Optional[str] = None
    experience_years: Optional[str] = None
    graduation_info: Optional[str] = None
    associations: Optional[str] = None
    website_url: Optional[str] = None
    work_setup_preference: Optional[str] = None
    preferred_timeline: Optional[str] = None
    about_us: Optional[str] = None
    comments: Optional[str] = None
    portfolio_urls: List[str] = []
    preferred_work_locations: List[str] = []
    profile_pic_url: str
    banner_images: List[str] = []
    project_averages: List[ProjectAverageResponse] = []
    created_at: datetime
    updated_at: Optional[datetime] = None

    @field_validator("portfolio_urls", "preferred_work_locations", "banner_images", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return v or []


class ProfileWithOwnerResponse(ProfileResponse):
    user: ProfileOwner


class ProfileEnvelope(CamelModel):
    message: str
    profile: ProfileResponse


class UserDetailsResponse(CamelModel):
    id: UUID
    first_name: str
    last_name: str
    email: str
    user_type: AccountType
    is_verified: bool
    profile: Optional[ProfileResponse] = None
