import json
from fastapi import APIRouter, Depends, Form, UploadFile, File, status
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session
from typing import List, Optional
from app.api.deps import get_current_user
from app.core.database import get_db
from app.core.exceptions import ValidationError, validation_error_from
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.profile import (
    ProfileCreate, ProfileUpdate, ProfileEnvelope, ProfileResponse,
    ProfileWithOwnerResponse, UserDetailsResponse,
)
from app.services import onboarding_service
from app.utils.email import EmailSender, get_email_sender
from app.utils.file_storage import MediaStorage, get_media_storage

router = APIRouter(prefix="/onboarding", tags=["Onboarding"])


# ─── Helpers ──────────────────────────────────────────────────────────────────

JSON_LIST_FIELDS = ("typeOfProjects", "portfolioUrls", "preferredWorkLocations")


def _parse_json_list(raw, field: str) -> list:
    """
    Parse a JSON-encoded array sent as a multipart text field.
    A bare (non-JSON) string is accepted as a one-element list for the
    plain string fields. Values already decoded from ``data`` pass through.
    """
    if isinstance(raw, str):
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            if field == "typeOfProjects":
                raise ValidationError(f"'{field}' must be a valid JSON array.")
            return [raw]
    else:
        parsed = raw

    if isinstance(parsed, dict) and field == "typeOfProjects":
        parsed = [parsed]
    if not isinstance(parsed, list):
        raise ValidationError(f"'{field}' must be a JSON array.")
    return parsed


def _parse_data_field(raw: Optional[str]) -> dict:
    """Decode the single JSON object some clients send as the 'data' form field."""
    if raw is None:
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        raise ValidationError("Invalid JSON data format")
    if not isinstance(parsed, dict):
        raise ValidationError("Invalid JSON data format")
    if "typeOfProjects" not in parsed and "projectAverages" in parsed:
        parsed["typeOfProjects"] = parsed.pop("projectAverages")
    return parsed


def _collect_fields(defaults: Optional[dict] = None, **form_values) -> dict:
    """
    Keep only fields the client sent and decode the JSON-encoded ones.
    Individual form fields override the same key in ``defaults``.
    """
    data = {}
    merged = dict(defaults or {})
    merged.update({k: v for k, v in form_values.items() if v is not None})
    for field, value in merged.items():
        if value is None:
            continue
        if field in JSON_LIST_FIELDS:
            value = _parse_json_list(value, field)
        data[field] = value
    return data


def _validate(schema, data: dict):
    try:
        return schema.model_validate(data)
    except PydanticValidationError as e:
        raise validation_error_from(e.errors())


# ─── Complete onboarding ──────────────────────────────────────────────────────

@router.post("/complete-profile", response_model=ProfileEnvelope, status_code=status.HTTP_201_CREATED)
async def complete_profile(
    # ── Files ─────────────────────────────────────────────────────────────────
    profile_pic: Optional[UploadFile] = File(None, alias="profilePic"),
    banner_images: Optional[List[UploadFile]] = File(None, alias="bannerImages"),

    # ── Plain text fields ─────────────────────────────────────────────────────
    name: Optional[str] = Form(None),
    contact_number: Optional[str] = Form(None, alias="contactNumber"),
    city: Optional[str] = Form(None),
    business_name: Optional[str] = Form(None, alias="businessName"),
    service_provider_type: Optional[str] = Form(None, alias="serviceProviderType"),
    experience_years: Optional[str] = Form(None, alias="experienceYears"),
    graduation_info: Optional[str] = Form(None, alias="graduationInfo"),
    associations: Optional[str] = Form(None),
    website_url: Optional[str] = Form(None, alias="websiteUrl"),
    work_setup_preference: Optional[str] = Form(None, alias="workSetupPreference"),
    preferred_timeline: Optional[str] = Form(None, alias="preferredTimeline"),
    about_us: Optional[str] = Form(None, alias="aboutUs"),
    comments: Optional[str] = Form(None),

    # ── JSON-encoded string fields ────────────────────────────────────────────
    type_of_projects: Optional[str] = Form(None, alias="typeOfProjects"),
    portfolio_urls: Optional[str] = Form(None, alias="portfolioUrls"),
    preferred_work_locations: Optional[str] = Form(None, alias="preferredWorkLocations"),

    db: Session = Depends(get_db),
    storage: MediaStorage = Depends(get_media_storage),
    sender: EmailSender = Depends(get_email_sender),
    current_user: User = Depends(get_current_user),
):
    """Multipart form: profile picture, up to 5 banner images and the profile fields."""
    if profile_pic is None or not profile_pic.filename:
        raise ValidationError("Profile picture is required")

    data = _validate(ProfileCreate, _collect_fields(
        name=name,
        contactNumber=contact_number,
        city=city,
        businessName=business_name,
        serviceProviderType=service_provider_type,
        experienceYears=experience_years,
        graduationInfo=graduation_info,
        associations=associations,
        websiteUrl=website_url,
        workSetupPreference=work_setup_preference,
        preferredTimeline=preferred_timeline,
        aboutUs=about_us,
        comments=comments,
        typeOfProjects=type_of_projects,
        portfolioUrls=portfolio_urls,
        preferredWorkLocations=preferred_work_locations,
    ))

    profile = await onboarding_service.complete_profile(
        db, storage, sender, current_user, data, profile_pic, banner_images,
    )
    return ProfileEnvelope(
        message="Profile completed successfully",
        profile=ProfileResponse.model_validate(profile),
    )


# ─── Read ─────────────────────────────────────────────────────────────────────

@router.get("/profile", response_model=ProfileWithOwnerResponse)
def get_profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return onboarding_service.get_profile(db, current_user.id)


@router.get("/user-details", response_model=UserDetailsResponse)
def get_user_details(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return onboarding_service.get_user_details(db, current_user.id)


# ─── Update: multipart, every field optional ──────────────────────────────────

@router.put("/update-profile", response_model=ProfileEnvelope)
async def update_profile(
    profile_pic: Optional[UploadFile] = File(None, alias="profilePic"),
    banner_images: Optional[List[UploadFile]] = File(None, alias="bannerImages"),

    name: Optional[str] = Form(None),
    contact_number: Optional[str] = Form(None, alias="contactNumber"),
    city: Optional[str] = Form(None),
    business_name: Optional[str] = Form(None, alias="businessName"),
    service_provider_type: Optional[str] = Form(None, alias="serviceProviderType"),
    experience_years: Optional[str] = Form(None, alias="experienceYears"),
    graduation_info: Optional[str] = Form(None, alias="graduationInfo"),
    associations: Optional[str] = Form(None),
    website_url: Optional[str] = Form(None, alias="websiteUrl"),
    work_setup_preference: Optional[str] = Form(None, alias="workSetupPreference"),
    preferred_timeline: Optional[str] = Form(None, alias="preferredTimeline"),
    about_us: Optional[str] = Form(None, alias="aboutUs"),
    comments: Optional[str] = Form(None),

    type_of_projects: Optional[str] = Form(None, alias="typeOfProjects"),
    # Older clients send the same data as 'projectAverages'
    project_averages: Optional[str] = Form(None, alias="projectAverages"),
    portfolio_urls: Optional[str] = Form(None, alias="portfolioUrls"),
    preferred_work_locations: Optional[str] = Form(None, alias="preferredWorkLocations"),

    # Every field above as one JSON object
    data: Optional[str] = Form(None),

    db: Session = Depends(get_db),
    storage: MediaStorage = Depends(get_media_storage),
    current_user: User = Depends(get_current_user),
):
    """
    Partial update. New banner images are appended to the existing ones;
    project-type data, when sent, replaces all existing entries.
    """
    fields = _validate(ProfileUpdate, _collect_fields(
        _parse_data_field(data),
        name=name,
        contactNumber=contact_number,
        city=city,
        businessName=business_name,
        serviceProviderType=service_provider_type,
        experienceYears=experience_years,
        graduationInfo=graduation_info,
        associations=associations,
        websiteUrl=website_url,
        workSetupPreference=work_setup_preference,
        preferredTimeline=preferred_timeline,
        aboutUs=about_us,
        comments=comments,
        typeOfProjects=type_of_projects if type_of_projects is not None else project_averages,
        portfolioUrls=portfolio_urls,
        preferredWorkLocations=preferred_work_locations,
    ))

    profile = await onboarding_service.update_profile(
        db, storage, current_user, fields, profile_pic, banner_images,
    )
    return ProfileEnvelope(
        message="Profile updated successfully",
        profile=ProfileResponse.model_validate(profile),
    )


# ─── Delete ───────────────────────────────────────────────────────────────────

@router.delete("/delete-banner-image/{index}", response_model=ProfileEnvelope)
def delete_banner_image(
    index: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    profile = onboarding_service.delete_banner_image(db, current_user, index)
    return ProfileEnvelope(
        message="Banner image deleted successfully",
        profile=ProfileResponse.model_validate(profile),
    )


@router.delete("/delete-profile", response_model=MessageResponse)
async def delete_profile(
    db: Session = Depends(get_db),
    sender: EmailSender = Depends(get_email_sender),
    current_user: User = Depends(get_current_user),
):
    await onboarding_service.delete_profile(db, sender, current_user)
    return MessageResponse(message="Profile deleted successfully")
