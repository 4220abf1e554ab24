"""
services/onboarding_service.py

Service-provider profile lifecycle.

- Completing onboarding uploads the profile picture (and banner images),
  creates the profile with its project averages in one commit and promotes
  the account to ``pro``.
- Updates are partial. A new profile picture replaces the old one, new banner
  images are appended, and supplied project-type data replaces every existing
  project average.
- Deleting the profile removes its project averages and the profile in one
  transaction and returns the account to ``standard``.
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import UploadFile
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.database import transaction
from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.profile import Profile, ProjectAverage
from app.models.user import AccountType, User
from app.schemas.profile import ProfileCreate, ProfileUpdate, ProjectAverageIn
from app.services import directory
from app.utils.email import EmailSender, notify
from app.utils.file_storage import MediaStorage, real_files

log = logging.getLogger("wynngrid.onboarding")

MAX_BANNER_IMAGES = 5
PROFILE_PICTURE_FOLDER = "profile_pictures"
BANNER_IMAGE_FOLDER = "banner_images"


def _project_averages(
    entries: List[ProjectAverageIn], profile_id: Optional[UUID] = None
) -> List[ProjectAverage]:
    return [
        ProjectAverage(
            profile_id=profile_id,
            project_type=entry.project_type,
            avg_area=entry.avg_area,
            avg_value=entry.avg_value,
            specializations=list(entry.specializations),
        )
        for entry in entries
    ]


def _check_banner_count(banner_images: List[UploadFile]):
    if len(banner_images) > MAX_BANNER_IMAGES:
        raise ValidationError(f"At most {MAX_BANNER_IMAGES} banner images can be uploaded at once")


def _get_profile_or_404(db: Session, user_id: UUID) -> Profile:
    profile = directory.get_profile(db, user_id)
    if not profile:
        raise NotFoundError("Profile not found")
    return profile


async def complete_profile(
    db: Session,
    storage: MediaStorage,
    sender: EmailSender,
    user: User,
    data: ProfileCreate,
    profile_pic: Optional[UploadFile],
    banner_images: Optional[List[UploadFile]] = None,
) -> Profile:
    if profile_pic is None or not profile_pic.filename:
        raise ValidationError("Profile picture is required")

    banner_images = real_files(banner_images)
    _check_banner_count(banner_images)

    if directory.get_profile(db, user.id):
        raise ConflictError("Profile already exists")

    # Uploads happen before anything is written
    profile_pic_url = await storage.upload(profile_pic, PROFILE_PICTURE_FOLDER)
    banner_urls = await storage.upload_many(banner_images, BANNER_IMAGE_FOLDER)

    fields = data.model_dump(exclude={"type_of_projects"})
    profile = Profile(
        user_id=user.id,
        profile_pic_url=profile_pic_url,
        banner_images=banner_urls,
        **fields,
    )
    profile.project_averages = _project_averages(data.type_of_projects)
    db.add(profile)
    user.user_type = AccountType.PRO

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Profile already exists")

    log.info("Profile completed for user %s", user.id)

    await notify(
        sender,
        user.email,
        "Onboarding Complete",
        "Thank you for completing your onboarding process. We appreciate you believing in us!",
    )
    return directory.get_profile(db, user.id)


def get_profile(db: Session, user_id: UUID) -> Profile:
    return _get_profile_or_404(db, user_id)


async def update_profile(
    db: Session,
    storage: MediaStorage,
    user: User,
    data: ProfileUpdate,
    profile_pic: Optional[UploadFile] = None,
    banner_images: Optional[List[UploadFile]] = None,
) -> Profile:
    profile = _get_profile_or_404(db, user.id)

    banner_images = real_files(banner_images)
    _check_banner_count(banner_images)

    profile_pic_url = None
    if profile_pic is not None and profile_pic.filename:
        profile_pic_url = await storage.upload(profile_pic, PROFILE_PICTURE_FOLDER)
    new_banner_urls = await storage.upload_many(banner_images, BANNER_IMAGE_FOLDER)

    with transaction(db):
        for field, value in data.model_dump(exclude_unset=True, exclude={"type_of_projects"}).items():
            setattr(profile, field, value)

        if profile_pic_url:
            profile.profile_pic_url = profile_pic_url
        if new_banner_urls:
            profile.banner_images = list(profile.banner_images or []) + new_banner_urls

        if data.type_of_projects is not None:
            directory.delete_project_averages(db, profile.id)
            db.add_all(_project_averages(data.type_of_projects, profile.id))

    log.info("Profile updated for user %s", user.id)
    return directory.get_profile(db, user.id)


def delete_banner_image(db: Session, user: User, index: int) -> Profile:
    profile = _get_profile_or_404(db, user.id)

    banners = list(profile.banner_images or [])
    if index < 0 or index >= len(banners):
        raise ValidationError("Invalid image index")

    del banners[index]
    profile.banner_images = banners
    db.commit()
    return directory.get_profile(db, user.id)


async def delete_profile(db: Session, sender: EmailSender, user: User):
    profile = _get_profile_or_404(db, user.id)

    with transaction(db):
        directory.delete_profile_cascade(db, profile)
        user.user_type = AccountType.STANDARD

    log.info("Profile deleted for user %s", user.id)
    await notify(sender, user.email, "Profile deleted", "Profile deleted successfully")


def get_user_details(db: Session, user_id: UUID) -> User:
    user = directory.get_user(db, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user
