import logging
from fastapi import APIRouter, Depends, Form, UploadFile, File, status
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
from app.api.deps import get_current_user
from app.core.database import get_db
from app.core.exceptions import NotFoundError, ValidationError, validation_error_from
from app.models.project import Project, MIN_PROJECT_IMAGES, MAX_PROJECT_IMAGES
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.project import ProjectCreate, ProjectUpdate, ProjectResponse, ProjectEnvelope
from app.services import directory
from app.utils.file_storage import MediaStorage, get_media_storage, real_files

log = logging.getLogger("wynngrid.projects")

router = APIRouter(prefix="/projects", tags=["Projects"])

PROJECT_IMAGE_FOLDER = "project_images"


# ─── Helpers ──────────────────────────────────────────────────────────────────

def _get_project_or_404(db: Session, project_id: UUID, owner: User) -> Project:
    project = directory.get_project(db, project_id, owner.id)
    if not project:
        raise NotFoundError("Project not found")
    return project


def _form_data(**values) -> dict:
    return {k: v for k, v in values.items() if v is not None}


# ─── LIST / GET (own projects) ────────────────────────────────────────────────

@router.get("", response_model=List[ProjectResponse])
def list_projects(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return (
        db.query(Project)
        .filter(Project.owner_id == current_user.id)
        .order_by(Project.created_at.desc())
        .all()
    )


@router.get("/{project_id}", response_model=ProjectResponse)
def get_project(
    project_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _get_project_or_404(db, project_id, current_user)


# ─── CREATE: multipart form + at least two images ─────────────────────────────

@router.post("", response_model=ProjectEnvelope, status_code=status.HTTP_201_CREATED)
async def create_project(
    name: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    area: Optional[str] = Form(None),
    job_cost: Optional[str] = Form(None, alias="jobCost"),
    project_type: Optional[str] = Form(None, alias="projectType"),
    description: Optional[str] = Form(None),
    images: Optional[List[UploadFile]] = File(None),

    db: Session = Depends(get_db),
    storage: MediaStorage = Depends(get_media_storage),
    current_user: User = Depends(get_current_user),
):
    try:
        data = ProjectCreate.model_validate(_form_data(
            name=name,
            location=location,
            area=area,
            jobCost=job_cost,
            projectType=project_type,
            description=description,
        ))
    except PydanticValidationError as e:
        raise validation_error_from(e.errors())

    images = real_files(images)
    if len(images) < MIN_PROJECT_IMAGES:
        raise ValidationError(f"Minimum {MIN_PROJECT_IMAGES} images required")
    if len(images) > MAX_PROJECT_IMAGES:
        raise ValidationError(f"Maximum {MAX_PROJECT_IMAGES} images allowed")

    image_urls = await storage.upload_many(images, PROJECT_IMAGE_FOLDER)

    project = Project(
        owner_id=current_user.id,
        name=data.name,
        location=data.location,
        area=data.area,
        job_cost=data.job_cost,
        project_type=data.project_type,
        description=data.description,
        images=image_urls,
    )
    db.add(project)
    db.commit()
    db.refresh(project)
    log.info("Project %s created by %s", project.id, current_user.id)

    return ProjectEnvelope(
        message="Project created successfully",
        project=ProjectResponse.model_validate(project),
    )


# ─── UPDATE: partial, new images are appended ─────────────────────────────────

@router.put("/{project_id}", response_model=ProjectEnvelope)
async def update_project(
    project_id: UUID,
    name: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    area: Optional[str] = Form(None),
    job_cost: Optional[str] = Form(None, alias="jobCost"),
    project_type: Optional[str] = Form(None, alias="projectType"),
    description: Optional[str] = Form(None),
    images: Optional[List[UploadFile]] = File(None),

    db: Session = Depends(get_db),
    storage: MediaStorage = Depends(get_media_storage),
    current_user: User = Depends(get_current_user),
):
    project = _get_project_or_404(db, project_id, current_user)

    try:
        data = ProjectUpdate.model_validate(_form_data(
            name=name,
            location=location,
            area=area,
            jobCost=job_cost,
            projectType=project_type,
            description=description,
        ))
    except PydanticValidationError as e:
        raise validation_error_from(e.errors())

    new_images = real_files(images)
    image_urls = list(project.images or [])
    if len(image_urls) + len(new_images) < MIN_PROJECT_IMAGES:
        raise ValidationError(f"Minimum {MIN_PROJECT_IMAGES} images required")
    if len(image_urls) + len(new_images) > MAX_PROJECT_IMAGES:
        raise ValidationError(f"Maximum {MAX_PROJECT_IMAGES} images allowed")

    if new_images:
        image_urls += await storage.upload_many(new_images, PROJECT_IMAGE_FOLDER)

    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(project, field, value)
    project.images = image_urls

    db.commit()
    db.refresh(project)

    return ProjectEnvelope(
        message="Project updated successfully",
        project=ProjectResponse.model_validate(project),
    )


# ─── DELETE ───────────────────────────────────────────────────────────────────

@router.delete("/{project_id}", response_model=MessageResponse)
def delete_project(
    project_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    project = _get_project_or_404(db, project_id, current_user)
    db.delete(project)
    db.commit()
    return MessageResponse(message="Project deleted successfully")


@router.delete("/{project_id}/images/{index}", response_model=ProjectEnvelope)
def delete_project_image(
    project_id: UUID,
    index: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    project = _get_project_or_404(db, project_id, current_user)

    images = list(project.images or [])
    if index < 0 or index >= len(images):
        raise ValidationError("Invalid image index")

    if len(images) <= MIN_PROJECT_IMAGES:
        raise ValidationError(
            f"Cannot delete image. Minimum {MIN_PROJECT_IMAGES} images required"
        )

    del images[index]
    project.images = images
    db.commit()
    db.refresh(project)

    return ProjectEnvelope(
        message="Image deleted successfully",
        project=ProjectResponse.model_validate(project),
    )
