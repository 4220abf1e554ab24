from pydantic import Field, field_validator
from typing import Optional, List
from uuid import UUID
from datetime import datetime
from app.models.project import ProjectCategory
from app.schemas.common import CamelModel


class ProjectBase(CamelModel):
    name: str
    location: str
    area: float
    job_cost: float
    project_type: ProjectCategory
    description: Optional[str] = None


# ─── Create / update (built from multipart form fields) ───────────────────────

class ProjectCreate(ProjectBase):
    name: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    area: float = Field(..., gt=0)
    job_cost: float = Field(..., gt=0)


class ProjectUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    location: Optional[str] = Field(None, min_length=1)
    area: Optional[float] = Field(None, gt=0)
    job_cost: Optional[float] = Field(None, gt=0)
    project_type: Optional[ProjectCategory] = None
    description: Optional[str] = None


# ─── Responses ────────────────────────────────────────────────────────────────

class ProjectResponse(ProjectBase):
    id: UUID
    owner_id: UUID
    images: List[str] = []
    created_at: datetime
    updated_at: Optional[datetime] = None

    @field_validator("images", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return v or []


class ProjectEnvelope(CamelModel):
    message: str
    project: ProjectResponse
