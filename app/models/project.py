from sqlalchemy import Column, String, Float, Text, Enum, ForeignKey, JSON, Uuid
from sqlalchemy.orm import relationship
from app.models.base import BaseModel
import enum

MIN_PROJECT_IMAGES = 2
MAX_PROJECT_IMAGES = 10

class ProjectCategory(str, enum.Enum):
    COMMERCIAL = "Commercial"
    RESIDENTIAL = "Residential"
    OTHER = "Other"

class Project(BaseModel):
    __tablename__ = "projects"

    owner_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), index=True, nullable=False)

    name = Column(String(200), nullable=False)
    location = Column(String(255), nullable=False)
    area = Column(Float, nullable=False)
    job_cost = Column(Float, nullable=False)
    project_type = Column(Enum(ProjectCategory), nullable=False)
    description = Column(Text, nullable=True)

    # Ordered image URLs; never fewer than MIN_PROJECT_IMAGES
    images = Column(JSON, default=list, nullable=False)

    owner = relationship("User", back_populates="projects")
