from sqlalchemy import Column, String, Text, ForeignKey, JSON, Uuid
from sqlalchemy.orm import relationship
from app.models.base import BaseModel

class Profile(BaseModel):
    __tablename__ = "profiles"

    # One profile per account
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), unique=True, nullable=False)

    # Business details
    name = Column(String(150), nullable=True)
    contact_number = Column(String(30), nullable=True)
    city = Column(String(100), nullable=True)
    business_name = Column(String(200), nullable=True)
    service_provider_type = Column(String(100), nullable=True)
    experience_years = Column(String(50), nullable=True)
    graduation_info = Column(String(255), nullable=True)
    associations = Column(String(255), nullable=True)
    website_url = Column(String(255), nullable=True)
    work_setup_preference = Column(String(100), nullable=True)
    preferred_timeline = Column(String(100), nullable=True)
    about_us = Column(Text, nullable=True)
    comments = Column(Text, nullable=True)

    # Lists stored as JSON arrays; always reassign, never mutate in place
    portfolio_urls = Column(JSON, default=list)
    preferred_work_locations = Column(JSON, default=list)

    # Media
    profile_pic_url = Column(String(500), nullable=False)
    banner_images = Column(JSON, default=list)

    user = relationship("User", back_populates="profile")
    project_averages = relationship(
        "ProjectAverage",
        back_populates="profile",
        order_by="ProjectAverage.created_at",
    )

class ProjectAverage(BaseModel):
    __tablename__ = "project_averages"

    profile_id = Column(Uuid(as_uuid=True), ForeignKey("profiles.id"), nullable=False)
    project_type = Column(String(100), nullable=False)
    avg_area = Column(String(100), nullable=False)
    avg_value = Column(String(100), nullable=False)
    specializations = Column(JSON, default=list)

    profile = relationship("Profile", back_populates="project_averages")
