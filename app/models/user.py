from sqlalchemy import Column, String, Boolean, DateTime, Enum
from sqlalchemy.orm import relationship
from app.models.base import BaseModel
from app.models.profile import Profile  # noqa: F401
from app.models.project import Project  # noqa: F401
import enum

class AccountType(str, enum.Enum):
    STANDARD = "standard"
    PRO = "pro"

class User(BaseModel):
    __tablename__ = "users"

    email = Column(String(255), unique=True, index=True, nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False, default="")
    # Empty for accounts created through Google sign-in
    password_hash = Column(String(255), nullable=False, default="")

    user_type = Column(Enum(AccountType), nullable=False, default=AccountType.STANDARD)
    is_verified = Column(Boolean, nullable=False, default=False)

    # Set and cleared together
    otp = Column(String(6), nullable=True)
    otp_expiry = Column(DateTime, nullable=True)

    profile = relationship("Profile", back_populates="user", uselist=False)
    projects = relationship(
        "Project",
        back_populates="owner",
        order_by="Project.created_at.desc()",
    )
