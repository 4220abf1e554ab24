from sqlalchemy import Column, String, Boolean, Text, Enum
from app.models.base import BaseModel
import enum

class ContactPurpose(str, enum.Enum):
    QUERY = "Query"
    FEEDBACK = "Feedback"
    SUPPORT = "Support"
    BUSINESS = "Business"

class SubscriptionStatus(str, enum.Enum):
    PENDING = "PENDING"
    NOTIFIED = "NOTIFIED"

class Contact(BaseModel):
    __tablename__ = "contacts"

    purpose = Column(Enum(ContactPurpose), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    phone_number = Column(String(30), nullable=False)
    email = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    require_callback = Column(Boolean, default=False, nullable=False)

class NotificationSubscriber(BaseModel):
    __tablename__ = "notification_subscribers"

    email = Column(String(255), unique=True, index=True, nullable=False)
    status = Column(Enum(SubscriptionStatus), default=SubscriptionStatus.PENDING, nullable=False)
