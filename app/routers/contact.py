import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.database import get_db
from app.models.contact import Contact
from app.schemas.contact import ContactCreate, ContactEnvelope, ContactResponse
from app.utils.email import EmailSender, get_email_sender, notify

log = logging.getLogger("wynngrid.contact")

router = APIRouter(prefix="/contact", tags=["Contact"])


def _admin_body(contact: Contact) -> str:
    return (
        "New contact form submission\n\n"
        f"Purpose: {contact.purpose.value}\n"
        f"Name: {contact.first_name} {contact.last_name}\n"
        f"Email: {contact.email}\n"
        f"Phone: {contact.phone_number}\n"
        f"Requires callback: {'Yes' if contact.require_callback else 'No'}\n\n"
        f"Message:\n{contact.message}\n"
    )


@router.post("", response_model=ContactEnvelope, status_code=status.HTTP_201_CREATED)
async def submit_contact(
    data: ContactCreate,
    db: Session = Depends(get_db),
    sender: EmailSender = Depends(get_email_sender),
):
    contact = Contact(**data.model_dump())
    db.add(contact)
    db.commit()
    db.refresh(contact)
    log.info("Contact submission %s (%s)", contact.id, contact.purpose.value)

    # Neither email may fail the submission
    if settings.ADMIN_EMAIL:
        await notify(
            sender,
            settings.ADMIN_EMAIL,
            f"New {contact.purpose.value} from {contact.first_name} {contact.last_name}",
            _admin_body(contact),
        )
    await notify(
        sender,
        contact.email,
        "We received your message",
        f"Hi {contact.first_name},\n\n"
        "Thank you for contacting us. Our team will get back to you soon.",
    )

    return ContactEnvelope(
        message="Contact form submitted successfully",
        contact=ContactResponse.model_validate(contact),
    )
