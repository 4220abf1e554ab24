from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.exceptions import ConflictError
from app.models.contact import NotificationSubscriber, SubscriptionStatus
from app.schemas.contact import NotifyRequest, NotifyResponse
from app.utils.email import EmailSender, get_email_sender, notify

router = APIRouter(prefix="/notifyuser", tags=["Notifications"])


@router.post("/notify-me", response_model=NotifyResponse)
async def notify_me(
    data: NotifyRequest,
    db: Session = Depends(get_db),
    sender: EmailSender = Depends(get_email_sender),
):
    """Register an email for the launch notification list."""
    email = data.email.lower()
    existing = db.query(NotificationSubscriber).filter(NotificationSubscriber.email == email).first()
    if existing:
        raise ConflictError("Email is already subscribed")

    db.add(NotificationSubscriber(email=email, status=SubscriptionStatus.PENDING))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Email is already subscribed")

    await notify(
        sender,
        email,
        "You're on the list",
        "Thanks for your interest! We'll notify you as soon as we launch.",
    )
    return NotifyResponse(success=True, message="Successfully subscribed for notification")
