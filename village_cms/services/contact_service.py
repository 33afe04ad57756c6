"""
Contact form handling: validation, storage and admin notification.
"""

import logging
import re
from typing import Dict, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from village_cms.database.models import ContactMessage
from village_cms.services import email_service
from village_cms.utils.datetime_utils import utcnow

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MISSING_FIELDS_MESSAGE = "Semua field wajib diisi"
INVALID_EMAIL_MESSAGE = "Format email tidak valid"
SUCCESS_MESSAGE = "Pesan berhasil dikirim! Terima kasih atas feedbacknya."


def validate_contact(
    name: Optional[str],
    email: Optional[str],
    subject: Optional[str],
    message: Optional[str],
) -> None:
    """
    Check the required contact fields.

    Raises:
        ValueError: With the user-facing (Indonesian) message
    """
    if not all(v and v.strip() for v in (name, email, subject, message)):
        raise ValueError(MISSING_FIELDS_MESSAGE)
    if not EMAIL_PATTERN.match(email.strip()):
        raise ValueError(INVALID_EMAIL_MESSAGE)


async def submit_contact(
    session: AsyncSession,
    *,
    name: Optional[str],
    email: Optional[str],
    subject: Optional[str],
    message: Optional[str],
    phone: Optional[str] = None,
) -> Dict:
    """
    Validate, store and forward a contact form submission.

    The admin email is best-effort: a failed send is logged and the
    submission still succeeds.

    Raises:
        ValueError: If required fields are missing or the email is malformed
    """
    validate_contact(name, email, subject, message)

    contact = ContactMessage(
        name=name.strip(),
        email=email.strip().lower(),
        phone=phone.strip() if phone and phone.strip() else None,
        subject=subject.strip(),
        message=message.strip(),
    )
    session.add(contact)
    await session.commit()
    logger.info(f"Contact form submission {contact.id} from {contact.email}: {contact.subject}")

    sent = await email_service.send_contact_email(
        name=contact.name,
        email=contact.email,
        subject=contact.subject,
        message=contact.message,
        phone=contact.phone,
        timestamp=utcnow(),
    )
    if not sent:
        logger.warning(f"Contact message {contact.id} stored but notification email failed")

    return {"message": SUCCESS_MESSAGE, "success": True}


async def count_messages(session: AsyncSession) -> int:
    """Number of stored contact messages."""
    result = await session.execute(select(func.count(ContactMessage.id)))
    return result.scalar_one()
