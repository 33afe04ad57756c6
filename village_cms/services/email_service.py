"""
Email service using SendGrid for contact-form notifications.
"""

import asyncio
import os
import logging
from typing import Optional
from datetime import datetime
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail, Email, To, Content, ReplyTo
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def get_bool_env(key: str, default: bool = True) -> bool:
    """
    Parse a boolean environment variable from a string value.

    .env files store all values as strings, so this function converts string
    values like "true", "True", "TRUE", "1", "yes" to True, and everything
    else (including "false", "False", "0", "no", empty string) to False.

    Args:
        key: Environment variable name
        default: Default value if the variable is not set

    Returns:
        bool: Parsed boolean value
    """
    value = os.getenv(key)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes")


def _get_config():
    """Read SendGrid configuration from environment at call time."""
    return {
        "api_key": os.getenv("SENDGRID_API_KEY"),
        "from_email": os.getenv("SENDGRID_FROM_EMAIL", "noreply@desa.id"),
        "admin_email": os.getenv("ADMIN_EMAIL", "admin@desa.id"),
        "site_name": os.getenv("SITE_NAME", "Desa"),
    }


def is_enabled() -> bool:
    """Check if email sending is enabled (``ENABLE_EMAIL``, default true)."""
    return get_bool_env("ENABLE_EMAIL", default=True)


def build_contact_email_body(
    name: str,
    email: str,
    subject: str,
    message: str,
    phone: Optional[str] = None,
    timestamp: Optional[datetime] = None,
    site_name: str = "Desa",
) -> str:
    """Plain-text body for a contact-form notification."""
    body_lines = [
        "A new message was sent through the contact form:",
        "",
        "=" * 60,
        f"SUBJECT: {subject}",
        "=" * 60,
        message,
        "",
        "=" * 60,
        "SENDER:",
        "=" * 60,
        f"Name: {name}",
        f"Email: {email}",
        f"Phone: {phone or 'Not provided'}",
    ]
    if timestamp:
        body_lines.append(f"Submitted: {timestamp.strftime('%Y-%m-%d %H:%M:%S UTC')}")
    body_lines.extend(
        [
            "",
            "---",
            f"This is an automated message from the {site_name} website.",
        ]
    )
    return "\n".join(body_lines)


async def send_contact_email(
    name: str,
    email: str,
    subject: str,
    message: str,
    phone: Optional[str] = None,
    timestamp: Optional[datetime] = None,
) -> bool:
    """
    Send a contact-form notification to the site admin via SendGrid.

    Replies go straight to the sender through the Reply-To header.

    Returns:
        bool: True if the email was sent (or sending is disabled/unconfigured), False on failure
    """
    if not is_enabled():
        logger.info("Email sending is disabled. Email notification skipped.")
        return True  # Return True to not break the flow, but log that email was skipped

    cfg = _get_config()
    # If SendGrid is not configured, log warning and return True (don't fail the request)
    if not cfg["api_key"]:
        logger.warning("SENDGRID_API_KEY not configured. Email notification skipped.")
        return True

    try:
        email_body = build_contact_email_body(
            name=name,
            email=email,
            subject=subject,
            message=message,
            phone=phone,
            timestamp=timestamp,
            site_name=cfg["site_name"],
        )

        mail = Mail(
            from_email=Email(cfg["from_email"]),
            to_emails=To(cfg["admin_email"]),
            subject=f"[{cfg['site_name']}] Pesan kontak: {subject}",
            plain_text_content=Content("text/plain", email_body),
        )
        mail.reply_to = ReplyTo(email, name)

        sg = SendGridAPIClient(cfg["api_key"])
        response = await asyncio.to_thread(sg.send, mail)

        if 200 <= response.status_code < 300:
            logger.info(f"Contact email sent successfully to {cfg['admin_email']}")
            return True
        logger.error(f"SendGrid returned status {response.status_code}: {response.body}")
        return False

    except Exception as e:
        logger.error(f"Failed to send contact email: {str(e)}")
        # Don't raise the exception - we don't want email failures to break contact submission
        return False
