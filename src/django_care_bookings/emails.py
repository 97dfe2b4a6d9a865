"""Email sending for booking workflows.

Templates are stored as EmailTemplate rows and rendered with the Django
template engine; delivery goes through Django's configured email
backend.

Usage:
    from django_care_bookings.emails import send_templated_email

    result = send_templated_email(
        to="guest@example.com",
        template_key="booking-amended",
        context={"guest_name": "Alice"},
    )

    if not result.sent:
        logger.warning("Email not sent: %s", result.reason)
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from django.core.mail import EmailMultiAlternatives
from django.template import Context, Template

from .conf import from_email

logger = logging.getLogger(__name__)


# Template keys used by the booking workflow.
BOOKING_AMENDED = "booking-amended"
BOOKING_AMENDED_ADMIN = "booking-amended-admin"
BOOKING_APPROVED = "booking-approved"
BOOKING_DECLINED = "booking-declined"
BOOKING_CONFIRMED = "booking-confirmed"
BOOKING_CONFIRMED_ADMIN = "booking-confirmed-admin"
GUEST_CANCELLATION_REQUEST = "booking-guest-cancellation-request"
GUEST_CANCELLATION_REQUEST_ADMIN = "booking-guest-cancellation-request-admin"


@dataclass
class EmailResult:
    """Result of an email send attempt.

    Attributes:
        sent: Whether the email was handed to the backend
        reason: Reason for failure if sent is False
    """

    sent: bool
    reason: Optional[str] = None


def send_email(
    to: str,
    subject: str,
    body_text: str,
    body_html: Optional[str] = None,
) -> EmailResult:
    """Send one email through the configured Django email backend.

    Delivery failures are logged and reported in the result, never raised.
    """
    if not to:
        return EmailResult(sent=False, reason="no_recipient")

    email = EmailMultiAlternatives(
        subject=subject,
        body=body_text,
        from_email=from_email(),
        to=[to],
    )
    if body_html:
        email.attach_alternative(body_html, "text/html")

    try:
        email.send()
        logger.info("Email sent to=%s subject=%s", to, subject)
        return EmailResult(sent=True)
    except Exception as e:
        logger.exception("Failed to send email to=%s: %s", to, str(e))
        return EmailResult(sent=False, reason=str(e))


def render_email_template(key: str, context: dict) -> Tuple[str, str, str]:
    """Render an email template from the database.

    Returns:
        Tuple of (subject, text_body, html_body)

    Raises:
        ValueError: If template not found or inactive
    """
    from .models import EmailTemplate

    try:
        template = EmailTemplate.objects.get(key=key)
    except EmailTemplate.DoesNotExist:
        raise ValueError(f"Email template '{key}' not found")

    if not template.is_active:
        raise ValueError(f"Email template '{key}' is inactive")

    ctx = Context(context)
    subject = Template(template.subject).render(ctx).strip()
    text_body = Template(template.body_text).render(ctx)
    html_body = Template(template.body_html).render(ctx) if template.body_html else ""
    return subject, text_body, html_body


def send_templated_email(to: str, template_key: str, context: dict) -> EmailResult:
    """Render a database template and send it.

    A missing or inactive template is logged and reported as not sent.
    """
    try:
        subject, text_body, html_body = render_email_template(template_key, context)
    except ValueError as e:
        logger.warning("Email to=%s not sent: %s", to, e)
        return EmailResult(sent=False, reason=str(e))

    return send_email(to=to, subject=subject, body_text=text_body, body_html=html_body or None)
