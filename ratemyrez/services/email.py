"""Email service using Resend API."""

import logging

from ratemyrez.core.config import settings

logger = logging.getLogger(__name__)


def _send(to: str, subject: str, html: str) -> bool:
    """Send an email via Resend. Returns True on success."""
    if not settings.RESEND_API_KEY:
        logger.warning("RESEND_API_KEY not set, email to %s not sent: %s", to, subject)
        return False

    import resend

    resend.api_key = settings.RESEND_API_KEY

    try:
        resend.Emails.send(
            {
                "from": settings.MAIL_FROM,
                "to": [to],
                "subject": subject,
                "html": html,
            }
        )
        return True
    except Exception:
        logger.exception("Failed to send email to %s", to)
        return False


def send_password_reset_email(email: str, token: str) -> bool:
    """Send a password reset email."""
    url = f"{settings.APP_URL}/reset-password/{token}"
    html = f"""
    <h2>Reset your password</h2>
    <p>Click the link below to choose a new Rate My Rez password.</p>
    <p><a href="{url}">Reset Password</a></p>
    <p>This link expires in {settings.RESET_TOKEN_TTL_MINUTES} minutes.
    If you didn't request this, you can ignore this email.</p>
    """
    return _send(email, "Reset your Rate My Rez password", html)
