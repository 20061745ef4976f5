"""Outbound mail via the Resend HTTP API."""

import html
import logging

import httpx

from src.config import get_settings

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"


class MailService:
    """Service for sending transactional e-mail."""

    def __init__(self) -> None:
        self.settings = get_settings()
        self.timeout = 10.0

    @property
    def is_configured(self) -> bool:
        return bool(self.settings.resend_api_key)

    def send(self, to: str, subject: str, html_body: str) -> bool:
        """Send an e-mail.

        Returns True if the provider accepted the message. Failures are logged,
        never raised.
        """
        if not self.is_configured:
            logger.warning(f"RESEND_API_KEY not configured, not sending '{subject}' to {to}")
            return False

        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(
                    RESEND_API_URL,
                    headers={"Authorization": f"Bearer {self.settings.resend_api_key}"},
                    json={
                        "from": self.settings.mail_from,
                        "to": [to],
                        "subject": subject,
                        "html": html_body,
                    },
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Failed to send '{subject}' to {to}: {e}")
            return False

        logger.info(f"Sent '{subject}' to {to}")
        return True


def render_verification_email(link: str) -> str:
    """Render the account activation message."""
    safe_link = html.escape(link, quote=True)
    return f"""
      <div style="font-family:Arial,sans-serif;line-height:1.5">
        <h2>Activate your account</h2>
        <p>Click the link below to activate your account:</p>
        <p><a href="{safe_link}">{safe_link}</a></p>
        <p>The link expires in one hour. If you did not sign up, ignore this message.</p>
      </div>
    """


def build_verification_link(raw_token: str) -> str:
    settings = get_settings()
    return f"{settings.frontend_url.rstrip('/')}/verify?token={raw_token}"


def dispatch_verification_email(email: str, raw_token: str) -> None:
    """Queue the verification e-mail without blocking the caller.

    A broker outage is logged and swallowed; registration must not fail
    because the mail could not be queued.
    """
    from src.tasks.mail import send_verification_email

    try:
        send_verification_email.delay(email, build_verification_link(raw_token))
    except Exception as e:
        logger.error(f"Could not queue verification e-mail for {email}: {e}")
