"""Celery tasks for outbound e-mail."""

import logging

from src.celery_app import app as celery_app
from src.services.mail import MailService, render_verification_email

logger = logging.getLogger(__name__)

VERIFICATION_SUBJECT = "Activate your account"


@celery_app.task(bind=True, max_retries=3, default_retry_delay=30)
def send_verification_email(self, email: str, link: str) -> dict:
    """Send the account activation link.

    Args:
        email: Recipient address
        link: Verification URL containing the raw one-time token

    Returns:
        dict with the delivery result
    """
    mail = MailService()
    if not mail.is_configured:
        # Nothing to retry until an API key is set
        logger.warning(f"Mail is not configured, dropping verification e-mail to {email}")
        return {"success": False, "email": email}

    sent = mail.send(email, VERIFICATION_SUBJECT, render_verification_email(link))
    if not sent:
        if self.request.retries < self.max_retries:
            logger.info(f"Retrying verification e-mail to {email}")
            raise self.retry()
        logger.warning(f"Verification e-mail to {email} was not delivered")
    return {"success": sent, "email": email}
