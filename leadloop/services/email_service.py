"""
Email Service - owner notifications via Resend
"""
import logging
from typing import Optional

import resend

from leadloop.core import config

logger = logging.getLogger(__name__)


class EmailService:
    def __init__(self, api_key: Optional[str] = None, from_email: Optional[str] = None):
        self.api_key = api_key or config.RESEND_API_KEY
        self.from_email = from_email or config.RESEND_FROM_EMAIL
        if not self.api_key:
            logger.warning("RESEND_API_KEY is not set - email sending will be disabled")

    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def send_email(self, to_email: str, subject: str, html: str,
                         from_email: Optional[str] = None) -> dict:
        """Send a single HTML email. Returns dict with success, provider_message_id, error."""
        if not self.is_configured():
            return {"success": False, "provider_message_id": None, "error": "Resend not configured"}

        try:
            resend.api_key = self.api_key
            sent = resend.Emails.send({
                "from": from_email or self.from_email,
                "to": [to_email],
                "subject": subject,
                "html": html,
            })
            message_id = sent.get("id") if isinstance(sent, dict) else None
            logger.info(f"Email sent to {to_email}: {message_id}")
            return {"success": True, "provider_message_id": message_id, "error": None}
        except Exception as e:
            logger.error(f"Error sending email to {to_email}: {e}")
            return {"success": False, "provider_message_id": None, "error": str(e)}


# Singleton instance
email_service = EmailService()


def get_email_service() -> EmailService:
    return email_service
