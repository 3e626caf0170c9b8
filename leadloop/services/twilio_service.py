"""
Twilio Service - outbound SMS and TwiML call-control documents
"""
import logging
from typing import Optional
from twilio.rest import Client
from twilio.base.exceptions import TwilioRestException

from leadloop.core import config
from leadloop.core.utils import normalize_phone

logger = logging.getLogger(__name__)


class TwilioService:
    def __init__(self, account_sid: Optional[str] = None, auth_token: Optional[str] = None,
                 default_from_number: Optional[str] = None):
        self.account_sid = account_sid or config.TWILIO_ACCOUNT_SID
        self.auth_token = auth_token or config.TWILIO_AUTH_TOKEN
        self.default_from_number = default_from_number or config.TWILIO_FROM_NUMBER
        self.client = None

        if self.account_sid and self.auth_token:
            try:
                self.client = Client(self.account_sid, self.auth_token)
                logger.info("Twilio client initialized successfully")
            except Exception as e:
                logger.error(f"Failed to initialize Twilio client: {e}")

    def is_configured(self) -> bool:
        """Check if Twilio is properly configured"""
        return self.client is not None

    async def send_sms(
        self,
        to_phone: str,
        body: str,
        from_phone: Optional[str] = None,
    ) -> dict:
        """
        Send SMS via Twilio

        Args:
            to_phone: Recipient phone number
            body: Message content
            from_phone: Sender number; falls back to the system-wide number

        Returns:
            dict with success status, provider_message_id, and error if any
        """
        if not self.is_configured():
            logger.warning("Twilio not configured - SMS not sent")
            return {
                "success": False,
                "error": "Twilio not configured",
                "provider_message_id": None
            }

        sender = from_phone or self.default_from_number
        if not sender:
            logger.error("No from_phone provided and no TWILIO_FROM_NUMBER configured")
            return {
                "success": False,
                "provider_message_id": None,
                "error": "No sender configured"
            }

        try:
            to_phone = normalize_phone(to_phone)
            message = self.client.messages.create(
                body=body,
                to=to_phone,
                from_=sender,
            )

            logger.info(f"SMS sent successfully: {message.sid} to {to_phone}")
            return {
                "success": True,
                "provider_message_id": message.sid,
                "error": None
            }

        except TwilioRestException as e:
            logger.error(f"Twilio error sending SMS: {e.msg}")
            return {
                "success": False,
                "provider_message_id": None,
                "error": str(e.msg)
            }
        except Exception as e:
            logger.error(f"Error sending SMS: {e}")
            return {
                "success": False,
                "provider_message_id": None,
                "error": str(e)
            }


# ---------------------------------------------------------------------------
# TwiML
# ---------------------------------------------------------------------------

def _xml_escape(value: str) -> str:
    return (
        value.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )


def hangup_twiml() -> str:
    return '<?xml version="1.0" encoding="UTF-8"?>\n<Response><Hangup/></Response>'


def dial_twiml(forwarding_phone: str, action_url: str) -> str:
    """Forward the call; Twilio posts the dial outcome to action_url when it ends"""
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<Response>
    <Dial action="{_xml_escape(action_url)}" method="POST">{_xml_escape(forwarding_phone.strip())}</Dial>
</Response>"""


# Singleton instance
twilio_service = TwilioService()


def get_sms_service() -> TwilioService:
    return twilio_service
