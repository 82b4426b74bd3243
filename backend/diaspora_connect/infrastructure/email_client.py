"""Resend Email Client: transactional email delivery.

Invariants:
    - configured is False when no API key is set; send() then raises ServiceNotConfiguredError
    - Every delivery failure surfaces as EmailDeliveryError
    - send() returns the Resend message id
"""

import logging

import resend
from resend.exceptions import ResendError

from diaspora_connect.core.errors import EmailDeliveryError, ServiceNotConfiguredError

logger = logging.getLogger(__name__)


class ResendEmailClient:
    """Sends HTML email through the Resend API."""

    def __init__(self, api_key: str, sender: str):
        self.api_key = api_key
        self.sender = sender

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def send(self, *, to: str, subject: str, html: str) -> str:
        if not self.configured:
            raise ServiceNotConfiguredError("Resend", "resend_api_key")
        # The SDK reads its key from module state.
        resend.api_key = self.api_key
        params: resend.Emails.SendParams = {
            "from": self.sender,
            "to": [to],
            "subject": subject,
            "html": html,
        }
        try:
            result = resend.Emails.send(params)
        except ResendError as e:
            logger.error(f"Resend rejected email: {e}")
            raise EmailDeliveryError(str(e))
        except Exception as e:
            logger.error(f"Unexpected Resend error: {e}", exc_info=True)
            raise EmailDeliveryError(str(e))
        message_id = result.get("id") if isinstance(result, dict) else getattr(result, "id", None)
        if not message_id:
            raise EmailDeliveryError("Resend returned no message id")
        logger.info(f"Email sent: {message_id}")
        return message_id
