"""Email Service: welcome and staff-authored emails with delivery logging.

Invariants:
    - Every send attempt is written to emailLogs (sent or failed, with Resend id or error)
    - Welcome emails never fail signup: the result is always a success flag + message
    - Custom emails raise EmailDeliveryError on failure (after logging the attempt)
    - A failed log write is logged and never masks the delivery outcome
    - With no log repository (Firestore unconfigured) sends proceed unlogged
"""

import logging
from datetime import datetime, timezone

from diaspora_connect.config import Settings
from diaspora_connect.core.domain_types import EmailStatus, EmailType
from diaspora_connect.core.email_templates import (
    build_custom_email_html, build_welcome_email_html,
)
from diaspora_connect.core.errors import DatastoreError, EmailDeliveryError
from diaspora_connect.infrastructure.email_client import ResendEmailClient
from diaspora_connect.repositories.engagement import EmailLogRepository

logger = logging.getLogger(__name__)

NOT_CONFIGURED = "RESEND_API_KEY not configured"


class EmailService:

    def __init__(
        self, client: ResendEmailClient, logs: EmailLogRepository | None, settings: Settings,
    ):
        self.client = client
        self.logs = logs
        self.settings = settings

    def send_welcome(self, *, to: str, name: str, user_id: str | None = None) -> dict:
        """Send the signup welcome email; returns {success, message[, emailId]}."""
        subject = f"Welcome to {self.settings.app_name}!"
        if not self.client.configured:
            logger.warning("RESEND_API_KEY is not configured. Skipping welcome email.")
            self._log(to, name, subject, EmailType.WELCOME, user_id, error=NOT_CONFIGURED)
            return {"success": True, "message": "Email service not configured, skipping."}

        html = build_welcome_email_html(
            name=name,
            app_name=self.settings.app_name,
            app_url=self.settings.base_url,
            year=datetime.now(timezone.utc).year,
        )
        try:
            email_id = self.client.send(to=to, subject=subject, html=html)
        except EmailDeliveryError as e:
            logger.error(
                f"Failed to send welcome email: {e.message}",
                extra={"user_id": user_id, "recipient": to},
            )
            self._log(to, name, subject, EmailType.WELCOME, user_id, error=e.message)
            return {"success": False, "message": "Email could not be sent, but signup succeeded."}

        self._log(to, name, subject, EmailType.WELCOME, user_id, resend_id=email_id)
        return {
            "success": True,
            "message": "Welcome email sent successfully",
            "emailId": email_id,
        }

    def send_custom(
        self,
        *,
        to: str,
        subject: str,
        body: str,
        name: str | None = None,
        user_id: str | None = None,
    ) -> str:
        html = build_custom_email_html(
            name=name or "",
            subject=subject,
            body=body,
            app_name=self.settings.app_name,
            app_url=self.settings.base_url,
            year=datetime.now(timezone.utc).year,
        )
        try:
            email_id = self.client.send(to=to, subject=subject, html=html)
        except EmailDeliveryError as e:
            logger.error(
                f"Failed to send custom email: {e.message}",
                extra={"user_id": user_id, "recipient": to},
            )
            self._log(to, name, subject, EmailType.CUSTOM, user_id, error=e.message)
            raise
        self._log(to, name, subject, EmailType.CUSTOM, user_id, resend_id=email_id)
        return email_id

    def _log(
        self,
        to: str,
        name: str | None,
        subject: str,
        email_type: EmailType,
        user_id: str | None,
        resend_id: str | None = None,
        error: str | None = None,
    ) -> None:
        if self.logs is None:
            return
        try:
            self.logs.create(
                to=to,
                name=name,
                subject=subject,
                email_type=email_type,
                status=EmailStatus.FAILED if error else EmailStatus.SENT,
                user_id=user_id,
                resend_id=resend_id,
                error=error,
            )
        except DatastoreError as e:
            logger.error(f"Failed to log email attempt: {e.message}", extra={"email_type": email_type.value})
