"""Transactional Email: welcome email sent after signup.

Invariants:
    - Always 200 once the request validates; delivery outcome is in `success`
    - Sending does not need Firestore: without it the attempt is simply not logged
"""

from fastapi import APIRouter, Depends

from diaspora_connect.api.dependencies import get_email_client, optional_repository
from diaspora_connect.config import Settings, get_settings
from diaspora_connect.infrastructure.email_client import ResendEmailClient
from diaspora_connect.repositories.engagement import EmailLogRepository
from diaspora_connect.schemas.messaging import EmailResult, WelcomeEmailRequest
from diaspora_connect.services.email_service import EmailService

router = APIRouter(prefix="/api/email", tags=["email"])


@router.post("/welcome", response_model=EmailResult, response_model_exclude_none=True)
def send_welcome_email(
    body: WelcomeEmailRequest,
    client: ResendEmailClient = Depends(get_email_client),
    logs: EmailLogRepository | None = Depends(optional_repository(EmailLogRepository)),
    settings: Settings = Depends(get_settings),
):
    service = EmailService(client, logs, settings)
    return service.send_welcome(to=body.email, name=body.name, user_id=body.user_id)
