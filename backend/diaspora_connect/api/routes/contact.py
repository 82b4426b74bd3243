"""Contact Form: public submission endpoint."""

import logging

from fastapi import APIRouter, Depends, status

from diaspora_connect.api.dependencies import repository
from diaspora_connect.repositories.engagement import ContactRepository
from diaspora_connect.schemas.messaging import ContactRequest, SuccessResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/contact", tags=["contact"])


@router.post("", response_model=SuccessResponse, status_code=status.HTTP_200_OK)
def submit_contact(
    body: ContactRequest,
    contacts: ContactRepository = Depends(repository(ContactRepository)),
):
    """Store a contact-form message (fields arrive trimmed and validated)."""
    record = contacts.create(
        name=body.name,
        email=body.email,
        message=body.message,
        user_id=body.user_id,
    )
    logger.info("Contact form submitted", extra={"document_id": record["id"]})
    return {"success": True, "message": "Contact form submitted successfully"}
