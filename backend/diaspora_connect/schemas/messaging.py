"""Messaging Schemas: contact form, transactional email and chat.

Invariants:
    - Contact fields are trimmed; blank name/email/message rejected
    - Chat history is accepted as loose JSON; malformed turns are dropped later
      (core/chat_messages.py), never rejected here
"""

from typing import Any

from pydantic import Field, field_validator

from diaspora_connect.schemas.base import CamelModel, check_email, strip_required


class ContactRequest(CamelModel):
    name: str | None = Field(None, validate_default=True)
    email: str | None = Field(None, validate_default=True)
    message: str | None = Field(None, max_length=10_000, validate_default=True)
    user_id: str | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str:
        return strip_required(v, "Name is required")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str | None) -> str:
        return check_email(v)

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str | None) -> str:
        return strip_required(v, "Message is required")


class SuccessResponse(CamelModel):
    success: bool
    message: str


class WelcomeEmailRequest(CamelModel):
    email: str | None = Field(None, validate_default=True)
    name: str | None = Field(None, validate_default=True)
    user_id: str | None = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str | None) -> str:
        return check_email(v)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str:
        return strip_required(v, "Name is required")


class EmailResult(CamelModel):
    success: bool
    message: str
    email_id: str | None = None


class CustomEmailRequest(CamelModel):
    """Admin-composed email to one recipient."""
    to: str
    name: str | None = None
    subject: str = Field(min_length=1, max_length=200)
    body: str = Field(min_length=1, max_length=20_000)
    user_id: str | None = None

    @field_validator("to")
    @classmethod
    def validate_to(cls, v: str) -> str:
        return check_email(v, "Recipient is required")


class ChatRequest(CamelModel):
    message: str | None = None
    conversation_history: list[Any] = Field(default_factory=list)


class ChatResponse(CamelModel):
    success: bool
    response: str
