"""Application Schemas: membership (individual/institutional) and volunteer forms.

Invariants:
    - Individual applications require fullName, mobileNumber, emailAddress, province
    - Institutional applications require the organisation and representative contacts
    - Every membership application accepts the declaration and is signed
    - Reviews only move to approved/rejected (withdrawn is volunteer-only)
"""

from pydantic import Field, field_validator, model_validator

from diaspora_connect.core.domain_types import (
    ApplicationStatus, MembershipApplicationType, VolunteerApplicationStatus,
)
from diaspora_connect.schemas.base import CamelModel, check_email

INDIVIDUAL_REQUIRED = ("full_name", "mobile_number", "email_address", "province")
INSTITUTIONAL_REQUIRED = (
    "organisation_name",
    "organisation_type",
    "representative_name",
    "representative_mobile",
    "representative_email",
)


class MembershipApplicationCreate(CamelModel):
    type: MembershipApplicationType

    # Individual
    full_name: str | None = Field(None, max_length=200)
    national_id_passport: str | None = None
    gender: str | None = None
    date_of_birth: str | None = None
    mobile_number: str | None = None
    email_address: str | None = None
    province: str | None = None
    district: str | None = None
    occupation: str | None = None
    participation_areas: list[str] = Field(default_factory=list)
    participation_other: str | None = None

    # Institutional
    organisation_name: str | None = Field(None, max_length=300)
    organisation_type: str | None = None
    organisation_type_other: str | None = None
    registration_status: str | None = None
    physical_address: str | None = None
    provinces_of_operation: list[str] = Field(default_factory=list)
    representative_name: str | None = None
    representative_position: str | None = None
    representative_mobile: str | None = None
    representative_email: str | None = None
    alternate_representative: str | None = None

    # Declaration
    declaration_accepted: bool = False
    signature_name: str | None = None
    signature_date: str | None = None

    @model_validator(mode="after")
    def check_required_fields(self) -> "MembershipApplicationCreate":
        required = (
            INDIVIDUAL_REQUIRED
            if self.type is MembershipApplicationType.INDIVIDUAL
            else INSTITUTIONAL_REQUIRED
        )
        missing = [
            type(self).model_fields[name].alias or name
            for name in required
            if not (getattr(self, name) or "").strip()
        ]
        if missing:
            raise ValueError(f"Missing required fields: {', '.join(missing)}")
        email_field = (
            "email_address"
            if self.type is MembershipApplicationType.INDIVIDUAL
            else "representative_email"
        )
        setattr(self, email_field, check_email(getattr(self, email_field)))
        if not self.declaration_accepted:
            raise ValueError("The declaration must be accepted")
        if not (self.signature_name or "").strip():
            raise ValueError("Signature is required")
        return self


class ApplicationReview(CamelModel):
    """Staff decision; approval may also set the membership number and allocated province."""
    status: ApplicationStatus
    notes: str | None = Field(None, max_length=5000)
    membership_number: str | None = Field(None, max_length=50)
    province_allocated: str | None = Field(None, max_length=200)

    @field_validator("membership_number", "province_allocated")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        return (v or "").strip() or None

    @model_validator(mode="after")
    def check_final_status(self) -> "ApplicationReview":
        if self.status is ApplicationStatus.PENDING:
            raise ValueError("Review status must be approved or rejected")
        return self


class VolunteerApplicationCreate(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    email: str
    phone: str = Field(min_length=1, max_length=50)
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    date_of_birth: str | None = None
    gender: str | None = None
    availability: str | None = None
    skills: list[str] = Field(default_factory=list)
    experience: str | None = Field(None, max_length=5000)
    motivation: str | None = Field(None, max_length=5000)
    references: str | None = Field(None, max_length=2000)

    @model_validator(mode="after")
    def check_contact(self) -> "VolunteerApplicationCreate":
        self.email = check_email(self.email)
        return self


class VolunteerStatusUpdate(CamelModel):
    status: VolunteerApplicationStatus
    notes: str | None = Field(None, max_length=5000)
