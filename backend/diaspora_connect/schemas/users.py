"""User Schemas: profile, profile updates and role changes."""

from datetime import datetime

from pydantic import Field, field_validator

from diaspora_connect.core.domain_types import UserRole
from diaspora_connect.core.referrals import normalize_referral_code
from diaspora_connect.schemas.base import CamelModel


class ProfileCreate(CamelModel):
    """Signup profile; referral code is optional and case-insensitive."""
    name: str | None = Field(None, max_length=200)
    referral_code: str | None = None

    @field_validator("referral_code")
    @classmethod
    def normalize_code(cls, v: str | None) -> str | None:
        return normalize_referral_code(v)


class ProfileUpdate(CamelModel):
    """Only name and photo are user-editable."""
    name: str | None = Field(None, min_length=1, max_length=200)
    photo_url: str | None = Field(None, alias="photoURL", max_length=2000)


class UserProfile(CamelModel):
    uid: str
    email: str | None = None
    name: str = ""
    membership_tier: str = "free"
    role: str = "supporter"
    email_verified: bool = False
    photo_url: str | None = Field(None, alias="photoURL")
    stripe_customer_id: str | None = None
    referral_code: str | None = None
    referred_by: str | None = None
    created_at: datetime | None = None


class RoleUpdate(CamelModel):
    role: UserRole


class ReferralSummary(CamelModel):
    referral_code: str | None
    referral_link: str | None
    referrals: list[dict]
