"""Content Schemas: petitions, news, products and member resources.

Update models are fully optional; routes persist only the fields a client sent
(`to_document(exclude_unset=True)`).
"""

from datetime import datetime, timezone

from pydantic import Field, field_validator

from diaspora_connect.core.domain_types import MembershipTier, NewsCategory
from diaspora_connect.schemas.base import CamelModel, check_email, strip_required


def as_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# --- Petitions ---------------------------------------------------------------

class PetitionCreate(CamelModel):
    title: str = Field(min_length=1, max_length=300)
    description: str = Field(min_length=1, max_length=20_000)
    goal: int = Field(gt=0)
    image_url: str | None = None
    published: bool = False
    active: bool = True
    expires_at: datetime | None = None

    @field_validator("expires_at")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        return as_utc(v)


class PetitionUpdate(CamelModel):
    title: str | None = Field(None, min_length=1, max_length=300)
    description: str | None = Field(None, min_length=1, max_length=20_000)
    goal: int | None = Field(None, gt=0)
    image_url: str | None = None
    published: bool | None = None
    active: bool | None = None
    expires_at: datetime | None = None

    @field_validator("expires_at")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        return as_utc(v)


class SignPetitionRequest(CamelModel):
    """Guests must give name and email; signed-in users fall back to their profile."""
    name: str | None = Field(None, max_length=200)
    email: str | None = None
    anonymous: bool = False

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str | None) -> str | None:
        return check_email(v) if v else None


# --- News --------------------------------------------------------------------

class NewsCreate(CamelModel):
    title: str = Field(min_length=1, max_length=300)
    content: str = Field(min_length=1)
    summary: str | None = Field(None, max_length=1000)
    category: NewsCategory = NewsCategory.GENERAL
    image_url: str | None = None
    published: bool = False


class NewsUpdate(CamelModel):
    title: str | None = Field(None, min_length=1, max_length=300)
    content: str | None = Field(None, min_length=1)
    summary: str | None = Field(None, max_length=1000)
    category: NewsCategory | None = None
    image_url: str | None = None
    published: bool | None = None


# --- Products ----------------------------------------------------------------

class ProductCreate(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    description: str = ""
    price: float = Field(gt=0)
    category: str = "merchandise"
    image_url: str | None = None
    stock: int = Field(0, ge=0)
    low_stock_threshold: int = Field(5, ge=0)
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return strip_required(v, "Product name is required")


class ProductUpdate(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    price: float | None = Field(None, gt=0)
    category: str | None = None
    image_url: str | None = None
    stock: int | None = Field(None, ge=0)
    low_stock_threshold: int | None = Field(None, ge=0)
    is_active: bool | None = None


# --- Resources ---------------------------------------------------------------

class ResourceCreate(CamelModel):
    title: str = Field(min_length=1, max_length=300)
    description: str = ""
    file_url: str = Field(min_length=1)
    category: str = "general"
    required_tier: MembershipTier = MembershipTier.FREE
