"""Site Content Schemas: banners, leaders, Twitter/X embeds and newsletter signups."""

from typing import Literal

from pydantic import Field, field_validator

from diaspora_connect.schemas.base import CamelModel, check_email, strip_required

TWEET_URL_PREFIXES = ("https://twitter.com/", "https://x.com/")
IMAGE_REQUIRED = "Please upload an image or provide an image URL"
NAME_AND_TITLE_REQUIRED = "Name and title are required"


def check_tweet_url(value: str | None) -> str:
    value = strip_required(value, "Tweet URL is required")
    if not value.startswith(TWEET_URL_PREFIXES):
        raise ValueError(
            "Please enter a valid Twitter/X URL (https://twitter.com/... or https://x.com/...)"
        )
    return value


def _trimmed(value: str | None) -> str | None:
    return value.strip() if value is not None else None


# --- Banners -----------------------------------------------------------------

class BannerCreate(CamelModel):
    image_url: str | None = Field(None, max_length=2000, validate_default=True)
    title: str = Field("", max_length=300)
    is_active: bool = True
    order: int | None = Field(None, ge=0)

    @field_validator("image_url")
    @classmethod
    def require_image(cls, v: str | None) -> str:
        return strip_required(v, IMAGE_REQUIRED)

    @field_validator("title")
    @classmethod
    def trim_title(cls, v: str) -> str:
        return v.strip()


class BannerUpdate(CamelModel):
    image_url: str | None = Field(None, max_length=2000)
    title: str | None = Field(None, max_length=300)
    is_active: bool | None = None
    order: int | None = Field(None, ge=0)

    @field_validator("image_url")
    @classmethod
    def keep_image(cls, v: str | None) -> str | None:
        return strip_required(v, IMAGE_REQUIRED) if v is not None else None

    @field_validator("title")
    @classmethod
    def trim_title(cls, v: str | None) -> str | None:
        return _trimmed(v)


# --- Leaders -----------------------------------------------------------------

class LeaderCreate(CamelModel):
    name: str | None = Field(None, max_length=200, validate_default=True)
    title: str | None = Field(None, max_length=200, validate_default=True)
    bio: str = Field("", max_length=5000)
    x_handle: str = Field("", max_length=100)
    image_url: str | None = Field(None, max_length=2000)
    is_active: bool = True
    order: int | None = Field(None, ge=0)

    @field_validator("name", "title")
    @classmethod
    def require_text(cls, v: str | None) -> str:
        return strip_required(v, NAME_AND_TITLE_REQUIRED)

    @field_validator("bio", "x_handle")
    @classmethod
    def trim(cls, v: str) -> str:
        return v.strip()


class LeaderUpdate(CamelModel):
    name: str | None = Field(None, max_length=200)
    title: str | None = Field(None, max_length=200)
    bio: str | None = Field(None, max_length=5000)
    x_handle: str | None = Field(None, max_length=100)
    image_url: str | None = Field(None, max_length=2000)
    is_active: bool | None = None
    order: int | None = Field(None, ge=0)

    @field_validator("name", "title")
    @classmethod
    def keep_text(cls, v: str | None) -> str | None:
        return strip_required(v, NAME_AND_TITLE_REQUIRED) if v is not None else None

    @field_validator("bio", "x_handle")
    @classmethod
    def trim(cls, v: str | None) -> str | None:
        return _trimmed(v)


class MoveRequest(CamelModel):
    direction: Literal["up", "down"]


# --- Twitter/X embeds --------------------------------------------------------

class TwitterEmbedCreate(CamelModel):
    tweet_url: str | None = Field(None, max_length=500, validate_default=True)
    label: str = Field("", max_length=200)
    is_active: bool = True

    @field_validator("tweet_url")
    @classmethod
    def validate_url(cls, v: str | None) -> str:
        return check_tweet_url(v)

    @field_validator("label")
    @classmethod
    def trim_label(cls, v: str) -> str:
        return v.strip()


class TwitterEmbedUpdate(CamelModel):
    tweet_url: str | None = Field(None, max_length=500)
    label: str | None = Field(None, max_length=200)
    is_active: bool | None = None

    @field_validator("tweet_url")
    @classmethod
    def validate_url(cls, v: str | None) -> str | None:
        return check_tweet_url(v) if v is not None else None

    @field_validator("label")
    @classmethod
    def trim_label(cls, v: str | None) -> str | None:
        return _trimmed(v)


# --- Newsletter --------------------------------------------------------------

class NewsletterSubscribe(CamelModel):
    email: str | None = Field(None, max_length=320, validate_default=True)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str | None) -> str:
        return check_email(v, "Please enter your email address")
