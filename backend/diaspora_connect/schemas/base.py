"""Shared schema base: camelCase on the wire, snake_case in Python."""

from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self, exclude_unset: bool = False) -> dict:
        """Dump with camelCase keys and plain enum values, the shape stored in Firestore."""
        data = self.model_dump(by_alias=True, exclude_unset=exclude_unset)
        return {
            key: value.value if isinstance(value, Enum) else value
            for key, value in data.items()
        }


def strip_required(value: str | None, message: str) -> str:
    """Trim a required text field; raise ValueError(message) when blank."""
    value = (value or "").strip()
    if not value:
        raise ValueError(message)
    return value


def check_email(value: str | None, required_message: str = "Email is required") -> str:
    value = strip_required(value, required_message)
    if "@" not in value:
        raise ValueError("Invalid email address")
    return value
