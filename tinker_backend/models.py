from __future__ import annotations

# tinker_backend/models.py
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_USERNAME = "User"


class UserProfile(BaseModel):
    """Profile fields handed over by the identity provider. All optional."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True, extra="ignore")

    username: str | None = None
    first_name: str | None = Field(None, alias="firstName")
    email: str | None = None
    image_url: str | None = Field(None, alias="imageUrl")

    @classmethod
    def coerce(cls, data: Any) -> "UserProfile":
        """Accept a UserProfile, a mapping or an identity object exposing attributes.
        Raises pydantic.ValidationError (a ValueError) for malformed fields."""
        if isinstance(data, cls):
            return data
        if data is None:
            return cls()
        if isinstance(data, Mapping):
            return cls.model_validate(dict(data))
        return cls.model_validate(data, from_attributes=True)

    def display_name(self) -> str:
        return self.username or self.first_name or DEFAULT_USERNAME

    def email_or_blank(self) -> str:
        return self.email or ""

    def avatar_or_blank(self) -> str:
        return self.image_url or ""
