"""User-facing account models.

`UserProfile` is the read-only projection the API returns after
authentication. `RegistrationData` and `ProfileUpdate` are validated client
side before they are sent.
"""

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator


class ImageFile(BaseModel):
    """A local image to upload as part of a multipart request."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    path: str = Field(min_length=1, validation_alias=AliasChoices("path", "uri"))
    content_type: str = Field(default="image/jpeg", validation_alias=AliasChoices("content_type", "type"))
    file_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("file_name", "fileName"))


class ProfileImage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    url: str


class UserProfile(BaseModel):
    """Profile of a marketplace user as returned by the API."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    email: str
    first_name: str = Field(default="", validation_alias=AliasChoices("firstName", "first_name"))
    last_name: str = Field(default="", validation_alias=AliasChoices("lastName", "last_name"))
    profile_image: Optional[ProfileImage] = Field(
        default=None, validation_alias=AliasChoices("profileImage", "profile_image")
    )
    is_email_verified: bool = Field(
        default=False, validation_alias=AliasChoices("isEmailVerified", "is_email_verified")
    )
    created_at: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("createdAt", "created_at")
    )

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


class RegistrationData(BaseModel):
    """Sign-up form submitted to ``POST /auth/signup``."""

    model_config = ConfigDict(str_strip_whitespace=True)

    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(min_length=1, repr=False)
    profile_image: Optional[ImageFile] = None

    @field_validator("email", mode="after")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class ProfileUpdate(BaseModel):
    """Partial profile update sent to ``PATCH /auth/profile``."""

    model_config = ConfigDict(str_strip_whitespace=True)

    first_name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    profile_image: Optional[ImageFile] = None

    def is_empty(self) -> bool:
        return self.first_name is None and self.last_name is None and self.profile_image is None
