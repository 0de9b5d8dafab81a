import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.models.enums import Role
from app.schemas.posts import RequestModel, SocialLinks, _require_http_url

USERNAME_PATTERN = r"^[a-zA-Z0-9_]+$"


def _optional_url(value):
    if value in (None, ""):
        return None
    return _require_http_url(value)


class SocialLinksIn(RequestModel):
    instagram: Optional[str] = None
    youtube: Optional[str] = None
    x: Optional[str] = None
    facebook: Optional[str] = None
    linkedin: Optional[str] = None
    website: Optional[str] = None
    email: Optional[EmailStr] = None

    @field_validator("instagram", "youtube", "x", "facebook", "linkedin", "website")
    @classmethod
    def validate_urls(cls, v):
        return _optional_url(v)


class AuthorFields(RequestModel):
    username: str = Field(min_length=3, max_length=50, pattern=USERNAME_PATTERN)
    fullName: str = Field(min_length=2, max_length=100)
    designation: str = Field(default="", max_length=100)
    bio: str = Field(default="", max_length=500)
    avatarUrl: Optional[str] = None
    role: Role
    social: SocialLinksIn = Field(default_factory=SocialLinksIn)

    @field_validator("avatarUrl")
    @classmethod
    def validate_avatar(cls, v):
        return _optional_url(v)


class CreateAuthorRequest(AuthorFields):
    password: str = Field(min_length=6)


class UpdateAuthorRequest(AuthorFields):
    password: Optional[str] = Field(default=None, min_length=6)
    active: Optional[bool] = None


class AuthorOut(BaseModel):
    id: str
    username: str
    fullName: str
    designation: str = ""
    bio: str = ""
    avatarUrl: Optional[str] = None
    role: Role
    active: bool
    social: SocialLinks = Field(default_factory=SocialLinks)
    createdAt: datetime.datetime
    updatedAt: datetime.datetime


class CurrentUser(BaseModel):
    id: str
    username: str
    fullName: str
    role: Role
