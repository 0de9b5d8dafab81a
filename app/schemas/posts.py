import datetime
from typing import List, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.models.enums import (
    ContentType,
    PostStatus,
    ServiceCategory,
    TemplateMode,
)
from app.utils import dedupe

SLUG_PATTERN = r"^[a-z0-9-]+$"


def _require_http_url(value: str) -> str:
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("must be a valid http(s) URL")
    return value


class RequestModel(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


# --- Requests ---


class Banner(RequestModel):
    url: str
    alt: str = Field(min_length=5, max_length=125)

    @field_validator("url")
    @classmethod
    def validate_url(cls, v):
        return _require_http_url(v)


class PullQuote(RequestModel):
    text: str = Field(min_length=1)
    citation: Optional[str] = None


class DefaultFields(RequestModel):
    body: str = ""
    pullQuotes: List[PullQuote] = Field(default_factory=list)


class CustomFields(RequestModel):
    # Raw strings; size ceilings are enforced by the sanitizer before cleaning
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=False)

    html: str = ""
    css: str = ""
    js: str = ""


class Template(RequestModel):
    mode: TemplateMode
    defaultFields: Optional[DefaultFields] = None
    customFields: Optional[CustomFields] = None

    @model_validator(mode="after")
    def fields_match_mode(self):
        if self.mode is TemplateMode.DEFAULT and self.defaultFields is None:
            raise ValueError("defaultFields is required when mode is 'default'")
        if self.mode is TemplateMode.CUSTOM and self.customFields is None:
            raise ValueError("customFields is required when mode is 'custom'")
        return self


class SeoFields(RequestModel):
    title: Optional[str] = Field(default=None, max_length=60)
    description: Optional[str] = Field(default=None, max_length=160)
    canonical: Optional[str] = None


class CreatePostRequest(RequestModel):
    title: str = Field(min_length=5, max_length=200)
    slug: Optional[str] = Field(default=None, pattern=SLUG_PATTERN, max_length=255)
    excerpt: str = Field(min_length=10, max_length=300)
    banner: Banner
    contentType: ContentType
    serviceCategory: ServiceCategory
    template: Template
    tags: List[str] = Field(default_factory=list)
    relatedIds: List[str] = Field(default_factory=list)
    seo: Optional[SeoFields] = None

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v):
        tags = [tag.strip() for tag in v]
        for tag in tags:
            if not 2 <= len(tag) <= 30:
                raise ValueError("Each tag must be 2-30 characters")
        return dedupe(tags)

    @field_validator("relatedIds")
    @classmethod
    def validate_related_ids(cls, v):
        return dedupe(item for item in v if item)


class EditPostRequest(CreatePostRequest):
    pass


class RejectPostRequest(RequestModel):
    reason: Optional[str] = Field(default=None, max_length=500)


# --- Responses ---


class SocialLinks(BaseModel):
    instagram: Optional[str] = None
    youtube: Optional[str] = None
    x: Optional[str] = None
    facebook: Optional[str] = None
    linkedin: Optional[str] = None
    website: Optional[str] = None
    email: Optional[str] = None


class AuthorSummary(BaseModel):
    id: str
    fullName: str
    avatarUrl: Optional[str] = None
    bio: Optional[str] = None
    social: SocialLinks = Field(default_factory=SocialLinks)


class PostOut(BaseModel):
    id: str
    slug: str
    title: str
    excerpt: str
    banner: dict
    contentType: str
    serviceCategory: str
    status: PostStatus
    rejectionReason: Optional[str] = None
    publishedAt: Optional[datetime.datetime] = None
    views: int = 0
    authorId: str
    template: dict
    tags: List[str] = Field(default_factory=list)
    relatedIds: List[str] = Field(default_factory=list)
    seo: dict
    createdAt: datetime.datetime
    updatedAt: datetime.datetime
    author: Optional[AuthorSummary] = None


class RelatedAuthor(BaseModel):
    fullName: str
    avatarUrl: Optional[str] = None


class RelatedPost(BaseModel):
    id: str
    title: str
    slug: str
    excerpt: str
    banner: dict
    contentType: str
    serviceCategory: str
    publishedAt: Optional[datetime.datetime] = None
    author: Optional[RelatedAuthor] = None


class Pagination(BaseModel):
    offset: int
    limit: int
    total: int
    hasMore: bool


class PostList(BaseModel):
    posts: List[PostOut]
    pagination: Pagination


class PostDetail(BaseModel):
    post: PostOut
    relatedPosts: List[RelatedPost] = Field(default_factory=list)


class ViewCount(BaseModel):
    views: int
