from enum import Enum


class PostStatus(str, Enum):
    DRAFT = "draft"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    REJECTED = "rejected"


class Role(str, Enum):
    ADMIN = "admin"
    AUTHOR = "author"


class TemplateMode(str, Enum):
    DEFAULT = "default"
    CUSTOM = "custom"


class ContentType(str, Enum):
    BLOG_POSTS = "Blog Posts"
    CASE_STUDIES = "Case Studies"
    USER_INTERVIEW = "User Interview"
    QUANTITATIVE_RESEARCH = "Quantitative Research"
    COMPETITORS_RESEARCH = "Competitors Research"


class ServiceCategory(str, Enum):
    META_GOOGLE_ADS = "Meta & Google Ads"
    FIRST_PARTY_DATA = "First Party Data"
    CRO = "CRO"
    HIGH_PERFORMING_CREATIVES = "High Performing Creatives"
    RETENTION_MARKETING = "Retention Marketing"
    OTHER = "Other"
