import uuid

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text

from app.db.postgres.base import Base
from app.models.enums import PostStatus
from app.utils import utcnow


class Post(Base):
    __tablename__ = "posts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    slug = Column(String(255), unique=True, index=True, nullable=False)
    title = Column(String(200), nullable=False)
    excerpt = Column(Text, nullable=False)
    banner = Column(JSON, nullable=False)
    content_type = Column(String(64), nullable=False, index=True)
    service_category = Column(String(64), nullable=False, index=True)
    # {"mode": ..., "defaultFields": {...}} or {"mode": ..., "customFields": {...}}
    template = Column(JSON, nullable=False)
    # Copy of the default-mode body, matched by text search
    search_body = Column(Text, nullable=False, default="")
    status = Column(
        String(32), nullable=False, index=True, default=PostStatus.DRAFT.value
    )
    rejection_reason = Column(Text, nullable=True)
    published_at = Column(DateTime(timezone=True), nullable=True)
    views = Column(Integer, nullable=False, default=0, server_default="0")
    author_id = Column(String(36), ForeignKey("authors.id"), nullable=False, index=True)
    seo = Column(JSON, nullable=False)
    tags = Column(JSON, nullable=False, default=list)
    related_ids = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
