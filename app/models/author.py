import uuid

from sqlalchemy import JSON, Boolean, Column, DateTime, String, Text

from app.db.postgres.base import Base
from app.models.enums import Role
from app.utils import utcnow


class Author(Base):
    __tablename__ = "authors"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    username = Column(String(50), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(100), nullable=False)
    designation = Column(String(100), nullable=False, default="")
    bio = Column(Text, nullable=False, default="")
    avatar_url = Column(String(512), nullable=True)
    role = Column(String(16), nullable=False, default=Role.AUTHOR.value)
    active = Column(Boolean, nullable=False, default=True)
    social = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
