import logging
from typing import List

from app.errors import ConflictError, NotFoundError
from app.models.author import Author
from app.models.enums import Role
from app.schemas.authors import (
    AuthorOut,
    CreateAuthorRequest,
    CurrentUser,
    UpdateAuthorRequest,
)
from app.security import hash_password
from app.services.post_lifecycle import Actor
from app.utils import utcnow

logger = logging.getLogger(__name__)

SOCIAL_KEYS = ("instagram", "youtube", "x", "facebook", "linkedin", "website", "email")


class AuthorsService:
    """Admin-side management of authors. Callers are already checked as admins."""

    def __init__(self, repo, posts_repo):
        self.repo = repo
        self.posts_repo = posts_repo

    def list_authors(self) -> List[AuthorOut]:
        return [to_author_out(a) for a in self.repo.list_all()]

    def get_current_user(self, actor: Actor) -> CurrentUser:
        author = self._get(actor.id)
        return CurrentUser(
            id=author.id,
            username=author.username,
            fullName=author.full_name,
            role=author.role,
        )

    def create_author(self, payload: CreateAuthorRequest) -> AuthorOut:
        if self.repo.get_by_username(payload.username):
            raise ConflictError("Username already exists", details={"field": "username"})

        now = utcnow()
        author = Author(
            username=payload.username,
            password_hash=hash_password(payload.password),
            full_name=payload.fullName,
            designation=payload.designation,
            bio=payload.bio,
            avatar_url=payload.avatarUrl,
            role=payload.role.value,
            active=True,
            social=_social(payload),
            created_at=now,
            updated_at=now,
        )
        author = self.repo.add(author)
        logger.info(f"Author {author.id} ({author.username}) created with role {author.role}")
        return to_author_out(author)

    def update_author(self, author_id: str, payload: UpdateAuthorRequest) -> AuthorOut:
        author = self._get(author_id)

        existing = self.repo.get_by_username(payload.username)
        if existing and existing.id != author.id:
            raise ConflictError("Username already exists", details={"field": "username"})

        active = author.active if payload.active is None else payload.active
        loses_admin = author.role == Role.ADMIN.value and author.active and (
            payload.role is not Role.ADMIN or not active
        )
        if loses_admin and self.repo.count_active_admins() <= 1:
            raise ConflictError("Cannot demote or deactivate the last active admin")

        author.username = payload.username
        author.full_name = payload.fullName
        author.designation = payload.designation
        author.bio = payload.bio
        author.avatar_url = payload.avatarUrl
        author.role = payload.role.value
        author.social = _social(payload)
        author.active = active
        if payload.password:
            author.password_hash = hash_password(payload.password)
        author.updated_at = utcnow()

        author = self.repo.save(author)
        logger.info(f"Author {author.id} updated")
        return to_author_out(author)

    def delete_author(self, author_id: str) -> None:
        author = self._get(author_id)

        if (
            author.role == Role.ADMIN.value
            and author.active
            and self.repo.count_active_admins() <= 1
        ):
            raise ConflictError("Cannot delete the last active admin")

        post_count = self.posts_repo.count_by_author(author.id)
        if post_count > 0:
            raise ConflictError(
                "Cannot delete author with existing posts; deactivate instead",
                details={"postCount": post_count},
            )

        self.repo.delete(author)
        logger.info(f"Author {author_id} deleted")

    def _get(self, author_id: str) -> Author:
        author = self.repo.get(author_id)
        if not author:
            raise NotFoundError("Author")
        return author


def _social(payload) -> dict:
    social = payload.social.model_dump(mode="json")
    return {key: social.get(key) or None for key in SOCIAL_KEYS}


def to_author_out(author: Author) -> AuthorOut:
    return AuthorOut(
        id=author.id,
        username=author.username,
        fullName=author.full_name,
        designation=author.designation or "",
        bio=author.bio or "",
        avatarUrl=author.avatar_url,
        role=author.role,
        active=author.active,
        social=author.social or {},
        createdAt=author.created_at,
        updatedAt=author.updated_at,
    )
