from typing import Optional

from fastapi import Depends, HTTPException
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_403_FORBIDDEN

from app.db.postgres.base import get_db
from app.errors import AuthenticationError, AuthorizationError
from app.models.enums import Role
from app.repos.authors_repo import SqlAuthorsRepo
from app.repos.posts_repo import SqlPostsRepo
from app.security import decode_access_token, get_settings, get_token
from app.services.authors_service import AuthorsService
from app.services.post_lifecycle import Actor
from app.services.posts_service import PostsService
from app.settings import Settings


def get_posts_repo(db=Depends(get_db)):
    return SqlPostsRepo(db)


def get_authors_repo(db=Depends(get_db)):
    return SqlAuthorsRepo(db)


def get_posts_service(
    repo=Depends(get_posts_repo),
    authors_repo=Depends(get_authors_repo),
):
    return PostsService(repo=repo, authors_repo=authors_repo)


def get_authors_service(
    repo=Depends(get_authors_repo),
    posts_repo=Depends(get_posts_repo),
):
    return AuthorsService(repo=repo, posts_repo=posts_repo)


def get_optional_actor(
    token: Optional[str] = Depends(get_token),
    authors_repo=Depends(get_authors_repo),
    current_settings: Settings = Depends(get_settings),
) -> Optional[Actor]:
    """Resolve the caller, or None for anonymous and invalid credentials."""
    if not token:
        return None
    author_id = decode_access_token(token, current_settings)
    if not author_id:
        return None
    author = authors_repo.get(author_id)
    if not author or not author.active:
        return None
    return Actor(id=author.id, role=Role(author.role))


def get_current_actor(actor: Optional[Actor] = Depends(get_optional_actor)) -> Actor:
    if actor is None:
        error = AuthenticationError("Invalid or missing access token")
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail=error.to_dict())
    return actor


def require_admin(actor: Actor = Depends(get_current_actor)) -> Actor:
    if not actor.is_admin:
        error = AuthorizationError("Admin access required")
        raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail=error.to_dict())
    return actor
