import logging
from typing import List

from fastapi import APIRouter, Depends

from app import dependencies as deps
from app.routers.common import translate_errors
from app.schemas.authors import (
    AuthorOut,
    CreateAuthorRequest,
    CurrentUser,
    UpdateAuthorRequest,
)
from app.services.authors_service import AuthorsService
from app.services.post_lifecycle import Actor

logger = logging.getLogger(__name__)

router = APIRouter(tags=["authors"])


@router.get("/auth/me", response_model=CurrentUser)
def get_me(
    actor: Actor = Depends(deps.get_current_actor),
    service: AuthorsService = Depends(deps.get_authors_service),
):
    with translate_errors("retrieve current user"):
        return service.get_current_user(actor)


@router.get(
    "/authors",
    response_model=List[AuthorOut],
    dependencies=[Depends(deps.require_admin)],
)
def list_authors(service: AuthorsService = Depends(deps.get_authors_service)):
    with translate_errors("retrieve authors"):
        return service.list_authors()


@router.post(
    "/authors",
    response_model=AuthorOut,
    status_code=201,
    dependencies=[Depends(deps.require_admin)],
)
def create_author(
    payload: CreateAuthorRequest,
    service: AuthorsService = Depends(deps.get_authors_service),
):
    with translate_errors("create author"):
        return service.create_author(payload)


@router.put(
    "/authors/{author_id}",
    response_model=AuthorOut,
    dependencies=[Depends(deps.require_admin)],
)
def update_author(
    author_id: str,
    payload: UpdateAuthorRequest,
    service: AuthorsService = Depends(deps.get_authors_service),
):
    with translate_errors("update author"):
        return service.update_author(author_id, payload)


@router.delete("/authors/{author_id}", dependencies=[Depends(deps.require_admin)])
def delete_author(
    author_id: str,
    service: AuthorsService = Depends(deps.get_authors_service),
):
    with translate_errors("delete author"):
        service.delete_author(author_id)
    return {"success": True}
