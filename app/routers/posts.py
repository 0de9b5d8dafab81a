import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from app import dependencies as deps
from app.models.enums import ContentType, PostStatus, ServiceCategory
from app.repos.posts_repo import PostFilters
from app.routers.common import translate_errors
from app.schemas.posts import (
    CreatePostRequest,
    EditPostRequest,
    PostDetail,
    PostList,
    PostOut,
    RejectPostRequest,
    ViewCount,
)
from app.services.post_lifecycle import Actor
from app.services.posts_service import PostsService
from app.settings import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("", response_model=PostList)
def list_posts(
    offset: int = Query(0, ge=0),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    contentType: Optional[ContentType] = None,
    serviceCategory: Optional[ServiceCategory] = None,
    status: Optional[PostStatus] = None,
    q: Optional[str] = Query(None, max_length=100),
    authorId: Optional[str] = None,
    actor: Optional[Actor] = Depends(deps.get_optional_actor),
    service: PostsService = Depends(deps.get_posts_service),
):
    """List posts visible to the caller, newest first."""
    filters = PostFilters(
        content_type=contentType.value if contentType else None,
        service_category=serviceCategory.value if serviceCategory else None,
        status=status.value if status else None,
        author_id=authorId,
        q=q.strip() if q and q.strip() else None,
    )
    with translate_errors("retrieve posts"):
        return service.list_posts(actor, filters, offset=offset, limit=limit)


@router.get("/{slug}", response_model=PostDetail)
def get_post(
    slug: str,
    actor: Optional[Actor] = Depends(deps.get_optional_actor),
    service: PostsService = Depends(deps.get_posts_service),
):
    """Get a single post by slug, with related posts."""
    with translate_errors("retrieve post"):
        return service.get_post(slug, actor)


@router.post("", response_model=PostOut, status_code=201)
def create_post(
    payload: CreatePostRequest,
    actor: Actor = Depends(deps.get_current_actor),
    service: PostsService = Depends(deps.get_posts_service),
):
    with translate_errors("create post"):
        return service.create_post(actor, payload)


@router.put("/{post_id}", response_model=PostOut)
def edit_post(
    post_id: str,
    payload: EditPostRequest,
    actor: Actor = Depends(deps.get_current_actor),
    service: PostsService = Depends(deps.get_posts_service),
):
    with translate_errors("update post"):
        return service.edit_post(actor, post_id, payload)


@router.delete("/{post_id}")
def delete_post(
    post_id: str,
    actor: Actor = Depends(deps.get_current_actor),
    service: PostsService = Depends(deps.get_posts_service),
):
    with translate_errors("delete post"):
        service.delete_post(actor, post_id)
    return {"success": True}


@router.post("/{post_id}/submit", response_model=PostOut)
def submit_post(
    post_id: str,
    actor: Actor = Depends(deps.get_current_actor),
    service: PostsService = Depends(deps.get_posts_service),
):
    with translate_errors("submit post"):
        return service.submit_post(actor, post_id)


@router.post("/{post_id}/approve", response_model=PostOut)
def approve_post(
    post_id: str,
    actor: Actor = Depends(deps.get_current_actor),
    service: PostsService = Depends(deps.get_posts_service),
):
    with translate_errors("approve post"):
        return service.approve_post(actor, post_id)


@router.post("/{post_id}/reject", response_model=PostOut)
def reject_post(
    post_id: str,
    payload: Optional[RejectPostRequest] = Body(None),
    actor: Actor = Depends(deps.get_current_actor),
    service: PostsService = Depends(deps.get_posts_service),
):
    reason = payload.reason if payload else None
    with translate_errors("reject post"):
        return service.reject_post(actor, post_id, reason=reason)


@router.post("/{post_id}/view", response_model=ViewCount)
def record_view(
    post_id: str,
    actor: Optional[Actor] = Depends(deps.get_optional_actor),
    service: PostsService = Depends(deps.get_posts_service),
):
    with translate_errors("record view"):
        return ViewCount(views=service.record_view(post_id, actor))
