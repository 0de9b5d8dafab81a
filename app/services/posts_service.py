import logging
from typing import Dict, Optional

from app.errors import AuthorizationError, NotFoundError, SlugConflictError
from app.models.enums import PostStatus, TemplateMode
from app.models.post import Post
from app.repos.posts_repo import PostFilters
from app.schemas.posts import (
    AuthorSummary,
    CreatePostRequest,
    EditPostRequest,
    Pagination,
    PostDetail,
    PostList,
    PostOut,
    RelatedAuthor,
    RelatedPost,
)
from app.services import post_lifecycle
from app.services.post_lifecycle import EDITORS, Actor, PostAction
from app.services.sanitizer import sanitize_template
from app.settings import settings
from app.utils import slugify, utcnow

logger = logging.getLogger(__name__)


class PostsService:
    def __init__(self, repo, authors_repo):
        self.repo = repo
        self.authors_repo = authors_repo

    # --- Read path ---

    def list_posts(
        self,
        actor: Optional[Actor],
        filters: PostFilters,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> PostList:
        limit = limit or settings.DEFAULT_PAGE_SIZE
        posts, total = self.repo.search(actor, filters, offset, limit)
        authors = self.authors_repo.get_many(p.author_id for p in posts)
        return PostList(
            posts=[to_post_out(p, authors.get(p.author_id)) for p in posts],
            pagination=Pagination(
                offset=offset,
                limit=limit,
                total=total,
                hasMore=offset + limit < total,
            ),
        )

    def get_post(self, slug: str, actor: Optional[Actor]) -> PostDetail:
        post = self.repo.get_by_slug(slug)
        # Invisible posts look exactly like missing ones
        if not post or not post_lifecycle.can_view(actor, post.author_id, post.status):
            raise NotFoundError()

        related = self.repo.related(post, settings.RELATED_POSTS_LIMIT)
        authors = self.authors_repo.get_many(
            [post.author_id, *(p.author_id for p in related)]
        )
        return PostDetail(
            post=to_post_out(post, authors.get(post.author_id)),
            relatedPosts=[to_related_post(p, authors.get(p.author_id)) for p in related],
        )

    # --- Write path ---

    def create_post(self, actor: Actor, payload: CreatePostRequest) -> PostOut:
        if actor is None or actor.role not in EDITORS:
            raise AuthorizationError("Author or admin access required")

        template = sanitize_template(payload.template.model_dump(mode="json"))
        slug = self._unique_slug(payload.slug or slugify(payload.title))
        now = utcnow()

        post = Post(
            slug=slug,
            title=payload.title,
            excerpt=payload.excerpt,
            banner=payload.banner.model_dump(),
            content_type=payload.contentType.value,
            service_category=payload.serviceCategory.value,
            template=template,
            search_body=_search_body(template),
            status=PostStatus.DRAFT.value,
            rejection_reason=None,
            published_at=None,
            views=0,
            author_id=actor.id,
            seo=_seo(payload),
            tags=list(payload.tags),
            related_ids=list(payload.relatedIds),
            created_at=now,
            updated_at=now,
        )
        post = self.repo.add(post)
        logger.info(f"Post {post.id} created as draft by {actor.id} (slug={post.slug})")
        return to_post_out(post)

    def edit_post(self, actor: Actor, post_id: str, payload: EditPostRequest) -> PostOut:
        post = self._get(post_id)
        post_lifecycle.decide(actor, post.author_id, post.status, PostAction.EDIT)

        if payload.slug and payload.slug != post.slug:
            if self.repo.slug_exists(payload.slug, exclude_id=post.id):
                raise SlugConflictError(payload.slug)

        template = sanitize_template(payload.template.model_dump(mode="json"))

        if payload.slug:
            post.slug = payload.slug
        post.title = payload.title
        post.excerpt = payload.excerpt
        post.banner = payload.banner.model_dump()
        post.content_type = payload.contentType.value
        post.service_category = payload.serviceCategory.value
        post.template = template
        post.search_body = _search_body(template)
        post.tags = list(payload.tags)
        post.related_ids = list(payload.relatedIds)
        post.seo = _seo(payload)
        post.updated_at = utcnow()

        post = self.repo.save(post)
        logger.info(f"Post {post.id} edited by {actor.id}")
        return to_post_out(post)

    def submit_post(self, actor: Actor, post_id: str) -> PostOut:
        return self._transition(actor, post_id, PostAction.SUBMIT)

    def approve_post(self, actor: Actor, post_id: str) -> PostOut:
        return self._transition(actor, post_id, PostAction.APPROVE)

    def reject_post(self, actor: Actor, post_id: str, reason: Optional[str] = None) -> PostOut:
        return self._transition(actor, post_id, PostAction.REJECT, reason=reason)

    def delete_post(self, actor: Actor, post_id: str) -> None:
        post = self._get(post_id)
        post_lifecycle.decide(actor, post.author_id, post.status, PostAction.DELETE)
        self.repo.delete(post)
        logger.info(f"Post {post_id} deleted by {actor.id}")

    def record_view(self, post_id: str, actor: Optional[Actor] = None) -> int:
        post = self._get(post_id)
        post_lifecycle.decide(actor, post.author_id, post.status, PostAction.VIEW)
        return self.repo.increment_views(post.id)

    # --- Helpers ---

    def _get(self, post_id: str) -> Post:
        post = self.repo.get(post_id)
        if not post:
            raise NotFoundError()
        return post

    def _transition(
        self, actor: Actor, post_id: str, action: PostAction, reason: Optional[str] = None
    ) -> PostOut:
        post = self._get(post_id)
        post_lifecycle.apply(post, actor, action, reason=reason)
        return to_post_out(self.repo.save(post))

    def _unique_slug(self, base: str) -> str:
        slug = base
        counter = 1
        while self.repo.slug_exists(slug):
            slug = f"{base}-{counter}"
            counter += 1
        return slug


def _seo(payload: CreatePostRequest) -> Dict[str, Optional[str]]:
    seo = payload.seo
    return {
        "title": (seo.title if seo else None) or payload.title,
        "description": (seo.description if seo else None) or payload.excerpt,
        "canonical": (seo.canonical if seo else None) or None,
    }


def _search_body(template: dict) -> str:
    if template.get("mode") == TemplateMode.DEFAULT.value:
        return (template.get("defaultFields") or {}).get("body", "")
    return ""


def to_author_summary(author) -> Optional[AuthorSummary]:
    if author is None:
        return None
    return AuthorSummary(
        id=author.id,
        fullName=author.full_name,
        avatarUrl=author.avatar_url,
        bio=author.bio,
        social=author.social or {},
    )


def to_post_out(post: Post, author=None) -> PostOut:
    return PostOut(
        id=post.id,
        slug=post.slug,
        title=post.title,
        excerpt=post.excerpt,
        banner=post.banner,
        contentType=post.content_type,
        serviceCategory=post.service_category,
        status=post.status,
        rejectionReason=post.rejection_reason,
        publishedAt=post.published_at,
        views=post.views or 0,
        authorId=post.author_id,
        template=post.template,
        tags=post.tags or [],
        relatedIds=post.related_ids or [],
        seo=post.seo,
        createdAt=post.created_at,
        updatedAt=post.updated_at,
        author=to_author_summary(author),
    )


def to_related_post(post: Post, author=None) -> RelatedPost:
    return RelatedPost(
        id=post.id,
        title=post.title,
        slug=post.slug,
        excerpt=post.excerpt,
        banner=post.banner,
        contentType=post.content_type,
        serviceCategory=post.service_category,
        publishedAt=post.published_at,
        author=RelatedAuthor(fullName=author.full_name, avatarUrl=author.avatar_url)
        if author
        else None,
    )
