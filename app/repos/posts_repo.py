from dataclasses import dataclass
from typing import List, Optional, Tuple

from sqlalchemy import case, func, or_, select, update
from sqlalchemy.orm import Session

from app.models.enums import PostStatus
from app.models.post import Post
from app.services.post_lifecycle import Actor
from app.utils import utcnow


@dataclass
class PostFilters:
    content_type: Optional[str] = None
    service_category: Optional[str] = None
    status: Optional[str] = None
    author_id: Optional[str] = None
    q: Optional[str] = None


def visibility_clause(actor: Optional[Actor]):
    """SQL condition matching the posts ``actor`` is allowed to see."""
    approved = Post.status == PostStatus.APPROVED.value
    if actor is None:
        return approved
    if actor.is_admin:
        return None
    return or_(approved, Post.author_id == actor.id)


class SqlPostsRepo:
    def __init__(self, db: Session):
        self.db = db

    def get(self, post_id: str) -> Optional[Post]:
        return self.db.get(Post, post_id)

    def get_by_slug(self, slug: str) -> Optional[Post]:
        return self.db.execute(select(Post).where(Post.slug == slug)).scalar_one_or_none()

    def slug_exists(self, slug: str, exclude_id: Optional[str] = None) -> bool:
        stmt = select(Post.id).where(Post.slug == slug)
        if exclude_id:
            stmt = stmt.where(Post.id != exclude_id)
        return self.db.execute(stmt.limit(1)).first() is not None

    def add(self, post: Post) -> Post:
        self.db.add(post)
        self.db.commit()
        self.db.refresh(post)
        return post

    def save(self, post: Post) -> Post:
        self.db.commit()
        self.db.refresh(post)
        return post

    def delete(self, post: Post) -> None:
        self.db.delete(post)
        self.db.commit()

    def increment_views(self, post_id: str) -> int:
        self.db.execute(
            update(Post)
            .where(Post.id == post_id)
            .values(views=Post.views + 1, updated_at=utcnow())
        )
        self.db.commit()
        return self.db.execute(select(Post.views).where(Post.id == post_id)).scalar_one()

    def count_by_author(self, author_id: str) -> int:
        return self.db.execute(
            select(func.count()).select_from(Post).where(Post.author_id == author_id)
        ).scalar_one()

    def search(
        self,
        actor: Optional[Actor],
        filters: PostFilters,
        offset: int,
        limit: int,
    ) -> Tuple[List[Post], int]:
        conditions = []
        # Visibility comes first so later filters can only narrow it
        visible = visibility_clause(actor)
        if visible is not None:
            conditions.append(visible)
        if filters.status:
            conditions.append(Post.status == filters.status)
        if filters.author_id:
            conditions.append(Post.author_id == filters.author_id)
        if filters.content_type:
            conditions.append(Post.content_type == filters.content_type)
        if filters.service_category:
            conditions.append(Post.service_category == filters.service_category)
        if filters.q:
            needle = filters.q.lower()
            conditions.append(
                or_(
                    *(
                        func.lower(column).contains(needle, autoescape=True)
                        for column in (Post.title, Post.excerpt, Post.search_body)
                    )
                )
            )

        total = self.db.execute(
            select(func.count()).select_from(Post).where(*conditions)
        ).scalar_one()

        sort_key = case(
            (Post.status == PostStatus.APPROVED.value, Post.published_at),
            else_=Post.updated_at,
        )
        rows = (
            self.db.execute(
                select(Post)
                .where(*conditions)
                .order_by(sort_key.desc(), Post.created_at.desc())
                .offset(offset)
                .limit(limit)
            )
            .scalars()
            .all()
        )
        return list(rows), total

    def related(self, post: Post, limit: int) -> List[Post]:
        match = or_(
            Post.content_type == post.content_type,
            Post.service_category == post.service_category,
        )
        if post.related_ids:
            match = or_(match, Post.id.in_(post.related_ids))
        stmt = (
            select(Post)
            .where(
                Post.status == PostStatus.APPROVED.value,
                Post.id != post.id,
                match,
            )
            .order_by(Post.created_at.desc())
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().all())
