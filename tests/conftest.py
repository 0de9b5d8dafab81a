import os

# Keep the module-level engine off Postgres while testing
os.environ.setdefault("DATABASE_URL", "sqlite://")

import datetime  # noqa: E402
import uuid  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.db.postgres.base import Base  # noqa: E402
from app.models.author import Author  # noqa: E402
from app.models.enums import PostStatus, Role  # noqa: E402
from app.models.post import Post  # noqa: E402
from app.services.post_lifecycle import Actor  # noqa: E402
from app.utils import utcnow  # noqa: E402

ADMIN = Actor(id="admin-1", role=Role.ADMIN)
AUTHOR = Actor(id="author-1", role=Role.AUTHOR)
OTHER_AUTHOR = Actor(id="author-2", role=Role.AUTHOR)


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


def make_author(
    author_id: str = None,
    username: str = None,
    role: Role = Role.AUTHOR,
    active: bool = True,
    **overrides,
) -> Author:
    author_id = author_id or str(uuid.uuid4())
    now = datetime.datetime(2024, 1, 1, tzinfo=datetime.timezone.utc)
    fields = dict(
        id=author_id,
        username=username or f"user_{author_id[:8].replace('-', '_')}",
        password_hash="not-a-real-hash",
        full_name="Test Author",
        designation="",
        bio="",
        avatar_url=None,
        role=role.value,
        active=active,
        social={},
        created_at=now,
        updated_at=now,
    )
    fields.update(overrides)
    return Author(**fields)


def default_template(body: str = "<p>Hello</p>", quotes=None) -> dict:
    return {
        "mode": "default",
        "defaultFields": {"body": body, "pullQuotes": quotes or []},
    }


def make_post(
    post_id: str = None,
    slug: str = None,
    status: PostStatus = PostStatus.DRAFT,
    author_id: str = AUTHOR.id,
    **overrides,
) -> Post:
    post_id = post_id or str(uuid.uuid4())
    now = datetime.datetime(2024, 1, 1, tzinfo=datetime.timezone.utc)
    fields = dict(
        id=post_id,
        slug=slug or f"post-{post_id[:8]}",
        title="A Case Study",
        excerpt="An excerpt long enough",
        banner={"url": "https://cdn.example.com/b.png", "alt": "Banner image"},
        content_type="Case Studies",
        service_category="CRO",
        template=default_template(),
        search_body="<p>Hello</p>",
        status=PostStatus(status).value,
        rejection_reason=None,
        published_at=now if PostStatus(status) is PostStatus.APPROVED else None,
        views=0,
        author_id=author_id,
        seo={"title": "A Case Study", "description": "An excerpt long enough", "canonical": None},
        tags=[],
        related_ids=[],
        created_at=now,
        updated_at=now,
    )
    fields.update(overrides)
    return Post(**fields)


def post_payload(**overrides) -> dict:
    """A valid JSON body for POST /posts and PUT /posts/{id}."""
    payload = {
        "title": "Hello World",
        "excerpt": "A short excerpt for the post",
        "banner": {"url": "https://cdn.example.com/banner.png", "alt": "Banner alt"},
        "contentType": "Case Studies",
        "serviceCategory": "CRO",
        "template": {
            "mode": "default",
            "defaultFields": {
                "body": "<p>Body text</p>",
                "pullQuotes": [
                    {"text": "First quote", "citation": "Ann"},
                    {"text": "Second quote"},
                ],
            },
        },
        "tags": ["growth", "cro"],
    }
    payload.update(overrides)
    return payload


class FakePostsRepo:
    """
    In-memory stand-in for SqlPostsRepo used in service tests.
    """

    def __init__(self, posts=None):
        self.posts = {p.id: p for p in posts or []}
        self.saved = []
        self.deleted = []

    def get(self, post_id):
        return self.posts.get(post_id)

    def get_by_slug(self, slug):
        return next((p for p in self.posts.values() if p.slug == slug), None)

    def slug_exists(self, slug, exclude_id=None):
        return any(p.slug == slug and p.id != exclude_id for p in self.posts.values())

    def add(self, post):
        if post.id is None:
            post.id = str(uuid.uuid4())
        self.posts[post.id] = post
        return post

    def save(self, post):
        self.saved.append(post.id)
        self.posts[post.id] = post
        return post

    def delete(self, post):
        self.deleted.append(post.id)
        self.posts.pop(post.id, None)

    def increment_views(self, post_id):
        post = self.posts[post_id]
        post.views = (post.views or 0) + 1
        post.updated_at = utcnow()
        return post.views

    def count_by_author(self, author_id):
        return sum(1 for p in self.posts.values() if p.author_id == author_id)

    def related(self, post, limit):
        return [
            p
            for p in self.posts.values()
            if p.status == PostStatus.APPROVED.value
            and p.id != post.id
            and (
                p.id in (post.related_ids or [])
                or p.content_type == post.content_type
                or p.service_category == post.service_category
            )
        ][:limit]

    def search(self, actor, filters, offset, limit):
        self.last_search = (actor, filters, offset, limit)
        rows = list(self.posts.values())
        return rows[offset : offset + limit], len(rows)


class FakeAuthorsRepo:
    """
    In-memory stand-in for SqlAuthorsRepo.
    """

    def __init__(self, authors=None):
        self.authors = {a.id: a for a in authors or []}
        self.deleted = []

    def get(self, author_id):
        return self.authors.get(author_id)

    def get_by_username(self, username):
        return next((a for a in self.authors.values() if a.username == username), None)

    def get_many(self, author_ids):
        return {i: self.authors[i] for i in author_ids if i in self.authors}

    def list_all(self):
        return list(self.authors.values())

    def count_active_admins(self):
        return sum(
            1 for a in self.authors.values() if a.role == Role.ADMIN.value and a.active
        )

    def add(self, author):
        if author.id is None:
            author.id = str(uuid.uuid4())
        self.authors[author.id] = author
        return author

    def save(self, author):
        self.authors[author.id] = author
        return author

    def delete(self, author):
        self.deleted.append(author.id)
        self.authors.pop(author.id, None)
