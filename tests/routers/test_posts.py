import pytest
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.testclient import TestClient

from app import dependencies as deps
from app.db.postgres.base import get_db
from app.main import validation_exception_handler
from app.models.enums import PostStatus, Role
from app.routers import posts
from app.security import create_access_token
from tests.conftest import (
    ADMIN,
    AUTHOR,
    OTHER_AUTHOR,
    make_author,
    make_post,
    post_payload,
)


def make_app(db_session):
    app = FastAPI()
    app.dependency_overrides[get_db] = lambda: db_session
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.include_router(posts.router)
    return app


def auth(actor):
    return {"Authorization": f"Bearer {create_access_token(actor.id, actor.role.value)}"}


@pytest.fixture
def client(db_session):
    db_session.add_all(
        [
            make_author(AUTHOR.id, "author_one"),
            make_author(OTHER_AUTHOR.id, "author_two"),
            make_author(ADMIN.id, "admin_one", role=Role.ADMIN),
        ]
    )
    db_session.commit()
    return TestClient(make_app(db_session))


def seed(db_session, *rows):
    db_session.add_all(rows)
    db_session.commit()


def test_public_listing_never_includes_unapproved_posts(client, db_session):
    seed(
        db_session,
        make_post("a1", "live", PostStatus.APPROVED),
        make_post("d1", "draft", PostStatus.DRAFT),
        make_post("p1", "pending", PostStatus.PENDING_APPROVAL),
        make_post("r1", "rejected", PostStatus.REJECTED),
    )

    for params in ({}, {"status": "draft"}, {"status": "pending_approval"}, {"q": "case"}):
        res = client.get("/posts", params=params)
        assert res.status_code == 200
        assert all(p["status"] == "approved" for p in res.json()["posts"])

    body = client.get("/posts").json()
    assert [p["slug"] for p in body["posts"]] == ["live"]
    assert body["pagination"] == {"offset": 0, "limit": 6, "total": 1, "hasMore": False}


def test_author_listing_includes_own_posts_only(client, db_session):
    seed(
        db_session,
        make_post("d1", "mine", PostStatus.DRAFT, AUTHOR.id),
        make_post("d2", "theirs", PostStatus.DRAFT, OTHER_AUTHOR.id),
    )

    res = client.get("/posts", headers=auth(AUTHOR))

    assert [p["slug"] for p in res.json()["posts"]] == ["mine"]


def test_invalid_token_is_treated_as_anonymous_on_reads(client, db_session):
    seed(db_session, make_post("d1", "mine", PostStatus.DRAFT, AUTHOR.id))

    res = client.get("/posts", headers={"Authorization": "Bearer not-a-token"})

    assert res.status_code == 200
    assert res.json()["posts"] == []


def test_session_cookie_is_accepted(client, db_session):
    seed(db_session, make_post("d1", "mine", PostStatus.DRAFT, AUTHOR.id))
    client.cookies.set("cms_auth", create_access_token(AUTHOR.id, "author"))

    res = client.get("/posts/mine")

    assert res.status_code == 200


def test_get_post_by_slug_with_related(client, db_session):
    seed(
        db_session,
        make_post("a1", "main", PostStatus.APPROVED),
        make_post("a2", "sibling", PostStatus.APPROVED),
    )

    res = client.get("/posts/main")

    assert res.status_code == 200
    body = res.json()
    assert body["post"]["slug"] == "main"
    assert body["post"]["author"]["fullName"] == "Test Author"
    assert [p["slug"] for p in body["relatedPosts"]] == ["sibling"]


def test_hidden_post_is_not_found(client, db_session):
    seed(db_session, make_post("d1", "secret", PostStatus.DRAFT, AUTHOR.id))

    assert client.get("/posts/secret").status_code == 404
    assert client.get("/posts/secret", headers=auth(OTHER_AUTHOR)).status_code == 404
    assert client.get("/posts/secret", headers=auth(ADMIN)).status_code == 200


def test_create_requires_authentication(client):
    res = client.post("/posts", json=post_payload())
    assert res.status_code == 401


def test_create_post_returns_draft_with_unique_slug(client):
    first = client.post("/posts", json=post_payload(), headers=auth(AUTHOR))
    second = client.post("/posts", json=post_payload(), headers=auth(AUTHOR))

    assert first.status_code == 201
    assert first.json()["status"] == "draft"
    assert first.json()["publishedAt"] is None
    assert [first.json()["slug"], second.json()["slug"]] == ["hello-world", "hello-world-1"]


def test_create_post_validation_failure_is_400(client):
    res = client.post("/posts", json=post_payload(title="Hey"), headers=auth(AUTHOR))

    assert res.status_code == 400
    detail = res.json()["detail"]
    assert detail["code"] == "VALIDATION_ERROR"
    assert any(error["field"].endswith("title") for error in detail["details"])


def test_oversized_custom_html_is_rejected_without_creating_a_post(client):
    payload = post_payload(
        template={"mode": "custom", "customFields": {"html": "a" * (101 * 1024)}}
    )

    res = client.post("/posts", json=payload, headers=auth(AUTHOR))

    assert res.status_code == 400
    assert res.json()["detail"]["code"] == "CONTENT_TOO_LARGE"
    listing = client.get("/posts", headers=auth(ADMIN)).json()
    assert listing["pagination"]["total"] == 0


def test_custom_template_is_sanitized(client):
    payload = post_payload(
        template={
            "mode": "custom",
            "customFields": {
                "html": '<div data-x="1" onclick="evil()">Hi</div><script>x()</script>',
                "css": "body { behavior: url(x.htc); color: red; }",
                "js": "eval('1'); console.log(2);",
            },
        }
    )

    res = client.post("/posts", json=payload, headers=auth(AUTHOR))

    assert res.status_code == 201
    custom = res.json()["template"]["customFields"]
    assert custom["html"] == '<div data-x="1">Hi</div>'
    assert "behavior" not in custom["css"]
    assert "eval(" not in custom["js"]
    assert "console.log(2);" in custom["js"]


def test_edit_slug_collision_is_400(client, db_session):
    seed(
        db_session,
        make_post("p1", "mine", PostStatus.DRAFT, AUTHOR.id),
        make_post("p2", "taken", PostStatus.DRAFT, AUTHOR.id),
    )

    res = client.put("/posts/p1", json=post_payload(slug="taken"), headers=auth(AUTHOR))

    assert res.status_code == 400
    assert res.json()["detail"]["code"] == "SLUG_CONFLICT"


def test_author_cannot_edit_approved_post(client, db_session):
    seed(db_session, make_post("p1", "live", PostStatus.APPROVED, AUTHOR.id))

    res = client.put("/posts/p1", json=post_payload(), headers=auth(AUTHOR))

    assert res.status_code == 403


def test_author_approve_is_forbidden_regardless_of_status(client, db_session):
    seed(
        db_session,
        make_post("d1", "draft", PostStatus.DRAFT, AUTHOR.id),
        make_post("p1", "pending", PostStatus.PENDING_APPROVAL, AUTHOR.id),
    )

    for post_id in ("d1", "p1"):
        res = client.post(f"/posts/{post_id}/approve", headers=auth(AUTHOR))
        assert res.status_code == 403
        assert res.json()["detail"]["code"] == "PERMISSION_DENIED"


def test_submit_approve_workflow(client, db_session):
    seed(db_session, make_post("p1", "mine", PostStatus.DRAFT, AUTHOR.id))

    submitted = client.post("/posts/p1/submit", headers=auth(AUTHOR))
    assert submitted.status_code == 200
    assert submitted.json()["status"] == "pending_approval"

    approved = client.post("/posts/p1/approve", headers=auth(ADMIN))
    assert approved.status_code == 200
    assert approved.json()["status"] == "approved"
    assert approved.json()["publishedAt"] is not None

    again = client.post("/posts/p1/approve", headers=auth(ADMIN))
    assert again.status_code == 400
    assert again.json()["detail"]["code"] == "INVALID_TRANSITION"


def test_reject_with_and_without_reason(client, db_session):
    seed(
        db_session,
        make_post("p1", "one", PostStatus.PENDING_APPROVAL, AUTHOR.id),
        make_post("p2", "two", PostStatus.PENDING_APPROVAL, AUTHOR.id),
    )

    with_reason = client.post(
        "/posts/p1/reject", json={"reason": "Needs sources"}, headers=auth(ADMIN)
    )
    without = client.post("/posts/p2/reject", headers=auth(ADMIN))

    assert with_reason.json()["rejectionReason"] == "Needs sources"
    assert without.status_code == 200
    assert without.json()["rejectionReason"] == "No reason provided"


def test_delete_is_admin_only(client, db_session):
    seed(db_session, make_post("p1", "mine", PostStatus.DRAFT, AUTHOR.id))

    assert client.delete("/posts/p1", headers=auth(AUTHOR)).status_code == 403

    res = client.delete("/posts/p1", headers=auth(ADMIN))
    assert res.status_code == 200
    assert res.json() == {"success": True}
    assert client.get("/posts/mine", headers=auth(ADMIN)).status_code == 404


def test_view_counter_only_for_approved_posts(client, db_session):
    seed(
        db_session,
        make_post("a1", "live", PostStatus.APPROVED),
        make_post("d1", "draft", PostStatus.DRAFT),
    )

    assert client.post("/posts/a1/view").json() == {"views": 1}
    assert client.post("/posts/a1/view").json() == {"views": 2}

    res = client.post("/posts/d1/view")
    assert res.status_code == 400
    assert res.json()["detail"]["code"] == "INVALID_TRANSITION"


def test_unknown_post_is_404(client):
    res = client.post("/posts/missing/submit", headers=auth(AUTHOR))
    assert res.status_code == 404


def test_unexpected_errors_become_500(db_session):
    class BrokenService:
        def list_posts(self, *args, **kwargs):
            raise RuntimeError("boom")


    app = make_app(db_session)
    app.dependency_overrides[deps.get_posts_service] = lambda: BrokenService()
    client = TestClient(app)

    res = client.get("/posts")

    assert res.status_code == 500
    assert res.json()["detail"] == "Failed to retrieve posts"
