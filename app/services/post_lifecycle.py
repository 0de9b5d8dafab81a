"""
Post publication state machine.

States:
    draft ──submit──> pending_approval ──approve──> approved
      ^                     │
      │                   reject
      │                     v
      └────── submit ── rejected

Every action is decided by ``decide(actor, author_id, status, action)``, which applies the
guards in a fixed order:

    1. the actor's role may perform the action      -> AuthorizationError
    2. authors act only on posts they own           -> AuthorizationError
    3. authors may not edit approved posts          -> AuthorizationError
    4. the current status allows the action         -> InvalidTransitionError

so a role violation is always reported ahead of a state violation. ``apply``
runs ``decide`` and only then mutates the post; a failed guard leaves the post
untouched.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Optional

from app.errors import AuthorizationError, InvalidTransitionError
from app.models.enums import PostStatus, Role
from app.utils import utcnow

logger = logging.getLogger(__name__)

DEFAULT_REJECTION_REASON = "No reason provided"


class PostAction(str, Enum):
    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"
    EDIT = "edit"
    DELETE = "delete"
    VIEW = "view"


@dataclass(frozen=True)
class Actor:
    id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


ALL_STATUSES: FrozenSet[PostStatus] = frozenset(PostStatus)
EDITORS: FrozenSet[Role] = frozenset({Role.ADMIN, Role.AUTHOR})
ADMINS: FrozenSet[Role] = frozenset({Role.ADMIN})

# None means the action is open to unauthenticated callers
ALLOWED_ROLES: Dict[PostAction, Optional[FrozenSet[Role]]] = {
    PostAction.SUBMIT: EDITORS,
    PostAction.APPROVE: ADMINS,
    PostAction.REJECT: ADMINS,
    PostAction.EDIT: EDITORS,
    PostAction.DELETE: ADMINS,
    PostAction.VIEW: None,
}

# Actions an author may only perform on their own posts
OWNER_ONLY: FrozenSet[PostAction] = frozenset({PostAction.SUBMIT, PostAction.EDIT})

SOURCE_STATUSES: Dict[PostAction, FrozenSet[PostStatus]] = {
    PostAction.SUBMIT: frozenset({PostStatus.DRAFT, PostStatus.REJECTED}),
    PostAction.APPROVE: frozenset({PostStatus.PENDING_APPROVAL}),
    PostAction.REJECT: frozenset({PostStatus.PENDING_APPROVAL}),
    PostAction.EDIT: ALL_STATUSES,
    PostAction.DELETE: ALL_STATUSES,
    PostAction.VIEW: frozenset({PostStatus.APPROVED}),
}

# Target status; actions missing here keep the current status
TARGET_STATUS: Dict[PostAction, PostStatus] = {
    PostAction.SUBMIT: PostStatus.PENDING_APPROVAL,
    PostAction.APPROVE: PostStatus.APPROVED,
    PostAction.REJECT: PostStatus.REJECTED,
}

_STATE_MESSAGES = {
    PostAction.SUBMIT: "Only draft or rejected posts can be submitted",
    PostAction.APPROVE: "Only pending posts can be approved",
    PostAction.REJECT: "Only pending posts can be rejected",
    PostAction.VIEW: "Can only track views for approved posts",
}


def _forbidden(actor: Optional[Actor], action: PostAction, message: str) -> AuthorizationError:
    logger.warning(f"Denied {action.value} for {actor.id if actor else 'anonymous'}: {message}")
    return AuthorizationError(message)


def decide(
    actor: Optional[Actor], author_id: str, status: PostStatus, action: PostAction
) -> PostStatus:
    """Return the status ``action`` leads to, or raise why it is not allowed."""
    status = PostStatus(status)

    allowed = ALLOWED_ROLES[action]
    if allowed is not None and (actor is None or actor.role not in allowed):
        message = "Admin access required" if allowed == ADMINS else "Author or admin access required"
        raise _forbidden(actor, action, message)

    if actor is not None and not actor.is_admin:
        if action in OWNER_ONLY and author_id != actor.id:
            raise _forbidden(actor, action, f"You can only {action.value} your own posts")
        if action is PostAction.EDIT and status is PostStatus.APPROVED:
            raise _forbidden(actor, action, "Cannot edit approved posts")

    if status not in SOURCE_STATUSES[action]:
        raise InvalidTransitionError(action.value, status.value, _STATE_MESSAGES.get(action))

    return TARGET_STATUS.get(action, status)


def apply(post, actor: Optional[Actor], action: PostAction, reason: Optional[str] = None):
    """
    Run a status-changing action (submit, approve, reject) against ``post``.

    ``post`` is any object exposing ``status``, ``author_id``,
    ``published_at``, ``rejection_reason`` and ``updated_at``.
    """
    current = PostStatus(post.status)
    target = decide(actor, post.author_id, current, action)

    now = utcnow()
    if current is PostStatus.REJECTED and target is not PostStatus.REJECTED:
        post.rejection_reason = None
    if target is PostStatus.APPROVED and post.published_at is None:
        post.published_at = now
    if target is PostStatus.REJECTED:
        post.rejection_reason = reason or DEFAULT_REJECTION_REASON
    post.status = target.value
    post.updated_at = now

    logger.info(
        f"Post {post.id} {current.value} -> {target.value} by {actor.id if actor else 'anonymous'}"
    )
    return post


def can_view(actor: Optional[Actor], author_id: str, status: PostStatus) -> bool:
    """Read-path visibility: public sees approved, authors also their own, admins all."""
    if PostStatus(status) is PostStatus.APPROVED:
        return True
    if actor is None:
        return False
    return actor.is_admin or actor.id == author_id
