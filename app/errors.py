"""
Error taxonomy for the CMS core.

Services raise these; routers translate them into HTTP responses using
``status_code`` and ``to_dict()``. Anything that is not a ``CmsError``
(persistence failures included) is treated as an opaque server error.
"""

from typing import Any, Dict, Optional


class CmsError(Exception):
    """Base exception for errors surfaced to the caller."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class ValidationError(CmsError):
    """Malformed or out-of-range input. Nothing is written."""

    status_code = 400
    code = "VALIDATION_ERROR"


class ContentTooLargeError(ValidationError):
    code = "CONTENT_TOO_LARGE"

    def __init__(self, field: str, size: int, limit: int):
        super().__init__(
            f"{field} content too large (max {limit // 1024}KB)",
            details={"field": field, "size": size, "limit": limit},
        )
        self.field = field


class SlugConflictError(ValidationError):
    code = "SLUG_CONFLICT"

    def __init__(self, slug: str):
        super().__init__("Slug already exists", details={"field": "slug", "slug": slug})


class InvalidTransitionError(CmsError):
    """The post's current status does not allow the requested action."""

    status_code = 400
    code = "INVALID_TRANSITION"

    def __init__(self, action: str, status: str, message: Optional[str] = None):
        super().__init__(
            message or f"Cannot {action} a post in status '{status}'",
            details={"action": action, "status": status},
        )
        self.action = action
        self.status = status


class AuthenticationError(CmsError):
    status_code = 401
    code = "AUTHENTICATION_REQUIRED"


class AuthorizationError(CmsError):
    status_code = 403
    code = "PERMISSION_DENIED"


class NotFoundError(CmsError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, resource: str = "Post"):
        super().__init__(f"{resource} not found")


class ConflictError(CmsError):
    """A request that is well-formed but clashes with existing records."""

    status_code = 400
    code = "CONFLICT"
