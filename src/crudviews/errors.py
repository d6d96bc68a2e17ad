"""
Error types for crudviews.

Two families:

- ``ConfigurationError``: programmer errors detected while composing routes
  or deriving schemas. These halt registration.
- ``RequestRejected``: per-request outcomes of the authorization pipeline and
  the destroy handler, each carrying the HTTP status it maps to.
"""

from typing import Any


class CrudViewsError(Exception):
    """Base exception for all crudviews errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigurationError(CrudViewsError):
    """
    Raised when route or schema composition is misconfigured.

    Examples:
    - Missing router, entity or generic view
    - Schemas not registered before generating routes
    - Instance-scoped operation on a path without the lookup parameter
    """

    pass


class AmbiguousVisibilityError(ConfigurationError):
    """Raised when a field is listed as both read-only and write-only."""

    def __init__(self, entity_name: str, fields: set[str]):
        self.entity_name = entity_name
        self.fields = fields
        names = ", ".join(sorted(fields))
        super().__init__(f"{entity_name}: fields marked both read-only and write-only: {names}")


class RequestRejected(CrudViewsError):
    """A request stopped before (or while) running its handler."""

    status_code: int = 400

    def __init__(self, detail: Any = None):
        self.detail = detail
        super().__init__(f"{type(self).__name__} ({self.status_code})")


class Unauthorized(RequestRejected):
    """The coarse permission hook rejected the request."""

    status_code = 401


class Forbidden(RequestRejected):
    """The object-level permission hook rejected the resolved instance."""

    status_code = 403


class NotFound(RequestRejected):
    """The lookup hook found no instance for an instance-scoped operation."""

    status_code = 404


class DestroyFailure(RequestRejected):
    """The destroy side-effect hook raised; ``detail`` is sent as the 400 body."""

    status_code = 400

    @classmethod
    def from_exception(cls, exc: Exception) -> "DestroyFailure":
        detail = getattr(exc, "detail", None)
        if detail is None:
            detail = {"detail": str(exc)}
        return cls(detail)
