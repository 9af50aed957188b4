"""
Error taxonomy shared by the pipeline, the services and the API layer.

Every error carries a human readable message and a stable machine code. The
API layer maps each class to an HTTP status (see server.py); the core never
raises HTTPException itself.
"""

from typing import TypeVar

T = TypeVar("T")


class ReaderError(Exception):
    """Base class for all expected application errors."""

    status_code: int = 500
    default_code: str = "internal"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code


class AuthError(ReaderError):
    """No or invalid user identity."""

    status_code = 401
    default_code = "unauthorized"

    def __init__(self, message: str = "Unauthorized", code: str | None = None):
        super().__init__(message, code)


class ValidationError(ReaderError):
    """Missing or malformed required input."""

    status_code = 400
    default_code = "invalid_input"


class EmptyFeedError(ValidationError):
    """A feed parsed correctly but contains no items."""

    status_code = 422
    default_code = "empty"


class DuplicateFeedError(ReaderError):
    """The user already subscribes to this feed URL."""

    status_code = 409
    default_code = "duplicate"


class FetchError(ReaderError):
    """
    A remote fetch failed.

    kind is "http" for a non-2xx (or empty) response and "network" for
    connection, DNS and timeout failures.
    """

    default_code = "unreachable"

    def __init__(
        self,
        message: str,
        kind: str = "network",
        status: int | None = None,
        url: str | None = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.status = status
        self.url = url

    @property
    def status_code(self) -> int:  # type: ignore[override]
        return 400 if self.kind == "http" else 502


class ParseError(ReaderError):
    """Feed XML could not be parsed into the canonical shape."""

    status_code = 422
    default_code = "unparseable"


class ExtractionError(ReaderError):
    """No article content could be extracted from a page."""

    status_code = 422
    default_code = "not_extractable"

    def __init__(
        self,
        message: str = "Could not extract article content",
        code: str | None = None,
    ):
        super().__init__(message, code)


class NotFoundError(ReaderError):
    """
    Entity does not exist or does not belong to the user.

    Both cases produce the same error so callers cannot discover other
    users' ids.
    """

    status_code = 404
    default_code = "not_found"


class PersistenceError(ReaderError):
    """Underlying store failure."""

    status_code = 500
    default_code = "persistence"


def require_resource(resource: T | None, detail: str = "Resource not found") -> T:
    """
    Raise NotFoundError if resource is None, otherwise return the resource.

    Usage:
        feed = require_resource(db.get_feed(feed_id, user_id), "Feed not found")
    """
    if resource is None:
        raise NotFoundError(detail)
    return resource


def require_feed(feed: T | None) -> T:
    """Raise NotFoundError if feed is None."""
    return require_resource(feed, "Feed not found")


def require_item(item: T | None) -> T:
    """Raise NotFoundError if feed item is None."""
    return require_resource(item, "Item not found")
