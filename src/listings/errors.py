"""Failure taxonomy for engagement operations.

Validation failures and unknown identifiers reuse Protean's own
``ValidationError`` and ``ObjectNotFoundError``. The remaining kinds are
raised from here. Every kind maps to one stable outward status code.
"""

from enum import Enum

from protean.exceptions import ObjectNotFoundError, ValidationError


class FailureKind(Enum):
    VALIDATION = "validation"
    AUTH_REQUIRED = "auth_required"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    STORE_UNAVAILABLE = "store_unavailable"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]

    @property
    def retryable(self) -> bool:
        return self is FailureKind.STORE_UNAVAILABLE


_STATUS_CODES = {
    FailureKind.VALIDATION: 400,
    FailureKind.AUTH_REQUIRED: 401,
    FailureKind.FORBIDDEN: 403,
    FailureKind.NOT_FOUND: 404,
    FailureKind.CONFLICT: 409,
    FailureKind.STORE_UNAVAILABLE: 503,
}


class EngagementError(Exception):
    """Base for failures raised by the listings domain.

    ``messages`` follows Protean's convention: a dict of field name to a list
    of human-readable strings.
    """

    kind = FailureKind.VALIDATION

    def __init__(self, messages: dict[str, list[str]]):
        self.messages = messages
        super().__init__(messages)

    def __str__(self):
        return str(dict(self.messages))


class ForbiddenError(EngagementError):
    """The caller is identified but not allowed to perform the operation."""

    kind = FailureKind.FORBIDDEN


class ConflictError(EngagementError):
    """The operation would break an aggregate invariant (e.g. a second response)."""

    kind = FailureKind.CONFLICT


class AuthRequiredError(EngagementError):
    """The operation needs an authenticated caller and none was supplied."""

    kind = FailureKind.AUTH_REQUIRED


class StoreUnavailableError(EngagementError):
    """The aggregate store failed or kept rejecting writes. Safe to retry."""

    kind = FailureKind.STORE_UNAVAILABLE


def failure_kind_of(exc: Exception) -> FailureKind:
    """Classify a domain exception into its failure kind."""
    if isinstance(exc, EngagementError):
        return exc.kind
    if isinstance(exc, ObjectNotFoundError):
        return FailureKind.NOT_FOUND
    if isinstance(exc, ValidationError):
        return FailureKind.VALIDATION
    raise TypeError(f"{type(exc).__name__} is not an engagement failure")


def messages_of(exc: Exception) -> dict[str, list[str]]:
    """Extract a ``{field: [messages]}`` dict from any engagement failure."""
    messages = getattr(exc, "messages", None)
    if isinstance(messages, dict):
        return {key: value if isinstance(value, list) else [str(value)] for key, value in messages.items()}
    return {"_entity": [str(messages or exc)]}
