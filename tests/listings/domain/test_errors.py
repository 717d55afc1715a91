"""Tests for the failure taxonomy and its outward status codes."""

import pytest
from protean.exceptions import ObjectNotFoundError, ValidationError

from listings.errors import (
    AuthRequiredError,
    ConflictError,
    FailureKind,
    ForbiddenError,
    StoreUnavailableError,
    failure_kind_of,
    messages_of,
)


class TestFailureKind:
    @pytest.mark.parametrize(
        "kind,status",
        [
            (FailureKind.VALIDATION, 400),
            (FailureKind.AUTH_REQUIRED, 401),
            (FailureKind.FORBIDDEN, 403),
            (FailureKind.NOT_FOUND, 404),
            (FailureKind.CONFLICT, 409),
            (FailureKind.STORE_UNAVAILABLE, 503),
        ],
    )
    def test_status_codes_are_stable(self, kind, status):
        assert kind.status_code == status

    def test_only_store_failures_are_retryable(self):
        assert [k for k in FailureKind if k.retryable] == [FailureKind.STORE_UNAVAILABLE]


class TestClassification:
    def test_project_errors(self):
        assert failure_kind_of(ForbiddenError({"x": ["no"]})) is FailureKind.FORBIDDEN
        assert failure_kind_of(ConflictError({"x": ["no"]})) is FailureKind.CONFLICT
        assert failure_kind_of(AuthRequiredError({"x": ["no"]})) is FailureKind.AUTH_REQUIRED
        assert failure_kind_of(StoreUnavailableError({"x": ["no"]})) is FailureKind.STORE_UNAVAILABLE

    def test_protean_errors(self):
        assert failure_kind_of(ValidationError({"rating": ["bad"]})) is FailureKind.VALIDATION
        assert failure_kind_of(ObjectNotFoundError({"review": ["gone"]})) is FailureKind.NOT_FOUND

    def test_unrelated_exception_is_not_classified(self):
        with pytest.raises(TypeError):
            failure_kind_of(KeyError("boom"))

    def test_messages_normalized_to_lists(self):
        assert messages_of(ValidationError({"rating": ["bad"]})) == {"rating": ["bad"]}
        assert messages_of(ObjectNotFoundError("Property 42 does not exist")) == {
            "_entity": ["Property 42 does not exist"]
        }
