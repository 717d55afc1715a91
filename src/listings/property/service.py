"""Engagement Service — the boundary every engagement operation goes through.

Each call is one transaction against one property aggregate:
validate -> authorize -> mutate -> persist -> project. The command handler does
the load/mutate/persist inside its own Protean unit of work, so any failure
leaves the stored aggregate untouched.

Concurrency:
    Calls for the same property id are serialized by an in-process lock, and
    every write is version-checked by the repository. A version conflict (a
    writer outside this process got there first) is retried with a fresh read
    up to ``write_attempts`` times before surfacing as ``StoreUnavailableError``.
    Calls for different property ids never share a lock, and a lock is dropped
    as soon as no call holds or awaits it.

Errors never escape: every domain failure comes back as a failed ``Outcome``
carrying a stable ``FailureKind``.

The caller must have the listings domain context active (``with
listings.domain_context():``), once per thread.
"""

import os
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

import structlog
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain
from pydantic import BaseModel
from sqlalchemy.exc import DBAPIError

from listings.errors import (
    AuthRequiredError,
    EngagementError,
    FailureKind,
    StoreUnavailableError,
    failure_kind_of,
    messages_of,
)
from listings.projections.moderation_queue import moderation_queue
from listings.projections.user_favorites import favorites_of
from listings.property.deletion import DeleteProperty
from listings.property.favorites import ToggleFavorite
from listings.property.listing import AttachImage, BoostProperty, ListProperty, RemoveImage
from listings.property.property import DEFAULT_BOOST_DAYS, Property
from listings.property.reporting import ReportComment, ReportProperty
from listings.property.responding import AddResponse
from listings.property.reviewing import AddReview, DeleteReview
from listings.property.viewing import RecordView
from listings.property.views import (
    counters_view,
    favorite_state,
    image_view,
    property_view,
    queued_report_view,
    report_view,
    response_view,
    review_view,
)

logger = structlog.get_logger(__name__)

DEFAULT_WRITE_ATTEMPTS = 3

DOMAIN_FAILURES = (EngagementError, ObjectNotFoundError, ValidationError)
STORE_FAILURES = (DBAPIError, ConnectionError)


def write_attempts_from_env() -> int:
    return max(int(os.getenv("LISTINGS_WRITE_ATTEMPTS", DEFAULT_WRITE_ATTEMPTS)), 1)


# ---------------------------------------------------------------------------
# Result type
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Outcome:
    """Result of an engagement operation: a value, or a typed failure."""

    ok: bool
    value: Any = None
    kind: FailureKind | None = None
    messages: dict[str, list[str]] = field(default_factory=dict)

    @classmethod
    def success(cls, value: Any = None) -> "Outcome":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, exc: Exception) -> "Outcome":
        return cls(ok=False, kind=failure_kind_of(exc), messages=messages_of(exc))

    @property
    def retryable(self) -> bool:
        return self.kind is not None and self.kind.retryable

    @property
    def status_code(self) -> int:
        return 200 if self.ok else self.kind.status_code

    def to_dict(self) -> Any:
        if not self.ok:
            return {"error": self.messages, "kind": self.kind.value}
        if isinstance(self.value, BaseModel):
            return self.value.model_dump(mode="json")
        if isinstance(self.value, list):
            return [v.model_dump(mode="json") if isinstance(v, BaseModel) else v for v in self.value]
        return self.value


# ---------------------------------------------------------------------------
# Per-aggregate serialization
# ---------------------------------------------------------------------------
class AggregateLocks:
    """One lock per aggregate id, kept only while some call holds or awaits it."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._waiters: dict[str, int] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    def _acquire_entry(self, key) -> threading.Lock:
        with self._guard:
            self._waiters[key] = self._waiters.get(key, 0) + 1
            return self._locks.setdefault(key, threading.Lock())

    def _release_entry(self, key) -> None:
        with self._guard:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                del self._waiters[key]
                del self._locks[key]

    @contextmanager
    def hold(self, aggregate_id):
        key = str(aggregate_id)
        lock = self._acquire_entry(key)
        try:
            with lock:
                yield
        finally:
            self._release_entry(key)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------
class EngagementService:
    def __init__(self, locks: AggregateLocks | None = None, write_attempts: int | None = None) -> None:
        self.locks = AggregateLocks() if locks is None else locks
        self.write_attempts = write_attempts_from_env() if write_attempts is None else write_attempts

    # -------------------------------------------------------------------
    # Plumbing
    # -------------------------------------------------------------------
    def _process(self, operation, property_id, build_command):
        """Process a command, re-reading and retrying on version conflicts."""
        for attempt in range(1, self.write_attempts + 1):
            try:
                return current_domain.process(build_command(), asynchronous=False)
            except ExpectedVersionError:
                logger.warning(
                    "Version conflict on write",
                    operation=operation,
                    property_id=property_id,
                    attempt=attempt,
                )

        raise StoreUnavailableError(
            {"property": [f"Writes kept conflicting after {self.write_attempts} attempts, try again"]}
        )

    def _execute(self, operation, property_id, build_command, project) -> Outcome:
        try:
            if property_id is None:
                result = self._process(operation, property_id, build_command)
            else:
                with self.locks.hold(property_id):
                    result = self._process(operation, str(property_id), build_command)
            return Outcome.success(project(result))
        except DOMAIN_FAILURES as exc:
            return self._rejected(operation, property_id, exc)
        except STORE_FAILURES as exc:
            return self._store_failed(operation, property_id, exc)

    def _query(self, operation, property_id, read) -> Outcome:
        try:
            return Outcome.success(read())
        except DOMAIN_FAILURES as exc:
            return self._rejected(operation, property_id, exc)
        except STORE_FAILURES as exc:
            return self._store_failed(operation, property_id, exc)

    def _rejected(self, operation, property_id, exc) -> Outcome:
        outcome = Outcome.failure(exc)
        log = logger.warning if outcome.retryable else logger.info
        log(
            "Engagement operation rejected",
            operation=operation,
            property_id=str(property_id) if property_id is not None else None,
            kind=outcome.kind.value,
            messages=outcome.messages,
        )
        return outcome

    def _store_failed(self, operation, property_id, exc) -> Outcome:
        logger.error(
            "Aggregate store failure",
            operation=operation,
            property_id=str(property_id) if property_id is not None else None,
            error=str(exc),
            exc_info=True,
        )
        return Outcome.failure(StoreUnavailableError({"store": ["The property store is unavailable, try again"]}))

    def _require_user(self, operation, property_id, user_id) -> Outcome | None:
        if user_id is None or not str(user_id).strip():
            return self._rejected(
                operation,
                property_id,
                AuthRequiredError({"user": ["You must be signed in to do this"]}),
            )
        return None

    # -------------------------------------------------------------------
    # Listing lifecycle
    # -------------------------------------------------------------------
    def list_property(
        self,
        owner_id,
        title,
        property_type,
        description=None,
        price=None,
        currency="XAF",
        city=None,
    ) -> Outcome:
        if denied := self._require_user("list_property", None, owner_id):
            return denied

        def build():
            return ListProperty(
                owner_id=owner_id,
                title=title,
                property_type=property_type,
                description=description,
                price=price,
                currency=currency,
                city=city,
            )

        def project(property_id):
            return property_view(current_domain.repository_for(Property).get(property_id), owner_id)

        return self._execute("list_property", None, build, project)

    def get_property(self, property_id, viewer_id=None) -> Outcome:
        """Read the public view without touching any counter."""

        def read():
            return property_view(current_domain.repository_for(Property).get(property_id), viewer_id)

        return self._query("get_property", property_id, read)

    def delete_property(self, property_id, requester_id) -> Outcome:
        if denied := self._require_user("delete_property", property_id, requester_id):
            return denied

        outcome = self._execute(
            "delete_property",
            property_id,
            lambda: DeleteProperty(property_id=property_id, requester_id=requester_id),
            lambda _: None,
        )
        if outcome.ok:
            logger.info("Listing deleted", property_id=str(property_id), requester_id=str(requester_id))
        return outcome

    def boost_property(self, property_id, owner_id, days=DEFAULT_BOOST_DAYS) -> Outcome:
        if denied := self._require_user("boost_property", property_id, owner_id):
            return denied

        return self._execute(
            "boost_property",
            property_id,
            lambda: BoostProperty(property_id=property_id, owner_id=owner_id, days=days),
            lambda listing: property_view(listing, owner_id),
        )

    def attach_image(self, property_id, owner_id, url, storage_id) -> Outcome:
        if denied := self._require_user("attach_image", property_id, owner_id):
            return denied

        return self._execute(
            "attach_image",
            property_id,
            lambda: AttachImage(property_id=property_id, owner_id=owner_id, url=url, storage_id=storage_id),
            image_view,
        )

    def remove_image(self, property_id, owner_id, image_id) -> Outcome:
        if denied := self._require_user("remove_image", property_id, owner_id):
            return denied

        return self._execute(
            "remove_image",
            property_id,
            lambda: RemoveImage(property_id=property_id, owner_id=owner_id, image_id=image_id),
            lambda _: None,
        )

    # -------------------------------------------------------------------
    # Counters
    # -------------------------------------------------------------------
    def record_view(self, property_id, viewer_id=None, now=None) -> Outcome:
        """Count a view. Anonymous viewers are allowed."""
        return self._execute(
            "record_view",
            property_id,
            lambda: RecordView(property_id=property_id, viewer_id=viewer_id, viewed_at=now),
            lambda result: counters_view(*result),
        )

    def toggle_favorite(self, property_id, user_id) -> Outcome:
        if denied := self._require_user("toggle_favorite", property_id, user_id):
            return denied

        return self._execute(
            "toggle_favorite",
            property_id,
            lambda: ToggleFavorite(property_id=property_id, user_id=user_id),
            lambda listing: favorite_state(listing, user_id),
        )

    # -------------------------------------------------------------------
    # Reviews
    # -------------------------------------------------------------------
    def add_review(self, property_id, author_id, rating, comment) -> Outcome:
        if denied := self._require_user("add_review", property_id, author_id):
            return denied

        return self._execute(
            "add_review",
            property_id,
            lambda: AddReview(property_id=property_id, user_id=author_id, rating=rating, comment=comment),
            review_view,
        )

    def add_response(self, property_id, review_id, owner_id, text) -> Outcome:
        if denied := self._require_user("add_response", property_id, owner_id):
            return denied

        return self._execute(
            "add_response",
            property_id,
            lambda: AddResponse(
                property_id=property_id,
                review_id=review_id,
                owner_id=owner_id,
                response_text=text,
            ),
            response_view,
        )

    def delete_review(self, property_id, review_id, requester_id) -> Outcome:
        if denied := self._require_user("delete_review", property_id, requester_id):
            return denied

        return self._execute(
            "delete_review",
            property_id,
            lambda: DeleteReview(property_id=property_id, review_id=review_id, requester_id=requester_id),
            lambda _: None,
        )

    # -------------------------------------------------------------------
    # Moderation
    # -------------------------------------------------------------------
    def report_property(self, property_id, reporter_id, reason) -> Outcome:
        if denied := self._require_user("report_property", property_id, reporter_id):
            return denied

        return self._execute(
            "report_property",
            property_id,
            lambda: ReportProperty(property_id=property_id, reporter_id=reporter_id, reason=reason),
            lambda report: report_view(property_id, report),
        )

    def report_comment(self, property_id, review_id, reporter_id, reason) -> Outcome:
        if denied := self._require_user("report_comment", property_id, reporter_id):
            return denied

        return self._execute(
            "report_comment",
            property_id,
            lambda: ReportComment(
                property_id=property_id,
                review_id=review_id,
                reporter_id=reporter_id,
                reason=reason,
            ),
            lambda report: report_view(property_id, report),
        )

    # -------------------------------------------------------------------
    # Read models
    # -------------------------------------------------------------------
    def moderation_queue(self, property_id=None) -> Outcome:
        """Open reports, oldest first."""
        return self._query(
            "moderation_queue",
            property_id,
            lambda: [queued_report_view(record) for record in moderation_queue(property_id)],
        )

    def favorites_of(self, user_id) -> Outcome:
        """Property ids the user has favorited, most recent first."""
        if denied := self._require_user("favorites_of", None, user_id):
            return denied

        return self._query("favorites_of", None, lambda: favorites_of(user_id))
