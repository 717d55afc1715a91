"""ModerationQueue — open reports on listings and their reviews, one row per report."""

from protean.core.projector import on
from protean.fields import DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from listings.domain import listings
from listings.property.events import (
    CommentReported,
    PropertyDeleted,
    PropertyReported,
    ReviewDeleted,
)
from listings.property.property import Property, ReportTarget


@listings.projection
class ModerationQueue:
    report_id = Identifier(identifier=True, required=True)
    property_id = Identifier(required=True)
    review_id = Identifier()
    target = String(required=True, max_length=20)
    reported_by = Identifier(required=True)
    reason = Text(required=True)
    reported_at = DateTime()


@listings.projector(projector_for=ModerationQueue, aggregates=[Property])
class ModerationQueueProjector:
    @on(PropertyReported)
    def on_property_reported(self, event):
        current_domain.repository_for(ModerationQueue).add(
            ModerationQueue(
                report_id=event.report_id,
                property_id=event.property_id,
                target=ReportTarget.PROPERTY.value,
                reported_by=event.reported_by,
                reason=event.reason,
                reported_at=event.reported_at,
            )
        )

    @on(CommentReported)
    def on_comment_reported(self, event):
        current_domain.repository_for(ModerationQueue).add(
            ModerationQueue(
                report_id=event.report_id,
                property_id=event.property_id,
                review_id=event.review_id,
                target=ReportTarget.COMMENT.value,
                reported_by=event.reported_by,
                reason=event.reason,
                reported_at=event.reported_at,
            )
        )

    def _drop(self, **filters):
        repo = current_domain.repository_for(ModerationQueue)
        for record in repo._dao.query.filter(**filters).all().items:
            repo._dao.delete(record)

    @on(ReviewDeleted)
    def on_review_deleted(self, event):
        # A deleted review leaves nothing to moderate
        self._drop(review_id=str(event.review_id))

    @on(PropertyDeleted)
    def on_property_deleted(self, event):
        self._drop(property_id=str(event.property_id))


def moderation_queue(property_id=None):
    """Open reports, oldest first, optionally limited to one listing."""
    repo = current_domain.repository_for(ModerationQueue)
    query = repo._dao.query
    if property_id is not None:
        query = query.filter(property_id=str(property_id))
    return sorted(query.all().items, key=lambda r: r.reported_at)
