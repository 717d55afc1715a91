"""Domain events for the Property aggregate.

All events are versioned, immutable facts representing state changes.
Events are used for updating the moderation queue and favorites projections.
View counting raises no event; it is high-volume traffic, not a fact other
parts of the system react to.
"""

from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text

from listings.domain import listings


@listings.event(part_of="Property")
class PropertyListed:
    """A seller published a new listing."""

    __version__ = 1

    property_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    title = String(required=True)
    property_type = String(required=True)
    listed_at = DateTime(required=True)


@listings.event(part_of="Property")
class FavoriteToggled:
    """A buyer added the listing to, or removed it from, their favorites."""

    __version__ = 1

    property_id = Identifier(required=True)
    user_id = Identifier(required=True)
    favorited = Boolean(required=True)
    favorites = Integer(required=True)
    toggled_at = DateTime(required=True)


@listings.event(part_of="Property")
class ReviewAdded:
    """A buyer reviewed the listing."""

    __version__ = 1

    property_id = Identifier(required=True)
    review_id = Identifier(required=True)
    user_id = Identifier(required=True)
    rating = Integer(required=True)
    comment = Text(required=True)
    reviewed_at = DateTime(required=True)


@listings.event(part_of="Property")
class ReviewResponded:
    """The listing owner answered a review."""

    __version__ = 1

    property_id = Identifier(required=True)
    review_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    response_text = Text(required=True)
    responded_at = DateTime(required=True)


@listings.event(part_of="Property")
class ReviewDeleted:
    """A review was deleted by the listing owner or its author."""

    __version__ = 1

    property_id = Identifier(required=True)
    review_id = Identifier(required=True)
    deleted_by = Identifier(required=True)
    deleted_at = DateTime(required=True)


@listings.event(part_of="Property")
class PropertyReported:
    """A user flagged the listing for moderation."""

    __version__ = 1

    property_id = Identifier(required=True)
    report_id = Identifier(required=True)
    reported_by = Identifier(required=True)
    reason = Text(required=True)
    reported_at = DateTime(required=True)


@listings.event(part_of="Property")
class CommentReported:
    """A user flagged one of the listing's reviews for moderation."""

    __version__ = 1

    property_id = Identifier(required=True)
    review_id = Identifier(required=True)
    report_id = Identifier(required=True)
    reported_by = Identifier(required=True)
    reason = Text(required=True)
    reported_at = DateTime(required=True)


@listings.event(part_of="Property")
class PropertyBoosted:
    """The owner boosted the listing's visibility until a given time."""

    __version__ = 1

    property_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    boosted_until = DateTime(required=True)


@listings.event(part_of="Property")
class ImageRemoved:
    """An image was detached from the listing; its stored file can be released."""

    __version__ = 1

    property_id = Identifier(required=True)
    image_id = Identifier(required=True)
    storage_id = String(required=True)
    removed_at = DateTime(required=True)


@listings.event(part_of="Property")
class PropertyDeleted:
    """The listing was deleted together with its reviews, responses and reports."""

    __version__ = 1

    property_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    storage_ids = Text()  # JSON array of media storage identifiers
    deleted_at = DateTime(required=True)
