"""Property aggregate — a seller's listing and everything buyers do to it.

The Property aggregate is the single consistency boundary for engagement:
view counters, favorites, reviews with their owner responses, and the
moderation reports filed against the listing or its reviews. All of them
are read, mutated and written back together.

Counter rules:
    views         lifetime count, one increment per distinct viewer
                  (anonymous views always count)
    views_today   traffic of the current calendar day; every call increments,
                  reset to 0 when the day changes
    favorites     always equal to len(favorited_by); toggling twice restores

Review rules:
    - owners cannot review their own listing
    - at most one response per review, only from the listing owner

Reports are append-only and never de-duplicated.
"""

import json
from datetime import UTC, datetime, timedelta
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import (
    Date,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from listings.domain import listings
from listings.errors import ConflictError, ForbiddenError
from listings.property.events import (
    CommentReported,
    FavoriteToggled,
    ImageRemoved,
    PropertyBoosted,
    PropertyDeleted,
    PropertyListed,
    PropertyReported,
    ReviewAdded,
    ReviewDeleted,
    ReviewResponded,
)

MIN_RATING = 1
MAX_RATING = 5

DEFAULT_BOOST_DAYS = 7
MAX_BOOST_DAYS = 30


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class PropertyType(Enum):
    HOUSE = "House"
    APARTMENT = "Apartment"
    LAND = "Land"
    HOLIDAY = "Holiday"


class ListingStatus(Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    ONLINE = "Online"
    NEGOTIATION = "Negotiation"
    SOLD = "Sold"
    REMOVED = "Removed"


class ReportTarget(Enum):
    PROPERTY = "Property"
    COMMENT = "Comment"


def _is_blank(text):
    return text is None or not str(text).strip()


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@listings.value_object(part_of="Property")
class OwnerResponse:
    """The listing owner's answer to a review."""

    owner_id = Identifier(required=True)
    response_text = Text(required=True)
    created_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@listings.entity(part_of="Property")
class Review:
    """A buyer's rating and comment on the listing.

    ``response`` is either absent or holds the owner's single response.
    """

    user_id = Identifier(required=True)
    rating = Integer(required=True, min_value=MIN_RATING, max_value=MAX_RATING)
    comment = Text(required=True)
    created_at = DateTime(required=True)
    response = ValueObject(OwnerResponse)


@listings.entity(part_of="Property")
class Report:
    """A moderation flag on the listing itself or on one of its reviews."""

    target = String(choices=ReportTarget, required=True)
    review_id = Identifier()  # Set only for comment reports
    reported_by = Identifier(required=True)
    reason = Text(required=True)
    created_at = DateTime(required=True)


@listings.entity(part_of="Property")
class ListingImage:
    """An image reference held by the external media store."""

    url = String(required=True, max_length=500)
    storage_id = String(required=True, max_length=255)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@listings.aggregate
class Property:
    """A real-estate listing owned by exactly one seller."""

    owner_id = Identifier(required=True)

    # Listing details
    title = String(required=True, max_length=200)
    description = Text()
    property_type = String(choices=PropertyType, required=True)
    price = Float(min_value=0.0)
    currency = String(max_length=3, default="XAF")
    city = String(max_length=100)
    status = String(choices=ListingStatus, default=ListingStatus.APPROVED.value)
    boosted_until = DateTime()

    # Media
    images = HasMany(ListingImage)

    # Views
    views = Integer(default=0, min_value=0)
    views_today = Integer(default=0, min_value=0)
    views_today_date = Date()
    viewed_by = Text(default="[]")  # JSON array of user ids

    # Favorites
    favorites = Integer(default=0, min_value=0)
    favorited_by = Text(default="[]")  # JSON array of user ids

    # Engagement
    reviews = HasMany(Review)
    reports = HasMany(Report)

    # Timestamps
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def favorites_match_favorited_by(self):
        if self.favorites != len(self.favoriters()):
            raise ValidationError({"favorites": ["Favorite count must equal the number of users who favorited"]})

    @invariant.post
    def counted_users_are_unique(self):
        for field_name, members in (("viewed_by", self.viewers()), ("favorited_by", self.favoriters())):
            if len(set(members)) != len(members):
                raise ValidationError({field_name: ["A user can only be counted once"]})

    @invariant.post
    def comment_reports_reference_a_review(self):
        for report in self.reports:
            if report.target == ReportTarget.COMMENT.value and not report.review_id:
                raise ValidationError({"reports": ["Comment reports must reference a review"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def publish(
        cls,
        owner_id,
        title,
        property_type,
        description=None,
        price=None,
        currency="XAF",
        city=None,
    ):
        """Publish a new listing for ``owner_id``."""
        now = datetime.now(UTC)

        listing = cls(
            owner_id=owner_id,
            title=title,
            description=description,
            property_type=property_type,
            price=price,
            currency=currency,
            city=city,
            status=ListingStatus.APPROVED.value,
            views=0,
            views_today=0,
            viewed_by=json.dumps([]),
            favorites=0,
            favorited_by=json.dumps([]),
            created_at=now,
            updated_at=now,
        )

        listing.raise_(
            PropertyListed(
                property_id=str(listing.id),
                owner_id=str(owner_id),
                title=title,
                property_type=property_type,
                listed_at=now,
            )
        )

        return listing

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def is_owned_by(self, user_id):
        return user_id is not None and str(user_id) == str(self.owner_id)

    def viewers(self):
        return json.loads(self.viewed_by) if self.viewed_by else []

    def favoriters(self):
        return json.loads(self.favorited_by) if self.favorited_by else []

    def is_favorited_by(self, user_id):
        return user_id is not None and str(user_id) in self.favoriters()

    def find_review(self, review_id):
        """Return the review with ``review_id`` or raise ``ObjectNotFoundError``."""
        review = next((r for r in self.reviews if str(r.id) == str(review_id)), None)
        if review is None:
            raise ObjectNotFoundError({"review": [f"Review {review_id} does not exist"]})
        return review

    def property_reports(self):
        return [r for r in self.reports if r.target == ReportTarget.PROPERTY.value]

    def comment_reports(self, review_id):
        return [
            r for r in self.reports if r.target == ReportTarget.COMMENT.value and str(r.review_id) == str(review_id)
        ]

    # -------------------------------------------------------------------
    # Counters
    # -------------------------------------------------------------------
    def record_view(self, viewer_id=None, now=None):
        """Count a page view.

        The lifetime counter moves once per distinct viewer. The daily counter
        moves on every call after resetting on a new calendar day. Returns
        True when the lifetime counter moved.
        """
        now = now or datetime.now(UTC)
        today = now.date()
        viewers = self.viewers()
        first_view = viewer_id is None or str(viewer_id) not in viewers

        with atomic_change(self):
            if self.views_today_date != today:
                self.views_today = 0
                self.views_today_date = today
            self.views_today = self.views_today + 1

            if first_view:
                self.views = self.views + 1
                if viewer_id is not None:
                    self.viewed_by = json.dumps(viewers + [str(viewer_id)])

        return first_view

    def toggle_favorite(self, user_id):
        """Add ``user_id`` to the favorites, or remove it if already there.

        Returns True when the listing is now favorited by the user.
        """
        user_id = str(user_id)
        favoriters = self.favoriters()
        now = datetime.now(UTC)

        with atomic_change(self):
            if user_id in favoriters:
                favoriters.remove(user_id)
                self.favorites = max(self.favorites - 1, 0)
                favorited = False
            else:
                favoriters.append(user_id)
                self.favorites = self.favorites + 1
                favorited = True
            self.favorited_by = json.dumps(favoriters)
            self.updated_at = now

        self.raise_(
            FavoriteToggled(
                property_id=str(self.id),
                user_id=user_id,
                favorited=favorited,
                favorites=self.favorites,
                toggled_at=now,
            )
        )

        return favorited

    # -------------------------------------------------------------------
    # Reviews
    # -------------------------------------------------------------------
    def add_review(self, user_id, rating, comment, now=None):
        """Append a review. A user may review the same listing more than once."""
        if self.is_owned_by(user_id):
            raise ForbiddenError({"review": ["Owners cannot review their own listing"]})

        if rating is None or not MIN_RATING <= rating <= MAX_RATING:
            raise ValidationError({"rating": [f"Rating must be between {MIN_RATING} and {MAX_RATING}"]})

        if _is_blank(comment):
            raise ValidationError({"comment": ["Comment cannot be empty"]})

        now = now or datetime.now(UTC)

        review = Review(
            user_id=user_id,
            rating=rating,
            comment=comment,
            created_at=now,
        )
        self.add_reviews(review)
        self.updated_at = now

        self.raise_(
            ReviewAdded(
                property_id=str(self.id),
                review_id=str(review.id),
                user_id=str(user_id),
                rating=rating,
                comment=comment,
                reviewed_at=now,
            )
        )

        return review

    def add_response(self, review_id, owner_id, response_text, now=None):
        """Attach the owner's single response to a review."""
        if not self.is_owned_by(owner_id):
            raise ForbiddenError({"response": ["Only the listing owner can respond to reviews"]})

        review = self.find_review(review_id)

        if review.response is not None:
            raise ConflictError({"response": ["A review can have at most one owner response"]})

        if _is_blank(response_text):
            raise ValidationError({"response_text": ["Response cannot be empty"]})

        now = now or datetime.now(UTC)
        response = OwnerResponse(
            owner_id=owner_id,
            response_text=response_text.strip(),
            created_at=now,
        )
        review.response = response
        self.updated_at = now

        self.raise_(
            ReviewResponded(
                property_id=str(self.id),
                review_id=str(review.id),
                owner_id=str(owner_id),
                response_text=response.response_text,
                responded_at=now,
            )
        )

        return response

    def delete_review(self, review_id, requester_id):
        """Remove a review. Allowed for the listing owner and the review's author.

        Reports filed against the review stay on the listing.
        """
        review = self.find_review(review_id)

        if not (self.is_owned_by(requester_id) or str(requester_id) == str(review.user_id)):
            raise ForbiddenError({"review": ["Only the listing owner or the author can delete a review"]})

        now = datetime.now(UTC)
        self.remove_reviews(review)
        self.updated_at = now

        self.raise_(
            ReviewDeleted(
                property_id=str(self.id),
                review_id=str(review_id),
                deleted_by=str(requester_id),
                deleted_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Moderation
    # -------------------------------------------------------------------
    def report_property(self, reporter_id, reason, now=None):
        """Flag the listing for human moderation."""
        if _is_blank(reason):
            raise ValidationError({"reason": ["Report reason is required"]})

        now = now or datetime.now(UTC)
        report = Report(
            target=ReportTarget.PROPERTY.value,
            reported_by=reporter_id,
            reason=reason.strip(),
            created_at=now,
        )
        self.add_reports(report)
        self.updated_at = now

        self.raise_(
            PropertyReported(
                property_id=str(self.id),
                report_id=str(report.id),
                reported_by=str(reporter_id),
                reason=report.reason,
                reported_at=now,
            )
        )

        return report

    def report_comment(self, review_id, reporter_id, reason, now=None):
        """Flag one of the listing's reviews for human moderation."""
        review = self.find_review(review_id)

        if _is_blank(reason):
            raise ValidationError({"reason": ["Report reason is required"]})

        now = now or datetime.now(UTC)
        report = Report(
            target=ReportTarget.COMMENT.value,
            review_id=review.id,
            reported_by=reporter_id,
            reason=reason.strip(),
            created_at=now,
        )
        self.add_reports(report)
        self.updated_at = now

        self.raise_(
            CommentReported(
                property_id=str(self.id),
                review_id=str(review.id),
                report_id=str(report.id),
                reported_by=str(reporter_id),
                reason=report.reason,
                reported_at=now,
            )
        )

        return report

    # -------------------------------------------------------------------
    # Owner actions
    # -------------------------------------------------------------------
    def _assert_owner(self, user_id, action):
        if not self.is_owned_by(user_id):
            raise ForbiddenError({"property": [f"Only the listing owner can {action}"]})

    def boost(self, owner_id, days=DEFAULT_BOOST_DAYS, now=None):
        """Raise the listing's visibility for ``days`` days from now."""
        self._assert_owner(owner_id, "boost it")

        if days is None or not 1 <= days <= MAX_BOOST_DAYS:
            raise ValidationError({"days": [f"Boost duration must be between 1 and {MAX_BOOST_DAYS} days"]})

        now = now or datetime.now(UTC)
        self.boosted_until = now + timedelta(days=days)
        self.updated_at = now

        self.raise_(
            PropertyBoosted(
                property_id=str(self.id),
                owner_id=str(owner_id),
                boosted_until=self.boosted_until,
            )
        )

    def is_boosted(self, now=None):
        if self.boosted_until is None:
            return False
        return self.boosted_until > (now or datetime.now(UTC))

    def attach_image(self, owner_id, url, storage_id):
        """Reference an image already uploaded to the media store."""
        self._assert_owner(owner_id, "add images")

        if _is_blank(url) or _is_blank(storage_id):
            raise ValidationError({"images": ["Image URL and storage id are required"]})

        image = ListingImage(url=url, storage_id=storage_id)
        self.add_images(image)
        self.updated_at = datetime.now(UTC)
        return image

    def remove_image(self, owner_id, image_id):
        self._assert_owner(owner_id, "remove images")

        image = next((i for i in self.images if str(i.id) == str(image_id)), None)
        if image is None:
            raise ObjectNotFoundError({"image": [f"Image {image_id} does not exist"]})

        now = datetime.now(UTC)
        self.remove_images(image)
        self.updated_at = now

        self.raise_(
            ImageRemoved(
                property_id=str(self.id),
                image_id=str(image_id),
                storage_id=image.storage_id,
                removed_at=now,
            )
        )

    def mark_deleted(self, requester_id):
        """Detach every review, report and image ahead of removing the listing."""
        self._assert_owner(requester_id, "delete it")

        storage_ids = [image.storage_id for image in self.images]
        now = datetime.now(UTC)

        with atomic_change(self):
            for review in list(self.reviews):
                self.remove_reviews(review)
            for report in list(self.reports):
                self.remove_reports(report)
            for image in list(self.images):
                self.remove_images(image)
            self.status = ListingStatus.REMOVED.value
            self.updated_at = now

        self.raise_(
            PropertyDeleted(
                property_id=str(self.id),
                owner_id=str(self.owner_id),
                storage_ids=json.dumps(storage_ids),
                deleted_at=now,
            )
        )
