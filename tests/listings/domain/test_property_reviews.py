"""Tests for reviews and owner responses on the Property aggregate."""

import pytest
from protean.exceptions import ObjectNotFoundError, ValidationError

from listings.errors import ConflictError, ForbiddenError
from listings.property.events import ReviewAdded, ReviewDeleted, ReviewResponded
from listings.property.property import Property, PropertyType


def _listing(**overrides):
    defaults = {
        "owner_id": "seller-001",
        "title": "Studio near Bastos",
        "property_type": PropertyType.APARTMENT.value,
        "price": 150000.0,
        "city": "Yaounde",
    }
    defaults.update(overrides)
    listing = Property.publish(**defaults)
    listing._events.clear()
    return listing


def _reviewed_listing():
    listing = _listing()
    review = listing.add_review(user_id="buyer-001", rating=4, comment="Bright and quiet")
    listing._events.clear()
    return listing, review


class TestAddReview:
    def test_review_appended(self):
        listing = _listing()
        review = listing.add_review(user_id="buyer-001", rating=5, comment="Lovely place")
        assert len(listing.reviews) == 1
        assert str(review.user_id) == "buyer-001"
        assert review.rating == 5
        assert review.comment == "Lovely place"
        assert review.created_at is not None
        assert review.response is None

    def test_review_raises_event(self):
        listing = _listing()
        review = listing.add_review(user_id="buyer-001", rating=3, comment="Okay")
        event = listing._events[-1]
        assert isinstance(event, ReviewAdded)
        assert event.review_id == str(review.id)
        assert event.rating == 3

    def test_same_author_may_review_twice(self):
        listing = _listing()
        listing.add_review(user_id="buyer-001", rating=4, comment="First visit")
        listing.add_review(user_id="buyer-001", rating=2, comment="Second visit")
        assert len(listing.reviews) == 2

    @pytest.mark.parametrize("rating", [0, 6, -1])
    def test_rating_out_of_range_rejected(self, rating):
        listing = _listing()
        with pytest.raises(ValidationError) as exc:
            listing.add_review(user_id="buyer-001", rating=rating, comment="nice")
        assert "rating" in exc.value.messages
        assert len(listing.reviews) == 0

    @pytest.mark.parametrize("comment", ["", "   ", None])
    def test_empty_comment_rejected(self, comment):
        listing = _listing()
        with pytest.raises(ValidationError) as exc:
            listing.add_review(user_id="buyer-001", rating=4, comment=comment)
        assert "comment" in exc.value.messages

    def test_owner_cannot_review_own_listing(self):
        listing = _listing()
        with pytest.raises(ForbiddenError):
            listing.add_review(user_id="seller-001", rating=5, comment="Best house ever")

    def test_owner_check_comes_before_validation(self):
        listing = _listing()
        with pytest.raises(ForbiddenError):
            listing.add_review(user_id="seller-001", rating=9, comment="")


class TestAddResponse:
    def test_owner_responds_once(self):
        listing, review = _reviewed_listing()
        response = listing.add_response(review.id, "seller-001", "  Thanks!  ")
        assert response.response_text == "Thanks!"
        assert str(response.owner_id) == "seller-001"
        assert listing.find_review(review.id).response == response

    def test_response_raises_event(self):
        listing, review = _reviewed_listing()
        listing.add_response(review.id, "seller-001", "Thanks!")
        event = listing._events[-1]
        assert isinstance(event, ReviewResponded)
        assert event.review_id == str(review.id)

    def test_second_response_conflicts(self):
        listing, review = _reviewed_listing()
        listing.add_response(review.id, "seller-001", "Thanks!")
        with pytest.raises(ConflictError):
            listing.add_response(review.id, "seller-001", "Again")
        assert listing.find_review(review.id).response.response_text == "Thanks!"

    def test_non_owner_forbidden(self):
        listing, review = _reviewed_listing()
        with pytest.raises(ForbiddenError):
            listing.add_response(review.id, "buyer-002", "I agree")

    def test_non_owner_forbidden_even_after_response(self):
        listing, review = _reviewed_listing()
        listing.add_response(review.id, "seller-001", "Thanks!")
        with pytest.raises(ForbiddenError):
            listing.add_response(review.id, "buyer-002", "Me too")

    def test_non_owner_forbidden_for_unknown_review(self):
        listing, _ = _reviewed_listing()
        with pytest.raises(ForbiddenError):
            listing.add_response("missing-review", "buyer-002", "Hello")

    def test_unknown_review_not_found(self):
        listing, _ = _reviewed_listing()
        with pytest.raises(ObjectNotFoundError):
            listing.add_response("missing-review", "seller-001", "Thanks!")

    def test_empty_text_rejected(self):
        listing, review = _reviewed_listing()
        with pytest.raises(ValidationError) as exc:
            listing.add_response(review.id, "seller-001", "   ")
        assert "response_text" in exc.value.messages
        assert listing.find_review(review.id).response is None


class TestDeleteReview:
    def test_author_can_delete(self):
        listing, review = _reviewed_listing()
        listing.delete_review(review.id, "buyer-001")
        assert len(listing.reviews) == 0
        assert isinstance(listing._events[-1], ReviewDeleted)

    def test_owner_can_delete(self):
        listing, review = _reviewed_listing()
        listing.delete_review(review.id, "seller-001")
        assert len(listing.reviews) == 0

    def test_stranger_cannot_delete(self):
        listing, review = _reviewed_listing()
        with pytest.raises(ForbiddenError):
            listing.delete_review(review.id, "buyer-999")
        assert len(listing.reviews) == 1

    def test_unknown_review_not_found(self):
        listing, _ = _reviewed_listing()
        with pytest.raises(ObjectNotFoundError):
            listing.delete_review("missing-review", "seller-001")

    def test_reports_on_deleted_review_are_kept(self):
        listing, review = _reviewed_listing()
        listing.report_comment(review.id, "buyer-002", "spam")
        listing.delete_review(review.id, "seller-001")
        assert len(listing.reports) == 1
