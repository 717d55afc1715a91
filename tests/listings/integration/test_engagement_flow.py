"""End-to-end engagement on one listing through the service boundary."""

from datetime import UTC, datetime, timedelta

from listings.property.service import EngagementService


class TestEngagementFlow:
    def test_listing_lifecycle(self):
        service = EngagementService()
        property_id = service.list_property(
            owner_id="seller-001",
            title="Four-bedroom villa",
            property_type="House",
            price=150000000.0,
            city="Douala",
        ).value.id

        day_one = datetime(2026, 7, 1, 9, 0, tzinfo=UTC)
        service.record_view(property_id, "buyer-001", now=day_one)
        service.record_view(property_id, "buyer-002", now=day_one)
        service.record_view(property_id, "buyer-001", now=day_one + timedelta(days=1))
        service.toggle_favorite(property_id, "buyer-001")
        review_id = service.add_review(property_id, "buyer-002", 5, "Perfect for a family").value.id
        service.add_response(property_id, review_id, "seller-001", "Glad you liked it")
        service.report_comment(property_id, review_id, "buyer-003", "Looks sponsored")
        boosted = service.boost_property(property_id, "seller-001").value

        view = service.get_property(property_id, viewer_id="buyer-001").value
        assert view.views == 2
        assert view.views_today == 1
        assert view.favorites == 1
        assert view.is_favorited is True
        assert view.reviews[0].responses[0].response_text == "Glad you liked it"
        assert view.report_count == 1
        assert boosted.is_boosted is True

        assert service.delete_property(property_id, "seller-001").ok
        assert service.get_property(property_id).kind.value == "not_found"
        assert service.moderation_queue(property_id).value == []
