"""Shared BDD fixtures and step definitions for the listings domain."""

import pytest
from pytest_bdd import given, parsers, then, when

from listings.property.service import EngagementService


@pytest.fixture()
def service():
    return EngagementService()


@pytest.fixture()
def outcome():
    """Container for the most recent service outcome."""
    return {"last": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(
    parsers.cfparse('a listing owned by seller "{owner_id}" with no favorites'),
    target_fixture="listing",
)
def listing_owned_by(service, owner_id):
    view = service.list_property(owner_id=owner_id, title="BDD listing", property_type="House").value
    assert view.favorites == 0
    return {"id": view.id, "owner_id": owner_id}


@given(
    parsers.cfparse('a listing owned by seller "{owner_id}" with a review by "{author_id}"'),
    target_fixture="listing",
)
def listing_with_review(service, owner_id, author_id):
    view = service.list_property(owner_id=owner_id, title="BDD listing", property_type="House").value
    review = service.add_review(view.id, author_id, 4, "Nice place").value
    return {"id": view.id, "owner_id": owner_id, "review_id": review.id}


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('seller "{owner_id}" responds "{text}" to the review'))
def respond_to_review(service, listing, outcome, owner_id, text):
    outcome["last"] = service.add_response(listing["id"], listing["review_id"], owner_id, text)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the operation fails with "{kind}"'))
def operation_fails_with(outcome, kind):
    assert outcome["last"] is not None
    assert not outcome["last"].ok
    assert outcome["last"].kind.value == kind


@then("the response succeeds")
def response_succeeds(outcome):
    assert outcome["last"].ok, outcome["last"].messages
