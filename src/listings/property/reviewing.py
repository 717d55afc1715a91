"""AddReview and DeleteReview — buyer reviews on a listing.

A user may review the same listing repeatedly; owners may not review their own.
Deletion is open to the listing owner and to the review's author.
"""

from protean.fields import Identifier, Integer, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from listings.domain import listings
from listings.property.property import Property


@listings.command(part_of="Property")
class AddReview:
    property_id = Identifier(required=True)
    user_id = Identifier(required=True)
    rating = Integer(required=True)
    comment = Text()


@listings.command(part_of="Property")
class DeleteReview:
    property_id = Identifier(required=True)
    review_id = Identifier(required=True)
    requester_id = Identifier(required=True)


@listings.command_handler(part_of=Property)
class ReviewCommandHandler:
    @handle(AddReview)
    def add_review(self, command):
        repo = current_domain.repository_for(Property)
        listing = repo.get(command.property_id)
        review = listing.add_review(
            user_id=command.user_id,
            rating=command.rating,
            comment=command.comment,
        )
        repo.add(listing)
        return review

    @handle(DeleteReview)
    def delete_review(self, command):
        repo = current_domain.repository_for(Property)
        listing = repo.get(command.property_id)
        listing.delete_review(review_id=command.review_id, requester_id=command.requester_id)
        repo.add(listing)
