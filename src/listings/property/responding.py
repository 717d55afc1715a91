"""AddResponse — the listing owner answers a review, once."""

from protean.fields import Identifier, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from listings.domain import listings
from listings.property.property import Property


@listings.command(part_of="Property")
class AddResponse:
    property_id = Identifier(required=True)
    review_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    response_text = Text()


@listings.command_handler(part_of=Property)
class AddResponseHandler:
    @handle(AddResponse)
    def add_response(self, command):
        repo = current_domain.repository_for(Property)
        listing = repo.get(command.property_id)
        response = listing.add_response(
            review_id=command.review_id,
            owner_id=command.owner_id,
            response_text=command.response_text,
        )
        repo.add(listing)
        return response
