"""ToggleFavorite — add a listing to, or remove it from, a user's favorites."""

from protean.fields import Identifier
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from listings.domain import listings
from listings.property.property import Property


@listings.command(part_of="Property")
class ToggleFavorite:
    property_id = Identifier(required=True)
    user_id = Identifier(required=True)


@listings.command_handler(part_of=Property)
class ToggleFavoriteHandler:
    @handle(ToggleFavorite)
    def toggle_favorite(self, command):
        repo = current_domain.repository_for(Property)
        listing = repo.get(command.property_id)
        listing.toggle_favorite(command.user_id)
        repo.add(listing)
        return listing
