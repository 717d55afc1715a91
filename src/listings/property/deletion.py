"""DeleteProperty — remove a listing with all of its reviews, responses and reports.

The aggregate detaches its children first so the repository drops them along
with the root. Stored images are released by the media handler on
``PropertyDeleted``.
"""

from protean.fields import Identifier
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from listings.domain import listings
from listings.property.property import Property


@listings.command(part_of="Property")
class DeleteProperty:
    property_id = Identifier(required=True)
    requester_id = Identifier(required=True)


@listings.command_handler(part_of=Property)
class DeletePropertyHandler:
    @handle(DeleteProperty)
    def delete_property(self, command):
        repo = current_domain.repository_for(Property)
        listing = repo.get(command.property_id)
        listing.mark_deleted(requester_id=command.requester_id)

        # Persist the detached children and queue the event, then drop the root
        repo.add(listing)
        repo._dao.delete(listing)
