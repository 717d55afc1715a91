"""RecordView — count a page view of a listing.

Anonymous viewers (no ``viewer_id``) always count toward both counters.
"""

from protean.fields import DateTime, Identifier
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from listings.domain import listings
from listings.property.property import Property


@listings.command(part_of="Property")
class RecordView:
    property_id = Identifier(required=True)
    viewer_id = Identifier()
    viewed_at = DateTime()


@listings.command_handler(part_of=Property)
class RecordViewHandler:
    @handle(RecordView)
    def record_view(self, command):
        repo = current_domain.repository_for(Property)
        listing = repo.get(command.property_id)
        counted = listing.record_view(viewer_id=command.viewer_id, now=command.viewed_at)
        repo.add(listing)
        return listing, counted
