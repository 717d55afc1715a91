"""Owner-side listing commands: creating a listing and managing its visibility and images.

Listing returns the new property id. Every other command here is
restricted to the listing owner by the aggregate.
"""

from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from listings.domain import listings
from listings.property.property import DEFAULT_BOOST_DAYS, Property


@listings.command(part_of="Property")
class ListProperty:
    owner_id = Identifier(required=True)
    title = String(required=True, max_length=200)
    property_type = String(required=True, max_length=20)
    description = Text()
    price = Float()
    currency = String(max_length=3, default="XAF")
    city = String(max_length=100)


@listings.command(part_of="Property")
class BoostProperty:
    property_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    days = Integer(default=DEFAULT_BOOST_DAYS)


@listings.command(part_of="Property")
class AttachImage:
    property_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    url = String(required=True, max_length=500)
    storage_id = String(required=True, max_length=255)


@listings.command(part_of="Property")
class RemoveImage:
    property_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    image_id = Identifier(required=True)


@listings.command_handler(part_of=Property)
class ListingCommandHandler:
    @handle(ListProperty)
    def list_property(self, command):
        listing = Property.publish(
            owner_id=command.owner_id,
            title=command.title,
            property_type=command.property_type,
            description=command.description,
            price=command.price,
            currency=command.currency or "XAF",
            city=command.city,
        )
        current_domain.repository_for(Property).add(listing)
        return str(listing.id)

    @handle(BoostProperty)
    def boost_property(self, command):
        repo = current_domain.repository_for(Property)
        listing = repo.get(command.property_id)
        listing.boost(owner_id=command.owner_id, days=command.days)
        repo.add(listing)
        return listing

    @handle(AttachImage)
    def attach_image(self, command):
        repo = current_domain.repository_for(Property)
        listing = repo.get(command.property_id)
        image = listing.attach_image(
            owner_id=command.owner_id,
            url=command.url,
            storage_id=command.storage_id,
        )
        repo.add(listing)
        return image

    @handle(RemoveImage)
    def remove_image(self, command):
        repo = current_domain.repository_for(Property)
        listing = repo.get(command.property_id)
        listing.remove_image(owner_id=command.owner_id, image_id=command.image_id)
        repo.add(listing)
