"""Release stored image files once the listing no longer references them.

Release failures are logged and never undo the domain change: the listing is
already consistent, and an orphaned file is only wasted storage.
"""

import json

import structlog
from protean.utils.mixins import handle

from listings.domain import listings
from listings.media import get_media_store
from listings.property.events import ImageRemoved, PropertyDeleted
from listings.property.property import Property

logger = structlog.get_logger(__name__)


def _release(storage_ids, property_id):
    store = get_media_store()
    for storage_id in storage_ids:
        result = store.release(storage_id)
        if not result.released:
            logger.warning(
                "Failed to release stored image",
                property_id=property_id,
                storage_id=storage_id,
                reason=result.failure_reason,
            )


@listings.event_handler(part_of=Property)
class MediaCleanupHandler:
    """Releases media for detached images and deleted listings."""

    @handle(ImageRemoved)
    def on_image_removed(self, event: ImageRemoved) -> None:
        _release([event.storage_id], str(event.property_id))

    @handle(PropertyDeleted)
    def on_property_deleted(self, event: PropertyDeleted) -> None:
        storage_ids = json.loads(event.storage_ids) if event.storage_ids else []
        _release(storage_ids, str(event.property_id))
        logger.info(
            "Released media for deleted listing",
            property_id=str(event.property_id),
            images=len(storage_ids),
        )
