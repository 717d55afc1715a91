"""UserFavorites — the listings each user has favorited."""

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Identifier
from protean.utils.globals import current_domain

from listings.domain import listings
from listings.property.events import FavoriteToggled, PropertyDeleted
from listings.property.property import Property


def favorite_key(user_id, property_id):
    return f"{user_id}:{property_id}"


@listings.projection
class UserFavorites:
    favorite_id = Identifier(identifier=True, required=True)
    user_id = Identifier(required=True)
    property_id = Identifier(required=True)
    favorited_at = DateTime()


@listings.projector(projector_for=UserFavorites, aggregates=[Property])
class UserFavoritesProjector:
    @on(FavoriteToggled)
    def on_favorite_toggled(self, event):
        repo = current_domain.repository_for(UserFavorites)
        key = favorite_key(event.user_id, event.property_id)

        if event.favorited:
            repo.add(
                UserFavorites(
                    favorite_id=key,
                    user_id=event.user_id,
                    property_id=event.property_id,
                    favorited_at=event.toggled_at,
                )
            )
            return

        try:
            repo._dao.delete(repo.get(key))
        except ObjectNotFoundError:
            pass

    @on(PropertyDeleted)
    def on_property_deleted(self, event):
        repo = current_domain.repository_for(UserFavorites)
        for record in repo._dao.query.filter(property_id=str(event.property_id)).all().items:
            repo._dao.delete(record)


def favorites_of(user_id):
    """Property ids favorited by ``user_id``, most recent first."""
    repo = current_domain.repository_for(UserFavorites)
    records = repo._dao.query.filter(user_id=str(user_id)).all().items
    return [str(r.property_id) for r in sorted(records, key=lambda r: r.favorited_at, reverse=True)]
