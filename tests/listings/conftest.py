import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def listings_bed():
    from listings.domain import listings
    from listings.utils.db import drop_db, setup_db

    bed = DomainFixture(listings)
    bed.setup()
    setup_db(listings)

    yield bed

    drop_db(listings)
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(listings_bed):
    with listings_bed.domain_context():
        yield

        from listings.media import reset_media_store

        # Clear all databases
        for _, provider in current_domain.providers.items():
            provider._data_reset()

        # Drain event stores
        current_domain.event_store.store._data_reset()

        reset_media_store()
