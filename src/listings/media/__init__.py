"""Media store factory.

Provides get_media_store() / set_media_store() to swap implementations.
Defaults to the in-memory FakeMediaStore.
"""

from listings.media.fake_adapter import FakeMediaStore
from listings.media.port import MediaStore

_current_store: MediaStore | None = None


def get_media_store() -> MediaStore:
    """Return the current media store. Defaults to FakeMediaStore."""
    global _current_store
    if _current_store is None:
        _current_store = FakeMediaStore()
    return _current_store


def set_media_store(store: MediaStore) -> None:
    """Override the active media store (useful for tests)."""
    global _current_store
    _current_store = store


def reset_media_store() -> None:
    """Reset to default media store."""
    global _current_store
    _current_store = None
