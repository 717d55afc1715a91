"""In-memory media store for development and testing.

Records every release request so tests can assert on them, and can be
configured to fail for a given set of storage ids.
"""

from listings.media.port import MediaStore, ReleaseResult


class FakeMediaStore(MediaStore):
    """Configurable fake media store."""

    def __init__(self) -> None:
        self.failing_ids: set[str] = set()
        self.released: list[str] = []

    def configure(self, failing_ids: set[str] | None = None) -> None:
        """Make releases of ``failing_ids`` report failure."""
        self.failing_ids = set(failing_ids or ())

    def release(self, storage_id: str) -> ReleaseResult:
        if storage_id in self.failing_ids:
            return ReleaseResult(storage_id=storage_id, released=False, failure_reason="Storage unavailable")

        self.released.append(storage_id)
        return ReleaseResult(storage_id=storage_id, released=True)
