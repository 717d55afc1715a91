"""Media store port (abstract interface).

Listing images live in an external store. The domain only keeps their URL and
storage id, and asks the store to release the stored file when an image is
detached or its listing is deleted.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ReleaseResult:
    """Result of asking the store to release a stored file."""

    storage_id: str
    released: bool
    failure_reason: str | None = None


class MediaStore(ABC):
    """Abstract media store interface."""

    @abstractmethod
    def release(self, storage_id: str) -> ReleaseResult:
        """Delete the stored file identified by ``storage_id``."""
        ...
