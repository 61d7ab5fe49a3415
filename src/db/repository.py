"""Protocol repository: all the engine needs from persistence is a key-value blob store."""

from typing import Protocol


class BlobStore(Protocol):
    """Persistence layer orchestration"""

    def get(self, key: str) -> str | None:
        """Get the blob stored under key, if a record exists."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store (or overwrite) the blob under key."""
        ...
