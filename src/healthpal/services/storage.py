"""Key-value persistence port."""

from typing import Protocol


class KeyValueStore(Protocol):
    """Simple string key-value store holding whole serialized blobs."""

    def get(self, key: str) -> str | None:
        """Return the stored blob for a key, if any."""

    def set(self, key: str, value: str) -> None:
        """Overwrite the blob stored under a key."""
