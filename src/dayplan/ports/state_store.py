"""Key-value store interface for persisted planner state."""

from typing import Protocol


class KeyValueStore(Protocol):
    """String keys to JSON text, one whole value per key."""

    def get(self, key: str) -> str | None:
        """Read the value for a key. Returns None if not found."""
        ...

    def set(self, key: str, value: str) -> None:
        """Write/overwrite the value for a key."""
        ...
