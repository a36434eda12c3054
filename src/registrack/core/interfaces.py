"""Protocol definitions for external storage collaborators.

The core only depends on these protocols, never on concrete
implementations. Adapters live in registrack.adapters.storage.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable


@runtime_checkable
class KeyValueStore(Protocol):
    """Plain persisted key-value storage with string values.

    Implementations must tolerate removing keys that were never set.
    """

    async def multi_set(self, entries: Sequence[tuple[str, str]]) -> None:
        """Write several entries.

        Args:
            entries: (key, value) pairs to store.
        """
        ...

    async def multi_get(self, keys: Sequence[str]) -> list[tuple[str, str | None]]:
        """Read several keys.

        Args:
            keys: Keys to read.

        Returns:
            (key, value) pairs in the order requested; missing keys map to None.
        """
        ...

    async def multi_remove(self, keys: Sequence[str]) -> None:
        """Remove several keys.

        Args:
            keys: Keys to remove.
        """
        ...


@runtime_checkable
class SecretStore(Protocol):
    """Encrypted storage for a small number of secrets."""

    async def set_item(self, key: str, value: str) -> None:
        """Store a secret."""
        ...

    async def get_item(self, key: str) -> str | None:
        """Read a secret, or None if absent."""
        ...

    async def delete_item(self, key: str) -> None:
        """Delete a secret; absent keys are ignored."""
        ...
