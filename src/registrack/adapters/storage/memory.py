"""In-process storage, for tests and short-lived sessions."""

from __future__ import annotations

from collections.abc import Sequence


class InMemoryKeyValueStore:
    """Plain key-value store backed by a dict."""

    def __init__(self, initial: dict[str, str] | None = None):
        """Initialize the store, optionally with initial values."""
        self.data: dict[str, str] = dict(initial or {})

    async def multi_set(self, entries: Sequence[tuple[str, str]]) -> None:
        """Write several keys."""
        for key, value in entries:
            self.data[key] = value

    async def multi_get(self, keys: Sequence[str]) -> list[tuple[str, str | None]]:
        """Read several keys; missing keys read as None."""
        return [(key, self.data.get(key)) for key in keys]

    async def multi_remove(self, keys: Sequence[str]) -> None:
        """Remove several keys; absent keys are ignored."""
        for key in keys:
            self.data.pop(key, None)


class InMemorySecretStore:
    """Secret store backed by a dict. Holds values in clear; not for production."""

    def __init__(self) -> None:
        """Initialize an empty store."""
        self.data: dict[str, str] = {}

    async def set_item(self, key: str, value: str) -> None:
        """Store a secret."""
        self.data[key] = value

    async def get_item(self, key: str) -> str | None:
        """Return a secret, or None."""
        return self.data.get(key)

    async def delete_item(self, key: str) -> None:
        """Delete a secret; absent keys are ignored."""
        self.data.pop(key, None)
