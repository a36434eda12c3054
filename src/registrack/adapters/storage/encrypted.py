"""Fernet-encrypted secret store."""

from __future__ import annotations

from cryptography.fernet import Fernet, InvalidToken

from registrack.core.exceptions import SecretStoreError
from registrack.core.interfaces import KeyValueStore

SECRET_KEY_PREFIX = "secure:"


class FernetSecretStore:
    """Secret store that encrypts values before handing them to a key-value store.

    Secrets are namespaced under a prefix so the backing store may also
    hold other keys.
    """

    def __init__(self, backend: KeyValueStore, encryption_key: str | bytes):
        """Initialize the secret store.

        Args:
            backend: Store holding the ciphertexts.
            encryption_key: Fernet key (urlsafe base64, 32 bytes).

        Raises:
            SecretStoreError: If the key is not a valid Fernet key.
        """
        key = encryption_key.encode() if isinstance(encryption_key, str) else encryption_key
        try:
            self._fernet = Fernet(key)
        except ValueError as e:
            raise SecretStoreError(f"Invalid encryption key: {e}") from e
        self._backend = backend

    @staticmethod
    def generate_key() -> str:
        """Create a new random Fernet key."""
        return Fernet.generate_key().decode()

    async def set_item(self, key: str, value: str) -> None:
        """Encrypt and store a secret."""
        encrypted = self._fernet.encrypt(value.encode()).decode()
        await self._backend.multi_set([(SECRET_KEY_PREFIX + key, encrypted)])

    async def get_item(self, key: str) -> str | None:
        """Return a decrypted secret, or None when absent."""
        [(_, encrypted)] = await self._backend.multi_get([SECRET_KEY_PREFIX + key])
        if encrypted is None:
            return None
        try:
            return self._fernet.decrypt(encrypted.encode()).decode()
        except InvalidToken as e:
            raise SecretStoreError(f"Failed to decrypt secret {key!r}") from e

    async def delete_item(self, key: str) -> None:
        """Delete a secret; absent keys are ignored."""
        await self._backend.multi_remove([SECRET_KEY_PREFIX + key])
