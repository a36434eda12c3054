"""Session persistence across a plain and an encrypted storage tier.

The token and user are written under several redundant keys so that
older readers keep working. In production the token is additionally
kept in an encrypted secret store, which is also the fallback when the
plain tier has lost it.

A clear() always wins over a persist() or restore() that was already in
flight: every clear bumps a generation counter, and operations that see
the counter move underneath them undo their work.
"""

from __future__ import annotations

import json
from typing import Any

import structlog

from registrack.core.auth.extractor import extract_auth_payload
from registrack.core.auth.types import Session, StoredSession, User
from registrack.core.exceptions import (
    InvalidAuthResponseError,
    SecretStoreError,
    SessionClearedError,
    SessionStoreError,
)
from registrack.core.interfaces import KeyValueStore, SecretStore

logger = structlog.get_logger()

AUTH_TOKEN_KEY = "authToken"
TOKEN_KEY = "token"
CURRENT_USER_KEY = "currentUser"
USER_KEY = "user"
USER_DATA_KEY = "userData"
IS_AUTHENTICATED_KEY = "isAuthenticated"

# Every key this module writes to the plain tier.
STORAGE_KEYS: tuple[str, ...] = (
    AUTH_TOKEN_KEY,
    TOKEN_KEY,
    CURRENT_USER_KEY,
    USER_KEY,
    USER_DATA_KEY,
    IS_AUTHENTICATED_KEY,
)

# Read order when restoring.
TOKEN_KEYS: tuple[str, ...] = (AUTH_TOKEN_KEY, TOKEN_KEY)
USER_KEYS: tuple[str, ...] = (USER_DATA_KEY, USER_KEY, CURRENT_USER_KEY)

SECURE_TOKEN_KEY = AUTH_TOKEN_KEY


class SessionStore:
    """Persists, restores and clears the canonical session.

    Usage:
        store = SessionStore(InMemoryKeyValueStore())
        session = await store.persist(login_response)
        restored = await store.restore()
        await store.clear()
    """

    def __init__(
        self,
        plain: KeyValueStore,
        secret: SecretStore | None = None,
        *,
        production: bool = False,
    ) -> None:
        """Initialize the session store.

        Args:
            plain: Plain key-value tier.
            secret: Encrypted tier, required in production.
            production: Whether the encrypted tier is active.

        Raises:
            ValueError: If production is requested without a secret store.
        """
        if production and secret is None:
            raise ValueError("A secret store is required in production mode")
        self._plain = plain
        self._secret = secret
        self._production = production
        self._generation = 0

    @property
    def uses_secure_tier(self) -> bool:
        """Whether tokens are mirrored to the encrypted tier."""
        return self._production and self._secret is not None

    async def persist(self, raw: Any) -> Session:
        """Extract and store the session carried by an auth response.

        Args:
            raw: Decoded body of a login or registration response.

        Returns:
            The stored session.

        Raises:
            InvalidAuthResponseError: If no token and user could be extracted.
            SecretStoreError: If the encrypted tier rejects the token.
            SessionClearedError: If a clear() ran while persisting.
        """
        extracted = extract_auth_payload(raw)
        if extracted.token is None or extracted.user is None:
            logger.warning(
                "auth_response_incomplete",
                has_token=extracted.token is not None,
                has_user=extracted.user is not None,
            )
            raise InvalidAuthResponseError()

        token = extracted.token
        user = User.model_validate(extracted.user)
        user_json = json.dumps(extracted.user, ensure_ascii=False, default=str)
        entries = [
            (AUTH_TOKEN_KEY, token),
            (TOKEN_KEY, token),
            (CURRENT_USER_KEY, user_json),
            (USER_KEY, user_json),
            (USER_DATA_KEY, user_json),
            (IS_AUTHENTICATED_KEY, "true"),
        ]

        generation = self._generation
        superseded = False
        try:
            await self._plain.multi_set(entries)
            if self.uses_secure_tier:
                await self._write_secret(token)
        finally:
            superseded = generation != self._generation
            if superseded:
                await self._wipe()

        if superseded:
            logger.info("session_persist_superseded")
            raise SessionClearedError()

        logger.info(
            "session_persisted",
            extraction_path=extracted.path.value,
            source=extracted.source,
            secure_tier=self.uses_secure_tier,
        )
        return Session(token=token, user=user)

    async def restore(self) -> StoredSession:
        """Read the stored session back.

        The plain tier is read first. In production, a missing token is
        looked up in the encrypted tier. The user is taken from the first
        legacy key whose value parses as a JSON object.

        Returns:
            What could be restored; either half may be None.
        """
        generation = self._generation
        values = dict(await self._plain.multi_get([*TOKEN_KEYS, *USER_KEYS]))

        token = next((values[key] for key in TOKEN_KEYS if values.get(key)), None)
        user = self._first_user(values)

        if token is None and self.uses_secure_tier:
            token = await self._read_secret()

        if generation != self._generation:
            logger.info("session_restore_superseded")
            return StoredSession()

        return StoredSession(token=token, user=user)

    async def clear(self) -> None:
        """Remove every key this store writes, from both tiers."""
        self._generation += 1
        await self._wipe()
        logger.info("session_cleared")

    async def _wipe(self) -> None:
        await self._plain.multi_remove(list(STORAGE_KEYS))
        if self._secret is not None:
            try:
                await self._secret.delete_item(SECURE_TOKEN_KEY)
            except SessionStoreError:
                raise
            except Exception as e:
                raise SecretStoreError(f"Failed to delete secure token: {e}") from e

    async def _write_secret(self, token: str) -> None:
        assert self._secret is not None
        try:
            await self._secret.set_item(SECURE_TOKEN_KEY, token)
        except SessionStoreError:
            raise
        except Exception as e:
            raise SecretStoreError(f"Failed to store secure token: {e}") from e

    async def _read_secret(self) -> str | None:
        assert self._secret is not None
        try:
            return await self._secret.get_item(SECURE_TOKEN_KEY) or None
        except SessionStoreError:
            raise
        except Exception as e:
            raise SecretStoreError(f"Failed to read secure token: {e}") from e

    @staticmethod
    def _first_user(values: dict[str, str | None]) -> User | None:
        for key in USER_KEYS:
            value = values.get(key)
            if not value:
                continue
            try:
                data = json.loads(value)
                if isinstance(data, dict):
                    return User.model_validate(data)
            except ValueError:
                logger.warning("stored_user_unparseable", key=key)
        return None
