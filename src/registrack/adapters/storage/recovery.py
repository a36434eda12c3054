"""Scratch storage for the password recovery flow."""

from __future__ import annotations

from registrack.core.interfaces import KeyValueStore

RECOVERY_EMAIL_KEY = "emailRecuperacion"
RESET_TOKEN_KEY = "resetToken"


class RecoveryStore:
    """Remembers the email and reset token between recovery steps."""

    def __init__(self, backend: KeyValueStore):
        """Initialize with the store holding the recovery keys."""
        self._backend = backend

    async def save_email(self, correo: str) -> None:
        """Remember the email the code was sent to."""
        await self._backend.multi_set([(RECOVERY_EMAIL_KEY, correo)])

    async def save_reset_token(self, token: str) -> None:
        """Remember the token returned by code verification."""
        await self._backend.multi_set([(RESET_TOKEN_KEY, token)])

    async def load(self) -> tuple[str | None, str | None]:
        """Return (email, reset_token); either may be None."""
        values = dict(await self._backend.multi_get([RECOVERY_EMAIL_KEY, RESET_TOKEN_KEY]))
        return values.get(RECOVERY_EMAIL_KEY), values.get(RESET_TOKEN_KEY)

    async def clear(self) -> None:
        """Forget the email and reset token."""
        await self._backend.multi_remove([RECOVERY_EMAIL_KEY, RESET_TOKEN_KEY])
