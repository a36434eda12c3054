"""Authentication service.

Glues the API client, the session store and the recovery scratch store
into the operations a UI layer calls: login, registration, password
recovery, logout and session bootstrap. The current session is held
here; the API client never sees it except as the explicit token passed
into each call.
"""

from __future__ import annotations

from typing import Any

import structlog

from registrack.adapters.http import endpoints
from registrack.adapters.http.client import ApiClient
from registrack.adapters.storage.recovery import RecoveryStore
from registrack.core.auth.roles import is_administrative
from registrack.core.auth.session_store import SessionStore
from registrack.core.auth.tokens import is_token_valid
from registrack.core.auth.types import LoginRequest, RegistrationRequest, Session
from registrack.core.auth.validation import (
    is_numeric_code,
    sanitize_email,
    sanitize_login,
    sanitize_registration,
    validate_email,
    validate_password_strength,
)
from registrack.core.errors import ApiClientError
from registrack.core.exceptions import SecretStoreError, SessionStoreError, ValidationError

logger = structlog.get_logger()

WEAK_PASSWORD_MESSAGE = "La contraseña no cumple con los requisitos."
INVALID_EMAIL_MESSAGE = "Ingresa un correo electrónico válido."
INVALID_CODE_MESSAGE = "El código debe tener 6 dígitos."
MISSING_RECOVERY_EMAIL_MESSAGE = "No encontramos el correo de recuperación. Solicita un nuevo código."
MISSING_RESET_TOKEN_MESSAGE = "El código de recuperación no es válido. Solicita uno nuevo."


class AuthService:
    """Session lifecycle for one logical user.

    Usage:
        auth = AuthService(api, SessionStore(InMemoryKeyValueStore()))
        session = await auth.bootstrap() or await auth.login(credentials)
        requests = await request_service.list_my_service_requests(session.token)
    """

    def __init__(
        self,
        api: ApiClient,
        session_store: SessionStore,
        recovery: RecoveryStore | None = None,
    ):
        """Initialize the auth service.

        Args:
            api: Backend API client.
            session_store: Session persistence.
            recovery: Scratch store for the password recovery flow.
        """
        self.api = api
        self.session_store = session_store
        self.recovery = recovery
        self._session: Session | None = None

    @property
    def session(self) -> Session | None:
        """The current session, if logged in."""
        return self._session

    @property
    def is_authenticated(self) -> bool:
        """Whether a complete session is loaded."""
        return self._session is not None

    @property
    def is_administrative(self) -> bool:
        """Whether the current user may use the administrative screens."""
        return self._session is not None and is_administrative(self._session.user)

    async def login(self, request: LoginRequest) -> Session:
        """Log in and persist the resulting session.

        Args:
            request: Credentials.

        Returns:
            The new session.

        Raises:
            ApiClientError: If the backend rejects the credentials or is unreachable.
            InvalidAuthResponseError: If the response carries no token and user.
            SecretStoreError: If the encrypted tier fails; nothing stays persisted.
        """
        credentials = sanitize_login(request)
        body = await self.api.post(endpoints.LOGIN, json=credentials.model_dump())

        try:
            session = await self.session_store.persist(body)
        except SecretStoreError:
            logger.error("secure_session_write_failed")
            await self.session_store.clear()
            raise

        self._session = session
        logger.info(
            "user_logged_in",
            is_administrative=is_administrative(session.user),
        )
        return session

    async def register(self, request: RegistrationRequest) -> Any:
        """Create a customer account.

        The account is not logged in; the caller proceeds to login().

        Raises:
            ValidationError: If the password is too weak or the email malformed.
            ApiClientError: If the backend rejects the registration.
        """
        check = validate_password_strength(request.contrasena.strip())
        if not check.is_valid:
            raise ValidationError(WEAK_PASSWORD_MESSAGE, errors=check.errors)
        if not validate_email(request.correo):
            raise ValidationError(INVALID_EMAIL_MESSAGE)

        payload = sanitize_registration(request).to_payload()
        body = await self.api.post(endpoints.REGISTER, json=payload)
        logger.info("user_registered", id_rol=payload["id_rol"])
        return body

    async def forgot_password(self, correo: str) -> Any:
        """Ask the backend to email a recovery code."""
        email = sanitize_email(correo)
        if not validate_email(email):
            raise ValidationError(INVALID_EMAIL_MESSAGE)

        body = await self.api.post(endpoints.FORGOT_PASSWORD, json={"correo": email})
        if self.recovery is not None:
            await self.recovery.save_email(email)
        return body

    async def verify_reset_code(self, codigo: str, correo: str | None = None) -> Any:
        """Exchange a recovery code for a reset token.

        Args:
            codigo: Six-digit code from the recovery email.
            correo: Account email; defaults to the one saved by forgot_password().

        Raises:
            ValidationError: If the code is malformed or no email is known.
        """
        codigo = codigo.strip()
        if not is_numeric_code(codigo):
            raise ValidationError(INVALID_CODE_MESSAGE)

        if correo is None and self.recovery is not None:
            correo, _ = await self.recovery.load()
        if not correo:
            raise ValidationError(MISSING_RECOVERY_EMAIL_MESSAGE)

        body = await self.api.post(
            endpoints.VERIFY_RESET_CODE,
            json={"correo": sanitize_email(correo), "codigo": codigo},
        )
        token = body.get("token") if isinstance(body, dict) else None
        if isinstance(token, str) and token and self.recovery is not None:
            await self.recovery.save_reset_token(token)
        return body

    async def reset_password(self, new_password: str, token: str | None = None) -> Any:
        """Set a new password using the reset token.

        Args:
            new_password: The new password.
            token: Reset token; defaults to the one saved by verify_reset_code().

        Raises:
            ValidationError: If the password is weak or no reset token is known.
        """
        check = validate_password_strength(new_password)
        if not check.is_valid:
            raise ValidationError(WEAK_PASSWORD_MESSAGE, errors=check.errors)

        if token is None and self.recovery is not None:
            _, token = await self.recovery.load()
        if not token:
            raise ValidationError(MISSING_RESET_TOKEN_MESSAGE)

        body = await self.api.post(
            endpoints.RESET_PASSWORD,
            json={"token": token, "newPassword": new_password},
        )
        if self.recovery is not None:
            await self.recovery.clear()
        return body

    async def logout(self) -> None:
        """Drop the in-memory session and clear both storage tiers."""
        self._session = None
        await self.session_store.clear()
        logger.info("user_logged_out")

    async def bootstrap(self) -> Session | None:
        """Restore a stored session at startup.

        A stored session is kept only when both halves are present and
        the token has not expired; anything else is cleared.

        Returns:
            The restored session, or None.
        """
        try:
            stored = await self.session_store.restore()
        except SessionStoreError as e:
            logger.warning("session_restore_failed", tier=e.tier, error=str(e))
            await self.session_store.clear()
            return None

        session = stored.to_session()
        if session is None or not is_token_valid(session.token):
            logger.info(
                "stored_session_discarded",
                has_token=stored.token is not None,
                has_user=stored.user is not None,
            )
            await self.session_store.clear()
            self._session = None
            return None

        self._session = session
        logger.info("session_restored")
        return session

    async def handle_api_error(self, error: ApiClientError) -> None:
        """Log out when a backend call reports the session as expired."""
        if error.is_session_expired and self._session is not None:
            logger.info("session_expired_logout", status=error.status, code=error.code)
            await self.logout()
