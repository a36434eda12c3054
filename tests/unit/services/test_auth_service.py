"""Tests for AuthService."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock

import httpx
import pytest

from registrack.adapters.http import endpoints
from registrack.adapters.storage import (
    InMemoryKeyValueStore,
    InMemorySecretStore,
    RecoveryStore,
)
from registrack.core.auth.session_store import AUTH_TOKEN_KEY, SessionStore
from registrack.core.auth.types import LoginRequest, RegistrationRequest
from registrack.core.errors import ApiClientError
from registrack.core.exceptions import (
    InvalidAuthResponseError,
    SecretStoreError,
    ValidationError,
)
from registrack.services.auth import AuthService
from tests.fixtures.mocks import make_api, routes


def _registration(**overrides: Any) -> RegistrationRequest:
    data: dict[str, Any] = {
        "tipo_documento": "CC",
        "documento": "1020304",
        "nombre": "Laura",
        "apellido": "Gómez",
        "correo": "Laura@Example.com",
        "contrasena": "Secreta1!",
        **overrides,
    }
    return RegistrationRequest(**data)


class TestLogin:
    """Tests for AuthService.login."""

    async def test_login_persists_session(
        self,
        login_response: dict[str, Any],
        plain_store: InMemoryKeyValueStore,
        session_store: SessionStore,
        valid_token: str,
    ) -> None:
        """Test a successful login stores and exposes the session."""
        api, transport = make_api(
            routes({("POST", endpoints.LOGIN): httpx.Response(200, json=login_response)})
        )
        auth = AuthService(api, session_store)

        session = await auth.login(LoginRequest(correo=" Laura@Example.com ", contrasena="x"))

        assert session.token == valid_token
        assert auth.session == session
        assert auth.is_authenticated is True
        assert auth.is_administrative is False
        assert plain_store.data[AUTH_TOKEN_KEY] == valid_token
        assert transport.last_json() == {"correo": "laura@example.com", "contrasena": "x"}
        assert "Authorization" not in transport.last_request.headers

    async def test_login_rejected(self, session_store: SessionStore) -> None:
        """Test backend rejection surfaces as ApiClientError."""
        api, _ = make_api(
            routes(
                {
                    ("POST", endpoints.LOGIN): httpx.Response(
                        401, json={"codigo": "CREDENCIALES_INVALIDAS"}
                    )
                }
            )
        )
        auth = AuthService(api, session_store)

        with pytest.raises(ApiClientError) as exc_info:
            await auth.login(LoginRequest(correo="a@b.co", contrasena="x"))

        assert exc_info.value.message.startswith("Correo o contraseña incorrectos.")
        assert auth.session is None

    async def test_login_malformed_response(self, session_store: SessionStore) -> None:
        """Test a response without a user is rejected."""
        api, _ = make_api(
            routes({("POST", endpoints.LOGIN): httpx.Response(200, json={"token": "t"})})
        )
        auth = AuthService(api, session_store)

        with pytest.raises(InvalidAuthResponseError):
            await auth.login(LoginRequest(correo="a@b.co", contrasena="x"))

    async def test_secure_tier_failure_clears(
        self,
        login_response: dict[str, Any],
        plain_store: InMemoryKeyValueStore,
    ) -> None:
        """Test a failed encrypted write leaves nothing persisted."""
        failing = AsyncMock()
        failing.set_item.side_effect = OSError("keychain locked")
        store = SessionStore(plain_store, failing, production=True)
        api, _ = make_api(
            routes({("POST", endpoints.LOGIN): httpx.Response(200, json=login_response)})
        )
        auth = AuthService(api, store)

        with pytest.raises(SecretStoreError):
            await auth.login(LoginRequest(correo="a@b.co", contrasena="x"))

        assert plain_store.data == {}
        assert auth.session is None


class TestRegister:
    """Tests for AuthService.register."""

    async def test_weak_password_never_reaches_backend(self, session_store: SessionStore) -> None:
        """Test a weak password is rejected locally."""
        api, transport = make_api(routes({}))
        auth = AuthService(api, session_store)

        with pytest.raises(ValidationError) as exc_info:
            await auth.register(_registration(contrasena="weak"))

        assert "Un número." in exc_info.value.errors
        assert transport.requests == []

    async def test_register_sends_sanitized_payload(self, session_store: SessionStore) -> None:
        """Test the payload is sanitized before sending."""
        api, transport = make_api(
            routes({("POST", endpoints.REGISTER): httpx.Response(201, json={"success": True})})
        )
        auth = AuthService(api, session_store)

        body = await auth.register(_registration())

        assert body == {"success": True}
        payload = transport.last_json()
        assert payload["correo"] == "laura@example.com"
        assert payload["apellido"] == "Gomez"
        assert payload["id_rol"] == 1
        assert auth.session is None


class TestPasswordRecovery:
    """Tests for the password recovery flow."""

    @pytest.fixture
    def recovery(self) -> RecoveryStore:
        """Return an empty recovery store."""
        return RecoveryStore(InMemoryKeyValueStore())

    async def test_full_flow(self, session_store: SessionStore, recovery: RecoveryStore) -> None:
        """Test request code, verify it and reset the password."""
        api, transport = make_api(
            routes(
                {
                    ("POST", endpoints.FORGOT_PASSWORD): httpx.Response(200, json={}),
                    ("POST", endpoints.VERIFY_RESET_CODE): httpx.Response(
                        200, json={"token": "reset-1"}
                    ),
                    ("POST", endpoints.RESET_PASSWORD): httpx.Response(200, json={}),
                }
            )
        )
        auth = AuthService(api, session_store, recovery)

        await auth.forgot_password(" Laura@Example.com ")
        assert transport.last_json() == {"correo": "laura@example.com"}

        await auth.verify_reset_code("123456")
        assert transport.last_json() == {"correo": "laura@example.com", "codigo": "123456"}
        assert await recovery.load() == ("laura@example.com", "reset-1")

        await auth.reset_password("Nueva123!")
        assert transport.last_json() == {"token": "reset-1", "newPassword": "Nueva123!"}
        assert await recovery.load() == (None, None)

    async def test_invalid_code(self, session_store: SessionStore) -> None:
        """Test a malformed code is rejected locally."""
        api, _ = make_api(routes({}))
        auth = AuthService(api, session_store)

        with pytest.raises(ValidationError):
            await auth.verify_reset_code("12ab56", correo="a@b.co")

    async def test_reset_without_token(
        self,
        session_store: SessionStore,
        recovery: RecoveryStore,
    ) -> None:
        """Test resetting without a verified code is rejected."""
        api, _ = make_api(routes({}))
        auth = AuthService(api, session_store, recovery)

        with pytest.raises(ValidationError):
            await auth.reset_password("Nueva123!")

    async def test_invalid_email(self, session_store: SessionStore) -> None:
        """Test a malformed email is rejected locally."""
        api, transport = make_api(routes({}))
        auth = AuthService(api, session_store)

        with pytest.raises(ValidationError):
            await auth.forgot_password("not-an-email")

        assert transport.requests == []


class TestBootstrapAndLogout:
    """Tests for session bootstrap and logout."""

    async def test_bootstrap_restores_valid_session(
        self,
        session_store: SessionStore,
        login_response: dict[str, Any],
    ) -> None:
        """Test a stored, unexpired session is restored."""
        stored = await session_store.persist(login_response)
        api, _ = make_api(routes({}))
        auth = AuthService(api, session_store)

        session = await auth.bootstrap()

        assert session == stored
        assert auth.session == stored

    async def test_bootstrap_clears_expired_token(
        self,
        session_store: SessionStore,
        plain_store: InMemoryKeyValueStore,
        expired_token: str,
        customer_user_data: dict[str, Any],
    ) -> None:
        """Test an expired token is discarded and storage cleared."""
        await session_store.persist({"token": expired_token, "usuario": customer_user_data})
        api, _ = make_api(routes({}))
        auth = AuthService(api, session_store)

        assert await auth.bootstrap() is None
        assert plain_store.data == {}

    async def test_bootstrap_clears_half_session(
        self,
        session_store: SessionStore,
        plain_store: InMemoryKeyValueStore,
        valid_token: str,
    ) -> None:
        """Test a token without a user is discarded."""
        plain_store.data[AUTH_TOKEN_KEY] = valid_token
        api, _ = make_api(routes({}))
        auth = AuthService(api, session_store)

        assert await auth.bootstrap() is None
        assert plain_store.data == {}

    async def test_logout_clears_both_tiers(
        self,
        plain_store: InMemoryKeyValueStore,
        secret_store: InMemorySecretStore,
        secure_session_store: SessionStore,
        login_response: dict[str, Any],
    ) -> None:
        """Test logout drops the session everywhere."""
        api, _ = make_api(
            routes({("POST", endpoints.LOGIN): httpx.Response(200, json=login_response)})
        )
        auth = AuthService(api, secure_session_store)
        await auth.login(LoginRequest(correo="a@b.co", contrasena="x"))

        await auth.logout()

        assert auth.session is None
        assert plain_store.data == {}
        assert secret_store.data == {}

    async def test_session_expiry_forces_logout(
        self,
        session_store: SessionStore,
        login_response: dict[str, Any],
    ) -> None:
        """Test an expired-session error logs the user out."""
        api, _ = make_api(
            routes({("POST", endpoints.LOGIN): httpx.Response(200, json=login_response)})
        )
        auth = AuthService(api, session_store)
        await auth.login(LoginRequest(correo="a@b.co", contrasena="x"))

        await auth.handle_api_error(ApiClientError("x", status=403))
        assert auth.session is not None

        await auth.handle_api_error(ApiClientError("x", status=401, is_session_expired=True))
        assert auth.session is None
