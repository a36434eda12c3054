"""Tests for settings and service wiring."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from registrack.adapters.storage import FernetSecretStore, JsonFileKeyValueStore
from registrack.config import DEFAULT_TIMEOUT_SECONDS, Settings
from registrack.deps import create_services


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test defaults when nothing is configured."""
        for name in (
            "REGISTRACK_API_BASE_URL",
            "REGISTRACK_API_TIMEOUT_SECONDS",
            "REGISTRACK_ENV",
            "REGISTRACK_SECRET_KEY",
            "REGISTRACK_STORAGE_PATH",
            "REGISTRACK_SECRET_STORAGE_PATH",
        ):
            monkeypatch.delenv(name, raising=False)

        settings = Settings()

        assert settings.api_timeout_seconds == DEFAULT_TIMEOUT_SECONDS == 150
        assert settings.is_production is False
        assert settings.storage_path == ""
        assert settings.secret_storage_path == ""

    def test_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test values are read from the environment."""
        monkeypatch.setenv("REGISTRACK_API_BASE_URL", "https://api.example.com/api/")
        monkeypatch.setenv("REGISTRACK_API_TIMEOUT_SECONDS", "30")
        monkeypatch.setenv("REGISTRACK_ENV", "Production")

        settings = Settings()
        config = settings.api_client_config()

        assert config.base_url == "https://api.example.com/api"
        assert config.timeout_seconds == 30
        assert settings.is_production is True


class TestCreateServices:
    """Tests for create_services."""

    def test_development_wiring(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Test file storage without the secure tier."""
        monkeypatch.setenv("REGISTRACK_ENV", "development")
        monkeypatch.setenv("REGISTRACK_STORAGE_PATH", str(tmp_path / "session.json"))

        services = create_services(Settings())

        assert services.auth.session_store.uses_secure_tier is False
        assert isinstance(services.auth.recovery._backend, JsonFileKeyValueStore)
        assert services.requests.api is services.api

    def test_production_requires_secret_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test production without a key is refused."""
        monkeypatch.setenv("REGISTRACK_ENV", "production")
        monkeypatch.delenv("REGISTRACK_SECRET_KEY", raising=False)

        with pytest.raises(RuntimeError):
            create_services(Settings())

    def test_production_wiring(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test production enables the encrypted tier."""
        monkeypatch.setenv("REGISTRACK_ENV", "production")
        monkeypatch.setenv("REGISTRACK_SECRET_KEY", FernetSecretStore.generate_key())

        services = create_services(Settings())

        assert services.auth.session_store.uses_secure_tier is True

    def test_tiers_use_separate_stores(
        self,
        monkeypatch: pytest.MonkeyPatch,
        tmp_path: Path,
    ) -> None:
        """Test the encrypted tier does not share the plain tier's file."""
        monkeypatch.setenv("REGISTRACK_ENV", "production")
        monkeypatch.setenv("REGISTRACK_SECRET_KEY", FernetSecretStore.generate_key())
        monkeypatch.setenv("REGISTRACK_STORAGE_PATH", str(tmp_path / "session.json"))
        monkeypatch.setenv("REGISTRACK_SECRET_STORAGE_PATH", str(tmp_path / "secure.json"))

        services = create_services(Settings())

        plain = services.auth.recovery._backend
        secret_backend = services.auth.session_store._secret._backend
        assert isinstance(secret_backend, JsonFileKeyValueStore)
        assert secret_backend is not plain
        assert secret_backend.path != plain.path

    async def test_corrupt_plain_file_keeps_secure_token(
        self,
        monkeypatch: pytest.MonkeyPatch,
        tmp_path: Path,
        login_response: dict[str, Any],
        valid_token: str,
    ) -> None:
        """Test losing the plain file still restores the token from the encrypted tier."""
        session_path = tmp_path / "session.json"
        monkeypatch.setenv("REGISTRACK_ENV", "production")
        monkeypatch.setenv("REGISTRACK_SECRET_KEY", FernetSecretStore.generate_key())
        monkeypatch.setenv("REGISTRACK_STORAGE_PATH", str(session_path))
        monkeypatch.setenv("REGISTRACK_SECRET_STORAGE_PATH", str(tmp_path / "secure.json"))
        store = create_services(Settings()).auth.session_store
        await store.persist(login_response)

        session_path.write_text("{broken")
        restored = await store.restore()

        assert restored.token == valid_token
        assert restored.user is None

    def test_shared_file_refused(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Test both tiers cannot point at the same file."""
        path = str(tmp_path / "session.json")
        monkeypatch.setenv("REGISTRACK_ENV", "production")
        monkeypatch.setenv("REGISTRACK_SECRET_KEY", FernetSecretStore.generate_key())
        monkeypatch.setenv("REGISTRACK_STORAGE_PATH", path)
        monkeypatch.setenv("REGISTRACK_SECRET_STORAGE_PATH", path)

        with pytest.raises(RuntimeError):
            create_services(Settings())
