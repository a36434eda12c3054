"""Wiring of adapters and services from settings."""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from registrack.adapters.http.client import ApiClient
from registrack.adapters.storage import (
    FernetSecretStore,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    RecoveryStore,
)
from registrack.config import Settings, settings as default_settings
from registrack.core.auth.session_store import SessionStore
from registrack.core.interfaces import KeyValueStore
from registrack.services.auth import AuthService
from registrack.services.requests import ServiceRequestService

logger = structlog.get_logger()


@dataclass
class Services:
    """Everything a UI layer needs."""

    api: ApiClient
    auth: AuthService
    requests: ServiceRequestService


def create_services(settings: Settings | None = None) -> Services:
    """Build the services for the given settings.

    Storage is a JSON file when REGISTRACK_STORAGE_PATH is set, memory
    otherwise. In production the token is also kept in a Fernet-encrypted
    tier keyed by REGISTRACK_SECRET_KEY, backed by its own store
    (REGISTRACK_SECRET_STORAGE_PATH, or memory) so the two tiers fail
    independently.

    Raises:
        RuntimeError: If production mode is enabled without a secret key, or
            with both tiers pointed at the same file.
    """
    settings = settings or default_settings

    plain = _key_value_store(settings.storage_path)

    secret = None
    if settings.is_production:
        if not settings.secret_key:
            raise RuntimeError("REGISTRACK_SECRET_KEY must be set in production")
        if settings.secret_storage_path and settings.secret_storage_path == settings.storage_path:
            raise RuntimeError(
                "REGISTRACK_SECRET_STORAGE_PATH must differ from REGISTRACK_STORAGE_PATH"
            )
        secret = FernetSecretStore(
            _key_value_store(settings.secret_storage_path), settings.secret_key
        )

    api = ApiClient(settings.api_client_config())
    session_store = SessionStore(plain, secret, production=settings.is_production)

    logger.info(
        "services_created",
        api_base_url=settings.api_base_url,
        environment=settings.environment,
        persistent_storage=bool(settings.storage_path),
        persistent_secret_storage=bool(settings.secret_storage_path),
    )
    return Services(
        api=api,
        auth=AuthService(api, session_store, RecoveryStore(plain)),
        requests=ServiceRequestService(api),
    )


def _key_value_store(path: str) -> KeyValueStore:
    if path:
        return JsonFileKeyValueStore(path)
    return InMemoryKeyValueStore()
