"""Settings loaded from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_API_BASE_URL = "http://localhost:3000/api"
DEFAULT_TIMEOUT_SECONDS = 150.0


@dataclass(frozen=True)
class ApiClientConfig:
    """Configuration for the backend API client.

    Attributes:
        base_url: Backend API root, without trailing slash.
        timeout_seconds: Per-request timeout.
    """

    base_url: str = DEFAULT_API_BASE_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS


class Settings:
    """Application settings loaded from environment."""

    def __init__(self) -> None:
        """Load settings from environment variables."""
        self.api_base_url = os.getenv("REGISTRACK_API_BASE_URL", DEFAULT_API_BASE_URL).rstrip("/")
        self.api_timeout_seconds = float(
            os.getenv("REGISTRACK_API_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS))
        )
        self.environment = os.getenv("REGISTRACK_ENV", "development").lower()

        # Fernet key for the encrypted token tier; required in production
        self.secret_key = os.getenv("REGISTRACK_SECRET_KEY", "")
        self.storage_path = os.getenv("REGISTRACK_STORAGE_PATH", "")
        self.secret_storage_path = os.getenv("REGISTRACK_SECRET_STORAGE_PATH", "")

    @property
    def is_production(self) -> bool:
        """Whether the encrypted secret tier is enabled."""
        return self.environment == "production"

    def api_client_config(self) -> ApiClientConfig:
        """Build the API client configuration."""
        return ApiClientConfig(
            base_url=self.api_base_url,
            timeout_seconds=self.api_timeout_seconds,
        )


settings = Settings()
