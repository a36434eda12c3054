"""HTTP adapter for the backend API."""

from registrack.adapters.http.client import ApiClient

__all__ = ["ApiClient"]
