"""Application services consumed by UI layers."""

from registrack.services.auth import AuthService
from registrack.services.requests import ServiceRequestService

__all__ = ["AuthService", "ServiceRequestService"]
