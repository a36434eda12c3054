"""Auth domain types and utilities."""

from registrack.core.auth.extractor import ExtractedAuth, ExtractionPath, extract_auth_payload
from registrack.core.auth.roles import has_module_permission, is_administrative, resolve_role_id
from registrack.core.auth.session_store import SessionStore
from registrack.core.auth.tokens import is_token_valid, read_claims
from registrack.core.auth.types import (
    LoginRequest,
    RegistrationRequest,
    Role,
    Session,
    StoredSession,
    User,
)

__all__ = [
    "User",
    "Role",
    "Session",
    "StoredSession",
    "LoginRequest",
    "RegistrationRequest",
    "ExtractedAuth",
    "ExtractionPath",
    "extract_auth_payload",
    "is_administrative",
    "resolve_role_id",
    "has_module_permission",
    "is_token_valid",
    "read_claims",
    "SessionStore",
]
