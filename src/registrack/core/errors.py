"""Transport error classification.

This module turns HTTP-layer failures into ApiClientError, the single
error type the API client raises. Every ApiClientError carries a
user-facing Spanish message, the HTTP status when a response was
received, and flags that let callers tell network failures (offer a
retry) from session expiry (force a logout) and rate limiting (show a
wait time).
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from enum import Enum
from typing import Any

import httpx

SESSION_EXPIRED_CODE = "SESION_EXPIRADA"

_EXPIRED_TOKEN_CODES = frozenset({SESSION_EXPIRED_CODE, "TOKEN_EXPIRADO"})
_INVALID_CREDENTIAL_CODES = frozenset({"CREDENCIALES_INVALIDAS", "INVALID_CREDENTIALS"})
_USER_NOT_FOUND_CODES = frozenset({"USUARIO_NO_ENCONTRADO", "USER_NOT_FOUND"})
_INVALID_TOKEN_CODES = frozenset({"TOKEN_INVALIDO", "INVALID_TOKEN"})

NETWORK_ERROR_MESSAGE = "No pudimos conectarnos con el servidor. Revisa tu conexión a internet."
TIMEOUT_MESSAGE = "La solicitud tardó demasiado. Intenta nuevamente."
SESSION_EXPIRED_MESSAGE = "Tu sesión expiró. Inicia sesión nuevamente."
RATE_LIMITED_MESSAGE = (
    "Demasiados intentos. Por favor espera unos minutos antes de intentar nuevamente."
)
SERVER_ERROR_MESSAGE = "Error del servidor. Por favor intenta más tarde."
UNEXPECTED_ERROR_MESSAGE = "Ocurrió un error inesperado."
UNKNOWN_ERROR_MESSAGE = "Error desconocido al comunicarse con el servidor."


class ErrorKind(str, Enum):
    """Coarse classification used by callers to pick a recovery action."""

    NETWORK = "network"
    SESSION_EXPIRED = "session_expired"
    RATE_LIMITED = "rate_limited"
    HTTP = "http"


class ApiClientError(Exception):
    """A classified transport failure.

    Instances are immutable: every attribute is exposed read-only.

    Attributes:
        message: User-facing message.
        status: HTTP status code, or None when no response was received.
        is_network_error: True when the request never got a response.
        is_session_expired: True for 401 or a SESION_EXPIRADA body code.
        retry_after_minutes: Suggested wait before retrying, when known.
        payload: Decoded JSON error body, when it was an object.
    """

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        is_network_error: bool = False,
        is_session_expired: bool = False,
        retry_after_minutes: float | None = None,
        payload: Mapping[str, Any] | None = None,
    ) -> None:
        """Initialize the API client error."""
        super().__init__(message)
        self._message = message
        self._status = status
        self._is_network_error = is_network_error
        self._is_session_expired = is_session_expired
        self._retry_after_minutes = retry_after_minutes
        self._payload = dict(payload) if payload is not None else None

    @property
    def message(self) -> str:
        """User-facing message."""
        return self._message

    @property
    def status(self) -> int | None:
        """HTTP status code."""
        return self._status

    @property
    def is_network_error(self) -> bool:
        """Whether no response was received."""
        return self._is_network_error

    @property
    def is_session_expired(self) -> bool:
        """Whether the caller must force a logout."""
        return self._is_session_expired

    @property
    def retry_after_minutes(self) -> float | None:
        """Suggested wait time in minutes."""
        return self._retry_after_minutes

    @property
    def payload(self) -> dict[str, Any] | None:
        """A copy of the decoded error body."""
        return dict(self._payload) if self._payload is not None else None

    @property
    def code(self) -> str | None:
        """Backend error code (the `codigo` body field)."""
        if self._payload is None:
            return None
        code = self._payload.get("codigo")
        return code if isinstance(code, str) else None

    @property
    def kind(self) -> ErrorKind:
        """Recovery-oriented classification."""
        if self._is_network_error:
            return ErrorKind.NETWORK
        if self._is_session_expired:
            return ErrorKind.SESSION_EXPIRED
        if self._status == 429:
            return ErrorKind.RATE_LIMITED
        return ErrorKind.HTTP

    @property
    def retryable(self) -> bool:
        """Only connectivity failures are worth an immediate retry."""
        return self._is_network_error

    def to_dict(self) -> dict[str, Any]:
        """Convert error to a dictionary for display layers."""
        return {
            "error": {
                "kind": self.kind.value,
                "message": self._message,
                "status": self._status,
                "code": self.code,
                "retryable": self.retryable,
                "retry_after_minutes": self._retry_after_minutes,
            }
        }

    def __repr__(self) -> str:
        return (
            f"ApiClientError(status={self._status!r}, kind={self.kind.value!r}, "
            f"message={self._message!r})"
        )


def classify(error: BaseException) -> ApiClientError:
    """Map a transport-layer exception to an ApiClientError.

    Args:
        error: Exception raised while performing an HTTP call.

    Returns:
        The classified error. An ApiClientError is returned unchanged.
    """
    if isinstance(error, ApiClientError):
        return error

    if isinstance(error, httpx.HTTPStatusError):
        response = error.response
        return classify_response(
            response.status_code,
            decode_body(response),
            response.headers,
        )

    if isinstance(error, httpx.TimeoutException):
        return ApiClientError(TIMEOUT_MESSAGE, is_network_error=True)

    if isinstance(error, httpx.RequestError):
        return ApiClientError(NETWORK_ERROR_MESSAGE, is_network_error=True)

    return ApiClientError(str(error) or UNKNOWN_ERROR_MESSAGE)


def classify_response(
    status: int,
    body: Any,
    headers: Mapping[str, str] | None = None,
) -> ApiClientError:
    """Classify a failure response that was actually received.

    Args:
        status: HTTP status code.
        body: Decoded JSON body (anything; only objects are inspected).
        headers: Response headers.

    Returns:
        The classified error.
    """
    payload = body if isinstance(body, Mapping) else None
    retry_after = retry_after_minutes(payload, headers)
    code = payload.get("codigo") if payload else None

    return ApiClientError(
        user_message(status, payload, retry_after),
        status=status,
        is_session_expired=status == 401 or code == SESSION_EXPIRED_CODE,
        retry_after_minutes=retry_after,
        payload=payload,
    )


def decode_body(response: httpx.Response) -> Any:
    """Decode a response body as JSON, or None if it is not JSON."""
    try:
        return response.json()
    except ValueError:
        return None


def retry_after_minutes(
    payload: Mapping[str, Any] | None,
    headers: Mapping[str, str] | None,
) -> float | None:
    """Read the suggested wait time.

    The body field `retryAfterMinutes` wins; otherwise the `Retry-After`
    header is read as seconds. Non-positive or unparseable values yield None.
    """
    minutes: float | None = None
    if payload and payload.get("retryAfterMinutes"):
        minutes = _as_float(payload["retryAfterMinutes"])
    elif headers:
        seconds = _header(headers, "retry-after")
        if seconds is not None:
            parsed = _as_float(seconds)
            minutes = parsed / 60 if parsed is not None else None

    if minutes is None or not math.isfinite(minutes) or minutes <= 0:
        return None
    return minutes


def user_message(
    status: int | None,
    payload: Mapping[str, Any] | None,
    retry_after: float | None = None,
) -> str:
    """Build the user-facing message for a failure response."""
    payload = payload or {}
    code = payload.get("codigo")
    server_message = _server_message(payload)
    details = _details(payload)

    if code == SESSION_EXPIRED_CODE:
        return SESSION_EXPIRED_MESSAGE

    if status == 401:
        if code in _EXPIRED_TOKEN_CODES:
            return SESSION_EXPIRED_MESSAGE
        if code in _INVALID_CREDENTIAL_CODES:
            return (
                "Correo o contraseña incorrectos. "
                "Verifica tus credenciales e intenta de nuevo."
            )
        return server_message or "Credenciales incorrectas. Verifica tu correo y contraseña."

    if status == 403:
        return server_message or "No tienes permisos para realizar esta acción."

    if status == 404:
        if code in _USER_NOT_FOUND_CODES:
            return "El correo electrónico no está registrado en el sistema."
        return server_message or "Recurso no encontrado."

    if status == 400:
        if details:
            return details
        mensaje = payload.get("mensaje") if isinstance(payload.get("mensaje"), str) else None
        lowered = (mensaje or "").lower()
        if code in _INVALID_TOKEN_CODES or "token" in lowered or "código" in lowered:
            return mensaje or (
                "El código de recuperación es inválido o ha expirado. Solicita uno nuevo."
            )
        if "contraseña" in lowered or "password" in lowered or code == "PASSWORD_WEAK":
            return mensaje or "La contraseña no cumple con los requisitos de seguridad."
        return server_message or "Datos inválidos. Verifica la información ingresada."

    if status == 422:
        return details or server_message or "Los datos proporcionados no son válidos."

    if status == 429:
        if retry_after:
            minutes = math.ceil(retry_after)
            unit = "minuto" if minutes == 1 else "minutos"
            return f"Demasiados intentos. Intenta nuevamente en {minutes} {unit}."
        return RATE_LIMITED_MESSAGE

    if status is not None and status >= 500:
        return SERVER_ERROR_MESSAGE

    return details or server_message or UNEXPECTED_ERROR_MESSAGE


def _server_message(payload: Mapping[str, Any]) -> str | None:
    for key in ("mensaje", "error"):
        value = payload.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def _details(payload: Mapping[str, Any]) -> str | None:
    details = payload.get("detalles")
    if isinstance(details, list):
        return "\n".join(str(item) for item in details) or None
    if isinstance(details, str) and details:
        return details
    return None


def _header(headers: Mapping[str, str], name: str) -> str | None:
    if isinstance(headers, httpx.Headers):
        return headers.get(name)
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


def _as_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
