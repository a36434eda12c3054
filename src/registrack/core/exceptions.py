"""Domain-specific exceptions.

All exceptions raised by registrack inherit from RegistrackError,
making it easy to catch every client-core failure while still being
able to handle specific error types. Transport failures are the one
exception family that lives elsewhere: see registrack.core.errors.
"""

from __future__ import annotations


class RegistrackError(Exception):
    """Base exception for all registrack errors.

    All custom exceptions in the package inherit from this class
    to enable catching registrack-specific errors with a single except clause.
    """

    pass


class InvalidAuthResponseError(RegistrackError):
    """Authentication response did not carry a usable token and user.

    Raised when persisting a session from a login or registration
    response whose token or user could not be located. A partially
    valid session is never stored.
    """

    def __init__(self, message: str = "Respuesta de autenticación inválida.") -> None:
        """Initialize InvalidAuthResponseError.

        Args:
            message: Error description.
        """
        super().__init__(message)


class SessionStoreError(RegistrackError):
    """A session storage tier failed to read or write.

    Attributes:
        tier: Which tier failed ("plain" or "secure").
    """

    def __init__(self, message: str, tier: str = "plain") -> None:
        """Initialize SessionStoreError.

        Args:
            message: Error description.
            tier: Storage tier that failed.
        """
        super().__init__(message)
        self.tier = tier


class SecretStoreError(SessionStoreError):
    """The encrypted secret store failed.

    Write failures in production surface through this error so the
    caller can decide whether to continue without a persisted session.
    """

    def __init__(self, message: str) -> None:
        """Initialize SecretStoreError.

        Args:
            message: Error description.
        """
        super().__init__(message, tier="secure")


class SessionClearedError(RegistrackError):
    """A persist was superseded by a concurrent clear.

    The store is left empty. The session returned by the interrupted
    persist must not be treated as authoritative.
    """

    def __init__(self, message: str = "La sesión fue cerrada durante el guardado.") -> None:
        """Initialize SessionClearedError.

        Args:
            message: Error description.
        """
        super().__init__(message)


class ServiceRequestNotFoundError(RegistrackError):
    """A service request could not be found for the current account.

    Attributes:
        order_id: The order id that was looked up.
    """

    def __init__(self, order_id: int) -> None:
        """Initialize ServiceRequestNotFoundError.

        Args:
            order_id: The order id that was looked up.
        """
        super().__init__(
            f"Solicitud con ID {order_id} no encontrada en tus solicitudes. "
            "Verifica que la solicitud pertenezca a tu cuenta."
        )
        self.order_id = order_id


class ValidationError(RegistrackError):
    """Local input was rejected before reaching the backend.

    Attributes:
        errors: Individual rule violations, in display order.
    """

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        """Initialize ValidationError.

        Args:
            message: Error description.
            errors: Individual rule violations.
        """
        super().__init__(message)
        self.errors = errors or []
