"""Input hygiene for credentials and registration data."""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass, field

from registrack.core.auth.types import LoginRequest, RegistrationRequest

EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

PASSWORD_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"^.{8,}$", re.DOTALL), "Al menos 8 caracteres."),
    (re.compile(r"[A-Z]"), "Una letra mayúscula."),
    (re.compile(r"[a-z]"), "Una letra minúscula."),
    (re.compile(r"\d"), "Un número."),
    (re.compile(r"[!@#$%^&*(),.?\":{}|<>_\-]"), "Un carácter especial."),
)

@dataclass(frozen=True)
class PasswordCheck:
    """Outcome of a password strength check."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)

def sanitize_email(correo: str) -> str:
    """Trim and lower-case an email address."""
    return correo.strip().lower()

def _sanitize_name(value: str) -> str:
    """Strip accents and collapse whitespace."""
    decomposed = unicodedata.normalize("NFD", value)
    without_marks = "".join(c for c in decomposed if unicodedata.category(c) != "Mn")
    return " ".join(without_marks.split())

def sanitize_login(request: LoginRequest) -> LoginRequest:
    """Normalize login credentials before sending them."""
    return LoginRequest(
        correo=sanitize_email(request.correo),
        contrasena=request.contrasena.strip(),
    )

def sanitize_registration(request: RegistrationRequest) -> RegistrationRequest:
    """Normalize registration data before sending it."""
    telefono = re.sub(r"[^\d+]", "", request.telefono) if request.telefono else None
    return RegistrationRequest(
        tipo_documento=request.tipo_documento.strip().upper(),
        documento=re.sub(r"\D", "", request.documento),
        nombre=_sanitize_name(request.nombre),
        apellido=_sanitize_name(request.apellido),
        correo=sanitize_email(request.correo),
        contrasena=request.contrasena.strip(),
        telefono=telefono,
        id_rol=request.id_rol,
    )

def validate_email(correo: str) -> bool:
    """Check the rough shape of an email address."""
    return bool(EMAIL_REGEX.match(correo.strip()))

def validate_password_strength(password: str) -> PasswordCheck:
    """Check a password against the registration rules.

    Args:
        password: Candidate password.

    Returns:
        PasswordCheck listing every rule that failed.
    """
    errors = [message for pattern, message in PASSWORD_RULES if not pattern.search(password)]
    return PasswordCheck(is_valid=not errors, errors=errors)

def is_numeric_code(value: str, length: int = 6) -> bool:
    """Whether value is exactly `length` ASCII digits."""
    return bool(re.fullmatch(rf"[0-9]{{{length}}}", value))
