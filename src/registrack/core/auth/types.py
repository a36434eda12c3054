"""Auth domain types."""

from __future__ import annotations

from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    ValidationError,
    ValidatorFunctionWrapHandler,
    field_validator,
)


class BackendRecord(BaseModel):
    """Record owned by the backend, kept by value.

    Fields are never coerced: a value that does not match its declared
    type is kept exactly as received instead of being rejected, and
    unknown keys are kept as extra fields.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    @field_validator("*", mode="wrap")
    @classmethod
    def _keep_as_received(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
        try:
            return handler(value)
        except ValidationError:
            return value


class Role(BackendRecord):
    """Role object as returned by the backend.

    `permisos` maps module name to a capability map. It is not modelled,
    since only a literal True grants a capability.
    """

    id: StrictInt | StrictStr | None = None
    nombre: StrictStr | None = None
    codigo: StrictStr | None = None
    estado: StrictBool | None = None
    permisos: dict[str, Any] | None = None


class User(BackendRecord):
    """Authenticated user.

    A persisted user round-trips by value. `rol` may be absent, a role
    name, or a role object.
    """

    id: StrictInt | StrictStr | None = None
    id_usuario: StrictInt | StrictStr | None = None
    nombre: StrictStr | None = None
    apellido: StrictStr | None = None
    correo: StrictStr | None = None
    telefono: StrictInt | StrictStr | None = None
    documento: StrictInt | StrictStr | None = None
    tipo_documento: StrictStr | None = None
    rol: Role | StrictStr | None = None
    id_rol: StrictInt | StrictStr | None = None
    idRol: StrictInt | StrictStr | None = None  # noqa: N815

    @property
    def full_name(self) -> str:
        """Display name built from nombre and apellido."""
        return f"{self.nombre or ''} {self.apellido or ''}".strip()


class Session(BaseModel):
    """A complete, authoritative session."""

    model_config = ConfigDict(frozen=True)

    token: str = Field(min_length=1)
    user: User


class StoredSession(BaseModel):
    """Whatever could be read back from storage; either half may be missing."""

    model_config = ConfigDict(frozen=True)

    token: str | None = None
    user: User | None = None

    @property
    def is_complete(self) -> bool:
        """Whether both token and user were restored."""
        return bool(self.token) and self.user is not None

    def to_session(self) -> Session | None:
        """Promote to a Session when complete."""
        if self.token and self.user is not None:
            return Session(token=self.token, user=self.user)
        return None


class LoginRequest(BaseModel):
    """Credentials sent to the login endpoint."""

    correo: str
    contrasena: str


class RegistrationRequest(BaseModel):
    """Payload sent to the registration endpoint."""

    tipo_documento: str
    documento: str
    nombre: str
    apellido: str
    correo: str
    contrasena: str
    telefono: str | None = None
    id_rol: int = 1

    def to_payload(self) -> dict[str, Any]:
        """Wire representation, omitting an absent phone number."""
        return self.model_dump(exclude_none=True)
