"""Service request domain types.

ServiceRequest is the canonical record every list screen consumes. Its
attributes use Python names; it serializes (by alias) to the
client-shaped wire names the backend also emits, so a dumped record
normalizes back to an identical one.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Statuses from which a request cannot be acted upon any further.
TERMINAL_STATUSES: frozenset[str] = frozenset(
    {"Finalizada", "Finalizado", "Anulada", "Anulado", "Rechazada", "Rechazado"}
)


class StatusKind(str, Enum):
    """Lifecycle classification of a request status."""

    ACTIVE = "active"
    TERMINAL = "terminal"


class ServiceRequest(BaseModel):
    """Canonical service request (solicitud).

    Attributes:
        id: Order id as a string; never empty.
        external_order_id: Positive integer order id (id_orden_servicio).
        case_number: Human-facing case number (expediente).
        holder_name: Trademark holder (titular).
        brand_name: Trademark being registered (marca).
        service_type: Name of the requested service.
        assignee_name: Employee in charge (encargado).
        status: Backend status string.
        email: Contact email.
        telefono: Contact phone.
        created_at: Creation timestamp as sent by the backend.
        updated_at: Request/last-update timestamp, when known.
        client_id: Owning client id.
        assigned_employee_id: Assigned employee id, when assigned.
        raw_client: Client sub-object as received.
        raw_employee: Employee sub-object as received.
        raw_service: Service sub-object as received.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(min_length=1)
    external_order_id: int = Field(alias="id_orden_servicio", gt=0)
    case_number: str = Field(alias="expediente")
    holder_name: str = Field(alias="titular")
    brand_name: str = Field(alias="marca")
    service_type: str = Field(alias="tipoSolicitud")
    assignee_name: str = Field(alias="encargado")
    status: str = Field(alias="estado")
    email: str = ""
    telefono: str | None = None
    created_at: str = Field(default="", alias="fechaCreacion")
    updated_at: str | None = Field(default=None, alias="fechaSolicitud")
    client_id: int = Field(default=0, alias="id_cliente")
    assigned_employee_id: int | None = Field(default=None, alias="id_empleado_asignado")
    raw_client: dict[str, Any] | None = Field(default=None, alias="clienteCompleto")
    raw_employee: dict[str, Any] | None = Field(default=None, alias="empleadoCompleto")
    raw_service: dict[str, Any] | None = Field(default=None, alias="servicioCompleto")

    @property
    def status_kind(self) -> StatusKind:
        """Terminal or active."""
        return StatusKind.TERMINAL if self.status in TERMINAL_STATUSES else StatusKind.ACTIVE

    @property
    def is_terminal(self) -> bool:
        """Whether the request is finalized, annulled or rejected."""
        return self.status in TERMINAL_STATUSES

    def to_wire(self) -> dict[str, Any]:
        """Client-shaped representation."""
        return self.model_dump(by_alias=True)


class FollowUp(BaseModel):
    """One entry of a request's follow-up (seguimiento) history."""

    model_config = ConfigDict(frozen=True, extra="allow")

    id_seguimiento: int | None = None
    id_orden_servicio: int | None = None
    titulo: str | None = ""
    descripcion: str | None = ""
    observaciones: str | None = None
    nuevo_estado: str | None = None
    estado_anterior: str | None = None
    fecha: str | None = None
    fecha_registro: str | None = None
    fecha_creacion: str | None = None
    documentos_adjuntos: dict[str, Any] | None = None


class FollowUpCreate(BaseModel):
    """Payload that appends a follow-up, optionally moving the request to a new status."""

    id_orden_servicio: int = Field(gt=0)
    titulo: str = Field(min_length=1, max_length=200)
    descripcion: str = Field(min_length=1)
    observaciones: str | None = None
    nuevo_proceso: str | None = None
    documentos_adjuntos: dict[str, str] | None = None

    def to_payload(self) -> dict[str, Any]:
        """Wire representation without unset optional fields."""
        return self.model_dump(exclude_none=True)


class Client(BaseModel):
    """Client entry for request creation screens."""

    model_config = ConfigDict(frozen=True)

    id_cliente: int | None = None
    id_usuario: int | None = None
    nombre: str = ""
    apellido: str = ""
    correo: str = ""
    telefono: str = ""
    tipo_documento: str = "CC"
    documento: str = ""
    direccion: str = ""
    ciudad: str = ""
    tipo_persona: str = "Natural"
    marca: str = ""
    estado: bool = True


class Employee(BaseModel):
    """Employee entry for assignment screens."""

    model_config = ConfigDict(frozen=True, extra="allow")

    id_empleado: int
    nombres: str | None = ""
    apellidos: str | None = ""
    correo: str | None = ""
    estado_empleado: bool | int = True
    telefono: str | None = None

    @property
    def is_active(self) -> bool:
        """Whether the employee may be assigned work."""
        return self.estado_empleado is True or self.estado_empleado == 1


class Service(BaseModel):
    """Trademark service offered by the backend."""

    model_config = ConfigDict(frozen=True, extra="allow")

    id: int | None = None
    id_servicio: int | None = None
    nombre: str
    descripcion: str | None = None
    precio: float | None = None
    activo: bool | None = None


class AvailableStatuses(BaseModel):
    """Current status of a request and the statuses it may move to."""

    model_config = ConfigDict(frozen=True)

    estado_actual: str | None = None
    estados_disponibles: list[str] = Field(default_factory=list)
