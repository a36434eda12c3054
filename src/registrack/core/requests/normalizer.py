"""Service request normalization.

The backend returns service request lists in two shapes:

- CLIENT: records already shaped for the client, with a string `id`
  and a string `expediente`. They pass through with light validation
  and defaulting.
- PERSISTENCE: raw rows with an integer `id_orden_servicio` and nested
  `cliente`, `empleado_asignado` and `servicio` objects. Every canonical
  field is derived.

The shape is decided from the FIRST element only and applied to the
whole list. Mixed-shape lists are not supported: trailing records of
the other shape normalize inconsistently or are dropped. This is a
known limitation, kept as is.

Each record normalizes to either a ServiceRequest or a DroppedRecord,
so exclusions stay auditable. Records without a usable positive order
id are dropped and logged; they are never given a synthetic id.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

import structlog

from registrack.core.requests.types import (
    TERMINAL_STATUSES,
    FollowUp,
    ServiceRequest,
    StatusKind,
)

logger = structlog.get_logger()

NO_HOLDER = "Sin titular"
NO_BRAND = "Sin marca"
NO_SERVICE = "Sin servicio"
UNASSIGNED = "Sin asignar"
NO_STATUS = "Sin estado"


class RecordShape(str, Enum):
    """Wire shape of a service request list."""

    CLIENT = "client"
    PERSISTENCE = "persistence"


@dataclass(frozen=True)
class DroppedRecord:
    """A raw record excluded during normalization.

    Attributes:
        index: Position in the source list.
        reason: Why the record was excluded.
        raw: The record as received.
    """

    index: int
    reason: str
    raw: Any = None


@dataclass(frozen=True)
class NormalizationReport:
    """Outcome of normalizing one list."""

    shape: RecordShape
    records: list[ServiceRequest] = field(default_factory=list)
    dropped: list[DroppedRecord] = field(default_factory=list)


def detect_shape(raw_list: Sequence[Any]) -> RecordShape:
    """Decide the shape of a list from its first element.

    A list is CLIENT-shaped iff its first element has a string `id` and
    a string `expediente`; anything else is PERSISTENCE-shaped.
    """
    if not raw_list:
        return RecordShape.PERSISTENCE
    first = raw_list[0]
    if (
        isinstance(first, Mapping)
        and isinstance(first.get("id"), str)
        and isinstance(first.get("expediente"), str)
    ):
        return RecordShape.CLIENT
    return RecordShape.PERSISTENCE


def _text(*values: Any) -> str | None:
    """Return the first non-empty string."""
    for value in values:
        if isinstance(value, str) and value:
            return value
    return None


def _int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _positive_int(*values: Any) -> int | None:
    for value in values:
        number = _int(value)
        if number is not None and number > 0:
            return number
    return None


def _mapping(value: Any) -> dict[str, Any] | None:
    return dict(value) if isinstance(value, Mapping) else None


def _full_name(person: Any, first_key: str, last_key: str) -> str | None:
    if not isinstance(person, Mapping):
        return None
    first = person.get(first_key) or ""
    last = person.get(last_key) or ""
    return f"{first} {last}".strip() or None


def normalize_client_record(raw: Any, index: int = 0) -> ServiceRequest | DroppedRecord:
    """Validate and default a CLIENT-shaped record."""
    if not isinstance(raw, Mapping):
        return DroppedRecord(index=index, reason="not an object", raw=raw)

    raw_id = raw.get("id")
    record_id = str(raw_id).strip() if raw_id is not None else ""
    order_id = _positive_int(raw.get("id_orden_servicio"), record_id)
    if order_id is None:
        return DroppedRecord(index=index, reason="missing numeric order id", raw=raw)
    record_id = record_id or str(order_id)

    return ServiceRequest(
        id=record_id,
        external_order_id=order_id,
        case_number=_text(raw.get("expediente")) or f"EXP-{record_id}",
        holder_name=_text(raw.get("titular"), raw.get("nombreCompleto")) or NO_HOLDER,
        brand_name=_text(raw.get("marca"), raw.get("nombreMarca")) or NO_BRAND,
        service_type=_text(raw.get("tipoSolicitud")) or NO_SERVICE,
        assignee_name=_text(raw.get("encargado")) or UNASSIGNED,
        status=_text(raw.get("estado")) or NO_STATUS,
        email=_text(raw.get("email")) or "",
        telefono=_text(raw.get("telefono")),
        created_at=_text(raw.get("fechaCreacion")) or "",
        updated_at=_text(raw.get("fechaSolicitud"), raw.get("fechaFin")),
        client_id=_int(raw.get("id_cliente")) or 0,
        assigned_employee_id=_int(raw.get("id_empleado_asignado")),
        raw_client=_mapping(raw.get("clienteCompleto")),
        raw_employee=_mapping(raw.get("empleadoCompleto")),
        raw_service=_mapping(raw.get("servicioCompleto")),
    )


def normalize_persistence_record(raw: Any, index: int = 0) -> ServiceRequest | DroppedRecord:
    """Derive a canonical record from a PERSISTENCE-shaped row."""
    if not isinstance(raw, Mapping):
        return DroppedRecord(index=index, reason="not an object", raw=raw)

    order_id = _positive_int(raw.get("id_orden_servicio"), raw.get("id"))
    if order_id is None:
        return DroppedRecord(index=index, reason="missing order id", raw=raw)

    record_id = str(order_id)
    client = raw.get("cliente")
    employee = raw.get("empleado_asignado")
    service = raw.get("servicio")

    return ServiceRequest(
        id=record_id,
        external_order_id=order_id,
        case_number=_text(raw.get("expediente")) or f"EXP-{record_id}",
        holder_name=(
            _text(raw.get("nombre_solicitante"))
            or _full_name(client, "nombre", "apellido")
            or NO_HOLDER
        ),
        brand_name=_text(raw.get("marca_a_buscar"), raw.get("nombre_marca")) or NO_BRAND,
        service_type=(
            _text(service.get("nombre")) if isinstance(service, Mapping) else None
        )
        or NO_SERVICE,
        assignee_name=_full_name(employee, "nombres", "apellidos") or UNASSIGNED,
        status=_text(raw.get("estado"), raw.get("estado_actual")) or NO_STATUS,
        email=_text(raw.get("correo_electronico"), raw.get("email")) or "",
        telefono=_text(raw.get("telefono")),
        created_at=_text(raw.get("fecha_creacion"), raw.get("fecha_solicitud")) or "",
        updated_at=_text(raw.get("fecha_solicitud"), raw.get("updatedAt")),
        client_id=_int(raw.get("id_cliente")) or 0,
        assigned_employee_id=_int(raw.get("id_empleado_asignado")),
        raw_client=_mapping(client),
        raw_employee=_mapping(employee),
        raw_service=_mapping(service),
    )


_NORMALIZERS: dict[RecordShape, Callable[[Any, int], ServiceRequest | DroppedRecord]] = {
    RecordShape.CLIENT: normalize_client_record,
    RecordShape.PERSISTENCE: normalize_persistence_record,
}


def normalize_with_report(raw_list: Any) -> NormalizationReport:
    """Normalize a raw list and report which records were dropped.

    Args:
        raw_list: Decoded list from a service request endpoint. Anything
            that is not a list normalizes to an empty report.

    Returns:
        The canonical records, in source order, and the dropped ones.
    """
    if not isinstance(raw_list, list | tuple):
        return NormalizationReport(shape=RecordShape.PERSISTENCE)

    shape = detect_shape(raw_list)
    normalize = _NORMALIZERS[shape]

    records: list[ServiceRequest] = []
    dropped: list[DroppedRecord] = []
    for index, raw in enumerate(raw_list):
        result = normalize(raw, index)
        if isinstance(result, DroppedRecord):
            logger.warning(
                "service_request_dropped",
                index=result.index,
                reason=result.reason,
                shape=shape.value,
            )
            dropped.append(result)
        else:
            records.append(result)

    return NormalizationReport(shape=shape, records=records, dropped=dropped)


def normalize_service_requests(raw_list: Any) -> list[ServiceRequest]:
    """Normalize a raw list into canonical records, silently excluding unusable ones."""
    return normalize_with_report(raw_list).records


def is_terminal_status(status: str | None) -> bool:
    """Whether a status is one of the closed set of terminal statuses."""
    return status in TERMINAL_STATUSES


def classify_status(status: str | None) -> StatusKind:
    """Classify a status string as terminal or active."""
    return StatusKind.TERMINAL if is_terminal_status(status) else StatusKind.ACTIVE


def partition_by_status(
    records: Iterable[ServiceRequest],
) -> tuple[list[ServiceRequest], list[ServiceRequest]]:
    """Split records into (active, terminal), preserving order."""
    active: list[ServiceRequest] = []
    terminal: list[ServiceRequest] = []
    for record in records:
        (terminal if record.is_terminal else active).append(record)
    return active, terminal


def active_requests(records: Iterable[ServiceRequest]) -> list[ServiceRequest]:
    """Records still in progress."""
    return partition_by_status(records)[0]


def terminal_requests(records: Iterable[ServiceRequest]) -> list[ServiceRequest]:
    """Records finalized, annulled or rejected."""
    return partition_by_status(records)[1]


def find_request(raw_list: Iterable[Any], order_id: int) -> Mapping[str, Any] | None:
    """Locate a raw record by `id_orden_servicio` or `id`, compared numerically."""
    for raw in raw_list:
        if not isinstance(raw, Mapping):
            continue
        for key in ("id_orden_servicio", "id"):
            if _int(raw.get(key)) == order_id:
                return raw
    return None


def unwrap_list(body: Any, *paths: tuple[str, ...]) -> list[Any]:
    """Return the list in a response body that may or may not be wrapped.

    Args:
        body: Decoded JSON body.
        *paths: Key paths to try, in order, when the body is not a list.

    Returns:
        The first list found, or an empty list.
    """
    if isinstance(body, list):
        return body
    for path in paths:
        node = body
        for key in path:
            node = node.get(key) if isinstance(node, Mapping) else None
        if isinstance(node, list):
            return node
    return []


_EPOCH_FLOOR = datetime.min.replace(tzinfo=UTC)


def _follow_up_time(item: FollowUp) -> datetime:
    """Timestamp of a history entry; unparseable or missing stamps sort last."""
    stamp = item.fecha_registro or item.fecha_creacion or item.fecha
    if not stamp:
        return _EPOCH_FLOOR
    try:
        parsed = datetime.fromisoformat(stamp.replace("Z", "+00:00"))
    except ValueError:
        return _EPOCH_FLOOR
    # Naive stamps are treated as UTC.
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def sort_follow_ups(items: Iterable[FollowUp]) -> list[FollowUp]:
    """Order a follow-up history newest first."""
    return sorted(items, key=_follow_up_time, reverse=True)
