"""Service request operations.

Every method takes the bearer token explicitly. Lists come back
normalized; single-record and mutation endpoints return the backend
body as received.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar

import structlog
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from registrack.adapters.http import endpoints
from registrack.adapters.http.client import ApiClient
from registrack.core.exceptions import ServiceRequestNotFoundError, ValidationError
from registrack.core.requests.normalizer import (
    active_requests,
    find_request,
    normalize_service_requests,
    sort_follow_ups,
    terminal_requests,
    unwrap_list,
)
from registrack.core.requests.types import (
    AvailableStatuses,
    Client,
    Employee,
    FollowUp,
    FollowUpCreate,
    Service,
    ServiceRequest,
)

logger = structlog.get_logger()

RecordT = TypeVar("RecordT", bound=BaseModel)

EMPTY_REASON_MESSAGE = "Debes indicar el motivo de la anulación."


class ServiceRequestService:
    """Backend operations on service requests, follow-ups and catalogs."""

    def __init__(self, api: ApiClient):
        """Initialize with the API client used for every call."""
        self.api = api

    # Lists

    async def list_service_requests(self, token: str) -> list[ServiceRequest]:
        """Every request visible to staff, normalized."""
        body = await self.api.get(endpoints.SERVICE_REQUESTS, token=token)
        return normalize_service_requests(unwrap_list(body, ("data",)))

    async def list_active_service_requests(self, token: str) -> list[ServiceRequest]:
        """Staff requests still in progress."""
        return active_requests(await self.list_service_requests(token))

    async def list_finished_service_requests(self, token: str) -> list[ServiceRequest]:
        """Staff requests that are finalized, annulled or rejected."""
        return terminal_requests(await self.list_service_requests(token))

    async def list_my_service_requests(self, token: str) -> list[ServiceRequest]:
        """The logged-in customer's requests, all statuses."""
        body = await self.api.get(endpoints.MY_SERVICE_REQUESTS, token=token)
        return normalize_service_requests(unwrap_list(body, ("data",)))

    # Detail

    async def get_service_request(self, token: str, order_id: int) -> Any:
        """Full detail of a request, for staff."""
        return await self.api.get(endpoints.service_request(order_id), token=token)

    async def get_my_service_request(self, token: str, order_id: int) -> Mapping[str, Any]:
        """Full detail of one of the customer's own requests.

        Customers cannot read the staff detail endpoint, so the record is
        looked up in their own list.

        Raises:
            ServiceRequestNotFoundError: If the request is not in the customer's list.
        """
        body = await self.api.get(endpoints.MY_SERVICE_REQUESTS, token=token)
        found = find_request(unwrap_list(body, ("data",)), order_id)
        if found is None:
            logger.info("service_request_not_found", order_id=order_id)
            raise ServiceRequestNotFoundError(order_id)
        return found

    # Mutations

    async def create_service_request(
        self,
        token: str,
        service_id: int,
        payload: Mapping[str, Any],
    ) -> Any:
        """Create a request for a service; the form fields depend on the service."""
        body = await self.api.post(
            endpoints.create_service_request(service_id),
            json=dict(payload),
            token=token,
        )
        logger.info("service_request_created", service_id=service_id)
        return body

    async def edit_service_request(
        self,
        token: str,
        order_id: int,
        payload: Mapping[str, Any],
    ) -> Any:
        """Update the editable fields of a request."""
        return await self.api.put(
            endpoints.edit_service_request(order_id),
            json=dict(payload),
            token=token,
        )

    async def annul_service_request(self, token: str, order_id: int, motivo: str) -> Any:
        """Annul a request.

        Raises:
            ValidationError: If the reason is blank.
        """
        reason = motivo.strip()
        if not reason:
            raise ValidationError(EMPTY_REASON_MESSAGE)
        body = await self.api.put(
            endpoints.annul_service_request(order_id),
            json={"motivo": reason},
            token=token,
        )
        logger.info("service_request_annulled", order_id=order_id)
        return body

    async def assign_employee(self, token: str, order_id: int, employee_id: int) -> Any:
        """Assign an employee to a request."""
        body = await self.api.put(
            endpoints.assign_employee(order_id),
            json={"id_empleado": employee_id},
            token=token,
        )
        logger.info("employee_assigned", order_id=order_id, employee_id=employee_id)
        return body

    async def get_assigned_employee(self, token: str, order_id: int) -> Any:
        """Employee currently assigned to a request, as received."""
        return await self.api.get(endpoints.assigned_employee(order_id), token=token)

    async def get_available_statuses(self, token: str, order_id: int) -> AvailableStatuses:
        """Current status and the statuses a follow-up may move the request to."""
        body = await self.api.get(endpoints.available_statuses(order_id), token=token)
        if isinstance(body, Mapping) and isinstance(body.get("data"), Mapping):
            body = body["data"]
        try:
            return AvailableStatuses.model_validate(body if isinstance(body, Mapping) else {})
        except PydanticValidationError as e:
            logger.warning(
                "available_statuses_invalid", order_id=order_id, error_count=e.error_count()
            )
            return AvailableStatuses()

    # Follow-ups

    async def create_follow_up(self, token: str, follow_up: FollowUpCreate) -> Any:
        """Append a follow-up, optionally moving the request to a new status."""
        body = await self.api.post(
            endpoints.CREATE_FOLLOW_UP,
            json=follow_up.to_payload(),
            token=token,
        )
        logger.info(
            "follow_up_created",
            order_id=follow_up.id_orden_servicio,
            status_change=follow_up.nuevo_proceso is not None,
        )
        return body

    async def get_follow_up_history(self, token: str, order_id: int) -> list[FollowUp]:
        """Staff view of a request's history, in backend order."""
        body = await self.api.get(endpoints.follow_up_history(order_id), token=token)
        return _parse_items(FollowUp, unwrap_list(body, ("data",)), "follow_up")

    async def get_client_follow_up_history(self, token: str, order_id: int) -> list[FollowUp]:
        """Customer view of a request's history, newest first."""
        body = await self.api.get(endpoints.client_follow_up_history(order_id), token=token)
        items = _parse_items(FollowUp, unwrap_list(body, ("data",)), "follow_up")
        return sort_follow_ups(items)

    # Catalogs

    async def list_clients(self, token: str) -> list[Client]:
        """Clients, flattening the nested user object when present."""
        body = await self.api.get(endpoints.CLIENTS, token=token)
        raw_clients = unwrap_list(body, ("data", "clientes"), ("clientes",))
        flattened = [
            _flatten_client(raw) if isinstance(raw, Mapping) else raw for raw in raw_clients
        ]
        return _parse_items(Client, flattened, "client")

    async def list_employees(self, token: str) -> list[Employee]:
        """Active employees only."""
        body = await self.api.get(endpoints.EMPLOYEES, token=token)
        employees = _parse_items(Employee, unwrap_list(body, ("data",)), "employee")
        return [employee for employee in employees if employee.is_active]

    async def list_services(self, token: str) -> list[Service]:
        """Services a request can be created for."""
        body = await self.api.get(endpoints.SERVICES, token=token)
        return _parse_items(Service, unwrap_list(body, ("data",)), "service")


_CLIENT_USER_FIELDS = (
    "nombre",
    "apellido",
    "correo",
    "telefono",
    "tipo_documento",
    "documento",
    "direccion",
    "ciudad",
)


def _flatten_client(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Client fields, preferring those of a nested `usuario` object."""
    user = raw.get("usuario") if isinstance(raw.get("usuario"), Mapping) else {}
    data: dict[str, Any] = {
        "id_cliente": raw.get("id_cliente"),
        "id_usuario": raw.get("id_usuario") or user.get("id_usuario"),
        "tipo_persona": raw.get("tipo_persona") or "Natural",
        "marca": raw.get("marca") or "",
        "estado": raw["estado"] if raw.get("estado") is not None else True,
    }
    for name in _CLIENT_USER_FIELDS:
        value = user.get(name) or raw.get(name)
        if value:
            data[name] = str(value)
    return data


def _parse_items(model: type[RecordT], items: list[Any], kind: str) -> list[RecordT]:
    """Validate catalog or history items, dropping the ones that do not fit."""
    parsed: list[RecordT] = []
    for index, item in enumerate(items):
        if not isinstance(item, Mapping):
            logger.warning("backend_item_dropped", kind=kind, index=index, reason="not_an_object")
            continue
        try:
            parsed.append(model.model_validate(item))
        except PydanticValidationError as e:
            logger.warning(
                "backend_item_dropped",
                kind=kind,
                index=index,
                error_count=e.error_count(),
            )
    return parsed
