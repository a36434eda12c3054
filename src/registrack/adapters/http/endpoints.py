"""Backend API paths."""

from __future__ import annotations

LOGIN = "/usuarios/login"
REGISTER = "/usuarios/registrar"
FORGOT_PASSWORD = "/usuarios/forgot-password"
VERIFY_RESET_CODE = "/usuarios/forgot-password/verify-code"
RESET_PASSWORD = "/usuarios/reset-password"

SERVICE_REQUESTS = "/gestion-solicitudes"
MY_SERVICE_REQUESTS = "/gestion-solicitudes/mias"

CLIENTS = "/gestion-clientes"
EMPLOYEES = "/gestion-empleados"
SERVICES = "/servicios"

CREATE_FOLLOW_UP = "/seguimiento/crear"


def service_request(order_id: int | str) -> str:
    """Staff detail of a request."""
    return f"{SERVICE_REQUESTS}/{order_id}"


def create_service_request(service_id: int | str) -> str:
    """Creation endpoint for a service."""
    return f"{SERVICE_REQUESTS}/crear/{service_id}"


def edit_service_request(order_id: int | str) -> str:
    """Edit endpoint of a request."""
    return f"{SERVICE_REQUESTS}/editar/{order_id}"


def annul_service_request(order_id: int | str) -> str:
    """Annulment endpoint of a request."""
    return f"{SERVICE_REQUESTS}/anular/{order_id}"


def assign_employee(order_id: int | str) -> str:
    """Employee assignment endpoint of a request."""
    return f"{SERVICE_REQUESTS}/asignar-empleado/{order_id}"


def assigned_employee(order_id: int | str) -> str:
    """Assigned employee of a request."""
    return f"{SERVICE_REQUESTS}/{order_id}/empleado-asignado"


def available_statuses(order_id: int | str) -> str:
    """Statuses a request may move to."""
    return f"{SERVICE_REQUESTS}/{order_id}/estados-disponibles"


def follow_up_history(order_id: int | str) -> str:
    """Staff follow-up history of a request."""
    return f"/seguimiento/historial/{order_id}"


def client_follow_up_history(order_id: int | str) -> str:
    """Customer follow-up history of a request."""
    return f"/seguimiento/cliente/{order_id}"
