"""Service request fixtures in both wire shapes."""

from __future__ import annotations

from typing import Any

import pytest


@pytest.fixture
def persistence_record() -> dict[str, Any]:
    """Return a raw persistence row."""
    return {
        "id_orden_servicio": 42,
        "expediente": "EXP-2024-042",
        "nombre_solicitante": "Café Andino SAS",
        "marca_a_buscar": "Andino",
        "servicio": {"id_servicio": 2, "nombre": "Registro de marca"},
        "empleado_asignado": {"id_empleado": 5, "nombres": "Pedro", "apellidos": "Lara"},
        "estado": "En proceso",
        "correo_electronico": "contacto@andino.co",
        "telefono": "3001234567",
        "fecha_creacion": "2024-03-01T10:00:00Z",
        "fecha_solicitud": "2024-03-02T09:30:00Z",
        "id_cliente": 11,
        "id_empleado_asignado": 5,
        "cliente": {"id_cliente": 11, "nombre": "Laura", "apellido": "Gómez"},
    }


@pytest.fixture
def client_record() -> dict[str, Any]:
    """Return the client-shaped twin of persistence_record."""
    return {
        "id": "42",
        "id_orden_servicio": 42,
        "expediente": "EXP-2024-042",
        "titular": "Café Andino SAS",
        "marca": "Andino",
        "tipoSolicitud": "Registro de marca",
        "encargado": "Pedro Lara",
        "estado": "En proceso",
        "email": "contacto@andino.co",
        "telefono": "3001234567",
        "fechaCreacion": "2024-03-01T10:00:00Z",
        "fechaSolicitud": "2024-03-02T09:30:00Z",
        "id_cliente": 11,
        "id_empleado_asignado": 5,
        "clienteCompleto": {"id_cliente": 11, "nombre": "Laura", "apellido": "Gómez"},
        "empleadoCompleto": {"id_empleado": 5, "nombres": "Pedro", "apellidos": "Lara"},
        "servicioCompleto": {"id_servicio": 2, "nombre": "Registro de marca"},
    }


@pytest.fixture
def persistence_records(persistence_record: dict[str, Any]) -> list[dict[str, Any]]:
    """Return a mixed-status persistence list, including an unusable row."""
    finished = {
        **persistence_record,
        "id_orden_servicio": 43,
        "expediente": None,
        "estado": "Finalizado",
        "empleado_asignado": None,
    }
    annulled = {**persistence_record, "id_orden_servicio": 44, "estado": "Anulada"}
    broken = {"estado": "En proceso", "marca_a_buscar": "Sin id"}
    return [persistence_record, finished, annulled, broken]
