"""Administrative role resolution.

The backend describes a user's role in several ways: a numeric id (on
the role object or under legacy keys), a per-module permission map, or
a free-text role name. `is_administrative` reduces all of them to one
boolean. It is pure and total: malformed input yields False, never an
exception.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import BaseModel

logger = structlog.get_logger()

# Backend role ids: 1 = cliente, 2 = administrador, 3 = empleado.
CUSTOMER_ROLE_ID = 1
ADMINISTRATIVE_ROLE_IDS = frozenset({2, 3})

# Keys that may carry the role id, in lookup order after `rol.id`.
ROLE_ID_ALIASES: tuple[str, ...] = ("id_rol", "idRol")

# Reading any of these modules marks the role as administrative.
DASHBOARD_MODULES: tuple[str, ...] = ("dashboard", "gestion_dashboard")

# Any capability on one of these modules marks the role as administrative.
ADMINISTRATIVE_MODULES: tuple[str, ...] = (
    "usuarios",
    "empleados",
    "roles",
    "permisos",
    "privilegios",
    "solicitudes",
    "citas",
    "seguimiento",
    "clientes",
    "pagos",
    "servicios",
    "empresas",
    "archivos",
    "tipo_archivos",
    "solicitud_cita",
    "detalles_orden",
    "detalles_procesos",
    "servicios_procesos",
)

CAPABILITIES: tuple[str, ...] = ("crear", "leer", "actualizar", "eliminar")

ADMINISTRATIVE_ROLE_NAMES = frozenset(
    {"administrador", "admin", "empleado", "employee", "supervisor", "gerente", "manager"}
)


def _as_mapping(user: Any) -> Mapping[str, Any] | None:
    if isinstance(user, BaseModel):
        return user.model_dump(exclude_unset=True, warnings=False)
    if isinstance(user, Mapping):
        return user
    return None


def _as_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
        return int(number) if number.is_integer() else None
    return None


def resolve_role_id(user: Any) -> int | None:
    """Return the numeric role id, or None when no key carries one.

    Looks at `rol.id` first, then the legacy `id_rol` and `idRol` keys.
    The first present (non-null) key decides, even if it is not numeric.
    """
    data = _as_mapping(user)
    if data is None:
        return None

    rol = data.get("rol")
    candidates: list[Any] = []
    if isinstance(rol, Mapping):
        candidates.append(rol.get("id"))
    candidates.extend(data.get(alias) for alias in ROLE_ID_ALIASES)

    for value in candidates:
        if value is not None:
            return _as_int(value)
    return None


def _permission_map(user: Mapping[str, Any]) -> Mapping[str, Any] | None:
    rol = user.get("rol")
    if not isinstance(rol, Mapping):
        return None
    permisos = rol.get("permisos")
    return permisos if isinstance(permisos, Mapping) else None


def _grants(module_permissions: Any, capability: str) -> bool:
    return isinstance(module_permissions, Mapping) and module_permissions.get(capability) is True


def has_module_permission(user: Any, module: str, capability: str = "leer") -> bool:
    """Whether the role's permission map grants `capability` on `module`."""
    data = _as_mapping(user)
    if data is None:
        return False
    permisos = _permission_map(data)
    if permisos is None:
        return False
    return _grants(permisos.get(module), capability)


def permissions_grant_admin(permisos: Mapping[str, Any]) -> bool:
    """Whether a permission map describes an administrative role."""
    for module in DASHBOARD_MODULES:
        if _grants(permisos.get(module), "leer"):
            return True

    for module in ADMINISTRATIVE_MODULES:
        module_permissions = permisos.get(module)
        if any(_grants(module_permissions, capability) for capability in CAPABILITIES):
            return True
    return False


def role_name(user: Any) -> str:
    """Return the lower-cased role name, or "" when there is none."""
    data = _as_mapping(user)
    if data is None:
        return ""

    rol = data.get("rol")
    name: Any = None
    if isinstance(rol, str):
        name = rol
    elif isinstance(rol, Mapping):
        name = rol.get("nombre") or rol.get("name")
    if not name:
        name = data.get("role")
    return name.strip().lower() if isinstance(name, str) else ""


def is_administrative(user: Any) -> bool:
    """Decide whether a user holds administrative capability.

    Precedence, first match wins:
        1. Numeric role id: 2 or 3 is administrative, 1 is a customer.
        2. Permission map: dashboard read, or any capability on an
           administrative module.
        3. Role name matching a known administrative name.

    Args:
        user: A User model, a raw user mapping, or None.

    Returns:
        True for administrators and employees, False otherwise.
    """
    data = _as_mapping(user)
    if data is None:
        return False

    role_id = resolve_role_id(data)
    if role_id in ADMINISTRATIVE_ROLE_IDS:
        return True
    if role_id == CUSTOMER_ROLE_ID:
        return False

    permisos = _permission_map(data)
    if permisos and permissions_grant_admin(permisos):
        return True

    name = role_name(data)
    if name in ADMINISTRATIVE_ROLE_NAMES:
        return True

    logger.debug("role_not_administrative", role_id=role_id, role_name=name or None)
    return False
