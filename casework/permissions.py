"""Role model and permission guards."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable

from .errors import PermissionDenied, ValidationError

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """Single current role held by an actor."""

    USER = "user"
    SUPPORT = "support"
    MODERATOR = "moderator"
    ADMIN = "admin"


STAFF_ROLES: frozenset[Role] = frozenset({Role.SUPPORT, Role.MODERATOR, Role.ADMIN})
ADMIN_ROLES: frozenset[Role] = frozenset({Role.ADMIN})
AUDIT_READER_ROLES: frozenset[Role] = frozenset({Role.SUPPORT, Role.ADMIN})


def parse_role(value: Role | str) -> Role:
    try:
        return Role(value)
    except ValueError as exc:
        raise ValidationError(f"Unknown role: {value!r}") from exc


def is_staff(role: Role | str) -> bool:
    return parse_role(role) in STAFF_ROLES


def ensure_role(actor_role: Role | str, allowed: Iterable[Role], *, operation: str, actor_id: str | None = None) -> Role:
    """Return the parsed role or raise :class:`PermissionDenied`.

    Denials are logged and never reach the audit log, which only records
    privileged actions that actually happened.
    """

    role = parse_role(actor_role)
    allowed_roles = frozenset(allowed)
    if role not in allowed_roles:
        logger.warning(
            "Permission denied for %s: actor=%s role=%s",
            operation,
            actor_id or "<unknown>",
            role.value,
        )
        raise PermissionDenied(f"Role '{role.value}' may not perform {operation}")
    return role
