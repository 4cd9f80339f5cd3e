from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from casework.permissions import Role


@dataclass(slots=True, frozen=True)
class RoleAssignment:
    """The single current role of a user."""

    user_id: str
    role: Role
    assigned_by: str | None
    updated_at: datetime | None
