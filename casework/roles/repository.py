from __future__ import annotations

from typing import Any, Callable

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from casework.audit.models import AuditLogEntry
from casework.audit.repository import AuditLogRepository
from casework.db import Database, as_utc
from casework.errors import Conflict
from casework.permissions import Role
from packages.db.models import UserRoleTable

from .models import RoleAssignment


class RoleRepository:
    """Persistence for `user_roles`; one row per user at most."""

    def __init__(self, database: Database) -> None:
        self._database = database

    async def get_assignment(self, user_id: str) -> RoleAssignment | None:
        async with self._database.session() as session:
            row = await session.get(UserRoleTable, user_id)
            return None if row is None else self._table_to_assignment(row)

    async def count_assignments(self, user_id: str) -> int:
        async with self._database.session() as session:
            result = await session.execute(
                select(func.count()).select_from(UserRoleTable).where(UserRoleTable.user_id == user_id)
            )
            return int(result.scalar_one())

    async def replace_role(
        self,
        user_id: str,
        *,
        role: Role,
        assigned_by: str,
        audit_factory: Callable[[Role], AuditLogEntry],
        only_if_missing: bool = False,
    ) -> tuple[RoleAssignment, Role, AuditLogEntry] | None:
        """Replace the user's role and append the audit entry built from the old role.

        ``audit_factory(old_role)`` returns the entry to store. The row is read
        with ``FOR UPDATE`` so concurrent replacements serialize on it. With
        ``only_if_missing`` nothing happens when an assignment already exists.
        """

        async with self._database.transaction() as session:
            row = await session.get(UserRoleTable, user_id, with_for_update=True)
            if row is not None and only_if_missing:
                return None
            old_role = Role.USER if row is None else Role(row.role)
            audit = audit_factory(old_role)
            if row is None:
                row = UserRoleTable(user_id=user_id, role=role.value, assigned_by=assigned_by, updated_at=audit.created_at)
                session.add(row)
            else:
                row.role = role.value
                row.assigned_by = assigned_by
                row.updated_at = audit.created_at
            AuditLogRepository.add(session, audit)
            try:
                await session.flush()
            except IntegrityError as exc:
                raise Conflict(f"Role of {user_id} was assigned concurrently; retry later") from exc
            return self._table_to_assignment(row), old_role, audit

    @staticmethod
    def _table_to_assignment(row: Any) -> RoleAssignment:
        return RoleAssignment(
            user_id=str(row.user_id),
            role=Role(row.role),
            assigned_by=row.assigned_by,
            updated_at=as_utc(row.updated_at) if row.updated_at is not None else None,
        )
