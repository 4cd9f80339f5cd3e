from __future__ import annotations

import logging
from dataclasses import dataclass

from casework.audit.models import AuditAction, AuditLogEntry, TargetType
from casework.errors import require_text
from casework.permissions import ADMIN_ROLES, Role, ensure_role, parse_role

from .models import RoleAssignment
from .repository import RoleRepository

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = "system"


@dataclass(slots=True)
class RoleService:
    """Single-role-per-user assignments; every change is audited."""

    repository: RoleRepository

    async def get_role(self, user_id: str) -> Role:
        """Current role of ``user_id``; users without an assignment are plain users."""

        assignment = await self.repository.get_assignment(user_id)
        return Role.USER if assignment is None else assignment.role

    async def set_role(
        self,
        target_id: str,
        new_role: Role | str,
        *,
        actor_id: str,
        actor_role: Role | str,
    ) -> RoleAssignment:
        role = ensure_role(actor_role, ADMIN_ROLES, operation="role assignment", actor_id=actor_id)
        target = require_text(target_id, "target_id")
        desired = parse_role(new_role)

        def build_audit(old_role: Role) -> AuditLogEntry:
            return AuditLogEntry.create(
                actor_id=actor_id,
                actor_role=role,
                action_type=AuditAction.USER_ROLE_CHANGED,
                target_type=TargetType.USER,
                target_id=target,
                reason=f"Role changed from {old_role.value} to {desired.value}",
                metadata={"old_role": old_role.value, "new_role": desired.value},
            )

        assignment, old_role, _ = await self.repository.replace_role(
            target,
            role=desired,
            assigned_by=actor_id,
            audit_factory=build_audit,
        )
        logger.info("Role of %s changed %s -> %s by %s", target, old_role.value, desired.value, actor_id)
        return assignment

    async def bootstrap_admin(self, user_id: str) -> RoleAssignment | None:
        """Grant admin to a configured account that has no assignment yet."""

        def build_audit(old_role: Role) -> AuditLogEntry:
            return AuditLogEntry.create(
                actor_id=SYSTEM_ACTOR,
                actor_role=Role.ADMIN,
                action_type=AuditAction.USER_ROLE_CHANGED,
                target_type=TargetType.USER,
                target_id=user_id,
                reason=f"Bootstrap administrator: role changed from {old_role.value} to admin",
                metadata={"old_role": old_role.value, "new_role": Role.ADMIN.value},
            )

        outcome = await self.repository.replace_role(
            user_id,
            role=Role.ADMIN,
            assigned_by=SYSTEM_ACTOR,
            audit_factory=build_audit,
            only_if_missing=True,
        )
        if outcome is None:
            return None
        logger.info("Bootstrapped administrator %s", user_id)
        return outcome[0]
