from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from casework.errors import ValidationError
from casework.permissions import AUDIT_READER_ROLES, Role, ensure_role

from .models import AuditAction, AuditLogEntry, AuditQuery, TargetType
from .repository import AuditLogRepository

logger = logging.getLogger(__name__)

MAX_QUERY_LIMIT = 500


@dataclass(slots=True)
class AuditLogService:
    """Append and query access to the audit ledger."""

    repository: AuditLogRepository
    default_limit: int = 50

    async def append(self, entry: AuditLogEntry) -> AuditLogEntry:
        stored = await self.repository.append(entry)
        logger.info(
            "Audit %s by %s on %s:%s",
            stored.action_type.value,
            stored.actor_id,
            stored.target_type.value,
            stored.target_id,
        )
        return stored

    async def query(
        self,
        *,
        caller_role: Role | str,
        action_type: AuditAction | None = None,
        target_type: TargetType | None = None,
        target_id: str | None = None,
        actor_id: str | None = None,
        text_search: str | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
        limit: int | None = None,
    ) -> list[AuditLogEntry]:
        ensure_role(caller_role, AUDIT_READER_ROLES, operation="audit log query")
        effective_limit = self.default_limit if limit is None else limit
        if not 1 <= effective_limit <= MAX_QUERY_LIMIT:
            raise ValidationError(f"limit must be between 1 and {MAX_QUERY_LIMIT}")
        if since is not None and until is not None and since > until:
            raise ValidationError("since must not be later than until")
        filters = AuditQuery(
            action_type=action_type,
            target_type=target_type,
            target_id=target_id or None,
            actor_id=actor_id or None,
            text_search=(text_search or "").strip() or None,
            since=since,
            until=until,
            limit=effective_limit,
        )
        return await self.repository.query(filters)
