from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping

from casework.errors import require_text
from casework.permissions import Role, parse_role


class AuditAction(str, Enum):
    """Closed taxonomy of privileged actions."""

    USER_WARNED = "user_warned"
    USER_RESTRICTED = "user_restricted"
    USER_SUSPENDED = "user_suspended"
    USER_BANNED = "user_banned"
    USER_RESTORED = "user_restored"
    USER_ROLE_CHANGED = "user_role_changed"
    LISTING_FROZEN = "listing_frozen"
    LISTING_REMOVED = "listing_removed"
    LISTING_RESTORED = "listing_restored"
    CASE_ACKNOWLEDGED = "case_acknowledged"
    CASE_ESCALATED = "case_escalated"
    CASE_RESOLVED = "case_resolved"
    CASE_CLOSED = "case_closed"
    SETTING_UPDATED = "setting_updated"
    REPLY_TEMPLATE_CREATED = "reply_template_created"
    REPLY_TEMPLATE_UPDATED = "reply_template_updated"
    REPLY_TEMPLATE_DELETED = "reply_template_deleted"


class TargetType(str, Enum):
    USER = "user"
    LISTING = "listing"
    CASE = "case"
    SAVED_REPLY = "saved_reply"
    SYSTEM = "system"


@dataclass(slots=True, frozen=True)
class AuditLogEntry:
    """Immutable record of one privileged action."""

    id: str
    actor_id: str
    actor_role: Role
    action_type: AuditAction
    target_type: TargetType
    target_id: str
    reason: str
    created_at: datetime
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        *,
        actor_id: str,
        actor_role: Role | str,
        action_type: AuditAction,
        target_type: TargetType,
        target_id: str,
        reason: str | None,
        metadata: Mapping[str, Any] | None = None,
        created_at: datetime | None = None,
    ) -> "AuditLogEntry":
        return cls(
            id=str(uuid.uuid4()),
            actor_id=actor_id,
            actor_role=parse_role(actor_role),
            action_type=AuditAction(action_type),
            target_type=TargetType(target_type),
            target_id=require_text(target_id, "target_id"),
            reason=require_text(reason, "reason"),
            created_at=created_at or datetime.now(timezone.utc),
            metadata=dict(metadata or {}),
        )


@dataclass(slots=True)
class AuditQuery:
    """Filters accepted by the audit log query; unset fields do not filter."""

    action_type: AuditAction | None = None
    target_type: TargetType | None = None
    target_id: str | None = None
    actor_id: str | None = None
    text_search: str | None = None
    since: datetime | None = None
    until: datetime | None = None
    limit: int = 50
