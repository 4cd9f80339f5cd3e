from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Mapping

from casework.audit.models import AuditAction
from casework.permissions import ADMIN_ROLES, STAFF_ROLES, Role


class UserAction(str, Enum):
    WARN = "warn"
    RESTRICT = "restrict"
    SUSPEND = "suspend"
    BAN = "ban"
    UNBAN = "unban"


class ListingAction(str, Enum):
    FREEZE = "freeze"
    REMOVE = "remove"
    RESTORE = "restore"


class ListingStatus(str, Enum):
    ACTIVE = "active"
    SOLD = "sold"
    CANCELLED = "cancelled"
    FROZEN = "frozen"


# Destructive account actions are reserved for admins.
USER_ACTION_ROLES: Mapping[UserAction, frozenset[Role]] = {
    UserAction.WARN: STAFF_ROLES,
    UserAction.RESTRICT: STAFF_ROLES,
    UserAction.SUSPEND: ADMIN_ROLES,
    UserAction.BAN: ADMIN_ROLES,
    UserAction.UNBAN: ADMIN_ROLES,
}

USER_ACTION_AUDIT: Mapping[UserAction, AuditAction] = {
    UserAction.WARN: AuditAction.USER_WARNED,
    UserAction.RESTRICT: AuditAction.USER_RESTRICTED,
    UserAction.SUSPEND: AuditAction.USER_SUSPENDED,
    UserAction.BAN: AuditAction.USER_BANNED,
    UserAction.UNBAN: AuditAction.USER_RESTORED,
}

LISTING_ACTION_AUDIT: Mapping[ListingAction, AuditAction] = {
    ListingAction.FREEZE: AuditAction.LISTING_FROZEN,
    ListingAction.REMOVE: AuditAction.LISTING_REMOVED,
    ListingAction.RESTORE: AuditAction.LISTING_RESTORED,
}

LISTING_ACTION_TARGET: Mapping[ListingAction, ListingStatus] = {
    ListingAction.FREEZE: ListingStatus.FROZEN,
    ListingAction.REMOVE: ListingStatus.CANCELLED,
    ListingAction.RESTORE: ListingStatus.ACTIVE,
}

RESTORABLE_LISTING_STATUSES: frozenset[ListingStatus] = frozenset({ListingStatus.FROZEN, ListingStatus.CANCELLED})


@dataclass(slots=True)
class ModerationState:
    """Moderation flags of a user account; the flags are independent of each other."""

    user_id: str
    is_banned: bool
    is_suspended: bool
    is_restricted: bool
    warnings_count: int
    admin_notes: str | None
    updated_at: datetime

    @property
    def is_flagged(self) -> bool:
        return self.is_banned or self.is_suspended or self.is_restricted


@dataclass(slots=True)
class ListingState:
    """Moderation-relevant view of a marketplace listing."""

    id: str
    seller_id: str
    status: ListingStatus
    admin_notes: str | None
    updated_at: datetime
