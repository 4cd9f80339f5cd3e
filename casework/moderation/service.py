from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar

from casework.audit.models import AuditLogEntry, TargetType
from casework.errors import InvalidTransition, NotFound, ValidationError, require_text
from casework.permissions import STAFF_ROLES, Role, ensure_role

from .models import (
    LISTING_ACTION_AUDIT,
    LISTING_ACTION_TARGET,
    RESTORABLE_LISTING_STATUSES,
    USER_ACTION_AUDIT,
    USER_ACTION_ROLES,
    ListingAction,
    ListingState,
    ListingStatus,
    ModerationState,
    UserAction,
)
from .repository import ModerationRepository

logger = logging.getLogger(__name__)

ActionT = TypeVar("ActionT", bound=Enum)


def _parse_action(enum_type: type[ActionT], value: ActionT | str) -> ActionT:
    try:
        return enum_type(value)
    except ValueError as exc:
        raise ValidationError(f"Unknown action: {value!r}") from exc


@dataclass(slots=True)
class ModerationService:
    """Applies audited moderation actions to accounts and listings."""

    repository: ModerationRepository

    async def register_account(self, user_id: str) -> ModerationState:
        return await self.repository.register_account(require_text(user_id, "user_id"))

    async def register_listing(
        self,
        listing_id: str,
        *,
        seller_id: str,
        status: ListingStatus | str = ListingStatus.ACTIVE,
    ) -> ListingState:
        return await self.repository.register_listing(
            require_text(listing_id, "listing_id"),
            seller_id=require_text(seller_id, "seller_id"),
            status=ListingStatus(status),
        )

    async def get_user_state(self, user_id: str, *, caller_role: Role | str) -> ModerationState:
        ensure_role(caller_role, STAFF_ROLES, operation="account lookup")
        state = await self.repository.get_account(user_id)
        if state is None:
            raise NotFound(f"User {user_id} not found")
        return state

    async def get_listing(self, listing_id: str, *, caller_role: Role | str) -> ListingState:
        ensure_role(caller_role, STAFF_ROLES, operation="listing lookup")
        listing = await self.repository.get_listing(listing_id)
        if listing is None:
            raise NotFound(f"Listing {listing_id} not found")
        return listing

    async def apply_user_action(
        self,
        target_id: str,
        *,
        actor_id: str,
        actor_role: Role | str,
        action: UserAction | str,
        reason: str,
    ) -> tuple[ModerationState, AuditLogEntry]:
        """Apply ``action`` to an account and record it.

        Repeating an action is allowed; every successful call is audited on
        its own, even when the flag was already set.
        """

        user_action = _parse_action(UserAction, action)
        role = ensure_role(
            actor_role,
            USER_ACTION_ROLES[user_action],
            operation=f"user {user_action.value}",
            actor_id=actor_id,
        )
        cleaned_reason = require_text(reason, "reason")
        audit = AuditLogEntry.create(
            actor_id=actor_id,
            actor_role=role,
            action_type=USER_ACTION_AUDIT[user_action],
            target_type=TargetType.USER,
            target_id=target_id,
            reason=cleaned_reason,
            metadata={"action": user_action.value},
        )
        state = await self.repository.apply_user_action(
            target_id,
            action=user_action,
            reason=cleaned_reason,
            audit=audit,
        )
        if state is None:
            raise NotFound(f"User {target_id} not found")
        logger.info("User %s: %s by %s (%s)", target_id, user_action.value, actor_id, role.value)
        return state, audit

    async def apply_listing_action(
        self,
        listing_id: str,
        *,
        actor_id: str,
        actor_role: Role | str,
        action: ListingAction | str,
        reason: str,
    ) -> tuple[ListingStatus, AuditLogEntry]:
        listing_action = _parse_action(ListingAction, action)
        role = ensure_role(
            actor_role,
            STAFF_ROLES,
            operation=f"listing {listing_action.value}",
            actor_id=actor_id,
        )
        cleaned_reason = require_text(reason, "reason")
        target_status = LISTING_ACTION_TARGET[listing_action]
        allowed_from = RESTORABLE_LISTING_STATUSES if listing_action == ListingAction.RESTORE else None

        audit = AuditLogEntry.create(
            actor_id=actor_id,
            actor_role=role,
            action_type=LISTING_ACTION_AUDIT[listing_action],
            target_type=TargetType.LISTING,
            target_id=listing_id,
            reason=cleaned_reason,
            metadata={"action": listing_action.value, "to_status": target_status.value},
        )
        listing = await self.repository.set_listing_status(
            listing_id,
            status=target_status,
            reason=cleaned_reason,
            audit=audit,
            allowed_from=allowed_from,
        )
        if listing is None:
            current = await self.repository.get_listing(listing_id)
            if current is None:
                raise NotFound(f"Listing {listing_id} not found")
            raise InvalidTransition(
                f"Cannot {listing_action.value} a listing in status {current.status.value}"
            )
        logger.info("Listing %s: %s by %s (%s)", listing_id, listing_action.value, actor_id, role.value)
        return listing.status, audit
