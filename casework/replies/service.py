from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Mapping

from casework.audit.models import AuditAction, AuditLogEntry, TargetType
from casework.db import utcnow
from casework.errors import NotFound, ValidationError, require_text
from casework.permissions import ADMIN_ROLES, STAFF_ROLES, Role, ensure_role

from .models import EDITABLE_FIELDS, SavedReply
from .repository import SavedReplyRepository

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 255
MAX_CATEGORY_LENGTH = 100


def _clean_title(value: str | None) -> str:
    title = require_text(value, "title")
    if len(title) > MAX_TITLE_LENGTH:
        raise ValidationError(f"title must be at most {MAX_TITLE_LENGTH} characters")
    return title


def _clean_category(value: str | None) -> str | None:
    category = (value or "").strip() or None
    if category is not None and len(category) > MAX_CATEGORY_LENGTH:
        raise ValidationError(f"category must be at most {MAX_CATEGORY_LENGTH} characters")
    return category


@dataclass(slots=True)
class SavedReplyService:
    """Staff browse the response library; administrators curate it.

    Every create, update and delete is written to the audit log in the same
    transaction as the template change.
    """

    repository: SavedReplyRepository

    async def list_replies(self, *, caller_role: Role | str, search: str | None = None) -> list[SavedReply]:
        """Templates ordered by title, optionally filtered by a case-insensitive
        match on title, content or category."""

        ensure_role(caller_role, STAFF_ROLES, operation="saved reply listing")
        term = (search or "").strip() or None
        return await self.repository.list_replies(search=term)

    async def get_reply(self, reply_id: str, *, caller_role: Role | str) -> SavedReply:
        ensure_role(caller_role, STAFF_ROLES, operation="saved reply lookup")
        reply = await self.repository.get_reply(reply_id)
        if reply is None:
            raise NotFound(f"Saved reply {reply_id} not found")
        return reply

    async def create_reply(
        self,
        *,
        actor_id: str,
        actor_role: Role | str,
        title: str,
        content: str,
        category: str | None = None,
    ) -> SavedReply:
        role = ensure_role(actor_role, ADMIN_ROLES, operation="saved reply creation", actor_id=actor_id)
        now = utcnow()
        reply = SavedReply(
            id=str(uuid.uuid4()),
            title=_clean_title(title),
            content=require_text(content, "content"),
            category=_clean_category(category),
            created_by=actor_id,
            created_at=now,
            updated_at=now,
        )
        audit = AuditLogEntry.create(
            actor_id=actor_id,
            actor_role=role,
            action_type=AuditAction.REPLY_TEMPLATE_CREATED,
            target_type=TargetType.SAVED_REPLY,
            target_id=reply.id,
            reason=f"Reply template '{reply.title}' created",
            metadata={"title": reply.title, "category": reply.category},
            created_at=now,
        )
        await self.repository.create(reply, audit=audit)
        logger.info("Saved reply %s created by %s", reply.id, actor_id)
        return reply

    async def update_reply(
        self,
        reply_id: str,
        changes: Mapping[str, Any],
        *,
        actor_id: str,
        actor_role: Role | str,
    ) -> SavedReply:
        role = ensure_role(actor_role, ADMIN_ROLES, operation="saved reply update", actor_id=actor_id)
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown saved reply fields: {', '.join(sorted(unknown))}")
        if not changes:
            raise ValidationError("No changes supplied")

        cleaned: dict[str, Any] = {}
        if "title" in changes:
            cleaned["title"] = _clean_title(changes["title"])
        if "content" in changes:
            cleaned["content"] = require_text(changes["content"], "content")
        if "category" in changes:
            cleaned["category"] = _clean_category(changes["category"])

        audit = AuditLogEntry.create(
            actor_id=actor_id,
            actor_role=role,
            action_type=AuditAction.REPLY_TEMPLATE_UPDATED,
            target_type=TargetType.SAVED_REPLY,
            target_id=reply_id,
            reason=f"Reply template updated: {', '.join(sorted(cleaned))}",
            metadata={"fields": sorted(cleaned)},
        )
        updated = await self.repository.update(reply_id, cleaned, audit=audit)
        if updated is None:
            raise NotFound(f"Saved reply {reply_id} not found")
        logger.info("Saved reply %s updated by %s", reply_id, actor_id)
        return updated

    async def delete_reply(self, reply_id: str, *, actor_id: str, actor_role: Role | str) -> None:
        role = ensure_role(actor_role, ADMIN_ROLES, operation="saved reply deletion", actor_id=actor_id)
        current = await self.repository.get_reply(reply_id)
        if current is None:
            raise NotFound(f"Saved reply {reply_id} not found")
        audit = AuditLogEntry.create(
            actor_id=actor_id,
            actor_role=role,
            action_type=AuditAction.REPLY_TEMPLATE_DELETED,
            target_type=TargetType.SAVED_REPLY,
            target_id=reply_id,
            reason=f"Reply template '{current.title}' deleted",
            metadata={"title": current.title},
        )
        if not await self.repository.delete(reply_id, audit=audit):
            raise NotFound(f"Saved reply {reply_id} not found")
        logger.info("Saved reply %s deleted by %s", reply_id, actor_id)
