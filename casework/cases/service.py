from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from casework.audit.models import AuditAction, AuditLogEntry, TargetType
from casework.db import utcnow
from casework.errors import InvalidTransition, NotFound, PermissionDenied, ValidationError, require_text
from casework.permissions import STAFF_ROLES, Role, ensure_role, is_staff

from .models import Case, CaseMessage, CasePriority, CaseType
from .repository import CaseRepository
from .state import CaseStateMachine, CaseStatus

logger = logging.getLogger(__name__)

MAX_SUBJECT_LENGTH = 255


@dataclass(slots=True)
class CaseService:
    """Case workflow: opening, threaded messages and forward-only status changes."""

    repository: CaseRepository

    async def open_case(
        self,
        *,
        owner_id: str,
        case_type: CaseType | str,
        subject: str,
        priority: CasePriority | str = CasePriority.MEDIUM,
        initial_message: str | None = None,
    ) -> Case:
        cleaned_subject = require_text(subject, "subject")
        if len(cleaned_subject) > MAX_SUBJECT_LENGTH:
            raise ValidationError(f"subject must be at most {MAX_SUBJECT_LENGTH} characters")
        try:
            parsed_type = CaseType(case_type)
            case_priority = CasePriority(priority)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

        now = utcnow()
        case = Case(
            id=str(uuid.uuid4()),
            owner_id=require_text(owner_id, "owner_id"),
            type=parsed_type,
            subject=cleaned_subject,
            status=CaseStateMachine.initial_state(),
            priority=case_priority,
            created_at=now,
            updated_at=now,
        )
        message = None
        if initial_message is not None:
            message = CaseMessage(
                id=str(uuid.uuid4()),
                case_id=case.id,
                sender_id=case.owner_id,
                content=require_text(initial_message, "content"),
                is_internal=False,
                created_at=now,
            )
        created = await self.repository.create_case(case, message)
        logger.info("Case %s opened by %s (%s, %s)", created.id, created.owner_id, parsed_type.value, case_priority.value)
        return created

    async def get_case(self, case_id: str, *, caller_id: str, caller_role: Role | str) -> Case:
        case = await self._require_case(case_id)
        self._ensure_can_view(case, caller_id=caller_id, caller_role=caller_role)
        return case

    async def list_cases_for_owner(self, owner_id: str) -> list[Case]:
        return await self.repository.list_cases(owner_id=owner_id)

    async def list_cases(self, *, caller_role: Role | str, status: CaseStatus | None = None) -> list[Case]:
        ensure_role(caller_role, STAFF_ROLES, operation="case queue listing")
        return await self.repository.list_cases(status=status)

    async def post_message(
        self,
        case_id: str,
        *,
        sender_id: str,
        sender_role: Role | str,
        content: str,
        is_internal: bool = False,
    ) -> CaseMessage:
        body = require_text(content, "content")
        staff = is_staff(sender_role)
        if is_internal and not staff:
            logger.warning("Internal note rejected for non-staff sender %s on case %s", sender_id, case_id)
            raise PermissionDenied("Only staff may post internal notes")

        case = await self._require_case(case_id)
        if not staff and case.owner_id != sender_id:
            logger.warning("Sender %s is not the owner of case %s", sender_id, case_id)
            raise PermissionDenied("Only the case owner or staff may post to this case")

        message = CaseMessage(
            id=str(uuid.uuid4()),
            case_id=case_id,
            sender_id=sender_id,
            content=body,
            is_internal=is_internal,
            created_at=utcnow(),
        )
        stored = await self.repository.add_message(message)
        if stored is None:
            raise NotFound(f"Case {case_id} not found")
        return stored

    async def list_messages(
        self,
        case_id: str,
        *,
        caller_role: Role | str,
        caller_id: str | None = None,
    ) -> list[CaseMessage]:
        """Return the thread in posting order; internal notes only reach staff."""

        case = await self._require_case(case_id)
        staff = is_staff(caller_role)
        if caller_id is not None:
            self._ensure_can_view(case, caller_id=caller_id, caller_role=caller_role)
        return await self.repository.list_messages(case_id, include_internal=staff)

    async def acknowledge(self, case_id: str, *, actor_id: str, actor_role: Role | str) -> Case:
        role = ensure_role(actor_role, STAFF_ROLES, operation="case acknowledge", actor_id=actor_id)
        return await self._transition(
            case_id,
            to_status=CaseStatus.OPEN,
            actor_id=actor_id,
            actor_role=role,
            action=AuditAction.CASE_ACKNOWLEDGED,
            reason=f"Case acknowledged by {role.value}.",
            assigned_agent_id=actor_id,
        )

    async def escalate(self, case_id: str, *, actor_id: str, actor_role: Role | str, reason: str) -> Case:
        role = ensure_role(actor_role, STAFF_ROLES, operation="case escalate", actor_id=actor_id)
        return await self._transition(
            case_id,
            to_status=CaseStatus.ESCALATED,
            actor_id=actor_id,
            actor_role=role,
            action=AuditAction.CASE_ESCALATED,
            reason=require_text(reason, "reason"),
        )

    async def resolve(
        self,
        case_id: str,
        *,
        actor_id: str,
        actor_role: Role | str,
        note: str | None = None,
    ) -> Case:
        """Resolve a case. A second call fails; resolution is not idempotent."""

        role = ensure_role(actor_role, STAFF_ROLES, operation="case resolve", actor_id=actor_id)
        return await self._transition(
            case_id,
            to_status=CaseStatus.RESOLVED,
            actor_id=actor_id,
            actor_role=role,
            action=AuditAction.CASE_RESOLVED,
            reason=(note or "").strip() or f"Case resolved by {role.value}.",
            resolved_by=actor_id,
        )

    async def close(
        self,
        case_id: str,
        *,
        actor_id: str,
        actor_role: Role | str,
        note: str | None = None,
    ) -> Case:
        role = ensure_role(actor_role, STAFF_ROLES, operation="case close", actor_id=actor_id)
        return await self._transition(
            case_id,
            to_status=CaseStatus.CLOSED,
            actor_id=actor_id,
            actor_role=role,
            action=AuditAction.CASE_CLOSED,
            reason=(note or "").strip() or f"Case closed by {role.value}.",
        )

    async def _transition(
        self,
        case_id: str,
        *,
        to_status: CaseStatus,
        actor_id: str,
        actor_role: Role,
        action: AuditAction,
        reason: str,
        resolved_by: str | None = None,
        assigned_agent_id: str | None = None,
    ) -> Case:
        current = await self._require_case(case_id)
        CaseStateMachine.assert_transition(current.status, to_status)

        audit = AuditLogEntry.create(
            actor_id=actor_id,
            actor_role=actor_role,
            action_type=action,
            target_type=TargetType.CASE,
            target_id=case_id,
            reason=reason,
            metadata={"from_status": current.status.value, "to_status": to_status.value},
        )
        updated = await self.repository.transition(
            case_id,
            allowed_from=[current.status],
            to_status=to_status,
            changed_at=audit.created_at,
            audit=audit,
            resolved_by=resolved_by,
            assigned_agent_id=assigned_agent_id,
        )
        if updated is None:
            # Another request changed the case between the read and the guarded update.
            latest = await self._require_case(case_id)
            raise InvalidTransition(
                f"Invalid case status transition: {latest.status.value} -> {to_status.value}"
            )
        logger.info("Case %s %s -> %s by %s", case_id, current.status.value, to_status.value, actor_id)
        return updated

    async def _require_case(self, case_id: str) -> Case:
        case = await self.repository.get_case(case_id)
        if case is None:
            raise NotFound(f"Case {case_id} not found")
        return case

    @staticmethod
    def _ensure_can_view(case: Case, *, caller_id: str, caller_role: Role | str) -> None:
        if is_staff(caller_role) or case.owner_id == caller_id:
            return
        logger.warning("Caller %s denied access to case %s", caller_id, case.id)
        raise PermissionDenied("Only the case owner or staff may view this case")
