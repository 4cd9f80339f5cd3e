from __future__ import annotations

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from casework.api.schemas import AuditEntryResponse, to_audit_response
from casework.audit.models import AuditAction, TargetType
from casework.audit.service import AuditLogService
from casework.dependencies.auth import CurrentActor
from casework.dependencies.services import get_audit_service

router = APIRouter(prefix="/audit", tags=["audit"])

AuditServiceDep = Annotated[AuditLogService, Depends(get_audit_service)]


@router.get("", response_model=list[AuditEntryResponse])
async def query_audit_log(
    actor: CurrentActor,
    service: AuditServiceDep,
    action_type: AuditAction | None = Query(default=None),
    target_type: TargetType | None = Query(default=None),
    target_id: str | None = Query(default=None),
    actor_id: str | None = Query(default=None),
    q: str | None = Query(default=None, description="Matches reason text or an exact target id"),
    since: datetime | None = Query(default=None),
    until: datetime | None = Query(default=None),
    limit: int | None = Query(default=None),
) -> list[AuditEntryResponse]:
    entries = await service.query(
        caller_role=actor.role,
        action_type=action_type,
        target_type=target_type,
        target_id=target_id,
        actor_id=actor_id,
        text_search=q,
        since=since,
        until=until,
        limit=limit,
    )
    return [to_audit_response(entry) for entry in entries]
