from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from casework.api.schemas import AuditEntryResponse, CaseResponse, to_audit_response, to_case_response
from casework.dependencies.auth import CurrentActor, StaffActor
from casework.dependencies.services import get_reporting_service
from casework.reporting.service import ReportingService

router = APIRouter(prefix="/reports", tags=["reports"])

ReportingServiceDep = Annotated[ReportingService, Depends(get_reporting_service)]


@router.get("/dashboard")
async def dashboard(actor: StaffActor, service: ReportingServiceDep) -> dict[str, int]:
    counts = await service.dashboard(caller_role=actor.role)
    return counts.as_dict()


@router.get("/status-counts")
async def status_counts(actor: StaffActor, service: ReportingServiceDep) -> dict[str, int]:
    counts = await service.case_counts_by_status(caller_role=actor.role)
    return {status.value: count for status, count in counts.items()}


@router.get("/queues/priority", response_model=list[CaseResponse])
async def priority_queue(
    actor: StaffActor,
    service: ReportingServiceDep,
    limit: int | None = Query(default=None),
) -> list[CaseResponse]:
    cases = await service.priority_queue(caller_role=actor.role, limit=limit)
    return [to_case_response(case) for case in cases]


@router.get("/queues/escalations", response_model=list[CaseResponse])
async def escalation_queue(
    actor: StaffActor,
    service: ReportingServiceDep,
    limit: int | None = Query(default=None),
) -> list[CaseResponse]:
    cases = await service.escalation_queue(caller_role=actor.role, limit=limit)
    return [to_case_response(case) for case in cases]


@router.get("/activity", response_model=list[AuditEntryResponse])
async def recent_activity(
    actor: CurrentActor,
    service: ReportingServiceDep,
    limit: int | None = Query(default=None),
) -> list[AuditEntryResponse]:
    entries = await service.recent_activity(caller_role=actor.role, limit=limit)
    return [to_audit_response(entry) for entry in entries]
