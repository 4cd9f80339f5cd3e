from __future__ import annotations

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, ConfigDict, Field

from casework.api.schemas import CaseResponse, to_case_response
from casework.cases.models import CaseMessage, CasePriority, CaseType
from casework.cases.service import CaseService
from casework.cases.state import CaseStatus
from casework.dependencies.auth import CurrentActor, StaffActor
from casework.dependencies.services import get_case_service

router = APIRouter(prefix="/cases", tags=["cases"])


class CaseOpenRequest(BaseModel):
    type: CaseType = CaseType.OTHER
    subject: str = Field(..., min_length=1, max_length=255)
    priority: CasePriority = CasePriority.MEDIUM
    message: str | None = Field(default=None, min_length=1)


class MessageCreateRequest(BaseModel):
    content: str = Field(..., min_length=1)
    is_internal: bool = False


class EscalateRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=2000)


class NoteRequest(BaseModel):
    note: str | None = Field(default=None, max_length=2000)


class CaseMessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    case_id: str
    sender_id: str
    content: str
    is_internal: bool
    created_at: datetime


CaseServiceDep = Annotated[CaseService, Depends(get_case_service)]


def _to_message_response(message: CaseMessage) -> CaseMessageResponse:
    return CaseMessageResponse.model_validate(message)


@router.post("", response_model=CaseResponse, status_code=status.HTTP_201_CREATED)
async def open_case(payload: CaseOpenRequest, actor: CurrentActor, service: CaseServiceDep) -> CaseResponse:
    case = await service.open_case(
        owner_id=actor.actor_id,
        case_type=payload.type,
        subject=payload.subject,
        priority=payload.priority,
        initial_message=payload.message,
    )
    return to_case_response(case)


@router.get("", response_model=list[CaseResponse])
async def list_cases(
    actor: CurrentActor,
    service: CaseServiceDep,
    status_filter: CaseStatus | None = Query(default=None, alias="status"),
) -> list[CaseResponse]:
    """Staff see the whole queue; everyone else sees the cases they opened."""

    if actor.is_staff:
        cases = await service.list_cases(caller_role=actor.role, status=status_filter)
    else:
        cases = await service.list_cases_for_owner(actor.actor_id)
        if status_filter is not None:
            cases = [case for case in cases if case.status == status_filter]
    return [to_case_response(case) for case in cases]


@router.get("/{case_id}", response_model=CaseResponse)
async def get_case(case_id: str, actor: CurrentActor, service: CaseServiceDep) -> CaseResponse:
    case = await service.get_case(case_id, caller_id=actor.actor_id, caller_role=actor.role)
    return to_case_response(case)


@router.get("/{case_id}/messages", response_model=list[CaseMessageResponse])
async def list_messages(case_id: str, actor: CurrentActor, service: CaseServiceDep) -> list[CaseMessageResponse]:
    messages = await service.list_messages(case_id, caller_role=actor.role, caller_id=actor.actor_id)
    return [_to_message_response(message) for message in messages]


@router.post("/{case_id}/messages", response_model=CaseMessageResponse, status_code=status.HTTP_201_CREATED)
async def post_message(
    case_id: str,
    payload: MessageCreateRequest,
    actor: CurrentActor,
    service: CaseServiceDep,
) -> CaseMessageResponse:
    message = await service.post_message(
        case_id,
        sender_id=actor.actor_id,
        sender_role=actor.role,
        content=payload.content,
        is_internal=payload.is_internal,
    )
    return _to_message_response(message)


@router.post("/{case_id}/acknowledge", response_model=CaseResponse)
async def acknowledge_case(case_id: str, actor: StaffActor, service: CaseServiceDep) -> CaseResponse:
    case = await service.acknowledge(case_id, actor_id=actor.actor_id, actor_role=actor.role)
    return to_case_response(case)


@router.post("/{case_id}/escalate", response_model=CaseResponse)
async def escalate_case(
    case_id: str,
    payload: EscalateRequest,
    actor: StaffActor,
    service: CaseServiceDep,
) -> CaseResponse:
    case = await service.escalate(case_id, actor_id=actor.actor_id, actor_role=actor.role, reason=payload.reason)
    return to_case_response(case)


@router.post("/{case_id}/resolve", response_model=CaseResponse)
async def resolve_case(
    case_id: str,
    actor: StaffActor,
    service: CaseServiceDep,
    payload: NoteRequest | None = None,
) -> CaseResponse:
    note = payload.note if payload is not None else None
    case = await service.resolve(case_id, actor_id=actor.actor_id, actor_role=actor.role, note=note)
    return to_case_response(case)


@router.post("/{case_id}/close", response_model=CaseResponse)
async def close_case(
    case_id: str,
    actor: StaffActor,
    service: CaseServiceDep,
    payload: NoteRequest | None = None,
) -> CaseResponse:
    note = payload.note if payload is not None else None
    case = await service.close(case_id, actor_id=actor.actor_id, actor_role=actor.role, note=note)
    return to_case_response(case)
