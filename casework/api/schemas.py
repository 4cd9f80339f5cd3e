"""Response bodies shared by more than one route module."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from casework.audit.models import AuditAction, AuditLogEntry, TargetType
from casework.cases.models import Case, CasePriority, CaseType
from casework.cases.state import CaseStatus
from casework.permissions import Role


class CaseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    owner_id: str
    type: CaseType
    subject: str
    status: CaseStatus
    priority: CasePriority
    created_at: datetime
    updated_at: datetime
    resolved_at: datetime | None = None
    resolved_by: str | None = None
    assigned_agent_id: str | None = None


class AuditEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    actor_id: str
    actor_role: Role
    action_type: AuditAction
    target_type: TargetType
    target_id: str
    reason: str
    metadata: dict[str, Any]
    created_at: datetime


def to_case_response(case: Case) -> CaseResponse:
    return CaseResponse.model_validate(case)


def to_audit_response(entry: AuditLogEntry) -> AuditEntryResponse:
    return AuditEntryResponse.model_validate(entry)
