from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .state import CaseStatus


class CaseType(str, Enum):
    DISPUTE = "dispute"
    REFUND = "refund"
    REPORT = "report"
    OTHER = "other"


class CasePriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


# Queue ordering, most pressing first.
PRIORITY_RANK: dict[CasePriority, int] = {
    CasePriority.URGENT: 0,
    CasePriority.HIGH: 1,
    CasePriority.MEDIUM: 2,
    CasePriority.LOW: 3,
}


@dataclass(slots=True)
class Case:
    """Aggregate representing a support case."""

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


@dataclass(slots=True, frozen=True)
class CaseMessage:
    """One message in a case thread. Internal messages are staff-only."""

    id: str
    case_id: str
    sender_id: str
    content: str
    is_internal: bool
    created_at: datetime
