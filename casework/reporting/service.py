from __future__ import annotations

from dataclasses import asdict, dataclass

from casework.audit.models import AuditLogEntry, AuditQuery
from casework.audit.repository import AuditLogRepository
from casework.cases.models import Case, CaseType
from casework.cases.state import CaseStatus
from casework.errors import ValidationError
from casework.moderation.models import ListingStatus
from casework.permissions import AUDIT_READER_ROLES, STAFF_ROLES, Role, ensure_role

from .repository import ReportingRepository


@dataclass(slots=True, frozen=True)
class DashboardCounts:
    """Headline numbers for the support and admin dashboards."""

    new_cases: int
    open_cases: int
    escalated_cases: int
    open_disputes: int
    open_refunds: int
    active_listings: int
    frozen_listings: int
    flagged_accounts: int

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(slots=True)
class ReportingService:
    """Read-only views for staff dashboards."""

    repository: ReportingRepository
    audit_repository: AuditLogRepository
    default_limit: int = 5

    async def dashboard(self, *, caller_role: Role | str) -> DashboardCounts:
        ensure_role(caller_role, STAFF_ROLES, operation="dashboard")
        return DashboardCounts(
            new_cases=await self.repository.count_cases(statuses=(CaseStatus.NEW,)),
            open_cases=await self.repository.count_cases(statuses=(CaseStatus.OPEN,)),
            escalated_cases=await self.repository.count_cases(statuses=(CaseStatus.ESCALATED,)),
            open_disputes=await self.repository.count_cases(
                excluded_statuses=(CaseStatus.CLOSED,), case_type=CaseType.DISPUTE
            ),
            open_refunds=await self.repository.count_cases(statuses=(CaseStatus.OPEN,), case_type=CaseType.REFUND),
            active_listings=await self.repository.count_listings(ListingStatus.ACTIVE),
            frozen_listings=await self.repository.count_listings(ListingStatus.FROZEN),
            flagged_accounts=await self.repository.count_flagged_accounts(),
        )

    async def case_counts_by_status(self, *, caller_role: Role | str) -> dict[CaseStatus, int]:
        ensure_role(caller_role, STAFF_ROLES, operation="case status counts")
        return await self.repository.count_cases_by_status()

    async def priority_queue(self, *, caller_role: Role | str, limit: int | None = None) -> list[Case]:
        ensure_role(caller_role, STAFF_ROLES, operation="priority queue")
        return await self.repository.priority_queue(self._limit(limit))

    async def escalation_queue(self, *, caller_role: Role | str, limit: int | None = None) -> list[Case]:
        ensure_role(caller_role, STAFF_ROLES, operation="escalation queue")
        return await self.repository.escalation_queue(self._limit(limit))

    async def recent_activity(self, *, caller_role: Role | str, limit: int | None = None) -> list[AuditLogEntry]:
        ensure_role(caller_role, AUDIT_READER_ROLES, operation="recent activity")
        return await self.audit_repository.query(AuditQuery(limit=self._limit(limit)))

    def _limit(self, limit: int | None) -> int:
        value = self.default_limit if limit is None else limit
        if not 1 <= value <= 100:
            raise ValidationError("limit must be between 1 and 100")
        return value
