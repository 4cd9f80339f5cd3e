from __future__ import annotations

from sqlalchemy import case, func, or_, true
from sqlmodel import select

from casework.cases.models import PRIORITY_RANK, Case, CaseType
from casework.cases.repository import CaseRepository
from casework.cases.state import CaseStatus
from casework.db import Database
from casework.moderation.models import ListingStatus
from packages.db.models import CaseTable, ListingTable, UserAccountTable

UNRESOLVED_STATUSES = (CaseStatus.NEW, CaseStatus.OPEN, CaseStatus.ESCALATED)


class ReportingRepository:
    """Read-only aggregate queries over cases, listings and accounts."""

    def __init__(self, database: Database) -> None:
        self._database = database

    async def count_cases(
        self,
        *,
        statuses: tuple[CaseStatus, ...] | None = None,
        excluded_statuses: tuple[CaseStatus, ...] | None = None,
        case_type: CaseType | None = None,
    ) -> int:
        statement = select(func.count()).select_from(CaseTable)
        if statuses:
            statement = statement.where(CaseTable.status.in_([status.value for status in statuses]))
        if excluded_statuses:
            statement = statement.where(CaseTable.status.not_in([status.value for status in excluded_statuses]))
        if case_type is not None:
            statement = statement.where(CaseTable.type == case_type.value)
        return await self._scalar(statement)

    async def count_cases_by_status(self) -> dict[CaseStatus, int]:
        statement = select(CaseTable.status, func.count()).group_by(CaseTable.status)
        async with self._database.session() as session:
            result = await session.execute(statement)
            counts = {status: 0 for status in CaseStatus}
            for status, count in result.all():
                counts[CaseStatus(status)] = int(count)
            return counts

    async def count_listings(self, status: ListingStatus) -> int:
        statement = select(func.count()).select_from(ListingTable).where(ListingTable.status == status.value)
        return await self._scalar(statement)

    async def count_flagged_accounts(self) -> int:
        statement = (
            select(func.count())
            .select_from(UserAccountTable)
            .where(
                or_(
                    UserAccountTable.is_banned == true(),
                    UserAccountTable.is_suspended == true(),
                    UserAccountTable.is_restricted == true(),
                )
            )
        )
        return await self._scalar(statement)

    async def priority_queue(self, limit: int) -> list[Case]:
        rank = case(
            {priority.value: position for priority, position in PRIORITY_RANK.items()},
            value=CaseTable.priority,
            else_=len(PRIORITY_RANK),
        )
        statement = (
            select(CaseTable)
            .where(CaseTable.status.in_([status.value for status in UNRESOLVED_STATUSES]))
            .order_by(rank.asc(), CaseTable.created_at.asc())
            .limit(limit)
        )
        return await self._cases(statement)

    async def escalation_queue(self, limit: int) -> list[Case]:
        statement = (
            select(CaseTable)
            .where(CaseTable.status == CaseStatus.ESCALATED.value)
            .order_by(CaseTable.created_at.asc())
            .limit(limit)
        )
        return await self._cases(statement)

    async def _cases(self, statement) -> list[Case]:
        async with self._database.session() as session:
            result = await session.execute(statement)
            return [CaseRepository._table_to_case(row) for row in result.scalars().all()]

    async def _scalar(self, statement) -> int:
        async with self._database.session() as session:
            result = await session.execute(statement)
            return int(result.scalar_one())
