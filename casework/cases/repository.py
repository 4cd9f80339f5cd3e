from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable

from sqlalchemy import false, update
from sqlmodel import select

from casework.audit.models import AuditLogEntry
from casework.audit.repository import AuditLogRepository
from casework.db import Database, as_utc
from packages.db.models import CaseMessageTable, CaseTable

from .models import Case, CaseMessage, CasePriority, CaseType
from .state import CaseStatus


class CaseRepository:
    """Persistence helper wrapping `cases` and `case_messages`."""

    def __init__(self, database: Database) -> None:
        self._database = database

    async def create_case(self, case: Case, message: CaseMessage | None = None) -> Case:
        async with self._database.transaction() as session:
            session.add(
                CaseTable(
                    id=case.id,
                    owner_id=case.owner_id,
                    type=case.type.value,
                    subject=case.subject,
                    status=case.status.value,
                    priority=case.priority.value,
                    assigned_agent_id=case.assigned_agent_id,
                    created_at=case.created_at,
                    updated_at=case.updated_at,
                )
            )
            if message is not None:
                # The message row references the case, so the case must be flushed first.
                await session.flush()
                session.add(self._message_to_table(message))
        return case

    async def get_case(self, case_id: str) -> Case | None:
        async with self._database.session() as session:
            row = await session.get(CaseTable, case_id)
            if row is None:
                return None
            return self._table_to_case(row)

    async def list_cases(
        self,
        *,
        owner_id: str | None = None,
        status: CaseStatus | None = None,
        limit: int | None = None,
    ) -> list[Case]:
        statement = select(CaseTable)
        if owner_id is not None:
            statement = statement.where(CaseTable.owner_id == owner_id).order_by(CaseTable.updated_at.desc())
        else:
            statement = statement.order_by(CaseTable.created_at.desc())
        if status is not None:
            statement = statement.where(CaseTable.status == status.value)
        if limit is not None:
            statement = statement.limit(limit)
        async with self._database.session() as session:
            result = await session.execute(statement)
            return [self._table_to_case(row) for row in result.scalars().all()]

    async def add_message(self, message: CaseMessage) -> CaseMessage | None:
        """Store ``message`` and bump the case's `updated_at`; None if the case is gone."""

        async with self._database.transaction() as session:
            result = await session.execute(
                update(CaseTable)
                .where(CaseTable.id == message.case_id)
                .values(updated_at=message.created_at)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                return None
            session.add(self._message_to_table(message))
        return message

    async def list_messages(self, case_id: str, *, include_internal: bool) -> list[CaseMessage]:
        statement = select(CaseMessageTable).where(CaseMessageTable.case_id == case_id)
        if not include_internal:
            statement = statement.where(CaseMessageTable.is_internal == false())
        statement = statement.order_by(CaseMessageTable.created_at.asc())
        async with self._database.session() as session:
            result = await session.execute(statement)
            return [self._table_to_message(row) for row in result.scalars().all()]

    async def transition(
        self,
        case_id: str,
        *,
        allowed_from: Iterable[CaseStatus],
        to_status: CaseStatus,
        changed_at: datetime,
        audit: AuditLogEntry,
        resolved_by: str | None = None,
        assigned_agent_id: str | None = None,
    ) -> Case | None:
        """Compare-and-set the case status and write its audit entry in one transaction.

        Returns None when the case does not exist or is no longer in one of
        ``allowed_from``; nothing is written in that case.
        """

        values: dict[str, Any] = {"status": to_status.value, "updated_at": changed_at}
        if to_status == CaseStatus.RESOLVED:
            values["resolved_at"] = changed_at
            values["resolved_by"] = resolved_by
        if assigned_agent_id is not None:
            values["assigned_agent_id"] = assigned_agent_id

        async with self._database.transaction() as session:
            result = await session.execute(
                update(CaseTable)
                .where(CaseTable.id == case_id)
                .where(CaseTable.status.in_([status.value for status in allowed_from]))
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                return None
            AuditLogRepository.add(session, audit)
            row = await session.get(CaseTable, case_id, populate_existing=True)
            if row is None:  # pragma: no cover - row was updated in this transaction
                return None
            return self._table_to_case(row)

    @staticmethod
    def _message_to_table(message: CaseMessage) -> CaseMessageTable:
        return CaseMessageTable(
            id=message.id,
            case_id=message.case_id,
            sender_id=message.sender_id,
            content=message.content,
            is_internal=message.is_internal,
            created_at=message.created_at,
        )

    @staticmethod
    def _table_to_case(row: Any) -> Case:
        return Case(
            id=str(row.id),
            owner_id=str(row.owner_id),
            type=CaseType(row.type),
            subject=str(row.subject),
            status=CaseStatus(row.status),
            priority=CasePriority(row.priority),
            created_at=as_utc(row.created_at),
            updated_at=as_utc(row.updated_at),
            resolved_at=as_utc(row.resolved_at) if row.resolved_at is not None else None,
            resolved_by=row.resolved_by,
            assigned_agent_id=row.assigned_agent_id,
        )

    @staticmethod
    def _table_to_message(row: Any) -> CaseMessage:
        return CaseMessage(
            id=str(row.id),
            case_id=str(row.case_id),
            sender_id=str(row.sender_id),
            content=str(row.content),
            is_internal=bool(row.is_internal),
            created_at=as_utc(row.created_at),
        )
