from __future__ import annotations

from datetime import datetime
from typing import Any, Sequence

from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from casework.db import Database, as_utc, to_utc
from casework.permissions import Role
from packages.db.models import AuditLogTable

from .models import AuditAction, AuditLogEntry, AuditQuery, TargetType


class AuditLogRepository:
    """Persistence for the `audit_log` table. Rows are only ever inserted."""

    def __init__(self, database: Database) -> None:
        self._database = database

    @staticmethod
    def add(session: AsyncSession, entry: AuditLogEntry) -> None:
        """Stage ``entry`` on a session whose transaction also carries the audited change."""

        session.add(
            AuditLogTable(
                id=entry.id,
                actor_id=entry.actor_id,
                actor_role=entry.actor_role.value,
                action_type=entry.action_type.value,
                target_type=entry.target_type.value,
                target_id=entry.target_id,
                reason=entry.reason,
                metadata_=dict(entry.metadata),
                created_at=entry.created_at,
            )
        )

    async def append(self, entry: AuditLogEntry) -> AuditLogEntry:
        async with self._database.transaction() as session:
            self.add(session, entry)
        return entry

    async def query(self, filters: AuditQuery) -> list[AuditLogEntry]:
        statement = select(AuditLogTable)
        if filters.action_type is not None:
            statement = statement.where(AuditLogTable.action_type == filters.action_type.value)
        if filters.target_type is not None:
            statement = statement.where(AuditLogTable.target_type == filters.target_type.value)
        if filters.target_id:
            statement = statement.where(AuditLogTable.target_id == filters.target_id)
        if filters.actor_id:
            statement = statement.where(AuditLogTable.actor_id == filters.actor_id)
        if filters.text_search:
            term = filters.text_search.strip()
            statement = statement.where(
                or_(
                    AuditLogTable.reason.icontains(term, autoescape=True),
                    AuditLogTable.target_id == term,
                )
            )
        if filters.since is not None:
            statement = statement.where(AuditLogTable.created_at >= to_utc(filters.since))
        if filters.until is not None:
            statement = statement.where(AuditLogTable.created_at <= to_utc(filters.until))
        statement = statement.order_by(AuditLogTable.created_at.desc()).limit(filters.limit)

        async with self._database.session() as session:
            result = await session.execute(statement)
            return [self._table_to_entry(row) for row in result.scalars().all()]

    async def list_for_target(self, target_id: str) -> Sequence[AuditLogEntry]:
        return await self.query(AuditQuery(target_id=target_id, limit=1000))

    @staticmethod
    def _table_to_entry(row: Any) -> AuditLogEntry:
        return AuditLogEntry(
            id=str(row.id),
            actor_id=str(row.actor_id),
            actor_role=Role(row.actor_role),
            action_type=AuditAction(row.action_type),
            target_type=TargetType(row.target_type),
            target_id=str(row.target_id),
            reason=str(row.reason),
            created_at=as_utc(row.created_at),
            metadata=dict(row.metadata_ or {}),
        )
