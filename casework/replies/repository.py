from __future__ import annotations

from typing import Any, Mapping

from sqlalchemy import delete, or_, update
from sqlmodel import select

from casework.audit.models import AuditLogEntry
from casework.audit.repository import AuditLogRepository
from casework.db import Database, as_utc
from packages.db.models import SavedReplyTable

from .models import SavedReply


class SavedReplyRepository:
    """Persistence for the `saved_replies` table."""

    def __init__(self, database: Database) -> None:
        self._database = database

    async def list_replies(self, *, search: str | None = None) -> list[SavedReply]:
        statement = select(SavedReplyTable)
        if search:
            statement = statement.where(
                or_(
                    SavedReplyTable.title.icontains(search, autoescape=True),
                    SavedReplyTable.content.icontains(search, autoescape=True),
                    SavedReplyTable.category.icontains(search, autoescape=True),
                )
            )
        statement = statement.order_by(SavedReplyTable.title.asc(), SavedReplyTable.id.asc())
        async with self._database.session() as session:
            result = await session.execute(statement)
            return [self._table_to_reply(row) for row in result.scalars().all()]

    async def get_reply(self, reply_id: str) -> SavedReply | None:
        async with self._database.session() as session:
            row = await session.get(SavedReplyTable, reply_id)
            return None if row is None else self._table_to_reply(row)

    async def create(self, reply: SavedReply, *, audit: AuditLogEntry) -> SavedReply:
        async with self._database.transaction() as session:
            session.add(
                SavedReplyTable(
                    id=reply.id,
                    title=reply.title,
                    content=reply.content,
                    category=reply.category,
                    created_by=reply.created_by,
                    created_at=reply.created_at,
                    updated_at=reply.updated_at,
                )
            )
            AuditLogRepository.add(session, audit)
        return reply

    async def update(self, reply_id: str, changes: Mapping[str, Any], *, audit: AuditLogEntry) -> SavedReply | None:
        async with self._database.transaction() as session:
            result = await session.execute(
                update(SavedReplyTable)
                .where(SavedReplyTable.id == reply_id)
                .values(**changes, updated_at=audit.created_at)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                return None
            AuditLogRepository.add(session, audit)
            row = await session.get(SavedReplyTable, reply_id, populate_existing=True)
            return self._table_to_reply(row)

    async def delete(self, reply_id: str, *, audit: AuditLogEntry) -> bool:
        async with self._database.transaction() as session:
            result = await session.execute(
                delete(SavedReplyTable)
                .where(SavedReplyTable.id == reply_id)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                return False
            AuditLogRepository.add(session, audit)
        return True

    @staticmethod
    def _table_to_reply(row: Any) -> SavedReply:
        return SavedReply(
            id=str(row.id),
            title=str(row.title),
            content=str(row.content),
            category=row.category,
            created_by=str(row.created_by),
            created_at=as_utc(row.created_at),
            updated_at=as_utc(row.updated_at),
        )
