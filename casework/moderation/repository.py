from __future__ import annotations

from typing import Any, Iterable

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from casework.audit.models import AuditLogEntry
from casework.audit.repository import AuditLogRepository
from casework.db import Database, as_utc, utcnow
from packages.db.models import ListingTable, UserAccountTable

from .models import ListingState, ListingStatus, ModerationState, UserAction


class ModerationRepository:
    """Persistence for moderation flags on `user_accounts` and `marketplace_listings`."""

    def __init__(self, database: Database) -> None:
        self._database = database

    async def register_account(self, user_id: str) -> ModerationState:
        """Create the account row if it is missing and return its current state."""

        async with self._database.transaction() as session:
            row = await session.get(UserAccountTable, user_id)
            if row is None:
                now = utcnow()
                row = UserAccountTable(id=user_id, created_at=now, updated_at=now)
                session.add(row)
                await session.flush()
            return self._table_to_state(row)

    async def register_listing(
        self,
        listing_id: str,
        *,
        seller_id: str,
        status: ListingStatus = ListingStatus.ACTIVE,
    ) -> ListingState:
        async with self._database.transaction() as session:
            row = await session.get(ListingTable, listing_id)
            if row is None:
                now = utcnow()
                row = ListingTable(
                    id=listing_id,
                    seller_id=seller_id,
                    status=status.value,
                    created_at=now,
                    updated_at=now,
                )
                session.add(row)
                await session.flush()
            return self._table_to_listing(row)

    async def get_account(self, user_id: str) -> ModerationState | None:
        async with self._database.session() as session:
            row = await session.get(UserAccountTable, user_id)
            return None if row is None else self._table_to_state(row)

    async def get_listing(self, listing_id: str) -> ListingState | None:
        async with self._database.session() as session:
            row = await session.get(ListingTable, listing_id)
            return None if row is None else self._table_to_listing(row)

    async def apply_user_action(
        self,
        user_id: str,
        *,
        action: UserAction,
        reason: str,
        audit: AuditLogEntry,
    ) -> ModerationState | None:
        """Mutate the account flags and append ``audit`` in one transaction.

        Warnings are incremented in SQL so concurrent warns never lose an update.
        """

        values: dict[str, Any] = {"admin_notes": reason, "updated_at": audit.created_at}
        if action == UserAction.WARN:
            values["warnings_count"] = UserAccountTable.warnings_count + 1
        elif action == UserAction.RESTRICT:
            values["is_restricted"] = True
        elif action == UserAction.SUSPEND:
            values["is_suspended"] = True
        elif action == UserAction.BAN:
            values["is_banned"] = True
        elif action == UserAction.UNBAN:
            values.update(is_banned=False, is_suspended=False, is_restricted=False)
        else:  # pragma: no cover - enum is closed
            raise ValueError(f"Unsupported user action: {action}")

        async with self._database.transaction() as session:
            result = await session.execute(
                update(UserAccountTable)
                .where(UserAccountTable.id == user_id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                return None
            AuditLogRepository.add(session, audit)
            row = await session.get(UserAccountTable, user_id, populate_existing=True)
            return self._table_to_state(row)

    async def set_listing_status(
        self,
        listing_id: str,
        *,
        status: ListingStatus,
        reason: str,
        audit: AuditLogEntry,
        allowed_from: Iterable[ListingStatus] | None = None,
    ) -> ListingState | None:
        """Guarded status write plus audit entry; None when the guard or id does not match."""

        statement = update(ListingTable).where(ListingTable.id == listing_id)
        if allowed_from is not None:
            statement = statement.where(ListingTable.status.in_([value.value for value in allowed_from]))
        statement = statement.values(
            status=status.value,
            admin_notes=reason,
            updated_at=audit.created_at,
        ).execution_options(synchronize_session=False)

        async with self._database.transaction() as session:
            result = await session.execute(statement)
            if result.rowcount == 0:
                return None
            AuditLogRepository.add(session, audit)
            return await self._reload_listing(session, listing_id)

    async def _reload_listing(self, session: AsyncSession, listing_id: str) -> ListingState:
        row = await session.get(ListingTable, listing_id, populate_existing=True)
        return self._table_to_listing(row)

    @staticmethod
    def _table_to_state(row: Any) -> ModerationState:
        return ModerationState(
            user_id=str(row.id),
            is_banned=bool(row.is_banned),
            is_suspended=bool(row.is_suspended),
            is_restricted=bool(row.is_restricted),
            warnings_count=int(row.warnings_count),
            admin_notes=row.admin_notes,
            updated_at=as_utc(row.updated_at),
        )

    @staticmethod
    def _table_to_listing(row: Any) -> ListingState:
        return ListingState(
            id=str(row.id),
            seller_id=str(row.seller_id),
            status=ListingStatus(row.status),
            admin_notes=row.admin_notes,
            updated_at=as_utc(row.updated_at),
        )
