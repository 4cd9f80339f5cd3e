"""Platform settings store; administrators edit values and every edit is audited."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

from sqlmodel import select

from casework.audit.models import AuditAction, AuditLogEntry, TargetType
from casework.audit.repository import AuditLogRepository
from casework.db import Database, as_utc, utcnow
from casework.errors import NotFound, require_text
from casework.permissions import ADMIN_ROLES, STAFF_ROLES, Role, ensure_role
from packages.db.models import SystemSettingTable

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class SystemSetting:
    key: str
    value: Any
    description: str | None
    updated_at: datetime


class SystemSettingsRepository:
    """Persistence for the `system_settings` table."""

    def __init__(self, database: Database) -> None:
        self._database = database

    async def list_settings(self) -> list[SystemSetting]:
        async with self._database.session() as session:
            result = await session.execute(select(SystemSettingTable).order_by(SystemSettingTable.key.asc()))
            return [self._table_to_setting(row) for row in result.scalars().all()]

    async def define(self, key: str, value: Any, description: str | None = None) -> SystemSetting:
        async with self._database.transaction() as session:
            row = await session.get(SystemSettingTable, key)
            if row is None:
                row = SystemSettingTable(key=key, value=value, description=description, updated_at=utcnow())
                session.add(row)
                await session.flush()
            return self._table_to_setting(row)

    async def update_value(self, key: str, value: Any, *, audit: AuditLogEntry) -> SystemSetting | None:
        async with self._database.transaction() as session:
            row = await session.get(SystemSettingTable, key, with_for_update=True)
            if row is None:
                return None
            row.value = value
            row.updated_at = audit.created_at
            AuditLogRepository.add(session, audit)
            await session.flush()
            return self._table_to_setting(row)

    @staticmethod
    def _table_to_setting(row: Any) -> SystemSetting:
        return SystemSetting(
            key=str(row.key),
            value=row.value,
            description=row.description,
            updated_at=as_utc(row.updated_at),
        )


@dataclass(slots=True)
class SystemSettingsService:
    repository: SystemSettingsRepository

    async def list_settings(self, *, caller_role: Role | str) -> list[SystemSetting]:
        ensure_role(caller_role, STAFF_ROLES, operation="settings listing")
        return await self.repository.list_settings()

    async def seed(self, defaults: Mapping[str, Any]) -> None:
        """Define missing settings; existing values are left untouched."""

        for key, value in defaults.items():
            await self.repository.define(key, value)

    async def update_setting(
        self,
        key: str,
        value: Any,
        *,
        actor_id: str,
        actor_role: Role | str,
    ) -> SystemSetting:
        role = ensure_role(actor_role, ADMIN_ROLES, operation="setting update", actor_id=actor_id)
        setting_key = require_text(key, "key")
        audit = AuditLogEntry.create(
            actor_id=actor_id,
            actor_role=role,
            action_type=AuditAction.SETTING_UPDATED,
            target_type=TargetType.SYSTEM,
            target_id=setting_key,
            reason=f"Setting {setting_key} updated to {json.dumps(value)}",
            metadata={"value": value},
        )
        updated = await self.repository.update_value(setting_key, value, audit=audit)
        if updated is None:
            raise NotFound(f"Setting {setting_key} not found")
        logger.info("Setting %s updated by %s", setting_key, actor_id)
        return updated
