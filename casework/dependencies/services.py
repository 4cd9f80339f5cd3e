from __future__ import annotations

from typing import Any

from fastapi import HTTPException, Request

from casework.audit.service import AuditLogService
from casework.cases.service import CaseService
from casework.moderation.service import ModerationService
from casework.replies.service import SavedReplyService
from casework.reporting.service import ReportingService
from casework.roles.service import RoleService
from casework.system.settings import SystemSettingsService


def _service(request: Request, name: str) -> Any:
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(status_code=503, detail="Casework services are not configured")
    return service


async def get_case_service(request: Request) -> CaseService:
    return _service(request, "case_service")


async def get_moderation_service(request: Request) -> ModerationService:
    return _service(request, "moderation_service")


async def get_audit_service(request: Request) -> AuditLogService:
    return _service(request, "audit_service")


async def get_role_service(request: Request) -> RoleService:
    return _service(request, "role_service")


async def get_reporting_service(request: Request) -> ReportingService:
    return _service(request, "reporting_service")


async def get_settings_service(request: Request) -> SystemSettingsService:
    return _service(request, "settings_service")


async def get_reply_service(request: Request) -> SavedReplyService:
    return _service(request, "reply_service")
