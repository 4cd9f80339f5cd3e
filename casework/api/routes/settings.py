from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict

from casework.dependencies.auth import AdminActor, StaffActor
from casework.dependencies.services import get_settings_service
from casework.system.settings import SystemSettingsService

router = APIRouter(prefix="/settings", tags=["settings"])


class SettingUpdateRequest(BaseModel):
    value: Any


class SettingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    key: str
    value: Any
    description: str | None
    updated_at: datetime


SettingsServiceDep = Annotated[SystemSettingsService, Depends(get_settings_service)]


@router.get("", response_model=list[SettingResponse])
async def list_settings(actor: StaffActor, service: SettingsServiceDep) -> list[SettingResponse]:
    settings = await service.list_settings(caller_role=actor.role)
    return [SettingResponse.model_validate(setting) for setting in settings]


@router.put("/{key}", response_model=SettingResponse)
async def update_setting(
    key: str,
    payload: SettingUpdateRequest,
    actor: AdminActor,
    service: SettingsServiceDep,
) -> SettingResponse:
    setting = await service.update_setting(key, payload.value, actor_id=actor.actor_id, actor_role=actor.role)
    return SettingResponse.model_validate(setting)
