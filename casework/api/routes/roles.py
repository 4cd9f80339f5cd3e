from __future__ import annotations

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict

from casework.dependencies.auth import AdminActor, StaffActor
from casework.dependencies.services import get_role_service
from casework.permissions import Role
from casework.roles.service import RoleService

router = APIRouter(prefix="/roles", tags=["roles"])


class RoleAssignmentRequest(BaseModel):
    role: Role


class RoleAssignmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    role: Role
    assigned_by: str | None = None
    updated_at: datetime | None = None


RoleServiceDep = Annotated[RoleService, Depends(get_role_service)]


@router.get("/{user_id}", response_model=RoleAssignmentResponse)
async def get_role(user_id: str, _: StaffActor, service: RoleServiceDep) -> RoleAssignmentResponse:
    role = await service.get_role(user_id)
    return RoleAssignmentResponse(user_id=user_id, role=role)


@router.put("/{user_id}", response_model=RoleAssignmentResponse)
async def set_role(
    user_id: str,
    payload: RoleAssignmentRequest,
    actor: AdminActor,
    service: RoleServiceDep,
) -> RoleAssignmentResponse:
    assignment = await service.set_role(user_id, payload.role, actor_id=actor.actor_id, actor_role=actor.role)
    return RoleAssignmentResponse.model_validate(assignment)
