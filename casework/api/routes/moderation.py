"""Moderation routes.

The marketplace owns account and listing rows; it mirrors them here through the
admin-only `PUT` registration routes before staff can moderate them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from casework.api.schemas import AuditEntryResponse, to_audit_response
from casework.dependencies.auth import AdminActor, StaffActor
from casework.dependencies.services import get_moderation_service
from casework.moderation.models import ListingAction, ListingState, ListingStatus, ModerationState, UserAction
from casework.moderation.service import ModerationService

router = APIRouter(prefix="/moderation", tags=["moderation"])


class UserActionRequest(BaseModel):
    action: UserAction
    reason: str = Field(..., min_length=1, max_length=2000)


class ListingActionRequest(BaseModel):
    action: ListingAction
    reason: str = Field(..., min_length=1, max_length=2000)


class ListingRegistrationRequest(BaseModel):
    seller_id: str = Field(..., min_length=1, max_length=255)
    status: ListingStatus = ListingStatus.ACTIVE


class ModerationStateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    is_banned: bool
    is_suspended: bool
    is_restricted: bool
    warnings_count: int
    admin_notes: str | None
    updated_at: datetime


class ListingStateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    seller_id: str
    status: ListingStatus
    admin_notes: str | None
    updated_at: datetime


class UserActionResponse(BaseModel):
    state: ModerationStateResponse
    audit: AuditEntryResponse


class ListingActionResponse(BaseModel):
    listing_id: str
    status: ListingStatus
    audit: AuditEntryResponse


ModerationServiceDep = Annotated[ModerationService, Depends(get_moderation_service)]


def _to_state_response(state: ModerationState) -> ModerationStateResponse:
    return ModerationStateResponse.model_validate(state)


def _to_listing_response(listing: ListingState) -> ListingStateResponse:
    return ListingStateResponse.model_validate(listing)


@router.put("/users/{user_id}", response_model=ModerationStateResponse)
async def register_account(user_id: str, _: AdminActor, service: ModerationServiceDep) -> ModerationStateResponse:
    state = await service.register_account(user_id)
    return _to_state_response(state)


@router.get("/users/{user_id}", response_model=ModerationStateResponse)
async def get_user_state(user_id: str, actor: StaffActor, service: ModerationServiceDep) -> ModerationStateResponse:
    state = await service.get_user_state(user_id, caller_role=actor.role)
    return _to_state_response(state)


@router.post("/users/{user_id}/actions", response_model=UserActionResponse)
async def apply_user_action(
    user_id: str,
    payload: UserActionRequest,
    actor: StaffActor,
    service: ModerationServiceDep,
) -> UserActionResponse:
    # suspend, ban and unban are further restricted to admins by the service.
    state, audit = await service.apply_user_action(
        user_id,
        actor_id=actor.actor_id,
        actor_role=actor.role,
        action=payload.action,
        reason=payload.reason,
    )
    return UserActionResponse(state=_to_state_response(state), audit=to_audit_response(audit))


@router.put("/listings/{listing_id}", response_model=ListingStateResponse)
async def register_listing(
    listing_id: str,
    payload: ListingRegistrationRequest,
    _: AdminActor,
    service: ModerationServiceDep,
) -> ListingStateResponse:
    listing = await service.register_listing(listing_id, seller_id=payload.seller_id, status=payload.status)
    return _to_listing_response(listing)


@router.get("/listings/{listing_id}", response_model=ListingStateResponse)
async def get_listing(listing_id: str, actor: StaffActor, service: ModerationServiceDep) -> ListingStateResponse:
    listing = await service.get_listing(listing_id, caller_role=actor.role)
    return _to_listing_response(listing)


@router.post("/listings/{listing_id}/actions", response_model=ListingActionResponse)
async def apply_listing_action(
    listing_id: str,
    payload: ListingActionRequest,
    actor: StaffActor,
    service: ModerationServiceDep,
) -> ListingActionResponse:
    new_status, audit = await service.apply_listing_action(
        listing_id,
        actor_id=actor.actor_id,
        actor_role=actor.role,
        action=payload.action,
        reason=payload.reason,
    )
    return ListingActionResponse(listing_id=listing_id, status=new_status, audit=to_audit_response(audit))
