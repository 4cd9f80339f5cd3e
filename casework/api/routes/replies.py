from __future__ import annotations

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, ConfigDict, Field

from casework.dependencies.auth import AdminActor, StaffActor
from casework.dependencies.services import get_reply_service
from casework.replies.service import SavedReplyService

router = APIRouter(prefix="/replies", tags=["replies"])


class SavedReplyCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    category: str | None = Field(default=None, max_length=100)


class SavedReplyUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    content: str | None = Field(default=None, min_length=1)
    category: str | None = Field(default=None, max_length=100)


class SavedReplyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    content: str
    category: str | None
    created_by: str
    created_at: datetime
    updated_at: datetime


ReplyServiceDep = Annotated[SavedReplyService, Depends(get_reply_service)]


@router.get("", response_model=list[SavedReplyResponse])
async def list_replies(
    actor: StaffActor,
    service: ReplyServiceDep,
    q: str | None = Query(default=None, description="Matches title, content or category"),
) -> list[SavedReplyResponse]:
    replies = await service.list_replies(caller_role=actor.role, search=q)
    return [SavedReplyResponse.model_validate(reply) for reply in replies]


@router.get("/{reply_id}", response_model=SavedReplyResponse)
async def get_reply(reply_id: str, actor: StaffActor, service: ReplyServiceDep) -> SavedReplyResponse:
    reply = await service.get_reply(reply_id, caller_role=actor.role)
    return SavedReplyResponse.model_validate(reply)


@router.post("", response_model=SavedReplyResponse, status_code=status.HTTP_201_CREATED)
async def create_reply(
    payload: SavedReplyCreateRequest,
    actor: AdminActor,
    service: ReplyServiceDep,
) -> SavedReplyResponse:
    reply = await service.create_reply(
        actor_id=actor.actor_id,
        actor_role=actor.role,
        title=payload.title,
        content=payload.content,
        category=payload.category,
    )
    return SavedReplyResponse.model_validate(reply)


@router.patch("/{reply_id}", response_model=SavedReplyResponse)
async def update_reply(
    reply_id: str,
    payload: SavedReplyUpdateRequest,
    actor: AdminActor,
    service: ReplyServiceDep,
) -> SavedReplyResponse:
    # Only fields present in the body change; an explicit null clears the category.
    reply = await service.update_reply(
        reply_id,
        payload.model_dump(exclude_unset=True),
        actor_id=actor.actor_id,
        actor_role=actor.role,
    )
    return SavedReplyResponse.model_validate(reply)


@router.delete("/{reply_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_reply(reply_id: str, actor: AdminActor, service: ReplyServiceDep) -> Response:
    await service.delete_reply(reply_id, actor_id=actor.actor_id, actor_role=actor.role)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
